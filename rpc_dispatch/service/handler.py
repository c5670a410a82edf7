"""RPC service: routes raw requests to registered method implementations."""
import inspect
import json
import logging
from typing import Any, Callable, Generic, Union

from ..method import Method
from ..serializers import JsonFlavor, UnrecognizedValuesPolicy
from ..utils.errors import BadRequestError, ServiceError
from .models import MethodErrorInfo, RawResponse, RequestMeta, ServiceOptions
from .registry import MethodImplementation, MethodRegistry, MethodRegistryBuilder, RegisteredMethod
from .request_parser import ParsedRequest, RequestKind, parse_request
from .studio import DEFAULT_STUDIO_APP_JS_URL, get_studio_html, normalize_studio_app_js_url

logger = logging.getLogger(__name__)


def _default_error_logger(error_info: MethodErrorInfo) -> None:
    logger.error(
        f"Error in method {error_info.method.name}: {error_info.error}",
        exc_info=error_info.error,
    )


def _never(error_info: MethodErrorInfo) -> bool:
    return False


class Service(Generic[RequestMeta]):
    """Implementation of an RPC service.

    Build instances with ``Service.builder()``. A built service cannot be
    modified and can serve concurrent requests.

    ``RequestMeta`` is whatever the transport extracts from the HTTP request
    (typically headers) and passes along to the method implementations.
    """

    def __init__(self, registry: MethodRegistry, options: ServiceOptions[RequestMeta]):
        self._registry = registry
        self._options = options
        if options.keep_unrecognized_values:
            self._unrecognized_values = UnrecognizedValuesPolicy.KEEP
        else:
            self._unrecognized_values = UnrecognizedValuesPolicy.DROP

    @staticmethod
    def builder() -> "ServiceBuilder":
        """Return a new builder."""
        return ServiceBuilder()

    @property
    def registry(self) -> MethodRegistry:
        return self._registry

    @property
    def options(self) -> ServiceOptions[RequestMeta]:
        return self._options

    async def handle_request(self, request_body: str, request_meta: RequestMeta) -> RawResponse:
        """Parse a request and invoke the method it addresses.

        For GET requests, pass the decoded query string (the part of the URL
        after '?') as the request body.

        Args:
            request_body: Raw request body
            request_meta: Passed through to the method implementation

        Returns:
            RawResponse to send back over HTTP. Errors are reported in the
            response, never raised.
        """
        try:
            parsed = parse_request(request_body)
            if parsed.kind == RequestKind.LIST:
                return self._list_methods()
            if parsed.kind == RequestKind.STUDIO:
                return RawResponse.ok_html(get_studio_html(self._options.studio_app_js_url))

            entry = self._registry.resolve(parsed.method_name, parsed.method_number)
            request = self._decode_request(entry.method, parsed)
        except BadRequestError as e:
            logger.debug(f"Bad request: {e}")
            return RawResponse.bad_request(f"bad request: {e}")

        return await self._invoke(entry, request, request_meta, parsed.flavor)

    def _list_methods(self) -> RawResponse:
        return RawResponse.ok_json(json.dumps({"methods": self._registry.describe()}, indent=2))

    def _decode_request(self, method: Method, parsed: ParsedRequest) -> Any:
        serializer = method.request_serializer
        try:
            if parsed.request_code is not None:
                return serializer.from_json_code(parsed.request_code, self._unrecognized_values)
            return serializer.from_json(parsed.request_json, self._unrecognized_values)
        except Exception as e:
            raise BadRequestError(f"can't parse JSON: {e}") from e

    async def _invoke(
        self,
        entry: RegisteredMethod,
        request: Any,
        request_meta: RequestMeta,
        flavor: JsonFlavor,
    ) -> RawResponse:
        try:
            response = entry.impl(request, request_meta)
            if inspect.isawaitable(response):
                response = await response
        except Exception as e:
            error_info = MethodErrorInfo(
                error=e,
                method=entry.method,
                request=request,
                request_meta=request_meta,
            )
            return self._error_response(error_info)

        return self._encode_response(entry.method, response, flavor)

    def _error_response(self, error_info: MethodErrorInfo[RequestMeta]) -> RawResponse:
        try:
            self._options.error_logger(error_info)
        except Exception:
            logger.exception(f"Error logger failed for method {error_info.method.name}")

        error = error_info.error
        if isinstance(error, ServiceError):
            return RawResponse.server_error(error.message, error.status_code.status_code)

        try:
            can_send_message = self._options.can_send_unknown_error_message(error_info)
        except Exception:
            logger.exception("can_send_unknown_error_message failed; masking error message")
            can_send_message = False
        if can_send_message:
            return RawResponse.server_error(f"server error: {error}")
        return RawResponse.server_error("server error")

    def _encode_response(self, method: Method, response: Any, flavor: JsonFlavor) -> RawResponse:
        try:
            response_json = method.response_serializer.to_json_code(response, flavor)
        except Exception as e:
            logger.error(f"Can't serialize response of method {method.name}: {e}")
            return RawResponse.server_error(f"server error: can't serialize response to JSON: {e}")
        return RawResponse.ok_json(response_json)


class ServiceBuilder(Generic[RequestMeta]):
    """Registers method implementations and options, then builds a Service."""

    def __init__(self):
        self._methods = MethodRegistryBuilder()
        self._keep_unrecognized_values = False
        self._can_send_unknown_error_message: Callable[[MethodErrorInfo[RequestMeta]], bool] = _never
        self._error_logger: Callable[[MethodErrorInfo[RequestMeta]], None] = _default_error_logger
        self._studio_app_js_url = DEFAULT_STUDIO_APP_JS_URL

    def add_method(self, method: Method, impl: MethodImplementation) -> "ServiceBuilder[RequestMeta]":
        """Register the implementation of a method.

        Args:
            method: Method descriptor
            impl: Async callable taking (request, request_meta) and returning
                the response

        Raises:
            DuplicateMethodError: If a method with the same number is already
                registered
            InvalidMethodError: If the method can't be described in the
                method listing
        """
        self._methods.add(method, impl)
        return self

    def set_keep_unrecognized_values(self, keep_unrecognized_values: bool) -> "ServiceBuilder[RequestMeta]":
        """Whether to keep unrecognized fields when decoding requests.

        Only enable this for data from trusted sources. Fields injected by a
        malicious caller could be read as valid data once a later version of
        the schema defines them.
        """
        self._keep_unrecognized_values = keep_unrecognized_values
        return self

    def set_can_send_unknown_error_message(
        self,
        can_send_unknown_error_message: Union[bool, Callable[[MethodErrorInfo[RequestMeta]], bool]],
    ) -> "ServiceBuilder[RequestMeta]":
        """Whether the message of an unknown error can be sent to the caller.

        Unknown errors are exceptions other than ServiceError. By default
        their message is masked and the caller receives 'server error' with
        status 500, so that sensitive information does not leak.

        Pass a predicate instead of a bool to decide per error, e.g. to send
        error messages only to admins.
        """
        if isinstance(can_send_unknown_error_message, bool):
            value = can_send_unknown_error_message
            self._can_send_unknown_error_message = lambda error_info: value
        else:
            self._can_send_unknown_error_message = can_send_unknown_error_message
        return self

    def set_error_logger(
        self, error_logger: Callable[[MethodErrorInfo[RequestMeta]], None]
    ) -> "ServiceBuilder[RequestMeta]":
        """Callback invoked whenever a method implementation raises.

        Defaults to logging the method name and the error. May be called
        concurrently from several in-flight requests.
        """
        self._error_logger = error_logger
        return self

    def set_studio_app_js_url(self, studio_app_js_url: str) -> "ServiceBuilder[RequestMeta]":
        """URL of the JavaScript file of the studio app.

        The studio app is served when the service receives the request
        'studio'.

        Raises:
            InvalidStudioUrlError: If the URL is malformed
        """
        self._studio_app_js_url = normalize_studio_app_js_url(studio_app_js_url)
        return self

    def build(self) -> Service[RequestMeta]:
        """Build the Service instance."""
        registry = self._methods.seal()
        options = ServiceOptions(
            keep_unrecognized_values=self._keep_unrecognized_values,
            can_send_unknown_error_message=self._can_send_unknown_error_message,
            error_logger=self._error_logger,
            studio_app_js_url=self._studio_app_js_url,
        )
        logger.info(f"Built RPC service with {len(registry)} methods")
        return Service(registry, options)
