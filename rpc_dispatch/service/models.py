"""Service request/response models."""
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

from ..method import Method

RequestMeta = TypeVar("RequestMeta")

JSON_CONTENT_TYPE = "application/json"
HTML_CONTENT_TYPE = "text/html; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


class RawResponse(BaseModel):
    """Response to send back over HTTP."""

    model_config = ConfigDict(frozen=True)

    data: str
    status_code: int
    content_type: str

    @classmethod
    def ok_json(cls, data: str) -> "RawResponse":
        return cls(data=data, status_code=200, content_type=JSON_CONTENT_TYPE)

    @classmethod
    def ok_html(cls, data: str) -> "RawResponse":
        return cls(data=data, status_code=200, content_type=HTML_CONTENT_TYPE)

    @classmethod
    def bad_request(cls, data: str) -> "RawResponse":
        return cls(data=data, status_code=400, content_type=TEXT_CONTENT_TYPE)

    @classmethod
    def server_error(cls, data: str, status_code: int = 500) -> "RawResponse":
        return cls(data=data, status_code=status_code, content_type=TEXT_CONTENT_TYPE)


@dataclass(frozen=True)
class MethodErrorInfo(Generic[RequestMeta]):
    """Information about an error raised by a method implementation."""

    # The exception that was raised.
    error: BaseException
    # The method being executed.
    method: Method
    # Decoded request passed to the implementation.
    request: Any
    # Metadata extracted from the HTTP request, typically headers.
    request_meta: RequestMeta


@dataclass(frozen=True)
class ServiceOptions(Generic[RequestMeta]):
    """Options fixed when the service is built."""

    keep_unrecognized_values: bool
    can_send_unknown_error_message: Callable[[MethodErrorInfo[RequestMeta]], bool]
    error_logger: Callable[[MethodErrorInfo[RequestMeta]], None]
    studio_app_js_url: str
