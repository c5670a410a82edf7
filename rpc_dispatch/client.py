"""Client for calling methods of a remote RPC service over HTTP."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from .method import Method, Request, Response
from .serializers import JsonFlavor, UnrecognizedValuesPolicy
from .utils.errors import RemoteServiceError

logger = logging.getLogger(__name__)


class ServiceClient:
    """Sends requests to a service served by ``create_rpc_router``."""

    def __init__(
        self,
        service_url: str,
        timeout: int = 30,
        http_client: Optional[httpx.Client] = None,
    ):
        """Initialize the client.

        Args:
            service_url: URL of the service (e.g., http://localhost:8000/rpc)
            timeout: Request timeout in seconds, ignored if http_client is given
            http_client: HTTP client to send requests with
        """
        self.service_url = service_url
        self._owns_client = http_client is None
        self.client = http_client if http_client is not None else httpx.Client(timeout=timeout)

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def close(self):
        """Close the HTTP client, unless it was passed in."""
        if self._owns_client:
            self.client.close()

    def invoke_remote(
        self,
        method: Method[Request, Response],
        request: Request,
        headers: Optional[Dict[str, str]] = None,
    ) -> Response:
        """Invoke a method of the remote service.

        Args:
            method: Method to invoke
            request: Request passed to the method
            headers: Extra HTTP headers, e.g. for authentication

        Returns:
            Decoded response of the method

        Raises:
            RemoteServiceError: If the service responds with an error status
            httpx.HTTPError: If the request can't be sent
        """
        request_code = method.request_serializer.to_json_code(request, JsonFlavor.DENSE)
        # Names containing ':' can't be sent; the number is enough to address the method.
        name = method.name if ":" not in method.name else ""
        body = f"{name}:{method.number}::{request_code}"
        response = self._post(body, headers)
        return method.response_serializer.from_json_code(response.text, UnrecognizedValuesPolicy.DROP)

    def list_methods(self) -> List[Dict[str, Any]]:
        """Fetch the description of the methods of the remote service."""
        response = self._post("list", None)
        return response.json()["methods"]

    def _post(self, body: str, headers: Optional[Dict[str, str]]) -> httpx.Response:
        request_headers = {"Content-Type": "text/plain; charset=utf-8"}
        request_headers.update(headers or {})
        try:
            response = self.client.post(
                self.service_url,
                content=body.encode("utf-8"),
                headers=request_headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"HTTP error during RPC request: {e}")
            raise
        if response.status_code != 200:
            raise RemoteServiceError(response.status_code, response.text)
        return response
