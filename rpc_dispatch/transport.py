"""FastAPI binding: serves an RPC service over HTTP GET and POST."""
import logging
from typing import Any, Callable, Dict
from urllib.parse import unquote

from fastapi import APIRouter, Request, Response

from .service.handler import Service
from .service.models import RawResponse

logger = logging.getLogger(__name__)


def headers_as_meta(request: Request) -> Dict[str, str]:
    """Default request meta: the HTTP request headers."""
    return dict(request.headers)


def to_http_response(raw_response: RawResponse) -> Response:
    """Convert a RawResponse to a FastAPI response."""
    return Response(
        content=raw_response.data,
        status_code=raw_response.status_code,
        media_type=raw_response.content_type,
    )


def create_rpc_router(
    service: Service,
    path: str = "/rpc",
    meta_factory: Callable[[Request], Any] = headers_as_meta,
) -> APIRouter:
    """Create a router exposing a service at the given path.

    POST requests carry the request in their body. GET requests carry it in
    the query string, e.g. '/rpc?list' or '/rpc?studio'.

    Args:
        service: Service handling the requests
        path: URL path of the service
        meta_factory: Builds the request meta passed to method
            implementations from the HTTP request
    """
    router = APIRouter()

    async def respond(request_body: str, request: Request) -> Response:
        request_meta = meta_factory(request)
        raw_response = await service.handle_request(request_body, request_meta)
        if raw_response.status_code != 200:
            logger.info(f"{request.method} {path} -> {raw_response.status_code}")
        return to_http_response(raw_response)

    @router.get(path)
    async def rpc_get(request: Request):
        """Handle an RPC request passed in the query string."""
        return await respond(unquote(request.url.query), request)

    @router.post(path)
    async def rpc_post(request: Request):
        """Handle an RPC request passed in the body."""
        body = await request.body()
        try:
            request_body = body.decode("utf-8")
        except UnicodeDecodeError:
            logger.info(f"POST {path} -> 400: body is not valid UTF-8")
            return to_http_response(RawResponse.bad_request("bad request: request body is not valid UTF-8"))
        return await respond(request_body, request)

    return router
