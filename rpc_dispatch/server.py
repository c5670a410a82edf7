"""FastAPI server exposing a demo RPC service."""
import logging
import os
from contextlib import asynccontextmanager
from typing import Dict

from fastapi import FastAPI
from pydantic import BaseModel

from .method import Method
from .serializers import Serializers
from .service.handler import Service
from .transport import create_rpc_router
from .utils.errors import ServiceError
from .utils.http_codes import HttpErrorCode

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVICE_VERSION = "1.0.0"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").strip().lower() in ("1", "true", "yes", "on")


class DivideRequest(BaseModel):
    dividend: float
    divisor: float


class DivideResponse(BaseModel):
    quotient: float
    remainder: float = 0.0


ECHO = Method(
    name="echo",
    number=1,
    request_serializer=Serializers.string,
    response_serializer=Serializers.string,
    doc="Returns the request prefixed with the caller's user name",
)
REVERSE = Method(
    name="reverse",
    number=2,
    request_serializer=Serializers.string,
    response_serializer=Serializers.string,
    doc="Reverses a string",
)
DIVIDE = Method(
    name="divide",
    number=3,
    request_serializer=Serializers.of(DivideRequest),
    response_serializer=Serializers.of(DivideResponse),
    doc="Divides two numbers",
)


async def echo(request: str, request_meta: Dict[str, str]) -> str:
    user = request_meta.get("x-user", "anonymous")
    return f"{user}: {request}"


async def reverse(request: str, request_meta: Dict[str, str]) -> str:
    return request[::-1]


async def divide(request: DivideRequest, request_meta: Dict[str, str]) -> DivideResponse:
    if request.divisor == 0:
        raise ServiceError(HttpErrorCode.BAD_REQUEST, "Division by zero")
    return DivideResponse(
        quotient=request.dividend / request.divisor,
        remainder=request.dividend % request.divisor,
    )


def build_service() -> Service[Dict[str, str]]:
    """Build the demo service from the environment configuration."""
    builder = (
        Service.builder()
        .add_method(ECHO, echo)
        .add_method(REVERSE, reverse)
        .add_method(DIVIDE, divide)
        .set_keep_unrecognized_values(_env_flag("RPC_KEEP_UNRECOGNIZED_VALUES"))
        .set_can_send_unknown_error_message(_env_flag("RPC_EXPOSE_ERROR_MESSAGES"))
    )
    studio_app_js_url = os.getenv("RPC_STUDIO_APP_JS_URL")
    if studio_app_js_url:
        builder.set_studio_app_js_url(studio_app_js_url)
    return builder.build()


service = build_service()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI app."""
    logger.info("Starting RPC server...")
    logger.info(f"Serving {len(service.registry)} RPC methods at /rpc")
    yield
    logger.info("Shutting down RPC server...")


app = FastAPI(
    title="RPC Dispatch Server",
    description="Demo RPC service: method listing, studio page and method invocation",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)
app.include_router(create_rpc_router(service, path="/rpc"))


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "rpc-dispatch-server",
        "version": SERVICE_VERSION,
        "methods": len(service.registry),
    }
