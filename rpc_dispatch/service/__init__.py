"""Request dispatch for RPC services."""
from .models import MethodErrorInfo, RawResponse, ServiceOptions
from .handler import Service, ServiceBuilder
from .registry import MethodRegistry, RegisteredMethod

__all__ = [
    "MethodErrorInfo",
    "RawResponse",
    "ServiceOptions",
    "Service",
    "ServiceBuilder",
    "MethodRegistry",
    "RegisteredMethod",
]
