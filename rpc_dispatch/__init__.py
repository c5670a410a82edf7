"""RPC services over HTTP: method registry, request dispatch, client."""
from .method import Method
from .serializers import JsonFlavor, PydanticSerializer, Serializer, Serializers, UnrecognizedValuesPolicy
from .service import MethodErrorInfo, RawResponse, Service, ServiceBuilder
from .utils.errors import RemoteServiceError, ServiceError
from .utils.http_codes import HttpErrorCode

__all__ = [
    "Method",
    "JsonFlavor",
    "PydanticSerializer",
    "Serializer",
    "Serializers",
    "UnrecognizedValuesPolicy",
    "MethodErrorInfo",
    "RawResponse",
    "Service",
    "ServiceBuilder",
    "RemoteServiceError",
    "ServiceError",
    "HttpErrorCode",
]
