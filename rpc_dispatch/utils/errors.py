"""Custom exception classes for the RPC service."""
from typing import Optional

from .http_codes import HttpErrorCode


class RPCError(Exception):
    """Base exception for RPC-related errors."""

    pass


class ServiceError(RPCError):
    """Raised from a method implementation to return a specific HTTP error.

    The status code and message are sent back to the caller verbatim. Any
    other exception raised by an implementation results in a 500 response.
    """

    def __init__(self, status_code: HttpErrorCode, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message if message is not None else status_code.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class BadRequestError(RPCError):
    """Malformed request: bad body format, unknown method, undecodable payload."""

    pass


class DuplicateMethodError(RPCError, ValueError):
    """A method with the same number is already registered."""

    pass


class InvalidStudioUrlError(RPCError, ValueError):
    """The studio app script URL is not a well-formed URL."""

    pass


class InvalidMethodError(RPCError, ValueError):
    """A method can't be described in the method listing."""

    pass


class RemoteServiceError(RPCError):
    """Non-200 response received from a remote RPC service."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message
