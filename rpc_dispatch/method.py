"""Method descriptors."""
from dataclasses import dataclass
from typing import Any, Dict, Generic, TypeVar

from .serializers import INT64_MAX, INT64_MIN, Serializer

Request = TypeVar("Request")
Response = TypeVar("Response")


@dataclass(frozen=True)
class Method(Generic[Request, Response]):
    """A named, numbered RPC method with fixed request and response types.

    The number identifies the method within a service and must be unique
    there. Several methods may share a name, in which case callers have to
    address them by number.
    """

    name: str
    number: int
    request_serializer: Serializer[Request]
    response_serializer: Serializer[Response]
    doc: str = ""

    def __post_init__(self):
        if not INT64_MIN <= self.number <= INT64_MAX:
            raise ValueError(f"Method number out of 64-bit range: {self.number}")

    def describe(self) -> Dict[str, Any]:
        """Entry of the method listing."""
        entry = {
            "method": self.name,
            "number": self.number,
            "request": self.request_serializer.type_descriptor(),
            "response": self.response_serializer.type_descriptor(),
        }
        if self.doc:
            entry["doc"] = self.doc
        return entry
