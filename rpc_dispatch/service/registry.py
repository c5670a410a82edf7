"""Table of the methods a service implements."""
import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Union

from ..method import Method
from ..utils.errors import BadRequestError, DuplicateMethodError, InvalidMethodError

logger = logging.getLogger(__name__)

# (request, request_meta) -> response, usually a coroutine function.
MethodImplementation = Callable[[Any, Any], Union[Awaitable[Any], Any]]


@dataclass(frozen=True)
class RegisteredMethod:
    """A method paired with its implementation."""

    method: Method
    impl: MethodImplementation
    # Entry of the method listing, computed at registration.
    description: Dict[str, Any]


class MethodRegistry:
    """Read-only method table, iterated in registration order."""

    def __init__(self, entries: Dict[int, RegisteredMethod]):
        self._entries = MappingProxyType(dict(entries))

    def __iter__(self) -> Iterator[RegisteredMethod]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def describe(self) -> List[Dict[str, Any]]:
        """Entries of the method listing, in registration order."""
        return [entry.description for entry in self._entries.values()]

    def __contains__(self, number: int) -> bool:
        return number in self._entries

    def get(self, number: int) -> Optional[RegisteredMethod]:
        """Look up a method by number."""
        return self._entries.get(number)

    def find_by_name(self, name: str) -> List[RegisteredMethod]:
        """All methods with the given name."""
        return [entry for entry in self._entries.values() if entry.method.name == name]

    def resolve(self, name: str, number: Optional[int]) -> RegisteredMethod:
        """Find the method a request addresses.

        An explicit number wins; the name is then only used in error
        messages. Without a number, the name must match exactly one method.

        Raises:
            BadRequestError: If no method or more than one method matches
        """
        if number is None:
            matches = self.find_by_name(name)
            if not matches:
                raise BadRequestError(f"method not found: {name}")
            if len(matches) > 1:
                raise BadRequestError(
                    f"method name '{name}' is ambiguous; use method number instead"
                )
            number = matches[0].method.number

        entry = self._entries.get(number)
        if entry is None:
            raise BadRequestError(f"method not found: {name}; number: {number}")
        return entry


class MethodRegistryBuilder:
    """Collects method registrations until the registry is sealed."""

    def __init__(self):
        self._entries: Dict[int, RegisteredMethod] = {}

    def add(self, method: Method, impl: MethodImplementation) -> None:
        """Register the implementation of a method.

        Raises:
            DuplicateMethodError: If a method with the same number exists
            InvalidMethodError: If the request or response type of the method
                can't be described as JSON
        """
        if method.number in self._entries:
            raise DuplicateMethodError(
                f"Method with the same number already registered ({method.number})"
            )
        try:
            description = method.describe()
            json.dumps(description)
        except Exception as e:
            raise InvalidMethodError(f"Can't describe method {method.name} ({method.number}): {e}") from e
        self._entries[method.number] = RegisteredMethod(method=method, impl=impl, description=description)
        logger.info(f"Registered RPC method: {method.name} ({method.number})")

    def seal(self) -> MethodRegistry:
        """Build the immutable registry."""
        return MethodRegistry(self._entries)
