"""Parsing of raw request bodies.

A request body takes one of four shapes:

* empty or ``list``: list the methods of the service
* ``studio``: serve the studio page
* a JSON object ``{"method": <name or number>, "request": <any>}``
* a colon-separated string ``name:number:format:data``
"""
import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..serializers import INT64_MAX, INT64_MIN, JsonFlavor
from ..utils.errors import BadRequestError

COMPACT_REQUEST_PATTERN = re.compile(r"([^:]*):([^:]*):([^:]*):(\S[\s\S]*)")
METHOD_NUMBER_PATTERN = re.compile(r"-?[0-9]+")

READABLE_FORMAT = "readable"


class RequestKind(Enum):
    LIST = "list"
    STUDIO = "studio"
    INVOKE = "invoke"


@dataclass(frozen=True)
class ParsedRequest:
    """Outcome of parsing a request body.

    For invocations, exactly one of ``request_json`` (JSON object bodies)
    and ``request_code`` (colon-separated bodies) holds the undecoded
    request: ``request_code`` is None for JSON object bodies.
    """

    kind: RequestKind
    method_name: str = ""
    method_number: Optional[int] = None
    format: str = ""
    request_json: Any = None
    request_code: Optional[str] = None

    @property
    def flavor(self) -> JsonFlavor:
        """Flavor of the JSON sent back to the caller."""
        if self.format == READABLE_FORMAT:
            return JsonFlavor.READABLE
        return JsonFlavor.DENSE


def _reject_constant(name: str):
    raise ValueError(f"unexpected constant: {name}")


def _is_int64(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and INT64_MIN <= value <= INT64_MAX


def parse_request(body: str) -> ParsedRequest:
    """Classify a request body and extract what is needed to invoke a method.

    Args:
        body: Raw request body, or the decoded query string of a GET request

    Returns:
        ParsedRequest describing the request

    Raises:
        BadRequestError: If the body is malformed
    """
    if body == "" or body == "list":
        return ParsedRequest(kind=RequestKind.LIST)
    if body == "studio":
        return ParsedRequest(kind=RequestKind.STUDIO)

    first_char = body[0]
    if first_char.isspace() or first_char == "{":
        return _parse_json_request(body)
    return _parse_compact_request(body)


def _parse_json_request(body: str) -> ParsedRequest:
    try:
        body_json = json.loads(body, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        raise BadRequestError("invalid JSON")
    if not isinstance(body_json, dict):
        raise BadRequestError("expected JSON object")

    if "method" not in body_json:
        raise BadRequestError("missing 'method' field in JSON")
    method_field = body_json["method"]
    if isinstance(method_field, str):
        method_name = method_field
        method_number = None
    elif _is_int64(method_field):
        method_name = "?"
        method_number = method_field
    else:
        raise BadRequestError("'method' field must be a string or an integer")

    if "request" not in body_json:
        raise BadRequestError("missing 'request' field in JSON")

    return ParsedRequest(
        kind=RequestKind.INVOKE,
        method_name=method_name,
        method_number=method_number,
        format=READABLE_FORMAT,
        request_json=body_json["request"],
    )


def _parse_compact_request(body: str) -> ParsedRequest:
    match = COMPACT_REQUEST_PATTERN.fullmatch(body)
    if match is None:
        raise BadRequestError("invalid request format")
    method_name, number_str, format_, request_code = match.groups()

    method_number = None
    if number_str:
        if not METHOD_NUMBER_PATTERN.fullmatch(number_str):
            raise BadRequestError("can't parse method number")
        method_number = int(number_str)
        if not _is_int64(method_number):
            raise BadRequestError("can't parse method number")

    return ParsedRequest(
        kind=RequestKind.INVOKE,
        method_name=method_name,
        method_number=method_number,
        format=format_,
        request_code=request_code,
    )
