"""JSON serializers for method requests and responses, backed by pydantic."""
from enum import Enum
from typing import Annotated, Any, Dict, Generic, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

T = TypeVar("T")

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class JsonFlavor(Enum):
    """Style of the JSON produced when serializing a value."""

    # Indented, every field present. Meant for humans.
    READABLE = "readable"
    # No whitespace, fields holding their default value omitted.
    DENSE = "dense"


class UnrecognizedValuesPolicy(Enum):
    """What to do with object fields the target type does not declare."""

    KEEP = "keep"
    DROP = "drop"


class Serializer(Protocol[T]):
    """Codec converting between JSON and the values a method works with."""

    def from_json(self, value: Any, policy: UnrecognizedValuesPolicy) -> T:
        """Decode an already-parsed JSON value."""
        ...

    def from_json_code(self, code: str, policy: UnrecognizedValuesPolicy) -> T:
        """Decode JSON text."""
        ...

    def to_json_code(self, value: T, flavor: JsonFlavor) -> str:
        """Encode a value to JSON text."""
        ...

    def type_descriptor(self) -> Dict[str, Any]:
        """JSON description of the type, shown in the method listing."""
        ...


def _with_extra(model: type, extra: str) -> type:
    """Subclass of a pydantic model with a different ``extra`` setting."""

    class _Model(model):
        model_config = ConfigDict(extra=extra)

    _Model.__name__ = model.__name__
    _Model.__qualname__ = model.__qualname__
    _Model.__module__ = model.__module__
    return _Model


class PydanticSerializer(Generic[T]):
    """Serializer for any type pydantic can validate.

    For ``BaseModel`` subclasses, unknown top-level fields are ignored under
    ``UnrecognizedValuesPolicy.DROP`` and kept under ``KEEP``. Kept fields
    are written back when the value is serialized. Nested models follow
    their own ``extra`` configuration.
    """

    def __init__(self, type_: Any):
        self.type_ = type_
        self._adapter = TypeAdapter(type_)
        self._is_model = isinstance(type_, type) and issubclass(type_, BaseModel)
        if self._is_model:
            extra = type_.model_config.get("extra") or "ignore"
            self._decoders = {
                UnrecognizedValuesPolicy.DROP: (
                    self._adapter if extra == "ignore" else TypeAdapter(_with_extra(type_, "ignore"))
                ),
                UnrecognizedValuesPolicy.KEEP: (
                    self._adapter if extra == "allow" else TypeAdapter(_with_extra(type_, "allow"))
                ),
            }
        else:
            self._decoders = {
                UnrecognizedValuesPolicy.DROP: self._adapter,
                UnrecognizedValuesPolicy.KEEP: self._adapter,
            }

    def from_json(self, value: Any, policy: UnrecognizedValuesPolicy) -> T:
        return self._decoders[policy].validate_python(value)

    def from_json_code(self, code: str, policy: UnrecognizedValuesPolicy) -> T:
        return self._decoders[policy].validate_json(code)

    def to_json_code(self, value: T, flavor: JsonFlavor) -> str:
        if flavor == JsonFlavor.READABLE:
            options = {"indent": 2}
        else:
            options = {"exclude_defaults": True}
        if self._is_model and isinstance(value, self.type_):
            # Serialize with the instance's own class so kept fields survive.
            return value.model_dump_json(warnings="error", **options)
        return self._adapter.dump_json(value, warnings="error", **options).decode("utf-8")

    def type_descriptor(self) -> Dict[str, Any]:
        return self._adapter.json_schema()

    def __repr__(self) -> str:
        return f"PydanticSerializer({self.type_!r})"


class Serializers:
    """Ready-made serializers for common types."""

    string = PydanticSerializer(str)
    int64 = PydanticSerializer(Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)])
    float64 = PydanticSerializer(float)
    boolean = PydanticSerializer(bool)

    @staticmethod
    def of(type_: Any) -> PydanticSerializer:
        """Serializer for an arbitrary type, e.g. a ``BaseModel`` subclass."""
        return PydanticSerializer(type_)
