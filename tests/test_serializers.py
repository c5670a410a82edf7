"""Unit tests for the pydantic-backed serializers."""
import json

import pytest
from pydantic import BaseModel, ConfigDict, ValidationError

from rpc_dispatch.serializers import JsonFlavor, Serializers, UnrecognizedValuesPolicy

DROP = UnrecognizedValuesPolicy.DROP
KEEP = UnrecognizedValuesPolicy.KEEP


class Point(BaseModel):
    x: int
    y: int = 0


class StrictPoint(BaseModel):
    model_config = ConfigDict(extra="forbid")

    x: int


@pytest.fixture
def point_serializer():
    return Serializers.of(Point)


class TestDecoding:
    """Test decoding requests."""

    def test_from_json(self, point_serializer):
        point = point_serializer.from_json({"x": 1, "y": 2}, DROP)

        assert point == Point(x=1, y=2)

    def test_from_json_code(self, point_serializer):
        assert point_serializer.from_json_code('{"x": 1}', DROP) == Point(x=1)

    def test_drop_unrecognized(self, point_serializer):
        point = point_serializer.from_json({"x": 1, "z": 3}, DROP)

        assert point == Point(x=1)
        assert "z" not in point.model_dump()

    def test_keep_unrecognized(self, point_serializer):
        point = point_serializer.from_json_code('{"x": 1, "z": 3}', KEEP)

        assert isinstance(point, Point)
        assert point.model_dump() == {"x": 1, "y": 0, "z": 3}
        assert json.loads(point_serializer.to_json_code(point, JsonFlavor.DENSE)) == {"x": 1, "z": 3}

    def test_drop_overrides_forbid(self):
        serializer = Serializers.of(StrictPoint)

        assert serializer.from_json({"x": 1, "z": 3}, DROP).x == 1
        with pytest.raises(ValidationError):
            StrictPoint.model_validate({"x": 1, "z": 3})

    def test_invalid_request(self, point_serializer):
        with pytest.raises(ValidationError):
            point_serializer.from_json({"x": "not a number"}, DROP)

    def test_int64_range(self):
        assert Serializers.int64.from_json_code("9223372036854775807", DROP) == 2 ** 63 - 1
        with pytest.raises(ValidationError):
            Serializers.int64.from_json_code("9223372036854775808", DROP)


class TestEncoding:
    """Test encoding responses."""

    def test_readable(self, point_serializer):
        code = point_serializer.to_json_code(Point(x=1), JsonFlavor.READABLE)

        assert code == '{\n  "x": 1,\n  "y": 0\n}'

    def test_dense(self, point_serializer):
        assert point_serializer.to_json_code(Point(x=1), JsonFlavor.DENSE) == '{"x":1}'

    def test_string(self):
        assert Serializers.string.to_json_code("hi", JsonFlavor.READABLE) == '"hi"'

    def test_type_descriptor(self, point_serializer):
        descriptor = point_serializer.type_descriptor()

        assert descriptor["title"] == "Point"
        assert descriptor["required"] == ["x"]
        assert Serializers.boolean.type_descriptor() == {"type": "boolean"}
