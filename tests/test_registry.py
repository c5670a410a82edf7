"""Unit tests for the method registry."""
import pytest

from rpc_dispatch.method import Method
from rpc_dispatch.serializers import Serializers
from rpc_dispatch.service.registry import MethodRegistryBuilder
from rpc_dispatch.utils.errors import BadRequestError, DuplicateMethodError, InvalidMethodError


async def noop(request, meta):
    return request


def method(name, number):
    return Method(name, number, Serializers.string, Serializers.string)


@pytest.fixture
def registry():
    """Create a registry with a method name shared by two methods."""
    builder = MethodRegistryBuilder()
    builder.add(method("first", 3), noop)
    builder.add(method("dup", 1), noop)
    builder.add(method("dup", 2), noop)
    return builder.seal()


class TestRegistration:
    """Test building the registry."""

    def test_registration_order(self, registry):
        assert [entry.method.number for entry in registry] == [3, 1, 2]
        assert len(registry) == 3

    def test_duplicate_number(self):
        builder = MethodRegistryBuilder()
        builder.add(method("a", 1), noop)

        with pytest.raises(DuplicateMethodError):
            builder.add(method("b", 1), noop)

    def test_sealed_registry_is_independent_of_builder(self):
        builder = MethodRegistryBuilder()
        builder.add(method("a", 1), noop)
        registry = builder.seal()

        builder.add(method("b", 2), noop)

        assert len(registry) == 1
        assert 2 not in registry

    def test_number_out_of_range(self):
        with pytest.raises(ValueError):
            method("huge", 2 ** 63)

    def test_int64_bounds(self):
        builder = MethodRegistryBuilder()
        builder.add(method("min", -(2 ** 63)), noop)
        builder.add(method("max", 2 ** 63 - 1), noop)

        assert len(builder.seal()) == 2

    def test_listing_entries_in_registration_order(self, registry):
        entries = registry.describe()

        assert [entry["number"] for entry in entries] == [3, 1, 2]
        assert entries[0]["request"] == {"type": "string"}

    def test_undescribable_method(self):
        class BrokenSerializer:
            def type_descriptor(self):
                raise TypeError("not describable")

        builder = MethodRegistryBuilder()

        with pytest.raises(InvalidMethodError, match="not describable"):
            builder.add(Method("broken", 1, BrokenSerializer(), Serializers.string), noop)
        assert len(builder.seal()) == 0


class TestResolution:
    """Test resolving methods by name and number."""

    def test_resolve_by_name(self, registry):
        assert registry.resolve("first", None).method.number == 3

    def test_resolve_by_number_ignores_name(self, registry):
        assert registry.resolve("first", 2).method.number == 2

    def test_resolve_ambiguous_name(self, registry):
        with pytest.raises(BadRequestError, match="method name 'dup' is ambiguous"):
            registry.resolve("dup", None)

    def test_resolve_unknown_name(self, registry):
        with pytest.raises(BadRequestError, match="^method not found: nope$"):
            registry.resolve("nope", None)

    def test_resolve_unknown_number(self, registry):
        with pytest.raises(BadRequestError, match="method not found: first; number: 42"):
            registry.resolve("first", 42)

    def test_find_by_name(self, registry):
        assert [entry.method.number for entry in registry.find_by_name("dup")] == [1, 2]
        assert registry.find_by_name("nope") == []
        assert registry.get(3).method.name == "first"
        assert registry.get(4) is None
