"""Tests for the type registry."""

import pytest

from typedprops.errors import UnknownTypeError
from typedprops.host import HOST_NATIVE_TYPES
from typedprops.registry import TypeRegistry
from typedprops.types import BUILTIN_TYPES, TypeDescriptor, register_builtin_types


def rating_type(key="rating"):
    return TypeDescriptor(key=key, display_name=lambda: "Rating", icon="lucide-star")


@pytest.fixture
def registry():
    registry = TypeRegistry()
    for descriptor in HOST_NATIVE_TYPES:
        registry.register(descriptor)
    register_builtin_types(registry)
    return registry


class TestTypeRegistry:
    def test_resolve(self, registry):
        assert registry.resolve("currency").name == "Currency"
        assert registry.resolve("missing") is None
        assert registry.resolve(None) is None

    def test_get_unknown_raises(self, registry):
        with pytest.raises(UnknownTypeError) as exc_info:
            registry.get("missing")
        assert exc_info.value.type_key == "missing"
        assert "currency" in exc_info.value.details["available_types"]

    def test_last_registration_wins(self, registry):
        replacement = TypeDescriptor(key="code", display_name=lambda: "Snippet")
        registry.register(replacement)
        assert registry.resolve("code") is replacement
        assert registry.keys().count("code") == 1

    def test_assignable_excludes_reserved_in_order(self, registry):
        keys = [d.key for d in registry.list_assignable()]
        assert "tags" not in keys and "aliases" not in keys
        assert keys[-4:] == [d.key for d in BUILTIN_TYPES]

    def test_reserved_properties(self, registry):
        assert registry.is_reserved_property("tags")
        assert registry.is_reserved_property("aliases")
        assert not registry.is_reserved_property("price")

    def test_extension_keys_are_namespaced(self, registry):
        descriptor = registry.register_extension(rating_type())
        assert descriptor.key == "typedprops:rating"
        assert "typedprops:rating" in registry
        assert registry.is_extension("typedprops:rating")
        assert not registry.is_extension("currency")

    def test_extension_prefix_not_doubled(self):
        registry = TypeRegistry(extension_prefix="acme:")
        assert registry.register_extension(rating_type("acme:rating")).key == "acme:rating"

    def test_unregister(self, registry):
        count = len(registry)
        assert registry.unregister("unit") is not None
        assert len(registry) == count - 1
        assert registry.unregister("unit") is None

    def test_registries_are_independent(self):
        first, second = TypeRegistry(), TypeRegistry()
        first.register(rating_type())
        assert "rating" not in second
