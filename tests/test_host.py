"""Tests for the in-memory host implementations."""

from typedprops.host import InMemoryPropertyHost, InMemoryTypeManager


class TestInMemoryPropertyHost:
    def test_dotted_paths(self):
        host = InMemoryPropertyHost({"size": {"width": 12}})
        assert host.get_value("size.width") == 12
        assert host.get_value("size.depth") is None
        assert host.get_value("missing.path") is None

    def test_set_creates_parents_and_none_clears(self):
        host = InMemoryPropertyHost()
        host.set_value("size.width", 3)
        assert host.values == {"size": {"width": 3}}

        host.set_value("size.width", None)
        assert host.values == {"size": {}}
        assert host.writes == [("size.width", 3), ("size.width", None)]

    def test_change_listeners(self):
        host = InMemoryPropertyHost()
        seen = []
        host.on_change(lambda path, value: seen.append((path, value)))
        host.set_value("price", 1)
        assert seen == [("price", 1)]


class TestInMemoryTypeManager:
    def test_assignments_and_events(self):
        manager = InMemoryTypeManager()
        seen = []
        manager.on_type_change(lambda path, key: seen.append((path, key)))

        manager.set_type("price", "currency")

        assert manager.get_assigned_widget("price") == "currency"
        assert seen == [("price", "currency")]

    def test_native_types_include_reserved(self):
        manager = InMemoryTypeManager()
        assert manager.registered_type_widgets["tags"].reserved_keys == ("tags",)
        assert "text" in manager.registered_type_widgets
