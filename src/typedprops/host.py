"""Host application interfaces and in-memory reference implementations.

The host owns raw property values and the type assignment of top-level
properties. ``InMemoryPropertyHost`` and ``InMemoryTypeManager`` implement
those interfaces for headless use and tests.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Tuple

from .types.base import TypeDescriptor
from .widgets.controls import CallbackList

logger = logging.getLogger(__name__)


class PropertyValueHost(Protocol):
    """Reads and writes raw property values; writing None clears."""

    def get_value(self, property_path: str) -> Any: ...

    def set_value(self, property_path: str, value: Any) -> None: ...


class MetadataTypeManager(Protocol):
    """Host-side type assignment for top-level properties."""

    registered_type_widgets: Mapping[str, TypeDescriptor]

    def set_type(self, property_path: str, type_key: str) -> None: ...

    def get_assigned_widget(self, property_path: str) -> Optional[str]: ...


class InMemoryPropertyHost:
    """Nested property values addressed by dotted paths.

    Example:
        host = InMemoryPropertyHost({"size": {"width": 12}})
        host.get_value("size.width")       # 12
        host.set_value("size.width", None) # removes the key
    """

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self.values: Dict[str, Any] = values if values is not None else {}
        self.writes: List[Tuple[str, Any]] = []
        self._listeners = CallbackList("property change")

    def get_value(self, property_path: str) -> Any:
        node: Any = self.values
        for part in property_path.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def set_value(self, property_path: str, value: Any) -> None:
        *parents, leaf = property_path.split(".")
        node = self.values
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                if value is None:
                    self._record(property_path, value)
                    return
                child = node[part] = {}
            node = child

        if value is None:
            node.pop(leaf, None)
        else:
            node[leaf] = value
        self._record(property_path, value)

    def on_change(self, callback: Callable[[str, Any], None]) -> Callable[[], None]:
        return self._listeners.add(callback)

    def _record(self, property_path: str, value: Any) -> None:
        self.writes.append((property_path, value))
        self._listeners.emit(property_path, value)


def _native(key: str, name: str, icon: str, reserved: Tuple[str, ...] = ()) -> TypeDescriptor:
    return TypeDescriptor(key=key, display_name=lambda: name, icon=icon, reserved_keys=reserved)


# Types the host renders itself; tags/aliases guard their reserved properties
HOST_NATIVE_TYPES: List[TypeDescriptor] = [
    _native("text", "Text", "lucide-text"),
    _native("number", "Number", "lucide-binary"),
    _native("checkbox", "Checkbox", "lucide-check-square"),
    _native("date", "Date", "lucide-calendar"),
    _native("multitext", "List", "lucide-list"),
    _native("tags", "Tags", "lucide-tags", ("tags",)),
    _native("aliases", "Aliases", "lucide-forward", ("aliases",)),
]


class InMemoryTypeManager:
    """Top-level property type assignments kept in a dict."""

    def __init__(
        self,
        assignments: Optional[Dict[str, str]] = None,
        native_types: Optional[List[TypeDescriptor]] = None,
    ):
        self.assignments: Dict[str, str] = dict(assignments or {})
        types = HOST_NATIVE_TYPES if native_types is None else native_types
        self.registered_type_widgets: Dict[str, TypeDescriptor] = {d.key: d for d in types}
        self._listeners = CallbackList("type change")

    def set_type(self, property_path: str, type_key: str) -> None:
        self.assignments[property_path] = type_key
        self._listeners.emit(property_path, type_key)

    def get_assigned_widget(self, property_path: str) -> Optional[str]:
        return self.assignments.get(property_path)

    def on_type_change(self, callback: Callable[[str, str], None]) -> Callable[[], None]:
        return self._listeners.add(callback)
