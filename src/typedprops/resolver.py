"""Type assignment: which type governs a property path.

Top-level properties are typed by the host's metadata type manager.
Sub-properties (dotted paths) are invisible to the host, so their type is
kept in the property's general settings record instead.
"""

import logging
from typing import Callable, Optional

from .menu import Menu, MenuItem
from .registry import TypeRegistry
from .settings import PropertySettingsStore
from .widgets.controls import CallbackList

logger = logging.getLogger(__name__)


def is_sub_property(property_path: str) -> bool:
    return "." in property_path


class TypeAssignmentResolver:
    """Reads and switches the type assigned to a property path.

    Example:
        resolver = TypeAssignmentResolver(registry, store, type_manager)
        resolver.switch_type("size.width", "measurement")
        resolver.assigned_type("size.width")     # "measurement"
    """

    def __init__(self, registry: TypeRegistry, store: PropertySettingsStore, type_manager):
        self._registry = registry
        self._store = store
        self._type_manager = type_manager
        self._rerender = CallbackList("rerender")

    is_sub_property = staticmethod(is_sub_property)

    def assigned_type(self, property_path: str) -> Optional[str]:
        """Type key governing the path, or None for plain rendering."""
        if is_sub_property(property_path):
            return self._store.get_general(property_path).custom_property_type
        return self._type_manager.get_assigned_widget(property_path)

    def switch_type(self, property_path: str, type_key: str) -> None:
        """Assign a type, replacing any previous assignment."""
        if self._registry.resolve(type_key) is None:
            logger.warning(f"Assigning unregistered type {type_key!r} to {property_path!r}")

        if not is_sub_property(property_path):
            self._type_manager.set_type(property_path, type_key)
            return

        general = self._store.get_general(property_path)
        general.custom_property_type = type_key
        self._store.set_general(property_path, general)
        logger.debug(f"Sub-property {property_path!r} switched to {type_key!r}")
        self._rerender.emit(property_path)

    def on_rerender(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """Subscribe to re-render requests for switched sub-properties."""
        return self._rerender.add(callback)

    def build_type_menu(self, property_path: str) -> Menu:
        """One item per assignable type; all disabled for reserved properties."""
        assigned = self.assigned_type(property_path)
        reserved = self._registry.is_reserved_property(property_path)

        menu = Menu()
        for descriptor in self._registry.list_assignable():
            key = descriptor.key
            menu.add_item(
                MenuItem(
                    title=descriptor.name,
                    icon=descriptor.icon,
                    section="type",
                    checked=key == assigned,
                    disabled=reserved,
                    is_extension=self._registry.is_extension(key),
                    on_click=lambda key=key: self.switch_type(property_path, key),
                )
            )
        return menu
