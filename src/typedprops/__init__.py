"""typedprops - pluggable, configurable value types for document properties.

Example usage:
    from typedprops import InMemoryPropertyHost, InMemoryTypeManager, PropertyTypesPlugin
    from typedprops.settings import MemoryStorage

    host = InMemoryPropertyHost({"price": {"value": 1234567, "currency": "USD"}})
    plugin = PropertyTypesPlugin(host, InMemoryTypeManager({"price": "currency"}),
                                 storage=MemoryStorage())
    plugin.load()
    plugin.render_property("price").display_text()   # "$1.23M"
"""

from .errors import ConfigError, ContractViolationError, SettingsError, TypedPropsError, UnknownTypeError
from .host import InMemoryPropertyHost, InMemoryTypeManager, MetadataTypeManager, PropertyValueHost
from .menu import Menu, MenuItem, PropertyMenuBuilder
from .plugin import PropertyTypesPlugin
from .registry import TypeRegistry
from .resolver import TypeAssignmentResolver
from .types import TypeDescriptor

__version__ = "0.1.0"

__all__ = [
    "PropertyTypesPlugin",
    "TypeRegistry",
    "TypeDescriptor",
    "TypeAssignmentResolver",
    "PropertyMenuBuilder",
    "Menu",
    "MenuItem",
    "PropertyValueHost",
    "MetadataTypeManager",
    "InMemoryPropertyHost",
    "InMemoryTypeManager",
    "TypedPropsError",
    "ConfigError",
    "UnknownTypeError",
    "ContractViolationError",
    "SettingsError",
]
