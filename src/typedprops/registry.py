"""Registry of property types.

The registry is an explicit object handed to whatever needs it; there is no
module-level instance.
"""

import dataclasses
import logging
from typing import Dict, Iterator, List, Optional

from .errors import UnknownTypeError
from .types.base import TypeDescriptor

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION_PREFIX = "typedprops:"


class TypeRegistry:
    """Type descriptors keyed by type key, in registration order.

    Example:
        registry = TypeRegistry()
        registry.register(CURRENCY_TYPE)
        registry.register_extension(my_type)      # key becomes "typedprops:<key>"

        registry.resolve("currency")              # descriptor
        registry.resolve("missing")               # None
        registry.get("missing")                   # raises UnknownTypeError
    """

    def __init__(self, extension_prefix: str = DEFAULT_EXTENSION_PREFIX):
        self.extension_prefix = extension_prefix
        self._types: Dict[str, TypeDescriptor] = {}

    def register(self, descriptor: TypeDescriptor) -> TypeDescriptor:
        """Insert or overwrite a descriptor by key (last write wins)."""
        if descriptor.key in self._types:
            logger.info(f"Replacing registered property type: {descriptor.key}")
        else:
            logger.debug(f"Registered property type: {descriptor.key}")
        self._types[descriptor.key] = descriptor
        return descriptor

    def register_extension(self, descriptor: TypeDescriptor) -> TypeDescriptor:
        """Register a third-party type under the reserved key prefix."""
        if not descriptor.key.startswith(self.extension_prefix):
            descriptor = dataclasses.replace(descriptor, key=f"{self.extension_prefix}{descriptor.key}")
        return self.register(descriptor)

    def unregister(self, key: str) -> Optional[TypeDescriptor]:
        return self._types.pop(key, None)

    def resolve(self, key: Optional[str]) -> Optional[TypeDescriptor]:
        if key is None:
            return None
        return self._types.get(key)

    def get(self, key: str) -> TypeDescriptor:
        """Look up a descriptor that must exist.

        Raises:
            UnknownTypeError: If the key is not registered.
        """
        descriptor = self._types.get(key)
        if descriptor is None:
            raise UnknownTypeError(key, list(self._types))
        return descriptor

    def list_assignable(self) -> List[TypeDescriptor]:
        """Descriptors a user may assign (those reserving no property names)."""
        return [d for d in self._types.values() if not d.reserved_keys]

    def is_reserved_property(self, property_name: str) -> bool:
        return any(property_name in d.reserved_keys for d in self._types.values())

    def is_extension(self, key: str) -> bool:
        return key.startswith(self.extension_prefix)

    def keys(self) -> List[str]:
        return list(self._types)

    def __contains__(self, key: object) -> bool:
        return key in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[TypeDescriptor]:
        return iter(list(self._types.values()))
