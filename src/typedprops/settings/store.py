"""Per-property, per-type settings store.

This module provides the PropertySettingsStore that keeps one settings
record per (property path, type key) pair, plus one general record per
property, inside a single host-owned settings document.
"""

import copy
import logging
from typing import Any, Callable, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from ..errors import ContractViolationError, SettingsError
from .schema import PropertyGeneralSettings, TypeSettingsModel
from .storage import SettingsStorage

logger = logging.getLogger(__name__)

GENERAL_KEY = "general"
TYPES_KEY = "types"
PROPERTIES_KEY = "properties"

# Listener signature: (property_path, type_key or "general", record)
ChangeListener = Callable[[str, str, Dict[str, Any]], None]


class PropertySettingsStore:
    """Settings records keyed by property then type.

    Records are replaced whole on every write; there is no field-level merge
    and no optimistic concurrency check, so the last writer wins.

    Example:
        store = PropertySettingsStore(YamlStorage(Path("settings.yaml")))
        store.load()
        store.register_schema("currency", CurrencySettings)

        record = store.get("price", "currency")     # defaults if never stored
        record["default_currency"] = "EUR"
        store.set("price", "currency", record)

        store.on_change(lambda prop, key, rec: print(prop, key, rec))
    """

    def __init__(self, storage: SettingsStorage, auto_save: bool = True):
        """Initialize the store.

        Args:
            storage: Backend holding the settings document.
            auto_save: If True, persist after every mutation.
        """
        self._storage = storage
        self._auto_save = auto_save
        self._document: Dict[str, Any] = {}
        self._schemas: Dict[str, Optional[Type[TypeSettingsModel]]] = {}
        self._listeners: List[ChangeListener] = []
        self._loaded = False
        self._closed = False

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    def load(self) -> None:
        """Load the settings document from storage."""
        document = self._storage.load()
        properties = document.get(PROPERTIES_KEY)
        if properties is not None and not isinstance(properties, dict):
            logger.warning("Discarding malformed 'properties' section in settings document")
            document[PROPERTIES_KEY] = {}
        self._document = document
        self._loaded = True
        self._closed = False
        logger.debug(f"Loaded settings for {len(self.properties())} properties")

    def save(self) -> None:
        """Persist the whole document."""
        self._storage.save(copy.deepcopy(self._document))
        logger.debug("Saved property settings")

    def close(self) -> None:
        """Tear down: drop listeners and refuse further writes."""
        self._listeners.clear()
        self._closed = True
        logger.debug("Closed property settings store")

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ─────────────────────────────────────────────────────────────────
    # Schemas
    # ─────────────────────────────────────────────────────────────────

    def register_schema(
        self,
        type_key: str,
        model: Optional[Type[TypeSettingsModel]],
    ) -> None:
        """Register the settings model for a type key (last write wins).

        Args:
            type_key: The property type key.
            model: Pydantic model describing the record, or None for types
                   without settings.
        """
        self._schemas[type_key] = model

    def unregister_schema(self, type_key: str) -> None:
        self._schemas.pop(type_key, None)

    def get_schema(self, type_key: str) -> Optional[Type[TypeSettingsModel]]:
        return self._schemas.get(type_key)

    # ─────────────────────────────────────────────────────────────────
    # Type settings
    # ─────────────────────────────────────────────────────────────────

    def get(self, property_path: str, type_key: str) -> Dict[str, Any]:
        """Get the settings record for a property and type.

        Never returns None: missing records yield schema defaults, and a
        malformed stored record is logged and replaced by defaults.

        Args:
            property_path: The property path (e.g., "price", "size.width").
            type_key: The type key (e.g., "currency").

        Returns:
            A copy of the record.
        """
        stored = self._type_records(property_path).get(type_key)
        model = self._schemas.get(type_key)

        if model is None:
            return copy.deepcopy(stored) if isinstance(stored, dict) else {}

        try:
            return model.model_validate(stored or {}).model_dump()
        except ValidationError as e:
            logger.warning(
                f"Malformed {type_key!r} settings for {property_path!r}, using defaults: "
                f"{e.error_count()} error(s)"
            )
            return model().model_dump()

    def get_model(self, property_path: str, type_key: str) -> TypeSettingsModel:
        """Get the settings record as its pydantic model.

        Raises:
            ContractViolationError: If no model is registered for the type.
        """
        model = self._schemas.get(type_key)
        if model is None:
            raise ContractViolationError(
                "get_model", f"no settings model registered for {type_key!r}"
            )
        return model.model_validate(self.get(property_path, type_key))

    def has(self, property_path: str, type_key: str) -> bool:
        """Check whether a record was ever stored for the pair."""
        return type_key in self._type_records(property_path)

    def set(
        self,
        property_path: str,
        type_key: str,
        record: Union[Dict[str, Any], BaseModel],
    ) -> Dict[str, Any]:
        """Replace the settings record for a property and type.

        Args:
            property_path: The property path.
            type_key: The type key.
            record: The complete new record (dict or model instance).

        Returns:
            The stored (validated) record.

        Raises:
            SettingsError: If the record fails the type's schema.
        """
        self._ensure_open("set")

        if isinstance(record, BaseModel):
            record = record.model_dump()

        model = self._schemas.get(type_key)
        if model is not None:
            try:
                record = model.model_validate(record).model_dump()
            except ValidationError as e:
                raise SettingsError(
                    property_path,
                    type_key,
                    [err["msg"] for err in e.errors()],
                ) from e
        else:
            record = copy.deepcopy(dict(record))

        entry = self._property_entry(property_path, create=True)
        entry.setdefault(TYPES_KEY, {})[type_key] = record

        self._after_write(property_path, type_key, record)
        return copy.deepcopy(record)

    # ─────────────────────────────────────────────────────────────────
    # General (per-property) settings
    # ─────────────────────────────────────────────────────────────────

    def get_general(self, property_path: str) -> PropertyGeneralSettings:
        """Get the general record for a property (defaults if absent)."""
        entry = self._property_entry(property_path)
        stored = entry.get(GENERAL_KEY) if entry else None
        try:
            return PropertyGeneralSettings.model_validate(stored or {})
        except ValidationError as e:
            logger.warning(
                f"Malformed general settings for {property_path!r}, using defaults: "
                f"{e.error_count()} error(s)"
            )
            return PropertyGeneralSettings()

    def set_general(
        self,
        property_path: str,
        general: Union[PropertyGeneralSettings, Dict[str, Any]],
    ) -> None:
        """Replace the general record for a property."""
        self._ensure_open("set_general")

        if isinstance(general, dict):
            general = PropertyGeneralSettings.model_validate(general)
        record = general.model_dump()

        entry = self._property_entry(property_path, create=True)
        entry[GENERAL_KEY] = record

        self._after_write(property_path, GENERAL_KEY, record)

    # ─────────────────────────────────────────────────────────────────
    # Introspection
    # ─────────────────────────────────────────────────────────────────

    def properties(self) -> List[str]:
        """List property paths that have any stored settings."""
        return list(self._document.get(PROPERTIES_KEY) or {})

    def type_keys(self, property_path: str) -> List[str]:
        """List type keys with stored records for a property."""
        return list(self._type_records(property_path))

    def snapshot(self) -> Dict[str, Any]:
        """Get a deep copy of the whole settings document."""
        return copy.deepcopy(self._document)

    # ─────────────────────────────────────────────────────────────────
    # Events
    # ─────────────────────────────────────────────────────────────────

    def on_change(self, callback: ChangeListener) -> Callable[[], None]:
        """Register a callback for record changes.

        Args:
            callback: Function(property_path, type_key, record). The type key
                      is "general" for general record writes.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(callback)
        return lambda: self.remove_listener(callback)

    def remove_listener(self, callback: ChangeListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _emit_change(self, property_path: str, key: str, record: Dict[str, Any]) -> None:
        # Snapshot list to avoid mutation during iteration
        for listener in list(self._listeners):
            try:
                listener(property_path, key, copy.deepcopy(record))
            except Exception as e:
                logger.warning(f"Settings listener error: {e}")

    # ─────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise ContractViolationError(operation, "settings store is closed")

    def _after_write(self, property_path: str, key: str, record: Dict[str, Any]) -> None:
        if self._auto_save:
            self.save()
        self._emit_change(property_path, key, record)

    def _property_entry(self, property_path: str, create: bool = False) -> Optional[Dict[str, Any]]:
        properties = self._document.get(PROPERTIES_KEY)
        if not isinstance(properties, dict):
            if not create:
                return None
            properties = self._document[PROPERTIES_KEY] = {}

        entry = properties.get(property_path)
        if not isinstance(entry, dict):
            if not create:
                return None
            entry = properties[property_path] = {}
        return entry

    def _type_records(self, property_path: str) -> Dict[str, Any]:
        entry = self._property_entry(property_path)
        if not entry:
            return {}
        records = entry.get(TYPES_KEY)
        return records if isinstance(records, dict) else {}
