"""Property type settings package.

Per-(property, type) settings records persisted in one host-owned document,
with schema defaults, whole-record writes and first-use seeding.

Example usage:
    from typedprops.settings import PropertySettingsStore, YamlStorage

    store = PropertySettingsStore(YamlStorage(Path("data/settings.yaml")))
    store.load()
    store.register_schema("currency", CurrencySettings)

    record = store.get("price", "currency")
    store.set("price", "currency", {**record, "default_currency": "EUR"})
"""

from .editor import (
    ACTION_DELETE,
    ACTION_DRAG,
    SettingsSession,
    UnitItemView,
    UnitListEditor,
    list_add,
    list_move_down,
    list_move_up,
    list_remove,
)
from .schema import (
    FieldType,
    PropertyGeneralSettings,
    SettingField,
    TypeSettingsModel,
    UnitEntry,
    get_field_by_key,
)
from .seeding import PresetPrompt, PresetSeeder, SeedState
from .storage import MemoryStorage, SettingsStorage, YamlStorage, parse_list_value
from .store import PropertySettingsStore

__all__ = [
    # Schema types
    "FieldType",
    "SettingField",
    "TypeSettingsModel",
    "UnitEntry",
    "PropertyGeneralSettings",
    "get_field_by_key",
    # Store
    "PropertySettingsStore",
    # Storage
    "SettingsStorage",
    "YamlStorage",
    "MemoryStorage",
    "parse_list_value",
    # Editor
    "SettingsSession",
    "UnitListEditor",
    "UnitItemView",
    "ACTION_DRAG",
    "ACTION_DELETE",
    "list_add",
    "list_remove",
    "list_move_up",
    "list_move_down",
    # Seeding
    "PresetSeeder",
    "PresetPrompt",
    "SeedState",
]
