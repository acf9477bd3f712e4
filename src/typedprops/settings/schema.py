"""Settings schema definitions.

Two layers describe per-type configuration:

- Pydantic models (``TypeSettingsModel`` subclasses) are the stored shape of a
  settings record. They supply defaults and validate whole-record writes.
- ``SettingField`` lists describe how a settings panel presents those fields,
  so a host UI can auto-render a form without knowing the type.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class FieldType(Enum):
    """Types of settings panel fields for UI rendering.

    Attributes:
        TEXT: Simple text input.
        NUMBER: Numeric input.
        SELECT: Dropdown with static options.
        LIST: Ordered list of editable entries.
    """

    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    LIST = "list"


@dataclass
class SettingField:
    """Definition of a single settings panel field.

    Attributes:
        key: Record field the input edits (e.g., "default_currency").
        label: Human-readable label for the UI.
        type: Field type determining widget rendering.
        default: Default value if not set.
        description: Help text shown under the label.
        options: Static list of options for SELECT type.
        min_value: Minimum value for NUMBER type.
        max_value: Maximum value for NUMBER type.
        placeholder: Placeholder text for text inputs.
    """

    key: str
    label: str
    type: FieldType
    default: Any = None
    description: str = ""
    options: Optional[List[str]] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    placeholder: Optional[str] = None

    def __post_init__(self):
        if self.type == FieldType.SELECT and not self.options:
            raise ValueError(f"Field '{self.key}': SELECT type requires options")

    def validate(self, value: Any) -> Optional[str]:
        """Validate a value against this field's constraints.

        Returns:
            Error message if invalid, None if valid.
        """
        if value is None:
            return None

        if self.type == FieldType.NUMBER:
            try:
                num_value = float(value)
            except (TypeError, ValueError):
                return f"{self.label} must be a number"
            if self.min_value is not None and num_value < self.min_value:
                return f"{self.label} must be at least {self.min_value}"
            if self.max_value is not None and num_value > self.max_value:
                return f"{self.label} must be at most {self.max_value}"

        if self.type == FieldType.SELECT and self.options:
            if value not in self.options:
                return f"{self.label} must be one of: {', '.join(self.options)}"

        if self.type == FieldType.LIST and not isinstance(value, list):
            return f"{self.label} must be a list"

        return None


def get_field_by_key(
    schema: List[SettingField], key: str
) -> Optional[SettingField]:
    """Find a field in a schema by its key."""
    for setting_field in schema:
        if setting_field.key == key:
            return setting_field
    return None


class TypeSettingsModel(BaseModel):
    """Base for per-(property, type) settings records."""

    model_config = ConfigDict(extra="ignore")


class UnitEntry(BaseModel):
    """A configurable unit option: display name plus shorthand symbol."""

    name: str = ""
    shorthand: str = ""

    @property
    def is_blank(self) -> bool:
        return not self.name.strip()


class PropertyGeneralSettings(BaseModel):
    """Per-property record shared by every type.

    Only ``custom_property_type`` is interpreted here; it governs the type of
    sub-properties, which the host cannot type natively. The remaining fields
    belong to the host and are kept round-trip.
    """

    model_config = ConfigDict(extra="allow")

    icon: str = ""
    hidden: bool = False
    alias: Optional[str] = None
    collapsed: bool = False
    custom_property_type: Optional[str] = None
