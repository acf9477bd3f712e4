"""Storage backends for settings persistence.

The store treats persistence as one nested document. Backends only need to
load and save that document whole.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Protocol

import yaml

logger = logging.getLogger(__name__)


class SettingsStorage(Protocol):
    """Whole-document persistence owned by the host."""

    def load(self) -> Dict[str, Any]:
        ...

    def save(self, data: Dict[str, Any]) -> None:
        ...


class YamlStorage:
    """YAML file storage for property settings.

    Property paths may contain dots (sub-properties), so unlike a dotted-key
    config file the document is stored as-is without key flattening.

    Example file structure:
        properties:
          price:
            types:
              currency:
                default_currency: EUR
          dimensions.width:
            general:
              custom_property_type: measurement
    """

    def __init__(self, path: Path):
        """Initialize YAML storage.

        Args:
            path: Path to the YAML file.
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Get the storage file path."""
        return self._path

    def load(self) -> Dict[str, Any]:
        """Load the settings document.

        Returns:
            The parsed document, or an empty dict if missing or unreadable.
        """
        if not self._path.exists():
            return {}

        try:
            with open(self._path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError) as e:
            logger.warning(f"Failed to load settings from {self._path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring non-mapping settings document in {self._path}")
            return {}
        return data

    def save(self, data: Dict[str, Any]) -> None:
        """Save the settings document.

        Args:
            data: The whole document.
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)

        with open(self._path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


class MemoryStorage:
    """In-process storage, for hosts that persist settings themselves and tests."""

    def __init__(self, initial: Dict[str, Any] = None):
        self._data: Dict[str, Any] = copy.deepcopy(initial or {})
        self.save_count = 0

    def load(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def save(self, data: Dict[str, Any]) -> None:
        self._data = copy.deepcopy(data)
        self.save_count += 1

    @property
    def data(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)


def parse_list_value(value: Any) -> list:
    """Parse a value that should be a list.

    Accepts comma-separated strings as typed into a single text input.

    Args:
        value: The value to parse (list, CSV string, or other).

    Returns:
        List of items.
    """
    if isinstance(value, list):
        return value
    if value is None:
        return []
    if isinstance(value, str):
        if "," in value:
            return [item.strip() for item in value.split(",") if item.strip()]
        return [value.strip()] if value.strip() else []
    return [value]
