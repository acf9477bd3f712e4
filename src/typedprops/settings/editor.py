"""Shared editing logic for settings panels.

Centralizes pending-record management and unit list manipulation so that
every frontend (Qt, CLI, tests) only provides I/O adapters.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..errors import ContractViolationError
from .schema import SettingField, UnitEntry, get_field_by_key
from .store import PropertySettingsStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pending record session
# ---------------------------------------------------------------------------


class SettingsSession:
    """Working copy of one settings record with validate/commit/discard.

    Settings panels edit the working copy and commit it as a whole record
    (on tab change or close), matching the store's replace-not-merge writes.

    Example:
        session = SettingsSession(store, "price", "currency", CURRENCY_FIELDS)
        session.update("default_currency", "EUR")
        session.commit()
    """

    def __init__(
        self,
        store: PropertySettingsStore,
        property_path: str,
        type_key: str,
        fields: Optional[List[SettingField]] = None,
    ):
        self._store = store
        self.property_path = property_path
        self.type_key = type_key
        self.fields = fields or []
        self._record: Dict[str, Any] = store.get(property_path, type_key)
        self._dirty = False

    @property
    def record(self) -> Dict[str, Any]:
        """The working record (mutable; call ``mark_dirty`` after editing)."""
        return self._record

    def get(self, key: str, default: Any = None) -> Any:
        value = self._record.get(key)
        return default if value is None else value

    def update(self, key: str, value: Any) -> Optional[str]:
        """Buffer a field change after validation.

        Returns:
            Validation error message, or None if valid.
        """
        setting_field = get_field_by_key(self.fields, key)
        if setting_field:
            error = setting_field.validate(value)
            if error:
                return error

        self._record[key] = value
        self._dirty = True
        return None

    def mark_dirty(self) -> None:
        self._dirty = True

    def has_pending(self) -> bool:
        return self._dirty

    def commit(self) -> Dict[str, Any]:
        """Write the working record to the store and reload it."""
        self._record = self._store.set(self.property_path, self.type_key, self._record)
        self._dirty = False
        return copy.deepcopy(self._record)

    def discard(self) -> None:
        """Drop buffered edits and reload the stored record."""
        self._record = self._store.get(self.property_path, self.type_key)
        self._dirty = False


# ---------------------------------------------------------------------------
# List manipulation helpers
# ---------------------------------------------------------------------------


def list_add(items: List[Any], value: Any) -> List[Any]:
    """Append an item to a list (mutated in place)."""
    items.append(value)
    return items


def list_remove(items: List[Any], index: int) -> Optional[Any]:
    """Remove an item by 0-based index.

    Returns:
        The removed item, or None if index was invalid.
    """
    if 0 <= index < len(items):
        return items.pop(index)
    return None


def list_move_up(items: List[Any], index: int) -> bool:
    """Move an item one position up (toward index 0).

    Returns:
        True if the move was performed.
    """
    if 0 < index < len(items):
        items[index - 1], items[index] = items[index], items[index - 1]
        return True
    return False


def list_move_down(items: List[Any], index: int) -> bool:
    """Move an item one position down (toward end).

    Returns:
        True if the move was performed.
    """
    if 0 <= index < len(items) - 1:
        items[index], items[index + 1] = items[index + 1], items[index]
        return True
    return False


# ---------------------------------------------------------------------------
# Unit list editor
# ---------------------------------------------------------------------------


ACTION_DRAG = "drag"
ACTION_DELETE = "delete"


@dataclass
class UnitItemView:
    """What a frontend renders for one unit row."""

    index: int
    name: str
    shorthand: str
    is_default: bool
    actions: List[str] = field(default_factory=list)


class UnitListEditor:
    """Editable unit list with a default-unit reference.

    Invariants:
    - Renaming the default unit rewrites the default reference in the same
      operation.
    - At least one named unit always remains: the delete action is not
      offered for the last one.
    """

    def __init__(self, units: List[Any], default_unit: Optional[str] = None):
        self._units: List[UnitEntry] = [UnitEntry.model_validate(u) for u in units]
        self.default_unit = default_unit

    @property
    def units(self) -> List[UnitEntry]:
        return [u.model_copy() for u in self._units]

    def __len__(self) -> int:
        return len(self._units)

    def valid_count(self) -> int:
        """Number of units with a non-blank name."""
        return sum(1 for u in self._units if not u.is_blank)

    def add(self, name: str = "", shorthand: str = "") -> int:
        """Append a unit and return its index."""
        list_add(self._units, UnitEntry(name=name, shorthand=shorthand))
        return len(self._units) - 1

    def rename(self, index: int, new_name: str) -> None:
        unit = self._at(index, "rename")
        old_name = unit.name
        unit.name = new_name
        if old_name and self.default_unit == old_name:
            self.default_unit = new_name

    def set_shorthand(self, index: int, shorthand: str) -> None:
        self._at(index, "set_shorthand").shorthand = shorthand

    def can_delete(self, index: int) -> bool:
        unit = self._at(index, "can_delete")
        if unit.is_blank:
            return True
        return self.valid_count() > 1

    def item_actions(self, index: int) -> List[str]:
        actions = [ACTION_DRAG]
        if self.can_delete(index):
            actions.append(ACTION_DELETE)
        return actions

    def remove(self, index: int) -> bool:
        """Remove a unit if allowed.

        Returns:
            False when the unit is the last named one (nothing removed).
        """
        if not self.can_delete(index):
            logger.debug(f"Refusing to delete the last unit at index {index}")
            return False
        removed = list_remove(self._units, index)
        if removed is not None and removed.name and removed.name == self.default_unit:
            self.default_unit = self._first_valid_name()
        return True

    def move(self, index: int, new_index: int) -> bool:
        """Move a unit step by step toward ``new_index``."""
        self._at(index, "move")
        moved = False
        while index < new_index and list_move_down(self._units, index):
            index += 1
            moved = True
        while index > new_index and list_move_up(self._units, index):
            index -= 1
            moved = True
        return moved

    def prune_blank(self) -> int:
        """Drop units without a name; fix a dangling default reference."""
        before = len(self._units)
        self._units = [u for u in self._units if not u.is_blank]
        names = {u.name for u in self._units}
        if self.default_unit is not None and self.default_unit not in names:
            self.default_unit = self._first_valid_name()
        return before - len(self._units)

    def render_item(self, unit: Optional[UnitEntry], index: Optional[int]) -> UnitItemView:
        """Build the row view for a unit.

        Raises:
            ContractViolationError: If called without a unit or index.
        """
        if unit is None or index is None:
            raise ContractViolationError("render_item", "called without a unit or index")
        return UnitItemView(
            index=index,
            name=unit.name,
            shorthand=unit.shorthand,
            is_default=bool(unit.name) and unit.name == self.default_unit,
            actions=self.item_actions(index),
        )

    def items(self) -> List[UnitItemView]:
        return [self.render_item(unit, i) for i, unit in enumerate(self._units)]

    def to_record(self) -> Dict[str, Any]:
        return {
            "units": [u.model_dump() for u in self._units],
            "default_unit": self.default_unit,
        }

    def _first_valid_name(self) -> Optional[str]:
        for unit in self._units:
            if not unit.is_blank:
                return unit.name
        return None

    def _at(self, index: int, operation: str) -> UnitEntry:
        if not 0 <= index < len(self._units):
            raise ContractViolationError(operation, f"unit index {index} out of range")
        return self._units[index]
