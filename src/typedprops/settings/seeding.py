"""First-use seeding of list-valued settings.

A unit list that has never been configured is seeded exactly once per
property: from a hardcoded default table, or from a preset the user picks
through an async prompt. While the prompt is open the property is in the
``AWAITING_PRESET`` state; a second request for the same property awaits the
same in-flight future instead of prompting again.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .store import PropertySettingsStore

logger = logging.getLogger(__name__)

# Receives the offered preset keys, resolves to the chosen key or None (cancelled)
PresetPrompt = Callable[[List[str]], Awaitable[Optional[str]]]


class SeedState(Enum):
    """Initialization state of a property's list setting."""

    UNSEEDED = "unseeded"
    AWAITING_PRESET = "awaiting_preset"
    SEEDED = "seeded"


class PresetSeeder:
    """Seeds an empty unit list for a (property, type) pair.

    Example:
        seeder = PresetSeeder(store, "measurement", UNIT_PRESETS, DEFAULT_UNITS,
                              prompt=ask_user, fallback_preset="length")
        record = await seeder.ensure_seeded("height")
    """

    def __init__(
        self,
        store: PropertySettingsStore,
        type_key: str,
        presets: Dict[str, List[Tuple[str, str]]],
        default_units: Dict[str, str],
        prompt: Optional[PresetPrompt] = None,
        fallback_preset: str = "length",
        list_field: str = "units",
        default_field: str = "default_unit",
    ):
        self._store = store
        self.type_key = type_key
        self._presets = presets
        self._default_units = default_units
        self._prompt = prompt
        self.fallback_preset = fallback_preset
        self._list_field = list_field
        self._default_field = default_field
        self._in_flight: Dict[str, asyncio.Future] = {}

    @property
    def prompts(self) -> bool:
        return self._prompt is not None

    def state(self, property_path: str) -> SeedState:
        if property_path in self._in_flight:
            return SeedState.AWAITING_PRESET
        if self.needs_seeding(property_path):
            return SeedState.UNSEEDED
        return SeedState.SEEDED

    def needs_seeding(self, property_path: str) -> bool:
        record = self._store.get(property_path, self.type_key)
        return not record.get(self._list_field)

    def seed_defaults(self, property_path: str) -> Dict[str, Any]:
        """Seed the hardcoded default table."""
        logger.debug(f"Seeding default units for {property_path!r}")
        return self._write(property_path, list(self._default_units.items()))

    def seed_preset(self, property_path: str, preset: Optional[str]) -> Dict[str, Any]:
        """Seed a named preset, falling back when it is unknown or None."""
        if preset not in self._presets:
            if preset is not None:
                logger.warning(f"Unknown unit preset {preset!r}, using {self.fallback_preset!r}")
            preset = self.fallback_preset
        if preset not in self._presets:
            return self.seed_defaults(property_path)
        logger.debug(f"Seeding preset {preset!r} for {property_path!r}")
        return self._write(property_path, self._presets[preset])

    async def ensure_seeded(self, property_path: str) -> Dict[str, Any]:
        """Seed the property if needed and return its settings record.

        Concurrent calls for the same property share one prompt.
        """
        if not self.needs_seeding(property_path):
            return self._store.get(property_path, self.type_key)

        in_flight = self._in_flight.get(property_path)
        if in_flight is not None:
            return await asyncio.shield(in_flight)

        if self._prompt is None:
            return self.seed_defaults(property_path)

        future = asyncio.get_running_loop().create_future()
        self._in_flight[property_path] = future
        try:
            try:
                choice = await self._prompt(list(self._presets))
            except Exception as e:
                logger.warning(f"Preset prompt failed for {property_path!r}: {e}")
                choice = None
            record = self.seed_preset(property_path, choice)
            future.set_result(record)
            return record
        except BaseException as e:
            if not future.done():
                if isinstance(e, asyncio.CancelledError):
                    future.cancel()
                else:
                    future.set_exception(e)
                    # Mark retrieved so an unawaited future does not warn
                    future.exception()
            raise
        finally:
            self._in_flight.pop(property_path, None)

    def request(
        self,
        property_path: str,
        on_ready: Callable[[Dict[str, Any]], None],
    ) -> Optional[asyncio.Task]:
        """Seed from synchronous code, calling ``on_ready`` with the record.

        Returns:
            The pending task when a prompt must be awaited, else None
            (``on_ready`` has already been called).
        """
        if not self.needs_seeding(property_path):
            on_ready(self._store.get(property_path, self.type_key))
            return None

        if self._prompt is None:
            on_ready(self.seed_defaults(property_path))
            return None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                f"No running event loop to await preset selection for {property_path!r}; "
                f"seeding {self.fallback_preset!r}"
            )
            on_ready(self.seed_preset(property_path, None))
            return None

        def _done(task: asyncio.Task) -> None:
            if task.cancelled():
                logger.debug(f"Preset seeding cancelled for {property_path!r}")
                return
            error = task.exception()
            if error is not None:
                logger.warning(f"Preset seeding failed for {property_path!r}: {error}")
                return
            on_ready(task.result())

        task = loop.create_task(self.ensure_seeded(property_path))
        task.add_done_callback(_done)
        return task

    def _write(self, property_path: str, units: List[Tuple[str, str]]) -> Dict[str, Any]:
        record = self._store.get(property_path, self.type_key)
        record[self._list_field] = [
            {"name": name, "shorthand": shorthand} for name, shorthand in units
        ]
        names = [name for name, _ in units]
        if record.get(self._default_field) not in names:
            record[self._default_field] = names[0] if names else None
        return self._store.set(property_path, self.type_key, record)
