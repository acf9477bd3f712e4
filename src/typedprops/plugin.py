"""Plugin lifecycle: wires registry, settings store, resolver and widgets.

Example:
    plugin = PropertyTypesPlugin(host, type_manager, storage=YamlStorage(path))
    plugin.load()

    widget = plugin.render_property("price")
    widget.activate()
    ...
    plugin.unload()
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .config import Config, get_config
from .errors import ContractViolationError
from .menu import Menu, PropertyActions, PropertyMenuBuilder
from .registry import TypeRegistry
from .resolver import TypeAssignmentResolver
from .settings import PresetPrompt, PresetSeeder, PropertySettingsStore, SettingsStorage, YamlStorage
from .types import BUILTIN_TYPES
from .types.base import ListenerContext, PlainCodec, SettingsContext, TypeDescriptor, WidgetContext
from .types.measurement import MEASUREMENT_KEY
from .types.presets import DEFAULT_UNITS, UNIT_PRESETS
from .widgets.controls import CallbackList, ControlFactory, Scheduler
from .widgets.focus import AsyncioScheduler, ManualScheduler
from .widgets.headless import HeadlessControlFactory
from .widgets.layouts import TextLayout
from .widgets.state import TypedFieldWidget

logger = logging.getLogger(__name__)

PLAIN_TYPE_KEY = "plain"

_MISSING = object()


def _default_scheduler() -> Scheduler:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.warning("No scheduler and no running event loop: edit mode only ends on blur after ManualScheduler.advance()")
        return ManualScheduler()
    return AsyncioScheduler(loop)


class PropertyTypesPlugin:
    """Owns the per-session objects and routes host events to them.

    Args:
        host: Raw property value access.
        type_manager: Host metadata type manager (top-level assignments).
        storage: Settings backend; defaults to the configured YAML file.
        config: Configuration; defaults to ``get_config()``.
        controls: Control factory; defaults to headless controls.
        scheduler: Timer source for blur settling. Defaults to the running
            asyncio loop; without one, a ManualScheduler the host must
            ``advance``.
        prompt: Async preset picker used when seeding unit lists.
        actions: Host dialogs used by the property context menu.
    """

    def __init__(
        self,
        host,
        type_manager,
        storage: Optional[SettingsStorage] = None,
        config: Optional[Config] = None,
        controls: Optional[ControlFactory] = None,
        scheduler: Optional[Scheduler] = None,
        prompt: Optional[PresetPrompt] = None,
        actions: Optional[PropertyActions] = None,
    ):
        self.config = config or get_config()
        self.host = host
        self.type_manager = type_manager
        self.controls = controls or HeadlessControlFactory()
        self.scheduler = scheduler or _default_scheduler()
        self.actions = actions

        storage = storage or YamlStorage(Path(self.config.storage.settings_path))
        self.store = PropertySettingsStore(storage, auto_save=self.config.storage.auto_save)
        self.registry = TypeRegistry(self.config.types.extension_prefix)
        self.resolver = TypeAssignmentResolver(self.registry, self.store, type_manager)

        use_prompt = prompt if self.config.types.prompt_for_unit_preset else None
        self.seeders: Dict[str, PresetSeeder] = {
            MEASUREMENT_KEY: PresetSeeder(
                self.store,
                MEASUREMENT_KEY,
                UNIT_PRESETS,
                DEFAULT_UNITS,
                prompt=use_prompt,
                fallback_preset=self.config.types.fallback_unit_preset,
            )
        }

        self._widgets: Dict[str, List[TypedFieldWidget]] = {}
        self._cleanups: List[Callable[[], None]] = []
        self._rerender = CallbackList("rerender")
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    def load(self) -> None:
        """Load settings and register host-native and built-in types."""
        if self._loaded:
            return
        self.store.load()

        for descriptor in self.type_manager.registered_type_widgets.values():
            self.registry.register(descriptor)
        for descriptor in BUILTIN_TYPES:
            self.register_type(descriptor)

        self._loaded = True
        self._cleanups.append(self.resolver.on_rerender(self._emit_rerender))
        for descriptor in self.registry:
            self._register_listeners(descriptor)
        logger.info(f"Property types loaded: {len(self.registry)} types")

    def unload(self) -> None:
        """Tear down widgets, detach listeners and close the store."""
        if not self._loaded:
            return
        for path in list(self._widgets):
            self.release_property(path)
        for cleanup in self._cleanups:
            cleanup()
        self._cleanups.clear()
        self._rerender.clear()
        self.store.close()
        self._loaded = False
        logger.info("Property types unloaded")

    # ─────────────────────────────────────────────────────────────────
    # Types
    # ─────────────────────────────────────────────────────────────────

    def register_type(self, descriptor: TypeDescriptor, extension: bool = False) -> TypeDescriptor:
        """Register a type and its settings schema.

        Args:
            descriptor: The type to add.
            extension: Namespace the key with the extension prefix.
        """
        if extension:
            descriptor = self.registry.register_extension(descriptor)
        else:
            descriptor = self.registry.register(descriptor)
        self.store.register_schema(descriptor.key, descriptor.settings_model)
        if self._loaded:
            self._register_listeners(descriptor)
        return descriptor

    def switch_type(self, property_path: str, type_key: str) -> None:
        self.resolver.switch_type(property_path, type_key)

    # ─────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────

    def render_property(self, property_path: str, value: Any = _MISSING) -> Optional[TypedFieldWidget]:
        """Build the widget for a property.

        Returns:
            The widget, or None when the assigned type is host-native and the
            host renders it itself. Unknown or unassigned types get a plain
            read-only widget.
        """
        if value is _MISSING:
            value = self.host.get_value(property_path)

        type_key = self.resolver.assigned_type(property_path)
        descriptor = self.registry.resolve(type_key)

        if descriptor is None:
            if type_key is not None:
                logger.warning(f"Unknown type {type_key!r} on {property_path!r}, rendering plain")
            widget = self._plain_widget(property_path, value)
        elif descriptor.render_widget is None:
            return None
        else:
            if not descriptor.validate(value):
                logger.warning(f"Value of {property_path!r} does not look like {descriptor.key}")
            try:
                widget = descriptor.render_widget(self._widget_context(property_path, value))
            except Exception as e:
                logger.warning(f"Widget for {descriptor.key!r} failed on {property_path!r}: {e}")
                widget = self._plain_widget(property_path, value)

        self._widgets.setdefault(property_path, []).append(widget)
        return widget

    def rerender(self, property_path: str) -> List[TypedFieldWidget]:
        """Replace the widgets of a property with fresh ones."""
        count = len(self.release_property(property_path))
        widgets = [self.render_property(property_path) for _ in range(max(count, 1))]
        return [w for w in widgets if w is not None]

    def release_property(self, property_path: str) -> List[TypedFieldWidget]:
        """Tear down every widget of a property (row removed by the host)."""
        widgets = self._widgets.pop(property_path, [])
        for widget in widgets:
            widget.teardown()
        return widgets

    def widgets_for(self, property_path: str) -> List[TypedFieldWidget]:
        return list(self._widgets.get(property_path, []))

    def notify_value_changed(self, property_path: str, value: Any) -> None:
        """Push a value changed outside the widgets into them."""
        for widget in self._widgets.get(property_path, []):
            widget.set_value(value)

    def on_rerender(self, callback: Callable[[str], None]) -> Callable[[], None]:
        return self._rerender.add(callback)

    # ─────────────────────────────────────────────────────────────────
    # Settings and menus
    # ─────────────────────────────────────────────────────────────────

    def open_settings(self, property_path: str, type_key: Optional[str] = None):
        """Build the settings panel for the property's (or the given) type.

        Returns:
            The panel, or None when the type has no settings.
        """
        type_key = type_key or self.resolver.assigned_type(property_path)
        descriptor = self.registry.resolve(type_key)
        if descriptor is None or descriptor.render_settings is None:
            return None
        ctx = SettingsContext(property_path, self.store, self.config, self.seeders)
        return descriptor.render_settings(ctx)

    def on_property_menu(self, property_path: str, menu: Optional[Menu] = None) -> Menu:
        if self.actions is None:
            raise ContractViolationError("on_property_menu", "no host actions configured")
        builder = PropertyMenuBuilder(self.resolver, self.actions, self.config.menu)
        return builder.build(property_path, menu)

    # ─────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────

    def _widget_context(self, property_path: str, value: Any) -> WidgetContext:
        return WidgetContext(
            property_path=property_path,
            value=value,
            store=self.store,
            controls=self.controls,
            scheduler=self.scheduler,
            write=lambda raw: self.host.set_value(property_path, raw),
            config=self.config,
            seeders=self.seeders,
        )

    def _plain_widget(self, property_path: str, value: Any) -> TypedFieldWidget:
        ctx = self._widget_context(property_path, value)
        widget = TypedFieldWidget.from_context(
            ctx, PLAIN_TYPE_KEY, PlainCodec(), TextLayout(self.controls.text())
        )
        widget.editable = False
        return widget

    def _register_listeners(self, descriptor: TypeDescriptor) -> None:
        if descriptor.register_listeners is None:
            return
        ctx = ListenerContext(self.store, self._emit_rerender, self.config)
        self._cleanups.extend(descriptor.register_listeners(ctx))

    def _emit_rerender(self, property_path: str) -> None:
        self._rerender.emit(property_path)
