"""Type descriptor and value codec contract.

Every property type is described by a ``TypeDescriptor``: identity, a coarse
shape check, a codec that turns raw stored values into typed values and
back, an optional settings model, and optional widget/settings/listener
factories.

Example:
    descriptor = TypeDescriptor(
        key="currency",
        display_name=lambda: "Currency",
        icon="lucide-dollar-sign",
        validate=is_currency_shape,
        codec_factory=make_currency_codec,
        settings_model=CurrencySettings,
        render_widget=render_currency_widget,
    )
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Generic,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    TypeVar,
)

from ..config import Config
from ..config.settings import TypesConfig
from ..settings import PresetSeeder, PropertySettingsStore, TypeSettingsModel
from .formatting import Number, coerce_number, format_plain_number

if TYPE_CHECKING:
    from ..widgets.controls import ControlFactory, Scheduler
    from ..widgets.state import TypedFieldWidget

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Codec(ABC, Generic[T]):
    """Converts between raw stored values and typed values.

    ``parse`` is total: malformed input yields the empty value (None) and a
    logged warning, never an exception.
    """

    @abstractmethod
    def parse(self, raw: Any) -> Optional[T]:
        ...

    @abstractmethod
    def format(self, value: Optional[T]) -> str:
        ...

    def dump(self, value: T) -> Any:
        """Raw form written back to the host."""
        return value

    def is_empty(self, value: Optional[T]) -> bool:
        return value is None


class PlainCodec(Codec[str]):
    """Passthrough codec for properties without a resolvable type."""

    def parse(self, raw: Any) -> Optional[str]:
        if raw is None:
            return None
        if isinstance(raw, bool):
            return "true" if raw else "false"
        if isinstance(raw, (int, float)):
            return format_plain_number(raw)
        if isinstance(raw, (list, tuple)):
            return ", ".join(str(item) for item in raw)
        return str(raw)

    def format(self, value: Optional[str]) -> str:
        return value or ""


class AmountCodec(Codec[T]):
    """Codec for records made of a number plus a secondary code.

    Subclasses set ``secondary_key`` (e.g. "currency" or "unit"), build the
    value record in ``make`` and render it in ``format``.
    """

    secondary_key: str = ""
    # Secondary values treated as "not chosen"
    placeholder_values: Tuple[str, ...] = ("",)

    def __init__(self, default_secondary: str):
        self.default_secondary = default_secondary

    @abstractmethod
    def make(self, value: Number, secondary: str) -> T:
        ...

    def parse(self, raw: Any) -> Optional[T]:
        if raw is None:
            return None

        if isinstance(raw, Mapping):
            if "value" not in raw and self.secondary_key not in raw:
                logger.warning(f"Unrecognized {self.secondary_key} record: {raw!r}")
                return None
            value = self._number(raw.get("value"))
            if value is None:
                return None
            return self.make(value, self._secondary(raw.get(self.secondary_key)))

        if isinstance(raw, str) and coerce_number(raw) is None and raw.strip():
            # Display text such as "$1.23M" or "12m"
            parsed = self.parse_display(raw.strip())
            if parsed is not None:
                return parsed

        if isinstance(raw, (int, float, str)) and not isinstance(raw, bool):
            value = self._number(raw)
            if value is None:
                return None
            return self.make(value, self.default_secondary)

        logger.warning(f"Cannot parse {type(raw).__name__} as {self.secondary_key} value")
        return None

    def parse_display(self, text: str) -> Optional[T]:
        """Parse the text produced by ``format``. None when it is not one."""
        return None

    def dump(self, value: T) -> Dict[str, Any]:
        return {"value": value.value, self.secondary_key: getattr(value, self.secondary_key)}

    def _number(self, raw: Any) -> Optional[Number]:
        number = coerce_number(raw)
        if number is None and raw is not None and not (isinstance(raw, str) and not raw.strip()):
            logger.warning(f"Non-numeric {self.secondary_key} amount {raw!r} treated as empty")
        return number

    def _secondary(self, raw: Any) -> str:
        if not isinstance(raw, str) or raw.strip() in self.placeholder_values:
            return self.default_secondary
        return raw


def is_amount_shape(value: Any) -> bool:
    """Coarse check used by amount types: empty, a number, or a value record."""
    if value is None or value == "":
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, str)):
        return True
    return isinstance(value, Mapping) and "value" in value


# ─────────────────────────────────────────────────────────────────
# Factory contexts
# ─────────────────────────────────────────────────────────────────


@dataclass
class WidgetContext:
    """Everything a type needs to build a widget for one property."""

    property_path: str
    value: Any
    store: PropertySettingsStore
    controls: "ControlFactory"
    scheduler: "Scheduler"
    write: Callable[[Any], None]
    config: Config = field(default_factory=Config)
    seeders: Dict[str, PresetSeeder] = field(default_factory=dict)


@dataclass
class SettingsContext:
    """Everything a type needs to build its settings panel."""

    property_path: str
    store: PropertySettingsStore
    config: Config = field(default_factory=Config)
    seeders: Dict[str, PresetSeeder] = field(default_factory=dict)


@dataclass
class ListenerContext:
    """Hooks a type may subscribe to while the plugin is loaded."""

    store: PropertySettingsStore
    rerender: Callable[[str], None]
    config: Config = field(default_factory=Config)


# ─────────────────────────────────────────────────────────────────
# Descriptor
# ─────────────────────────────────────────────────────────────────


def _plain_codec_factory(settings: Dict[str, Any], types_config: Optional[TypesConfig] = None) -> Codec:
    return PlainCodec()


@dataclass(frozen=True)
class TypeDescriptor:
    """A registered property type.

    Attributes:
        key: Unique, stable type key.
        display_name: Returns the (localized) name shown in menus.
        icon: Icon reference (e.g. "lucide-ruler").
        validate: Coarse shape check of a raw value; not full parsing.
        codec_factory: Builds the codec from a per-property settings record.
        settings_model: Pydantic model of the per-property settings record.
        render_widget: Builds the display/edit widget.
        render_settings: Builds the settings panel (None if the type has none).
        register_listeners: Subscribes to plugin events; returns cleanups.
        reserved_keys: Property names this type protects from reassignment.
        live_display: Update the display text while editing.
    """

    key: str
    display_name: Callable[[], str]
    icon: str = ""
    validate: Callable[[Any], bool] = lambda value: True
    codec_factory: Callable[..., Codec] = _plain_codec_factory
    settings_model: Optional[Type[TypeSettingsModel]] = None
    render_widget: Optional[Callable[[WidgetContext], "TypedFieldWidget"]] = None
    render_settings: Optional[Callable[[SettingsContext], Any]] = None
    register_listeners: Optional[Callable[[ListenerContext], List[Callable[[], None]]]] = None
    reserved_keys: Tuple[str, ...] = ()
    live_display: bool = False

    @property
    def name(self) -> str:
        return self.display_name()

    @property
    def codec(self) -> Codec:
        """Codec configured with schema defaults."""
        return self.make_codec({})

    def make_codec(self, settings: Dict[str, Any], types_config: Optional[TypesConfig] = None) -> Codec:
        return self.codec_factory(settings, types_config or TypesConfig())


def rerender_on_change(type_key: str) -> Callable[[ListenerContext], List[Callable[[], None]]]:
    """Listener factory: re-render a property when its ``type_key`` settings change."""

    def register(ctx: ListenerContext) -> List[Callable[[], None]]:
        def on_change(property_path: str, key: str, record: Dict[str, Any]) -> None:
            if key == type_key:
                ctx.rerender(property_path)

        return [ctx.store.on_change(on_change)]

    return register
