"""Value-with-unit property type.

Unlike measurement, the unit set is not edited per property: it is the
default unit table, optionally narrowed by an allow list, and values can be
shown with a fixed number of decimals.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from pydantic import Field

from ..config.settings import TypesConfig
from ..settings import FieldType, SettingField, SettingsSession, TypeSettingsModel, parse_list_value
from ..widgets.layouts import AmountLayout
from ..widgets.state import TypedFieldWidget
from .base import SettingsContext, TypeDescriptor, WidgetContext, is_amount_shape, rerender_on_change
from .formatting import Number, format_fixed, format_plain_number
from .measurement import UnitAmountCodec
from .presets import DEFAULT_UNITS

logger = logging.getLogger(__name__)

UNIT_KEY = "unit"


@dataclass(frozen=True)
class UnitValue:
    value: Number
    unit: str


class UnitSettings(TypeSettingsModel):
    decimal_places: Optional[int] = Field(default=None, ge=0, le=10)
    allowed_units: List[str] = Field(default_factory=list)


UNIT_FIELDS: List[SettingField] = [
    SettingField(
        key="decimal_places",
        label="Decimal places",
        type=FieldType.NUMBER,
        description="Fixed decimals in the display (blank for as entered)",
        min_value=0,
        max_value=10,
    ),
    SettingField(
        key="allowed_units",
        label="Allowed units",
        type=FieldType.TEXT,
        default=[],
        description="Comma-separated unit names or symbols (blank for all)",
        placeholder="mm, cm, m, km",
    ),
]


def allowed_unit_table(allowed: List[str], table: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Units whose name or shorthand is in ``allowed``; all units when empty."""
    table = DEFAULT_UNITS if table is None else table
    if not allowed:
        return dict(table)
    wanted = set(allowed)
    units = {name: shorthand for name, shorthand in table.items() if name in wanted or shorthand in wanted}
    if not units:
        logger.warning(f"No known units in allow list {allowed!r}, offering all units")
        return dict(table)
    return units


class UnitCodec(UnitAmountCodec):
    value_class = UnitValue

    def __init__(self, units: Mapping[str, str], default_unit: Optional[str] = None, decimal_places: Optional[int] = None):
        super().__init__(units, default_unit)
        self.decimal_places = decimal_places

    def format_number(self, value: Number) -> str:
        if self.decimal_places is None:
            return format_plain_number(value)
        return format_fixed(value, self.decimal_places)


def make_codec(settings: Dict[str, Any], types_config: Optional[TypesConfig] = None) -> UnitCodec:
    return UnitCodec(
        allowed_unit_table(settings.get("allowed_units") or []),
        decimal_places=settings.get("decimal_places"),
    )


def render_widget(ctx: WidgetContext) -> TypedFieldWidget:
    codec = make_codec(ctx.store.get(ctx.property_path, UNIT_KEY))
    layout = AmountLayout(
        ctx.controls.text(numeric=True, placeholder="0"),
        ctx.controls.dropdown(),
        "unit",
        options=codec.options(),
        default_choice=codec.default_unit,
        format_number=format_plain_number,
    )
    return TypedFieldWidget.from_context(ctx, UNIT_KEY, codec, layout, live_display=True)


class UnitSettingsPanel:
    """Settings panel model: decimal places and the unit allow list."""

    fields = UNIT_FIELDS

    def __init__(self, ctx: SettingsContext):
        self._session = SettingsSession(ctx.store, ctx.property_path, UNIT_KEY, UNIT_FIELDS)

    @property
    def decimal_places(self) -> Optional[int]:
        return self._session.get("decimal_places")

    @property
    def allowed_units(self) -> List[str]:
        return list(self._session.get("allowed_units", []))

    def set_decimal_places(self, value: Any) -> Optional[str]:
        """Set decimals from user input; blank clears the setting.

        Returns:
            Validation error message, or None on success.
        """
        if value is None or (isinstance(value, str) and not value.strip()):
            return self._session.update("decimal_places", None)
        error = UNIT_FIELDS[0].validate(value)
        if error:
            return error
        number = float(value)
        if not number.is_integer():
            return "Decimal places must be a whole number"
        return self._session.update("decimal_places", int(number))

    def set_allowed_units(self, text: str) -> Optional[str]:
        return self._session.update("allowed_units", parse_list_value(text))

    def on_tab_change(self) -> None:
        if self._session.has_pending():
            self._session.commit()

    def close(self) -> None:
        self.on_tab_change()


def render_settings(ctx: SettingsContext) -> UnitSettingsPanel:
    return UnitSettingsPanel(ctx)


UNIT_TYPE = TypeDescriptor(
    key=UNIT_KEY,
    display_name=lambda: "Unit",
    icon="lucide-scale",
    validate=is_amount_shape,
    codec_factory=make_codec,
    settings_model=UnitSettings,
    render_widget=render_widget,
    render_settings=render_settings,
    register_listeners=rerender_on_change(UNIT_KEY),
    live_display=True,
)
