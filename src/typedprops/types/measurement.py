"""Physical measurement property type.

Values are ``{"value": <number>, "unit": <unit name>}``. The unit list is
configured per property; it is seeded on first use from a preset the user
picks (or the default table when no prompt is available).
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import Field

from ..config.settings import TypesConfig
from ..settings import (
    FieldType,
    PresetSeeder,
    SettingField,
    SettingsSession,
    TypeSettingsModel,
    UnitEntry,
    UnitItemView,
    UnitListEditor,
)
from ..widgets.layouts import AmountLayout
from ..widgets.state import TypedFieldWidget
from .base import (
    AmountCodec,
    SettingsContext,
    TypeDescriptor,
    WidgetContext,
    is_amount_shape,
    rerender_on_change,
)
from .formatting import Number, coerce_number, format_plain_number
from .presets import DEFAULT_UNITS, UNIT_PRESETS, UNKNOWN_UNIT

logger = logging.getLogger(__name__)

MEASUREMENT_KEY = "measurement"

# "12m", "2.5 kg", "3Pace"
_AMOUNT_WITH_UNIT = re.compile(r"^([-+]?(?:\d+(?:\.\d*)?|\.\d+))\s*([^\d\s.,+-].*)$")


@dataclass(frozen=True)
class MeasurementValue:
    value: Number
    unit: str


class MeasurementSettings(TypeSettingsModel):
    units: List[UnitEntry] = Field(default_factory=list)
    default_unit: Optional[str] = None


MEASUREMENT_FIELDS: List[SettingField] = [
    SettingField(
        key="units",
        label="Units",
        type=FieldType.LIST,
        default=[],
        description="Units offered for this property, in order",
    ),
]


def units_from_settings(settings: Dict[str, Any]) -> Dict[str, str]:
    """Configured units as ``{name: shorthand}``, or the default table."""
    units: Dict[str, str] = {}
    for entry in settings.get("units") or []:
        name = entry.get("name", "") if isinstance(entry, Mapping) else ""
        if name.strip():
            units[name] = entry.get("shorthand") or ""
    return units or dict(DEFAULT_UNITS)


def resolve_default_unit(units: Mapping[str, str], default_unit: Optional[str]) -> str:
    if default_unit in units:
        return default_unit
    return next(iter(units), UNKNOWN_UNIT)


class UnitAmountCodec(AmountCodec):
    """Number plus unit name; formatted as number + shorthand ("12m")."""

    secondary_key = "unit"
    placeholder_values = ("", UNKNOWN_UNIT)
    value_class: type = MeasurementValue

    def __init__(self, units: Mapping[str, str], default_unit: Optional[str] = None):
        self.units = dict(units)
        super().__init__(resolve_default_unit(self.units, default_unit))

    @property
    def default_unit(self) -> str:
        return self.default_secondary

    def make(self, value: Number, secondary: str):
        return self.value_class(value, secondary)

    def format_number(self, value: Number) -> str:
        return format_plain_number(value)

    def format(self, value) -> str:
        if value is None:
            return ""
        return f"{self.format_number(value.value)}{self.units.get(value.unit) or value.unit}"

    def parse_display(self, text: str):
        match = _AMOUNT_WITH_UNIT.match(text)
        if not match:
            return None
        number = coerce_number(match.group(1))
        if number is None:
            return None
        return self.make(number, self.unit_for_label(match.group(2)))

    def unit_for_label(self, label: str) -> str:
        """Unit name for a shorthand or name; unknown labels are kept as names."""
        label = label.strip()
        for name, shorthand in self.units.items():
            if shorthand and shorthand == label:
                return name
        for name in self.units:
            if name == label or name.lower() == label.lower():
                return name
        return label

    def options(self) -> List[Tuple[str, str]]:
        return [(name, f"{name} ({shorthand})" if shorthand else name) for name, shorthand in self.units.items()]


class MeasurementCodec(UnitAmountCodec):
    value_class = MeasurementValue


def make_codec(settings: Dict[str, Any], types_config: Optional[TypesConfig] = None) -> MeasurementCodec:
    return MeasurementCodec(units_from_settings(settings), settings.get("default_unit"))


def _seeder(ctx) -> PresetSeeder:
    seeder = ctx.seeders.get(MEASUREMENT_KEY)
    if seeder is None:
        seeder = PresetSeeder(
            ctx.store,
            MEASUREMENT_KEY,
            UNIT_PRESETS,
            DEFAULT_UNITS,
            fallback_preset=ctx.config.types.fallback_unit_preset,
        )
    return seeder


def render_widget(ctx: WidgetContext) -> TypedFieldWidget:
    seeder = _seeder(ctx)
    awaiting = seeder.needs_seeding(ctx.property_path) and seeder.prompts

    codec = make_codec(ctx.store.get(ctx.property_path, MEASUREMENT_KEY))
    layout = AmountLayout(
        ctx.controls.text(numeric=True, placeholder="0"),
        ctx.controls.dropdown(),
        "unit",
        options=[] if awaiting else codec.options(),
        default_choice=None if awaiting else codec.default_unit,
        placeholder=(UNKNOWN_UNIT, "Unit"),
        format_number=format_plain_number,
    )
    widget = TypedFieldWidget.from_context(
        ctx, MEASUREMENT_KEY, codec, layout, live_display=True, ready=not awaiting
    )

    if seeder.needs_seeding(ctx.property_path):

        def on_ready(record: Dict[str, Any]) -> None:
            seeded = make_codec(record)
            widget.apply_options(seeded.options(), seeded.default_unit, codec=seeded)

        seeder.request(ctx.property_path, on_ready)
    return widget


class MeasurementSettingsPanel:
    """Settings panel model: the ordered unit list and default unit.

    Unit edits are buffered; ``on_tab_change`` prunes blank entries and
    writes the whole record.
    """

    fields = MEASUREMENT_FIELDS

    def __init__(self, ctx: SettingsContext):
        seeder = _seeder(ctx)
        if seeder.needs_seeding(ctx.property_path):
            seeder.seed_defaults(ctx.property_path)

        self._session = SettingsSession(ctx.store, ctx.property_path, MEASUREMENT_KEY, MEASUREMENT_FIELDS)
        self.editor = UnitListEditor(self._session.get("units", []), self._session.get("default_unit"))

    def items(self) -> List[UnitItemView]:
        return self.editor.items()

    @property
    def default_unit(self) -> Optional[str]:
        return self.editor.default_unit

    def default_unit_field(self) -> SettingField:
        """Select field for the default unit, built from the current names."""
        names = [unit.name for unit in self.editor.units if not unit.is_blank] or [UNKNOWN_UNIT]
        return SettingField(
            key="default_unit",
            label="Default unit",
            type=FieldType.SELECT,
            default=names[0],
            options=names,
        )

    def set_default_unit(self, name: str) -> Optional[str]:
        error = self.default_unit_field().validate(name)
        if error is None:
            self.editor.default_unit = name
            self._session.mark_dirty()
        return error

    def add_unit(self, name: str = "", shorthand: str = "") -> int:
        self._session.mark_dirty()
        return self.editor.add(name, shorthand)

    def rename_unit(self, index: int, name: str) -> None:
        self.editor.rename(index, name)
        self._session.mark_dirty()

    def set_shorthand(self, index: int, shorthand: str) -> None:
        self.editor.set_shorthand(index, shorthand)
        self._session.mark_dirty()

    def remove_unit(self, index: int) -> bool:
        removed = self.editor.remove(index)
        if removed:
            self._session.mark_dirty()
        return removed

    def move_unit(self, index: int, new_index: int) -> bool:
        moved = self.editor.move(index, new_index)
        if moved:
            self._session.mark_dirty()
        return moved

    def on_tab_change(self) -> None:
        pruned = self.editor.prune_blank()
        if not (pruned or self._session.has_pending()):
            return
        self._session.record.update(self.editor.to_record())
        self._session.commit()

    def close(self) -> None:
        self.on_tab_change()


def render_settings(ctx: SettingsContext) -> MeasurementSettingsPanel:
    return MeasurementSettingsPanel(ctx)


MEASUREMENT_TYPE = TypeDescriptor(
    key=MEASUREMENT_KEY,
    display_name=lambda: "Measurement",
    icon="lucide-ruler",
    validate=is_amount_shape,
    codec_factory=make_codec,
    settings_model=MeasurementSettings,
    render_widget=render_widget,
    render_settings=render_settings,
    register_listeners=rerender_on_change(MEASUREMENT_KEY),
    live_display=True,
)
