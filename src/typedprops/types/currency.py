"""Currency amount property type.

Values are ``{"value": <number>, "currency": <ISO code>}``; the display uses
the currency symbol and a compact amount ("$1.23M").
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..config.settings import TypesConfig
from ..settings import FieldType, SettingField, SettingsSession, TypeSettingsModel
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
from .formatting import Number, format_compact_number, format_plain_number, parse_compact_number
from .presets import DEFAULT_CURRENCIES

logger = logging.getLogger(__name__)

CURRENCY_KEY = "currency"

# "XYZ 50": codes without a symbol are shown before the amount
_CODE_PREFIX = re.compile(r"^([A-Za-z]{3})\s+(\S.*)$")


@dataclass(frozen=True)
class CurrencyValue:
    value: Number
    currency: str


class CurrencySettings(TypeSettingsModel):
    default_currency: Optional[str] = None


CURRENCY_FIELDS: List[SettingField] = [
    SettingField(
        key="default_currency",
        label="Default currency",
        type=FieldType.SELECT,
        default="USD",
        description="Currency used when a value has none",
        options=list(DEFAULT_CURRENCIES),
    ),
]


class CurrencyCodec(AmountCodec[CurrencyValue]):
    secondary_key = "currency"

    def __init__(self, default_currency: str = "USD", symbols: Optional[Mapping[str, str]] = None):
        super().__init__(default_currency)
        self.symbols = DEFAULT_CURRENCIES if symbols is None else symbols

    @property
    def default_currency(self) -> str:
        return self.default_secondary

    def make(self, value: Number, secondary: str) -> CurrencyValue:
        return CurrencyValue(value, secondary)

    def format(self, value: Optional[CurrencyValue]) -> str:
        if value is None:
            return ""
        amount = format_compact_number(value.value)
        symbol = self.symbols.get(value.currency)
        if symbol:
            return f"{symbol}{amount}"
        return f"{value.currency} {amount}"

    def parse_display(self, text: str) -> Optional[CurrencyValue]:
        match = _CODE_PREFIX.match(text)
        if match:
            amount = parse_compact_number(match.group(2))
            return None if amount is None else CurrencyValue(amount, match.group(1).upper())

        for symbol, currency in self._symbol_lookup():
            if text.startswith(symbol):
                amount = parse_compact_number(text[len(symbol) :])
                if amount is not None:
                    return CurrencyValue(amount, currency)
        return None

    def _symbol_lookup(self) -> List[Tuple[str, str]]:
        # Shared symbols ("$") resolve to the default currency, else the first listed
        lookup: Dict[str, str] = {}
        for currency, symbol in self.symbols.items():
            if symbol:
                lookup.setdefault(symbol, currency)
        default_symbol = self.symbols.get(self.default_currency)
        if default_symbol:
            lookup[default_symbol] = self.default_currency
        return sorted(lookup.items(), key=lambda item: len(item[0]), reverse=True)


def make_codec(settings: Dict[str, Any], types_config: Optional[TypesConfig] = None) -> CurrencyCodec:
    types_config = types_config or TypesConfig()
    return CurrencyCodec(settings.get("default_currency") or types_config.default_currency)


def render_widget(ctx: WidgetContext) -> TypedFieldWidget:
    codec = make_codec(ctx.store.get(ctx.property_path, CURRENCY_KEY), ctx.config.types)
    layout = AmountLayout(
        ctx.controls.text(numeric=True, placeholder="0"),
        ctx.controls.dropdown(),
        CURRENCY_KEY,
        options=[(code, code) for code in DEFAULT_CURRENCIES],
        default_choice=codec.default_currency,
        format_number=format_plain_number,
    )
    return TypedFieldWidget.from_context(ctx, CURRENCY_KEY, codec, layout)


class CurrencySettingsPanel:
    """Settings panel model: the default currency picker.

    Opening the panel creates the record with the configured default.
    """

    fields = CURRENCY_FIELDS

    def __init__(self, ctx: SettingsContext):
        self._session = SettingsSession(ctx.store, ctx.property_path, CURRENCY_KEY, CURRENCY_FIELDS)
        if not self._session.get("default_currency"):
            self._session.record["default_currency"] = ctx.config.types.default_currency
            self._session.mark_dirty()
            self._session.commit()

    @property
    def default_currency(self) -> str:
        return self._session.get("default_currency")

    def set_default_currency(self, code: str) -> Optional[str]:
        """Change and persist the default currency.

        Returns:
            Validation error message, or None on success.
        """
        error = self._session.update("default_currency", code)
        if error is None:
            self._session.commit()
        return error

    def on_tab_change(self) -> None:
        if self._session.has_pending():
            self._session.commit()

    def close(self) -> None:
        self.on_tab_change()


def render_settings(ctx: SettingsContext) -> CurrencySettingsPanel:
    return CurrencySettingsPanel(ctx)


CURRENCY_TYPE = TypeDescriptor(
    key=CURRENCY_KEY,
    display_name=lambda: "Currency",
    icon="lucide-dollar-sign",
    validate=is_amount_shape,
    codec_factory=make_codec,
    settings_model=CurrencySettings,
    render_widget=render_widget,
    render_settings=render_settings,
    register_listeners=rerender_on_change(CURRENCY_KEY),
)
