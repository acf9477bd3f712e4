"""Built-in property types and the type contract.

Example usage:
    from typedprops.registry import TypeRegistry
    from typedprops.types import register_builtin_types

    registry = TypeRegistry()
    register_builtin_types(registry)
    registry.resolve("currency").codec.format(CurrencyValue(50, "EUR"))  # "€50"
"""

from typing import List

from .base import (
    AmountCodec,
    Codec,
    ListenerContext,
    PlainCodec,
    SettingsContext,
    TypeDescriptor,
    WidgetContext,
    rerender_on_change,
)
from .code import CODE_TYPE, CodeCodec, CodeSettings
from .currency import CURRENCY_TYPE, CurrencyCodec, CurrencySettings, CurrencySettingsPanel, CurrencyValue
from .measurement import (
    MEASUREMENT_TYPE,
    MeasurementCodec,
    MeasurementSettings,
    MeasurementSettingsPanel,
    MeasurementValue,
)
from .unit import UNIT_TYPE, UnitCodec, UnitSettings, UnitSettingsPanel, UnitValue

BUILTIN_TYPES: List[TypeDescriptor] = [CODE_TYPE, CURRENCY_TYPE, MEASUREMENT_TYPE, UNIT_TYPE]


def register_builtin_types(registry) -> List[TypeDescriptor]:
    """Register every built-in type on ``registry``."""
    return [registry.register(descriptor) for descriptor in BUILTIN_TYPES]


__all__ = [
    # Contract
    "Codec",
    "AmountCodec",
    "PlainCodec",
    "TypeDescriptor",
    "WidgetContext",
    "SettingsContext",
    "ListenerContext",
    "rerender_on_change",
    # Built-ins
    "BUILTIN_TYPES",
    "register_builtin_types",
    "CODE_TYPE",
    "CodeCodec",
    "CodeSettings",
    "CURRENCY_TYPE",
    "CurrencyCodec",
    "CurrencySettings",
    "CurrencySettingsPanel",
    "CurrencyValue",
    "MEASUREMENT_TYPE",
    "MeasurementCodec",
    "MeasurementSettings",
    "MeasurementSettingsPanel",
    "MeasurementValue",
    "UNIT_TYPE",
    "UnitCodec",
    "UnitSettings",
    "UnitSettingsPanel",
    "UnitValue",
]
