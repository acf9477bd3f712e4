"""Unit and currency tables.

Domain data only: names, shorthand symbols and presets offered during
first-time configuration. No conversion between units happens anywhere.
"""

from typing import Dict, List, Tuple

# Placeholder unit key meaning "no unit chosen yet"
UNKNOWN_UNIT = "Unknown"

DEFAULT_CURRENCIES: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "JPY": "¥",
    "GBP": "£",
    "AUD": "$",
    "CAD": "$",
    "CHF": "CHF",
    "CNY": "¥",
    "HKD": "$",
    "NZD": "$",
    "SEK": "kr",
    "KRW": "₩",
    "SGD": "$",
    "NOK": "kr",
    "MXN": "$",
    "INR": "₹",
    "RUB": "₽",
    "ZAR": "R",
    "TRY": "₺",
    "BRL": "R$",
}

# (name, shorthand) pairs per preset, in display order
UNIT_PRESETS: Dict[str, List[Tuple[str, str]]] = {
    "length": [
        ("Millimeter", "mm"),
        ("Centimeter", "cm"),
        ("Meter", "m"),
        ("Kilometer", "km"),
        ("Inch", "in"),
        ("Foot", "ft"),
        ("Yard", "yd"),
        ("Mile", "mi"),
    ],
    "weight": [
        ("Milligram", "mg"),
        ("Gram", "g"),
        ("Kilogram", "kg"),
        ("Metric Ton", "t"),
        ("Ounce", "oz"),
        ("Pound", "lb"),
    ],
    "volume": [
        ("Milliliter", "ml"),
        ("Liter", "l"),
        ("Teaspoon", "tsp"),
        ("Tablespoon", "tbsp"),
        ("Fluid Ounce", "fl oz"),
        ("Cup", "cup"),
        ("Pint", "pt"),
        ("Quart", "qt"),
        ("Gallon", "gal"),
    ],
    "time": [
        ("Millisecond", "ms"),
        ("Second", "s"),
        ("Minute", "min"),
        ("Hour", "h"),
        ("Day", "d"),
        ("Week", "wk"),
        ("Month", "mo"),
        ("Year", "yr"),
    ],
    "temperature": [
        ("Celsius", "°C"),
        ("Fahrenheit", "°F"),
        ("Kelvin", "K"),
    ],
    "area": [
        ("Square Millimeter", "mm²"),
        ("Square Centimeter", "cm²"),
        ("Square Meter", "m²"),
        ("Square Kilometer", "km²"),
        ("Square Inch", "in²"),
        ("Square Foot", "ft²"),
        ("Square Yard", "yd²"),
        ("Acre", "acre"),
    ],
    "speed": [
        ("Meters per Second", "m/s"),
        ("Kilometers per Hour", "km/h"),
        ("Miles per Hour", "mph"),
        ("Knots", "kn"),
    ],
}

PRESET_LABELS: Dict[str, str] = {
    "length": "Length",
    "weight": "Weight",
    "volume": "Volume",
    "time": "Time",
    "temperature": "Temperature",
    "area": "Area",
    "speed": "Speed",
}


def _default_units() -> Dict[str, str]:
    units: Dict[str, str] = {}
    for preset in ("length", "weight", "volume", "area", "speed", "temperature"):
        units.update(UNIT_PRESETS[preset])
    # Time presets beyond an hour are calendar-ish; the flat table stops there
    units.update(UNIT_PRESETS["time"][:4])
    return units


# Flat name -> shorthand table used when nothing is configured
DEFAULT_UNITS: Dict[str, str] = _default_units()


def preset_units(preset: str) -> List[Tuple[str, str]]:
    """Get the (name, shorthand) pairs of a preset.

    Raises:
        KeyError: If the preset is unknown.
    """
    return list(UNIT_PRESETS[preset])
