"""Number coercion and display formatting shared by the codecs."""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

Number = Union[int, float]

_COMPACT_STEPS = (
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
)


def coerce_number(raw: Any) -> Optional[Number]:
    """Coerce a raw value to a number.

    Numeric strings are accepted (surrounding whitespace ignored). Integral
    results are returned as ``int``. Booleans, empty strings, NaN, infinity
    and anything non-numeric yield None.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, int):
        return raw

    if isinstance(raw, float):
        number = raw
    elif isinstance(raw, str):
        text = raw.strip()
        # float() accepts "1_000", "nan" and "inf"; stored values never should
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    if number.is_integer() and abs(number) < 2**53:
        return int(number)
    return number


def format_plain_number(value: Number) -> str:
    """Render a number the way a numeric input shows it ("7", "12.5")."""
    if isinstance(value, float) and value.is_integer() and abs(value) < 2**53:
        value = int(value)
    return str(value)


def _quantize(value: Number, places: int) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    quantized = Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)
    if quantized == 0:
        # Avoid "-0" for small negatives rounding to zero
        quantized = abs(quantized)
    return quantized


def format_fixed(value: Number, places: int) -> str:
    """Render a number with exactly ``places`` decimals (half-up rounding)."""
    return f"{_quantize(value, max(places, 0)):f}"


def format_grouped(value: Number, max_fraction_digits: int = 2, separator: str = ",") -> str:
    """Render a number with thousands grouping and at most N fraction digits.

    Trailing fractional zeros are dropped: 1.50 -> "1.5", 2.00 -> "2".
    """
    text = f"{_quantize(value, max_fraction_digits):,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if separator != ",":
        text = text.replace(",", separator)
    return text


def format_compact_number(value: Number, max_fraction_digits: int = 2, separator: str = ",") -> str:
    """Abbreviate large magnitudes with K/M/B suffixes.

    Examples:
        1234567 -> "1.23M", 50 -> "50", -1500 -> "-1.5K", 999 -> "999"
    """
    magnitude = abs(value)
    for threshold, suffix in _COMPACT_STEPS:
        if magnitude >= threshold:
            scaled = Decimal(str(value)) / Decimal(threshold)
            return f"{format_grouped(scaled, max_fraction_digits, separator)}{suffix}"
    return format_grouped(value, max_fraction_digits, separator)


def parse_compact_number(text: str, separator: str = ",") -> Optional[Number]:
    """Inverse of ``format_compact_number``: "1.23M" -> 1230000.

    Grouping separators are dropped. Returns None for anything that is not a
    (possibly suffixed) number.
    """
    text = text.strip().replace(separator, "")
    multiplier = 1
    for threshold, suffix in _COMPACT_STEPS:
        if text.endswith(suffix):
            text = text[: -len(suffix)]
            multiplier = threshold
            break
    number = coerce_number(text)
    if number is None or multiplier == 1:
        return number
    return coerce_number(str(Decimal(str(number)) * multiplier))
