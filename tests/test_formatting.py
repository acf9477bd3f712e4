"""Tests for number coercion and display formatting."""

import math

import pytest

from typedprops.types.formatting import (
    coerce_number,
    format_compact_number,
    format_fixed,
    format_grouped,
    format_plain_number,
)


class TestCoerceNumber:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (12, 12),
            (12.0, 12),
            (3.5, 3.5),
            ("12", 12),
            (" 3.5 ", 3.5),
            ("-7", -7),
            ("1e3", 1000),
        ],
    )
    def test_numeric_inputs(self, raw, expected):
        result = coerce_number(raw)
        assert result == expected
        assert type(result) is type(expected)

    @pytest.mark.parametrize(
        "raw",
        [None, "", "   ", "abc", "12abc", "1_000", "nan", "inf", math.nan, math.inf, True, False, [1], {}],
    )
    def test_non_numeric_is_absent(self, raw):
        assert coerce_number(raw) is None


class TestFormatting:
    def test_plain_number(self):
        assert format_plain_number(7) == "7"
        assert format_plain_number(7.0) == "7"
        assert format_plain_number(12.5) == "12.5"

    @pytest.mark.parametrize(
        "value, expected",
        [
            (50, "50"),
            (999, "999"),
            (1500, "1.5K"),
            (1234567, "1.23M"),
            (2_000_000_000, "2B"),
            (-1500, "-1.5K"),
            (12.345, "12.35"),
        ],
    )
    def test_compact_number(self, value, expected):
        assert format_compact_number(value) == expected

    def test_grouped_uses_separator_and_trims_zeros(self):
        assert format_grouped(1234.567) == "1,234.57"
        assert format_grouped(1234.5) == "1,234.5"
        assert format_grouped(2.0) == "2"

    def test_rounding_is_half_up(self):
        assert format_grouped(0.125) == "0.13"
        assert format_fixed(2.5, 0) == "3"

    def test_fixed_places(self):
        assert format_fixed(3.14159, 2) == "3.14"
        assert format_fixed(2, 3) == "2.000"

    def test_no_negative_zero(self):
        assert format_fixed(-0.001, 2) == "0.00"
