"""
Tests for dashboard display formatting.

Covers:
- Abbreviated and whole-dollar currency
- Half-up rounding
- Placeholder for missing values
"""

from decimal import Decimal

from dealflow_engines.formatting import (
    NO_VALUE,
    format_currency,
    format_days,
    format_percent,
    format_sigma,
)


class TestFormatCurrency:
    """Tests for format_currency."""

    def test_millions_abbreviated_to_one_place(self):
        assert format_currency(Decimal("1234567")) == "$1.2M"

    def test_exact_million(self):
        assert format_currency(1000000) == "$1.0M"

    def test_abbreviation_rounds_half_up(self):
        assert format_currency(1250000) == "$1.3M"

    def test_below_million_uses_thousands_separator(self):
        assert format_currency(Decimal("235000")) == "$235,000"

    def test_fraction_rounds_half_up(self):
        assert format_currency(1234.5) == "$1,235"

    def test_negative_amount(self):
        assert format_currency(-1234.5) == "-$1,235"

    def test_negative_millions_not_abbreviated(self):
        assert format_currency(-2500000) == "-$2,500,000"

    def test_abbreviation_disabled(self):
        assert format_currency(2500000, abbreviate=False) == "$2,500,000"

    def test_zero(self):
        assert format_currency(0) == "$0"

    def test_non_numeric_formats_as_zero(self):
        assert format_currency(None) == "$0"
        assert format_currency("n/a") == "$0"

    def test_numeric_string(self):
        assert format_currency("4500") == "$4,500"


class TestFormatPercent:
    """Tests for format_percent."""

    def test_one_place_by_default(self):
        assert format_percent(Decimal("66.666")) == "66.7%"

    def test_whole_percent(self):
        assert format_percent(Decimal("50"), places=0) == "50%"

    def test_half_up(self):
        assert format_percent(Decimal("12.25")) == "12.3%"

    def test_none_is_placeholder(self):
        assert format_percent(None) == NO_VALUE


class TestFormatSigmaAndDays:
    """Tests for sigma level and day count formatting."""

    def test_sigma_one_place(self):
        assert format_sigma(Decimal("4")) == "4.0σ"

    def test_sigma_interpolated_value(self):
        assert format_sigma(Decimal("2.656")) == "2.7σ"

    def test_sigma_none(self):
        assert format_sigma(None) == NO_VALUE

    def test_days_rounded(self):
        assert format_days(Decimal("42.5")) == "43 days"

    def test_days_none(self):
        assert format_days(None) == "—"
