"""
Tests for the Currency Normalizer

Verifies:
- Symbol, prefix, code-prefix and code-suffix price formats
- Longest prefix wins (CA$ over $)
- Unrecognized formats are recorded, never raised
- Conversion rounds half-up at every step
- Missing rates fall back to 1:1 and are recorded
"""

import math
from pathlib import Path
import sys

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.valuation_engine import (
    DiagnosticLog,
    ExchangeRateTable,
    SaleObservation,
    convert_from_base,
    convert_to_base,
    observation_from_text,
    parse_price,
    round_half_up,
)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def rates():
    """USD-based rate table."""
    return ExchangeRateTable(
        base="USD",
        as_of="2024-01-01",
        rates={"USD": 1, "EUR": 0.92, "SEK": 10.5, "GBP": 0.79},
    )


@pytest.fixture
def diagnostics():
    return DiagnosticLog()


# =============================================================================
# Test: Price Parsing
# =============================================================================

class TestParsePriceSymbols:
    """Symbol and prefix formats."""

    def test_dollar_sign_defaults_to_usd(self):
        assert parse_price("$25.00") == ("USD", 25.0)
        assert parse_price("$25") == ("USD", 25.0)

    def test_currency_symbols(self):
        assert parse_price("€30") == ("EUR", 30.0)
        assert parse_price("£20.50") == ("GBP", 20.5)
        assert parse_price("₹500") == ("INR", 500.0)

    def test_country_prefixed_dollars_beat_bare_dollar(self):
        assert parse_price("CA$30") == ("CAD", 30.0)
        assert parse_price("US$25") == ("USD", 25.0)
        assert parse_price("A$35") == ("AUD", 35.0)
        assert parse_price("NZ$40") == ("NZD", 40.0)
        assert parse_price("HK$200") == ("HKD", 200.0)

    def test_explicit_yen_prefix(self):
        assert parse_price("JP¥1,500") == ("JPY", 1500.0)

    def test_prefix_with_space(self):
        assert parse_price("R$ 100") == ("BRL", 100.0)
        assert parse_price("kr 250") == ("SEK", 250.0)

    def test_thousands_separators_stripped(self):
        assert parse_price("$1,234.50") == ("USD", 1234.5)

    def test_surrounding_whitespace_ignored(self):
        assert parse_price("  €30  ") == ("EUR", 30.0)


class TestParsePriceCodes:
    """Three-letter code formats."""

    def test_code_prefix(self):
        assert parse_price("CHF 95.00") == ("CHF", 95.0)
        assert parse_price("DKK 2.00") == ("DKK", 2.0)

    def test_code_prefix_case_insensitive(self):
        assert parse_price("dkk 100") == ("DKK", 100.0)

    def test_code_suffix(self):
        assert parse_price("100 SEK") == ("SEK", 100.0)
        assert parse_price("50.00 EUR") == ("EUR", 50.0)

    def test_code_suffix_with_thousands(self):
        assert parse_price("1,500 JPY") == ("JPY", 1500.0)


class TestParsePriceFailures:
    """Unparseable input yields None."""

    def test_empty_input_silent(self, diagnostics):
        assert parse_price("", diagnostics) is None
        assert parse_price("   ", diagnostics) is None
        assert parse_price(None, diagnostics) is None
        assert diagnostics.is_empty

    def test_number_without_currency_recorded(self, diagnostics):
        assert parse_price("about 25 bucks", diagnostics) is None
        assert diagnostics.unrecognized_formats == ["about 25 bucks"]

    def test_text_without_number_not_recorded(self, diagnostics):
        assert parse_price("free", diagnostics) is None
        assert parse_price("$abc", diagnostics) is None
        assert diagnostics.is_empty

    def test_repeated_format_recorded_once(self, diagnostics):
        parse_price("25 dollars", diagnostics)
        parse_price("25 dollars", diagnostics)
        assert diagnostics.unrecognized_formats == ["25 dollars"]

    @pytest.mark.parametrize("text", ["USD ,", ", SEK", "EUR ,,", "$,"])
    def test_separator_without_digits_recorded(self, diagnostics, text):
        assert parse_price(text, diagnostics) is None
        assert diagnostics.unrecognized_formats == [text]

    def test_no_diagnostics_does_not_raise(self):
        assert parse_price("about 25 bucks") is None


class TestObservationFromText:
    """Raw marketplace rows to SaleObservation."""

    def test_builds_observation(self):
        obs = observation_from_text("CA$30", "Like New", "Nov 19, 2025")
        assert obs == SaleObservation(
            currency="CAD", amount=30.0, condition="Like New", sale_date="Nov 19, 2025"
        )

    def test_unparseable_price_returns_none(self, diagnostics):
        assert observation_from_text("n/a 5", "New", "Nov 19, 2025", diagnostics) is None
        assert diagnostics.unrecognized_formats == ["n/a 5"]


# =============================================================================
# Test: Rounding and Conversion
# =============================================================================

class TestRounding:
    """Half-up rounding."""

    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(0.5) == 1

    def test_below_half_rounds_down(self):
        assert round_half_up(2.49) == 2


class TestConvertToBase:
    """Conversion into the base currency."""

    def test_divides_by_rate(self, rates):
        assert convert_to_base(100, "EUR", rates) == 109
        assert convert_to_base(100, "SEK", rates) == 10
        assert convert_to_base(1050, "SEK", rates) == 100

    def test_base_currency_rounded_unchanged(self, rates):
        assert convert_to_base(100, "USD", rates) == 100
        assert convert_to_base(2.5, "USD", rates) == 3

    def test_missing_rate_uses_one_to_one(self, rates, diagnostics):
        assert convert_to_base(100, "XYZ", rates, diagnostics) == 100
        assert diagnostics.missing_rates == ["XYZ"]

    def test_missing_rate_never_raises_without_log(self, rates):
        assert convert_to_base(42.4, "XYZ", rates) == 42


class TestConvertFromBase:
    """Conversion out of the base currency."""

    def test_multiplies_by_rate(self, rates):
        assert convert_from_base(100, "SEK", rates) == 1050
        assert convert_from_base(100, "EUR", rates) == 92

    def test_base_currency_rounded_unchanged(self, rates):
        assert convert_from_base(99.5, "USD", rates) == 100

    def test_missing_rate_uses_one_to_one(self, rates, diagnostics):
        assert convert_from_base(100, "XYZ", rates, diagnostics) == 100
        assert diagnostics.missing_rates == ["XYZ"]

    @pytest.mark.parametrize("currency", ["EUR", "SEK", "GBP"])
    @pytest.mark.parametrize("amount", [50, 999, 12345])
    def test_round_trip_within_rounding(self, rates, currency, amount):
        """Round trip loses at most one rounded base unit."""
        back = convert_from_base(convert_to_base(amount, currency, rates), currency, rates)
        assert abs(back - amount) <= math.ceil(rates.rates[currency])


# =============================================================================
# Test: Exchange Rate Table
# =============================================================================

class TestExchangeRateTable:
    """Base-rate invariant."""

    def test_base_rate_inserted(self):
        table = ExchangeRateTable(base="usd", as_of="2024-01-01", rates={"EUR": 0.9})
        assert table.base == "USD"
        assert table.rates["USD"] == 1

    def test_conflicting_base_rate_rejected(self):
        with pytest.raises(ValueError):
            ExchangeRateTable(base="USD", as_of="2024-01-01", rates={"USD": 1.1})

    def test_from_provider_dict(self):
        table = ExchangeRateTable.from_dict({
            "base": "SEK",
            "date": "2024-05-01",
            "source": "frankfurter.app (ECB data)",
            "rates": {"EUR": 0.087},
        })
        assert table.as_of == "2024-05-01"
        assert table.rate_for("EUR") == 0.087
        assert table.rate_for("SEK") == 1
        assert table.rate_for("XYZ") is None
