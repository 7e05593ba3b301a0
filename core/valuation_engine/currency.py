"""
Currency Normalizer for the Valuation Engine

Implements:
- Price text parsing ("$25.00", "CA$30", "CHF 95.00", "100 SEK")
- Conversion to and from the rate table's base currency

Every conversion rounds to a whole unit. Rounding happens at each step,
so chained conversions accumulate error; results depend on it.
"""

import logging
import math
import re
from typing import Dict, NamedTuple, Optional

from .diagnostics import DiagnosticLog
from .models import ExchangeRateTable, SaleObservation

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Constants
# =============================================================================

# Symbol and prefix forms; longer prefixes are tried first so "US$"
# wins over "$"
CURRENCY_PREFIXES: Dict[str, str] = {
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
    "JP¥": "JPY",
    "₹": "INR",
    "₽": "RUB",
    "₩": "KRW",
    "₪": "ILS",
    "₺": "TRY",
    "R$": "BRL",
    "kr": "SEK",  # Nordic krona, SEK is by far the most common
    "US$": "USD",
    "CA$": "CAD",
    "A$": "AUD",
    "NZ$": "NZD",
    "HK$": "HKD",
    "S$": "SGD",
    "MX$": "MXN",
    "$": "USD",
}

_SORTED_PREFIXES = sorted(CURRENCY_PREFIXES, key=len, reverse=True)

_LEADING_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)")
_CODE_PREFIX = re.compile(r"^([A-Z]{3})\s*([\d,]+\.?\d*)$", re.IGNORECASE)
_CODE_SUFFIX = re.compile(r"^([\d,]+\.?\d*)\s*([A-Z]{3})$", re.IGNORECASE)
# Digits or separators; "USD ," is recorded, "free" is not
_ANY_NUMBER = re.compile(r"[\d,]")


class ParsedPrice(NamedTuple):
    """Currency code and amount parsed from price text."""
    currency: str
    amount: float


def round_half_up(value: float) -> int:
    """Round to the nearest whole unit, halves upward."""
    return int(math.floor(value + 0.5))


def _parse_number(text: str) -> Optional[float]:
    """Parse the leading number of text after removing thousands separators."""
    match = _LEADING_NUMBER.match(text.replace(",", ""))
    if not match:
        return None
    return float(match.group(0))


def parse_price(
    text: Optional[str],
    diagnostics: Optional[DiagnosticLog] = None,
) -> Optional[ParsedPrice]:
    """
    Parse marketplace price text into currency code and amount.

    Formats, tried in order:
    1. Symbol or prefix: "$25.00", "€30", "CA$35.50"
    2. Code prefix: "CHF 100", "DKK 2.00"
    3. Code suffix: "100 SEK", "1,500 JPY"

    Args:
        text: Raw price text
        diagnostics: Receives text that contains digits or separators
            but cannot be parsed

    Returns:
        ParsedPrice, or None if the text could not be parsed
    """
    clean = (text or "").strip()
    if not clean:
        return None

    for prefix in _SORTED_PREFIXES:
        if clean.startswith(prefix):
            amount = _parse_number(clean[len(prefix):].strip())
            if amount is not None:
                return ParsedPrice(CURRENCY_PREFIXES[prefix], amount)

    match = _CODE_PREFIX.match(clean)
    if match:
        amount = _parse_number(match.group(2))
        if amount is not None:
            return ParsedPrice(match.group(1).upper(), amount)

    match = _CODE_SUFFIX.match(clean)
    if match:
        amount = _parse_number(match.group(1))
        if amount is not None:
            return ParsedPrice(match.group(2).upper(), amount)

    if _ANY_NUMBER.search(clean):
        if diagnostics is not None:
            diagnostics.record_unrecognized_format(clean)
        else:
            logger.warning('Unknown currency format: "%s"', clean)

    return None


def convert_to_base(
    amount: float,
    from_currency: str,
    table: ExchangeRateTable,
    diagnostics: Optional[DiagnosticLog] = None,
) -> int:
    """
    Convert an amount into the table's base currency.

    rates[X] is X per base unit, so base = amount / rate. A missing
    rate falls back to 1:1 and is recorded, never raised.

    Returns:
        Amount in base currency, rounded to a whole unit
    """
    if from_currency == table.base:
        return round_half_up(amount)

    rate = table.rate_for(from_currency)
    if rate is None:
        if diagnostics is not None:
            diagnostics.record_missing_rate(from_currency, table.base)
        else:
            logger.warning("No exchange rate for %s, using 1:1", from_currency)
        return round_half_up(amount)

    return round_half_up(amount / rate)


def convert_from_base(
    amount: float,
    to_currency: str,
    table: ExchangeRateTable,
    diagnostics: Optional[DiagnosticLog] = None,
) -> int:
    """
    Convert a base-currency amount into another currency.

    Returns:
        Amount in to_currency, rounded to a whole unit
    """
    if to_currency == table.base:
        return round_half_up(amount)

    rate = table.rate_for(to_currency)
    if rate is None:
        if diagnostics is not None:
            diagnostics.record_missing_rate(to_currency, table.base)
        else:
            logger.warning("No exchange rate for %s, using 1:1", to_currency)
        return round_half_up(amount)

    return round_half_up(amount * rate)


def observation_from_text(
    price_text: str,
    condition: str,
    sale_date: str,
    diagnostics: Optional[DiagnosticLog] = None,
) -> Optional[SaleObservation]:
    """Build a SaleObservation from raw marketplace text, or None if unparseable."""
    parsed = parse_price(price_text, diagnostics)
    if parsed is None:
        return None
    return SaleObservation(
        currency=parsed.currency,
        amount=parsed.amount,
        condition=condition,
        sale_date=sale_date,
    )
