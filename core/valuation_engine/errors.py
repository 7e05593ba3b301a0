"""
Exceptions for the Valuation Engine.

Only a missing rate table is fatal. Unparseable text, missing single
rates and items without market data are absorbed locally.
"""


class ValuationError(Exception):
    """Base class for valuation failures."""


class MissingRateTableError(ValuationError):
    """No exchange rate table was supplied, so nothing can be converted."""

    def __init__(self, base_currency: str = ""):
        self.base_currency = base_currency
        if base_currency:
            message = f"No exchange rate table available for base currency {base_currency}"
        else:
            message = "No exchange rate table available"
        super().__init__(message)
