"""
Formatting utilities.
"""

from typing import Optional


def format_currency(amount: int, currency: str = "USD") -> str:
    """
    Format an integer amount as currency.

    Args:
        amount: The amount in whole units.
        currency: Currency code (default USD).

    Returns:
        Formatted currency string.
    """
    symbols = {
        "GBP": "£",
        "USD": "$",
        "EUR": "€",
    }
    symbol = symbols.get(currency)
    if symbol is None:
        return f"{amount:,} {currency}"
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,}"


def format_signed_currency(amount: int, currency: str = "USD") -> str:
    """Currency with an explicit + for gains."""
    prefix = "+" if amount >= 0 else ""
    return prefix + format_currency(amount, currency)


def format_percent(value: Optional[float], decimals: int = 1) -> str:
    """
    Format a number as a percentage.

    Args:
        value: The percentage value, or None when undefined.
        decimals: Number of decimal places.

    Returns:
        Formatted percentage string ("N/A" for None).
    """
    if value is None:
        return "N/A"
    return f"{value:.{decimals}f}%"
