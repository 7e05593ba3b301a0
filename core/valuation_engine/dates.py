"""
Sale date normalization.

Marketplace dates are display strings such as "Nov 19, 2025". They are
parsed to naive datetimes (midnight) so sales can be ordered and aged.
"""

import calendar
from datetime import datetime
from typing import Optional, Tuple

from .diagnostics import DiagnosticLog


SALE_DATE_FORMATS: Tuple[str, ...] = (
    "%b %d, %Y",  # Nov 19, 2025
    "%B %d, %Y",  # November 19, 2025
    "%b %d %Y",
    "%d %b %Y",  # 19 Nov 2025
    "%d %B %Y",
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%m/%d/%Y",
)

# Diagnostic entry for blank date text
EMPTY_SALE_DATE = "<empty sale date>"


def parse_sale_date(
    text: Optional[str],
    diagnostics: Optional[DiagnosticLog] = None,
) -> Optional[datetime]:
    """
    Parse a sale date display string.

    Args:
        text: Date as displayed by the marketplace
        diagnostics: Receives text that matches no known format, and
            EMPTY_SALE_DATE for blank text

    Returns:
        Parsed datetime, or None if empty or unrecognized
    """
    clean = (text or "").strip()
    if not clean:
        if diagnostics is not None:
            diagnostics.record_unrecognized_format(EMPTY_SALE_DATE)
        return None

    for fmt in SALE_DATE_FORMATS:
        try:
            return datetime.strptime(clean, fmt)
        except ValueError:
            continue

    if diagnostics is not None:
        diagnostics.record_unrecognized_format(clean)
    return None


def subtract_months(moment: datetime, months: int) -> datetime:
    """
    Step back a number of calendar months.

    The day is clamped to the length of the target month
    (Mar 31 minus one month is Feb 28 or 29).
    """
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
