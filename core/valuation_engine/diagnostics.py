"""
Diagnostic accumulator for non-fatal valuation problems.

Price or date text that matches no known format and currencies without
an exchange rate are recorded here instead of raising. Callers thread
one DiagnosticLog through a batch and report it at the end.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import List

logger = logging.getLogger(__name__)


@dataclass
class DiagnosticLog:
    """
    Append-only record of unrecognized formats and missing rates.

    Entries are de-duplicated and keep first-seen order. Appends are
    guarded by a lock so one log can be shared across worker threads.
    """
    unrecognized_formats: List[str] = field(default_factory=list)
    missing_rates: List[str] = field(default_factory=list)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    def record_unrecognized_format(self, text: str) -> None:
        """Record price or date text that could not be parsed."""
        with self._lock:
            if text in self.unrecognized_formats:
                return
            self.unrecognized_formats.append(text)
        logger.warning('Unknown format: "%s"', text)

    def record_missing_rate(self, currency: str, base: str) -> None:
        """Record a currency with no exchange rate against base."""
        with self._lock:
            if currency in self.missing_rates:
                return
            self.missing_rates.append(currency)
        logger.warning("No exchange rate for %s <-> %s, using 1:1", currency, base)

    def merge(self, other: "DiagnosticLog") -> None:
        """Fold another log (e.g. a per-worker buffer) into this one."""
        with other._lock:
            formats = list(other.unrecognized_formats)
            rates = list(other.missing_rates)
        with self._lock:
            for text in formats:
                if text not in self.unrecognized_formats:
                    self.unrecognized_formats.append(text)
            for currency in rates:
                if currency not in self.missing_rates:
                    self.missing_rates.append(currency)

    @property
    def is_empty(self) -> bool:
        return not self.unrecognized_formats and not self.missing_rates

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "unrecognized_formats": list(self.unrecognized_formats),
            "missing_rates": list(self.missing_rates),
        }
