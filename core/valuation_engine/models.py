"""
Data models for the Valuation Engine

Defines structures for marketplace sale observations, exchange rate
tables, per-condition statistics and valuation results.

All monetary values on TierStatistics and ValuationResult are whole
units of the rate table's base currency.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional


class ConditionTier(Enum):
    """
    Condition grade of a physical item.

    Mirrors the marketplace condition labels exactly. UNKNOWN is a
    bucket for observation labels that match no canonical grade and is
    never a valid valuation target.
    """
    NEW = "New"
    LIKE_NEW = "Like New"
    VERY_GOOD = "Very Good"
    GOOD = "Good"
    ACCEPTABLE = "Acceptable"
    UNKNOWN = "Unknown"

    @property
    def rank(self) -> int:
        """Position in the total order (New first, Unknown last)."""
        return _TIER_RANK[self]

    @property
    def is_canonical(self) -> bool:
        return self is not ConditionTier.UNKNOWN

    @property
    def cli_name(self) -> str:
        """Kebab-case name used on the command line and in source labels."""
        return self.value.lower().replace(" ", "-")

    @classmethod
    def from_label(cls, label: Optional[str]) -> "ConditionTier":
        """Bucket a marketplace label; anything non-canonical is UNKNOWN."""
        if label:
            stripped = label.strip()
            for member in CONDITION_PRIORITY:
                if member.value == stripped:
                    return member
        return cls.UNKNOWN

    @classmethod
    def from_cli(cls, value: str) -> "ConditionTier":
        """Convert a kebab-case CLI value to a canonical tier."""
        normalised = value.strip().lower()
        for member in CONDITION_PRIORITY:
            if member.cli_name == normalised:
                return member
        valid = ", ".join(t.cli_name for t in CONDITION_PRIORITY)
        raise ValueError(f'Invalid condition: "{value}". Valid options: {valid}')


# Fallback walk order when the target condition has no data
CONDITION_PRIORITY: List[ConditionTier] = [
    ConditionTier.NEW,
    ConditionTier.LIKE_NEW,
    ConditionTier.VERY_GOOD,
    ConditionTier.GOOD,
    ConditionTier.ACCEPTABLE,
]

_TIER_RANK: Dict[ConditionTier, int] = {
    tier: index for index, tier in enumerate(CONDITION_PRIORITY + [ConditionTier.UNKNOWN])
}


class Region(Enum):
    """
    Currency region used for regional weighting.

    Sales in currencies of the selected region count fully; the rest are
    down-weighted once enough regional evidence exists.
    """
    EUROPE = "europe"
    AMERICAS = "americas"
    ASIA = "asia"
    INDIA = "india"
    OCEANIA = "oceania"

    @property
    def currencies(self) -> FrozenSet[str]:
        return REGION_CURRENCIES[self]

    @classmethod
    def from_string(cls, value: str) -> "Region":
        """Convert string to Region, case-insensitive."""
        normalised = value.lower().strip()
        for member in cls:
            if member.value == normalised:
                return member
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f'Invalid region: "{value}". Valid options: {valid}')


REGION_CURRENCIES: Dict[Region, FrozenSet[str]] = {
    Region.EUROPE: frozenset({
        "SEK", "EUR", "DKK", "NOK", "GBP", "CHF", "PLN", "CZK",
        "HUF", "RON", "BGN", "HRK", "ISK", "RUB", "UAH", "TRY",
    }),
    Region.AMERICAS: frozenset({
        "USD", "CAD", "MXN", "BRL", "ARS", "CLP", "COP", "PEN",
    }),
    Region.ASIA: frozenset({
        "JPY", "CNY", "KRW", "SGD", "HKD", "TWD", "THB", "MYR",
        "PHP", "IDR", "VND",
    }),
    Region.INDIA: frozenset({"INR"}),
    Region.OCEANIA: frozenset({"AUD", "NZD"}),
}

DEFAULT_REGION = Region.EUROPE


class Classification(Enum):
    """How a valuation estimate was obtained."""
    EXACT = "exact"
    FALLBACK = "fallback"
    NO_DATA = "no-data"


@dataclass(frozen=True)
class SaleObservation:
    """
    A single completed sale from the marketplace.

    Amount is in the original currency. The condition label and sale
    date are kept exactly as displayed (e.g. "Like New", "Nov 19, 2025").
    """
    currency: str
    amount: float
    condition: str
    sale_date: str


@dataclass(frozen=True)
class NormalizedObservation:
    """A sale converted to base currency with a parsed timestamp."""
    value: int  # Base currency units
    tier: ConditionTier
    timestamp: datetime
    currency: str  # Original currency, used for regional weighting
    sale_date: str  # Original display string


@dataclass
class ExchangeRateTable:
    """
    Exchange rates relative to a base currency.

    rates[X] is how many units of X one base unit buys, so
    rates[base] is always exactly 1.
    """
    base: str
    as_of: str
    rates: Dict[str, float] = field(default_factory=dict)
    source: str = ""

    def __post_init__(self):
        """Enforce the base-rate invariant."""
        self.base = self.base.upper()
        existing = self.rates.get(self.base)
        if existing is not None and existing != 1:
            raise ValueError(
                f"Rate for base currency {self.base} must be 1, got {existing}"
            )
        self.rates = {**self.rates, self.base: 1}

    def rate_for(self, currency: str) -> Optional[float]:
        """Return the rate for a currency, or None if unknown."""
        rate = self.rates.get(currency)
        if not rate:
            return None
        return rate

    @classmethod
    def from_dict(cls, data: dict) -> "ExchangeRateTable":
        """Build from the rate provider's cache shape."""
        return cls(
            base=data["base"],
            as_of=data.get("date", data.get("as_of", "")),
            rates=dict(data.get("rates", {})),
            source=data.get("source", ""),
        )


@dataclass
class TierStatistics:
    """
    Statistics for all sales of one item in one condition tier.

    Raw statistics use every observation unweighted. weighted_mean
    combines time, price and currency weights and is the value used
    for valuation.
    """
    tier: ConditionTier
    count: int
    median: int
    mean: int
    lowest: int
    highest: int
    percentile_25: int
    percentile_75: int
    weighted_mean: int
    recent_sales_count: int
    oldest_sale: str
    newest_sale: str

    @property
    def iqr(self) -> int:
        """Interquartile range (Q3 - Q1)."""
        return self.percentile_75 - self.percentile_25

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "condition": self.tier.value,
            "count": self.count,
            "median": self.median,
            "mean": self.mean,
            "lowest": self.lowest,
            "highest": self.highest,
            "percentile25": self.percentile_25,
            "percentile75": self.percentile_75,
            "weightedMean": self.weighted_mean,
            "recentSalesCount": self.recent_sales_count,
            "oldestSale": self.oldest_sale,
            "newestSale": self.newest_sale,
        }


@dataclass
class ValuationResult:
    """
    Final estimate for one item, in base currency.

    unvaluable is set when there was no market data and no purchase
    price, so the zero estimate must not be read as a real value.
    """
    estimated_value: int
    tier_used: Optional[ConditionTier]
    classification: Classification
    unvaluable: bool = False

    @property
    def source(self) -> str:
        """Report label, e.g. 'market:like-new' or 'fallback'."""
        if self.classification is Classification.NO_DATA or self.tier_used is None:
            return "fallback"
        return f"market:{self.tier_used.cli_name}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "estimated_value": self.estimated_value,
            "tier_used": self.tier_used.value if self.tier_used else None,
            "classification": self.classification.value,
            "unvaluable": self.unvaluable,
            "source": self.source,
        }
