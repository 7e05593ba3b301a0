"""
Weighting Engine for the Valuation Engine

Each observation gets three independent weights, combined
multiplicatively:

1. Temporal: exponential decay with a one-year half-life
   - today 1.0, 6 months ~0.71, 1 year 0.5, 2 years 0.25
2. Dispersion: Gaussian decay by distance from the tier median,
   measured in IQRs (soft outlier handling, nothing is dropped)
   - at median 1.0, 1 IQR ~0.61, 2 IQR ~0.14, floor 0.01
3. Region: sales in the selected region's currencies count fully,
   others 0.3, but only once the tier has at least 2 regional sales

combined = temporal x dispersion x region
weighted_mean = sum(value x combined) / sum(combined)
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Sequence

from .currency import round_half_up
from .models import NormalizedObservation


# =============================================================================
# Configuration Constants
# =============================================================================

# Half-life for temporal decay (one year)
TIME_WEIGHT_HALF_LIFE_DAYS = 365.25

# Gaussian width for dispersion weighting, in IQR units
PRICE_WEIGHT_SIGMA = 1.0

# Outliers still contribute at least 1%
MINIMUM_PRICE_WEIGHT = 0.01

# Weight of sales outside the selected region when regional data exists
NON_REGIONAL_CURRENCY_WEIGHT = 0.3

# Regional sales needed before non-regional sales are down-weighted
REGIONAL_SALES_THRESHOLD = 2

_SECONDS_PER_DAY = 24 * 60 * 60


def temporal_weight(
    sale_time: datetime,
    now: datetime,
    half_life_days: float = TIME_WEIGHT_HALF_LIFE_DAYS,
) -> float:
    """
    Weight a sale by age: 0.5 ** (age / half_life).

    Future-dated sales get full weight. There is no lower floor.
    """
    age_seconds = (now - sale_time).total_seconds()
    if age_seconds <= 0:
        return 1.0
    return math.pow(0.5, age_seconds / (half_life_days * _SECONDS_PER_DAY))


def dispersion_weight(
    value: float,
    median: float,
    iqr: float,
    sigma: float = PRICE_WEIGHT_SIGMA,
    floor: float = MINIMUM_PRICE_WEIGHT,
) -> float:
    """
    Weight a price by distance from the median in IQR units.

    A zero IQR means every price in the tier is treated equally.
    """
    if iqr == 0:
        return 1.0
    distance = abs(value - median) / iqr
    weight = math.exp(-(distance * distance) / (2 * sigma * sigma))
    return max(weight, floor)


def has_regional_data(
    currencies: Iterable[str],
    region_currencies: Iterable[str],
    threshold: int = REGIONAL_SALES_THRESHOLD,
) -> bool:
    """Whether enough sales come from the selected region."""
    regional = set(region_currencies)
    return sum(1 for c in currencies if c in regional) >= threshold


def region_weight(
    currency: str,
    regional_data: bool,
    region_currencies: Iterable[str],
    non_regional_weight: float = NON_REGIONAL_CURRENCY_WEIGHT,
) -> float:
    """Full weight for regional sales, reduced weight for the rest."""
    if not regional_data:
        return 1.0
    if currency in region_currencies:
        return 1.0
    return non_regional_weight


@dataclass(frozen=True)
class ObservationWeight:
    """The three factor weights of one observation and their product."""
    temporal: float
    dispersion: float
    region: float

    @property
    def combined(self) -> float:
        return self.temporal * self.dispersion * self.region


@dataclass(frozen=True)
class WeightingModel:
    """Tunable parameters of the weighting model."""
    half_life_days: float = TIME_WEIGHT_HALF_LIFE_DAYS
    sigma: float = PRICE_WEIGHT_SIGMA
    minimum_price_weight: float = MINIMUM_PRICE_WEIGHT
    non_regional_weight: float = NON_REGIONAL_CURRENCY_WEIGHT
    regional_threshold: int = REGIONAL_SALES_THRESHOLD

    def observation_weights(
        self,
        observations: Sequence[NormalizedObservation],
        median: float,
        iqr: float,
        region_currencies: Iterable[str],
        now: datetime,
    ) -> List[ObservationWeight]:
        """
        Weigh every observation of one tier.

        Args:
            observations: All observations of the tier
            median: Tier median, in base currency
            iqr: Tier interquartile range
            region_currencies: Currencies of the selected region
            now: Reference time for ageing

        Returns:
            One ObservationWeight per observation, same order
        """
        regional = frozenset(region_currencies)
        regional_data = has_regional_data(
            (o.currency for o in observations), regional, self.regional_threshold
        )
        return [
            ObservationWeight(
                temporal=temporal_weight(o.timestamp, now, self.half_life_days),
                dispersion=dispersion_weight(
                    o.value, median, iqr, self.sigma, self.minimum_price_weight
                ),
                region=region_weight(
                    o.currency, regional_data, regional, self.non_regional_weight
                ),
            )
            for o in observations
        ]

    def weighted_mean(
        self,
        observations: Sequence[NormalizedObservation],
        median: float,
        iqr: float,
        region_currencies: Iterable[str],
        now: datetime,
    ) -> int:
        """Multi-factor weighted mean of a tier, rounded to a whole unit."""
        weights = self.observation_weights(observations, median, iqr, region_currencies, now)
        return weighted_mean([o.value for o in observations], [w.combined for w in weights])


def weighted_mean(values: Sequence[float], weights: Sequence[float]) -> int:
    """
    Weighted mean rounded to a whole unit.

    Returns 0 when there are no values or the weights sum to zero.
    """
    total_weight = sum(weights)
    if not values or total_weight <= 0:
        return 0
    weighted_sum = sum(v * w for v, w in zip(values, weights))
    return round_half_up(weighted_sum / total_weight)
