"""
Statistics Aggregator for the Valuation Engine

Groups an item's sales by condition tier and computes, per tier:
- Raw statistics: count, median, mean, lowest, highest (all sales)
- Percentiles: Q1 and Q3 (the IQR scales dispersion weighting)
- Date range: oldest and newest sale
- Weighted mean: the multi-factor estimate used for valuation
- Recent sales: sales within the last 12 months

Statistics are recomputed from scratch on every call.
"""

import logging
import math
from collections import OrderedDict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from .currency import convert_to_base, round_half_up
from .dates import parse_sale_date, subtract_months
from .diagnostics import DiagnosticLog
from .models import (
    DEFAULT_REGION,
    ConditionTier,
    ExchangeRateTable,
    NormalizedObservation,
    Region,
    SaleObservation,
    TierStatistics,
)
from .weighting import WeightingModel

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Constants
# =============================================================================

RECENT_SALES_MONTHS = 12


def median(values: Sequence[float]) -> int:
    """
    Middle value, or the rounded average of the two middle values.

    Returns 0 for an empty sequence.
    """
    if not values:
        return 0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return round_half_up((ordered[mid - 1] + ordered[mid]) / 2)
    return round_half_up(ordered[mid])


def percentile(values: Sequence[float], p: float) -> int:
    """
    Percentile with linear interpolation between order statistics.

    index = (p / 100) * (n - 1); values at floor and ceiling of the
    index are interpolated and the result rounded.
    """
    if not values:
        return 0
    ordered = sorted(values)
    index = (p / 100) * (len(ordered) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return round_half_up(ordered[lower])
    return round_half_up(ordered[lower] + (ordered[upper] - ordered[lower]) * (index - lower))


def count_recent_sales(
    timestamps: Iterable[datetime],
    now: datetime,
    months: int = RECENT_SALES_MONTHS,
) -> int:
    """Count sales on or after the same day `months` calendar months ago."""
    cutoff = subtract_months(now, months)
    return sum(1 for t in timestamps if t >= cutoff)


def normalize_observations(
    observations: Iterable[SaleObservation],
    table: ExchangeRateTable,
    diagnostics: Optional[DiagnosticLog] = None,
) -> List[NormalizedObservation]:
    """
    Convert observations to base currency and parse their sale dates.

    Observations whose sale date cannot be parsed are skipped and
    recorded as unrecognized formats.
    """
    normalized = []
    for obs in observations:
        timestamp = parse_sale_date(obs.sale_date, diagnostics)
        if timestamp is None:
            logger.debug("Skipping sale with unparseable date %r", obs.sale_date)
            continue
        normalized.append(
            NormalizedObservation(
                value=convert_to_base(obs.amount, obs.currency, table, diagnostics),
                tier=ConditionTier.from_label(obs.condition),
                timestamp=timestamp,
                currency=obs.currency,
                sale_date=obs.sale_date,
            )
        )
    return normalized


def _tier_statistics(
    tier: ConditionTier,
    group: List[NormalizedObservation],
    region: Region,
    now: datetime,
    model: WeightingModel,
) -> TierStatistics:
    values = [o.value for o in group]
    by_date = sorted(group, key=lambda o: o.timestamp)

    p25 = percentile(values, 25)
    p75 = percentile(values, 75)
    tier_median = median(values)

    weighted = model.weighted_mean(group, tier_median, p75 - p25, region.currencies, now)

    return TierStatistics(
        tier=tier,
        count=len(group),
        median=tier_median,
        mean=round_half_up(sum(values) / len(values)),
        lowest=min(values),
        highest=max(values),
        percentile_25=p25,
        percentile_75=p75,
        weighted_mean=weighted,
        recent_sales_count=count_recent_sales((o.timestamp for o in group), now),
        oldest_sale=by_date[0].sale_date,
        newest_sale=by_date[-1].sale_date,
    )


def aggregate_tier_statistics(
    observations: Iterable[SaleObservation],
    table: ExchangeRateTable,
    region: Region = DEFAULT_REGION,
    now: Optional[datetime] = None,
    diagnostics: Optional[DiagnosticLog] = None,
    model: Optional[WeightingModel] = None,
) -> List[TierStatistics]:
    """
    Calculate per-tier statistics for one item's sales.

    Args:
        observations: All sales of the item, in original currencies
        table: Exchange rates used to convert to base currency
        region: Region for currency weighting
        now: Reference time (default: current time)
        diagnostics: Receives unparseable dates and missing rates
        model: Weighting parameters (default model if omitted)

    Returns:
        One TierStatistics per tier present, New first, Unknown last
    """
    now = now or datetime.now()
    model = model or WeightingModel()

    groups: Dict[ConditionTier, List[NormalizedObservation]] = OrderedDict()
    for obs in normalize_observations(observations, table, diagnostics):
        groups.setdefault(obs.tier, []).append(obs)

    stats = [
        _tier_statistics(tier, group, region, now, model)
        for tier, group in groups.items()
    ]
    stats.sort(key=lambda s: s.tier.rank)

    for s in stats:
        logger.debug(
            "%s: %d sales, median %d, weighted mean %d",
            s.tier.value, s.count, s.median, s.weighted_mean,
        )
    return stats
