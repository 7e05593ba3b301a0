"""
Valuation Resolver for the Valuation Engine

Turns an item's tier statistics into one estimate:
- Exact: the target tier has sales, use its weighted mean
- Fallback: walk New -> Acceptable, first tier with sales wins;
  if only Unknown sales exist, use the first record
- No data: 60% of the purchase price (conservative depreciation)

All amounts are base currency.
"""

from typing import List, Optional

from .currency import round_half_up
from .models import (
    CONDITION_PRIORITY,
    Classification,
    ConditionTier,
    TierStatistics,
    ValuationResult,
)


# =============================================================================
# Configuration Constants
# =============================================================================

# Estimate for items without market data, as a share of purchase price
NO_MARKET_DATA_MULTIPLIER = 0.6


class ValuationResolver:
    """
    Applies the fallback policy to tier statistics.

    Resolution order:
    1. NO DATA - no statistics at all
    2. EXACT - statistics for the target tier
    3. FALLBACK - first canonical tier in priority order
    4. FALLBACK - first record of any tier
    """

    def __init__(self, no_data_multiplier: float = NO_MARKET_DATA_MULTIPLIER):
        self._no_data_multiplier = no_data_multiplier

    def resolve(
        self,
        statistics: List[TierStatistics],
        target_tier: ConditionTier,
        purchase_price: Optional[float] = None,
    ) -> ValuationResult:
        """
        Resolve the estimate for one item.

        Args:
            statistics: The item's tier statistics
            target_tier: Tier from the Condition Resolver
            purchase_price: What the owner paid, in base currency

        Returns:
            ValuationResult; unvaluable is set when there is neither
            market data nor a positive purchase price
        """
        if not statistics:
            return self._no_data(purchase_price)

        by_tier = {s.tier: s for s in statistics}

        exact = by_tier.get(target_tier)
        if exact is not None:
            return ValuationResult(
                estimated_value=exact.weighted_mean,
                tier_used=exact.tier,
                classification=Classification.EXACT,
            )

        for tier in CONDITION_PRIORITY:
            candidate = by_tier.get(tier)
            if candidate is not None:
                return ValuationResult(
                    estimated_value=candidate.weighted_mean,
                    tier_used=candidate.tier,
                    classification=Classification.FALLBACK,
                )

        first = statistics[0]
        return ValuationResult(
            estimated_value=first.weighted_mean,
            tier_used=first.tier,
            classification=Classification.FALLBACK,
        )

    def _no_data(self, purchase_price: Optional[float]) -> ValuationResult:
        """Estimate from purchase price when there are no sales."""
        if not purchase_price or purchase_price <= 0:
            return ValuationResult(
                estimated_value=0,
                tier_used=None,
                classification=Classification.NO_DATA,
                unvaluable=True,
            )

        return ValuationResult(
            estimated_value=round_half_up(purchase_price * self._no_data_multiplier),
            tier_used=None,
            classification=Classification.NO_DATA,
        )


def resolve_valuation(
    statistics: List[TierStatistics],
    target_tier: ConditionTier,
    purchase_price: Optional[float] = None,
) -> ValuationResult:
    """Resolve with the default fallback multiplier."""
    return ValuationResolver().resolve(statistics, target_tier, purchase_price)
