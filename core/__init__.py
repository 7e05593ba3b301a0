"""
Collection Valuation Engine - Core Business Logic

This module provides the valuation pipeline:
1. Currency Normalization (price text, base-currency conversion)
2. Condition Resolution (which tier to value an item at)
3. Observation Weighting (time, price dispersion, currency region)
4. Tier Statistics (per-condition raw and weighted statistics)
5. Valuation Resolution (exact / fallback / no-data estimate)
6. Collection Valuation (batch evaluation and totals)
"""

# Valuation Engine v1.0
from .valuation_engine import (
    ConditionTier,
    CONDITION_PRIORITY,
    Region,
    Classification,
    SaleObservation,
    ExchangeRateTable,
    TierStatistics,
    ValuationResult,
    DiagnosticLog,
    ValuationError,
    MissingRateTableError,
    parse_price,
    convert_to_base,
    convert_from_base,
    resolve_tier,
    WeightingModel,
    aggregate_tier_statistics,
    ValuationResolver,
)

# Collection Valuer - batch pipeline
from .collection import (
    CollectionItem,
    ItemValuation,
    CollectionSummary,
    CollectionValuer,
)

__all__ = [
    # Valuation Engine v1.0
    "ConditionTier",
    "CONDITION_PRIORITY",
    "Region",
    "Classification",
    "SaleObservation",
    "ExchangeRateTable",
    "TierStatistics",
    "ValuationResult",
    "DiagnosticLog",
    "ValuationError",
    "MissingRateTableError",
    "parse_price",
    "convert_to_base",
    "convert_from_base",
    "resolve_tier",
    "WeightingModel",
    "aggregate_tier_statistics",
    "ValuationResolver",
    # Collection Valuer
    "CollectionItem",
    "ItemValuation",
    "CollectionSummary",
    "CollectionValuer",
]
