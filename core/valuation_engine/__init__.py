"""
Valuation Engine v1.0

Multi-factor valuation of collectible items from historical marketplace
sales: currency normalization, condition resolution, time/price/region
weighting, per-condition statistics and fallback-aware estimates.

All internal amounts are whole units of the rate table's base currency.
"""

from .models import (
    ConditionTier,
    CONDITION_PRIORITY,
    Region,
    REGION_CURRENCIES,
    DEFAULT_REGION,
    Classification,
    SaleObservation,
    NormalizedObservation,
    ExchangeRateTable,
    TierStatistics,
    ValuationResult,
)
from .diagnostics import DiagnosticLog
from .errors import ValuationError, MissingRateTableError
from .currency import (
    ParsedPrice,
    parse_price,
    convert_to_base,
    convert_from_base,
    observation_from_text,
    round_half_up,
)
from .dates import parse_sale_date
from .conditions import (
    DEFAULT_CONDITION,
    DEFAULT_PLAY_THRESHOLDS,
    PlayCountThresholds,
    parse_condition_text,
    infer_condition_from_plays,
    resolve_tier,
)
from .weighting import (
    ObservationWeight,
    WeightingModel,
    temporal_weight,
    dispersion_weight,
    region_weight,
    weighted_mean,
)
from .statistics import aggregate_tier_statistics, normalize_observations
from .valuation import ValuationResolver, resolve_valuation, NO_MARKET_DATA_MULTIPLIER

__all__ = [
    # Models
    "ConditionTier",
    "CONDITION_PRIORITY",
    "Region",
    "REGION_CURRENCIES",
    "DEFAULT_REGION",
    "Classification",
    "SaleObservation",
    "NormalizedObservation",
    "ExchangeRateTable",
    "TierStatistics",
    "ValuationResult",
    # Diagnostics and errors
    "DiagnosticLog",
    "ValuationError",
    "MissingRateTableError",
    # Currency Normalizer
    "ParsedPrice",
    "parse_price",
    "convert_to_base",
    "convert_from_base",
    "observation_from_text",
    "round_half_up",
    "parse_sale_date",
    # Condition Resolver
    "DEFAULT_CONDITION",
    "DEFAULT_PLAY_THRESHOLDS",
    "PlayCountThresholds",
    "parse_condition_text",
    "infer_condition_from_plays",
    "resolve_tier",
    # Weighting Engine
    "ObservationWeight",
    "WeightingModel",
    "temporal_weight",
    "dispersion_weight",
    "region_weight",
    "weighted_mean",
    # Statistics Aggregator
    "aggregate_tier_statistics",
    "normalize_observations",
    # Valuation Resolver
    "ValuationResolver",
    "resolve_valuation",
    "NO_MARKET_DATA_MULTIPLIER",
]

__version__ = "1.0"
