"""
Collection Valuer - Batch Valuation Pipeline

Values every item of an owner's collection with the Valuation Engine
and compares the estimates against what was paid.

Per item:
1. Convert the purchase price to base currency
2. Aggregate tier statistics from the item's sales
3. Resolve the target condition tier
4. Resolve the estimate (exact / fallback / no-data)
5. Convert purchase price and estimate to the display currency

Items are independent, so a batch can run on a worker pool.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .valuation_engine import (
    DEFAULT_CONDITION,
    DEFAULT_PLAY_THRESHOLDS,
    DEFAULT_REGION,
    Classification,
    ConditionTier,
    DiagnosticLog,
    ExchangeRateTable,
    MissingRateTableError,
    PlayCountThresholds,
    Region,
    SaleObservation,
    TierStatistics,
    ValuationResolver,
    ValuationResult,
    WeightingModel,
    aggregate_tier_statistics,
    convert_from_base,
    convert_to_base,
    resolve_tier,
)

logger = logging.getLogger(__name__)


@dataclass
class CollectionItem:
    """An owned item and the market sales found for it."""
    name: str
    item_id: str
    observations: List[SaleObservation] = field(default_factory=list)

    # From the collection export (all optional)
    purchase_amount: Optional[float] = None
    purchase_currency: Optional[str] = None
    condition_text: Optional[str] = None
    play_count: Optional[int] = None


@dataclass
class ItemValuation:
    """Valuation of one collection item."""
    item: CollectionItem
    target_tier: ConditionTier
    statistics: List[TierStatistics]
    result: ValuationResult

    purchase_base: int
    purchase_display: int
    estimate_display: int

    @property
    def estimate_base(self) -> int:
        return self.result.estimated_value

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "name": self.item.name,
            "item_id": self.item.item_id,
            "target_tier": self.target_tier.value,
            "purchase_price": self.purchase_display,
            "estimated_value": self.estimate_display,
            "purchase_price_base": self.purchase_base,
            "estimated_value_base": self.estimate_base,
            "valuation": self.result.to_dict(),
            "statistics": [s.to_dict() for s in self.statistics],
        }


@dataclass
class CollectionSummary:
    """Per-item valuations plus collection totals in display currency."""
    items: List[ItemValuation]
    base_currency: str
    display_currency: str
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)

    @property
    def total_purchase(self) -> int:
        return sum(v.purchase_display for v in self.items)

    @property
    def total_estimate(self) -> int:
        return sum(v.estimate_display for v in self.items)

    @property
    def difference(self) -> int:
        """Estimated gain (positive) or loss (negative)."""
        return self.total_estimate - self.total_purchase

    @property
    def percent_change(self) -> Optional[float]:
        """Change relative to total purchase, None when nothing was paid."""
        if self.total_purchase <= 0:
            return None
        return (self.difference / self.total_purchase) * 100

    @property
    def market_count(self) -> int:
        return sum(1 for v in self.items if v.result.classification is not Classification.NO_DATA)

    @property
    def fallback_count(self) -> int:
        return sum(1 for v in self.items if v.result.classification is Classification.NO_DATA)

    @property
    def unvaluable(self) -> List[ItemValuation]:
        return [v for v in self.items if v.result.unvaluable]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        percent = self.percent_change
        return {
            "base_currency": self.base_currency,
            "display_currency": self.display_currency,
            "items": [v.to_dict() for v in self.items],
            "totals": {
                "purchase_price": self.total_purchase,
                "estimated_value": self.total_estimate,
                "difference": self.difference,
                "percent_change": round(percent, 1) if percent is not None else None,
            },
            "counts": {
                "total": len(self.items),
                "market_data": self.market_count,
                "fallback": self.fallback_count,
                "unvaluable": len(self.unvaluable),
            },
            "diagnostics": self.diagnostics.to_dict(),
        }


class CollectionValuer:
    """
    Batch valuation of a collection against one exchange rate table.

    The rate table is read-only and shared; diagnostics are collected
    per worker and merged into the summary.
    """

    def __init__(
        self,
        rate_table: Optional[ExchangeRateTable],
        display_currency: Optional[str] = None,
        region: Region = DEFAULT_REGION,
        default_condition: Optional[ConditionTier] = None,
        ultimate_condition: ConditionTier = DEFAULT_CONDITION,
        thresholds: PlayCountThresholds = DEFAULT_PLAY_THRESHOLDS,
        model: Optional[WeightingModel] = None,
        now: Optional[datetime] = None,
        workers: int = 1,
    ):
        """
        Initialize the valuer.

        Args:
            rate_table: Exchange rates; required, a missing table is fatal
            display_currency: Currency of reported amounts (default: base)
            region: Region for currency weighting
            default_condition: Caller-wide condition for all items
            ultimate_condition: Condition when nothing else applies
            thresholds: Play-count bounds for condition inference
            model: Weighting parameters
            now: Reference time (default: current time at each call)
            workers: Thread pool size for batch evaluation

        Raises:
            MissingRateTableError: If no rate table is supplied
        """
        if rate_table is None:
            raise MissingRateTableError()
        self._rates = rate_table
        self._display_currency = (display_currency or rate_table.base).upper()
        self._region = region
        self._default_condition = default_condition
        self._ultimate_condition = ultimate_condition
        self._thresholds = thresholds
        self._model = model or WeightingModel()
        self._now = now
        self._workers = max(1, workers)
        self._resolver = ValuationResolver()

    @property
    def display_currency(self) -> str:
        return self._display_currency

    def value_item(
        self,
        item: CollectionItem,
        diagnostics: Optional[DiagnosticLog] = None,
        now: Optional[datetime] = None,
    ) -> ItemValuation:
        """Value a single item."""
        diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()
        now = now or self._now or datetime.now()

        purchase_base = 0
        if item.purchase_amount:
            purchase_base = convert_to_base(
                item.purchase_amount,
                (item.purchase_currency or self._rates.base).upper(),
                self._rates,
                diagnostics,
            )

        statistics = aggregate_tier_statistics(
            item.observations,
            self._rates,
            region=self._region,
            now=now,
            diagnostics=diagnostics,
            model=self._model,
        )

        target_tier = resolve_tier(
            item_condition_text=item.condition_text,
            caller_default_tier=self._default_condition,
            play_count=item.play_count,
            ultimate_default_tier=self._ultimate_condition,
            thresholds=self._thresholds,
        )

        result = self._resolver.resolve(statistics, target_tier, purchase_base)

        if result.unvaluable:
            logger.warning("No estimated value for: %s (ID: %s)", item.name, item.item_id)

        return ItemValuation(
            item=item,
            target_tier=target_tier,
            statistics=statistics,
            result=result,
            purchase_base=purchase_base,
            purchase_display=convert_from_base(
                purchase_base, self._display_currency, self._rates, diagnostics
            ),
            estimate_display=convert_from_base(
                result.estimated_value, self._display_currency, self._rates, diagnostics
            ),
        )

    def value_collection(
        self,
        items: List[CollectionItem],
        diagnostics: Optional[DiagnosticLog] = None,
    ) -> CollectionSummary:
        """
        Value every item and total the results.

        Output order follows input order regardless of worker count.

        Args:
            items: Collection items with their sales
            diagnostics: Log to extend, e.g. one already holding
                price text rejected while building the items
        """
        now = self._now or datetime.now()
        diagnostics = diagnostics if diagnostics is not None else DiagnosticLog()

        if self._workers == 1 or len(items) <= 1:
            valuations = [self.value_item(item, diagnostics, now) for item in items]
        else:
            buffers = [DiagnosticLog() for _ in items]
            with ThreadPoolExecutor(max_workers=self._workers) as executor:
                valuations = list(
                    executor.map(
                        lambda pair: self.value_item(pair[0], pair[1], now),
                        zip(items, buffers),
                    )
                )
            for buffer in buffers:
                diagnostics.merge(buffer)

        summary = CollectionSummary(
            items=valuations,
            base_currency=self._rates.base,
            display_currency=self._display_currency,
            diagnostics=diagnostics,
        )

        logger.info(
            "Valued %d items (%d with market data, %d fallback, %d unvaluable)",
            len(valuations),
            summary.market_count,
            summary.fallback_count,
            len(summary.unvaluable),
        )
        if diagnostics.missing_rates:
            logger.warning("Missing exchange rates: %s", ", ".join(diagnostics.missing_rates))
        if diagnostics.unrecognized_formats:
            logger.warning(
                "Unrecognized formats: %d distinct values", len(diagnostics.unrecognized_formats)
            )
        return summary
