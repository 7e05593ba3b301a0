"""
Request models for the valuation API and CLI payloads.

Both the HTTP endpoint and the command line accept the same JSON shape,
validated with pydantic and then converted to engine types.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel

from core.collection import CollectionItem, CollectionValuer
from core.valuation_engine import (
    ConditionTier,
    DiagnosticLog,
    ExchangeRateTable,
    Region,
    SaleObservation,
    observation_from_text,
)
from utils.config import Config


class ObservationInput(BaseModel):
    """
    One marketplace sale.

    Either raw price text ("CA$30") or an explicit currency and amount.
    """
    price: Optional[str] = None
    currency: Optional[str] = None
    amount: Optional[float] = None
    condition: str = ""
    sale_date: str


class ItemInput(BaseModel):
    """One collection item and its sales."""
    name: str
    item_id: str = ""
    observations: List[ObservationInput] = []
    purchase_amount: Optional[float] = None
    purchase_currency: Optional[str] = None
    condition_text: Optional[str] = None
    play_count: Optional[int] = None


class RatesInput(BaseModel):
    """
    Exchange rates as delivered by the rate provider.

    base may be omitted; the configured base currency is used then.
    """
    base: Optional[str] = None
    date: str = ""
    rates: Dict[str, float] = {}
    source: str = ""

    def to_table(self, default_base: str = "USD") -> ExchangeRateTable:
        return ExchangeRateTable(
            base=self.base or default_base,
            as_of=self.date,
            rates=dict(self.rates),
            source=self.source,
        )


class ValuationRequest(BaseModel):
    """Request body for collection valuation."""
    rates: RatesInput
    items: List[ItemInput] = []
    display_currency: Optional[str] = None
    region: Optional[str] = None
    condition: Optional[str] = None
    workers: int = 1


def _to_observation(
    obs: ObservationInput,
    diagnostics: DiagnosticLog,
) -> Optional[SaleObservation]:
    if obs.currency and obs.amount is not None:
        return SaleObservation(
            currency=obs.currency.upper(),
            amount=obs.amount,
            condition=obs.condition,
            sale_date=obs.sale_date,
        )
    return observation_from_text(obs.price or "", obs.condition, obs.sale_date, diagnostics)


def build_items(request: ValuationRequest) -> Tuple[List[CollectionItem], DiagnosticLog]:
    """
    Convert request items to collection items.

    Sales whose price text cannot be parsed are dropped and recorded
    in the returned diagnostic log.
    """
    diagnostics = DiagnosticLog()
    items = []
    for item in request.items:
        observations = []
        for obs in item.observations:
            parsed = _to_observation(obs, diagnostics)
            if parsed is not None:
                observations.append(parsed)
        items.append(
            CollectionItem(
                name=item.name,
                item_id=item.item_id,
                observations=observations,
                purchase_amount=item.purchase_amount,
                purchase_currency=item.purchase_currency,
                condition_text=item.condition_text,
                play_count=item.play_count,
            )
        )
    return items, diagnostics


def build_valuer(request: ValuationRequest, config: Config) -> CollectionValuer:
    """
    Configure a CollectionValuer for a request.

    Request values override configuration defaults.

    Raises:
        ValueError: Unknown region or condition name
    """
    if request.region:
        region = Region.from_string(request.region)
    else:
        region = config.region_enum()
    if request.condition:
        default_condition = ConditionTier.from_cli(request.condition)
    else:
        default_condition = config.default_condition_tier()

    return CollectionValuer(
        rate_table=request.rates.to_table(config.base_currency),
        display_currency=request.display_currency or config.display_currency,
        region=region,
        default_condition=default_condition,
        ultimate_condition=config.ultimate_condition_tier(),
        thresholds=config.thresholds(),
        model=config.weighting_model(),
        workers=max(request.workers, config.workers),
    )
