"""
Condition Resolver for the Valuation Engine

Decides which condition tier an owned item should be valued at.
Priority order, first match wins:

1. Condition text recorded for the item, if it names a canonical tier
2. Caller-wide default condition (e.g. a --condition flag)
3. Inference from play count
4. Ultimate default (Like New)
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .models import CONDITION_PRIORITY, ConditionTier


# =============================================================================
# Configuration Constants
# =============================================================================

DEFAULT_CONDITION = ConditionTier.LIKE_NEW


@dataclass(frozen=True)
class PlayCountThresholds:
    """
    Inclusive upper play-count bounds per tier.

    Default:
    - <= 1 play: New (unplayed or checked once)
    - <= 10 plays: Like New
    - <= 15 plays: Very Good
    - <= 25 plays: Good
    - more: Acceptable
    """
    bounds: Tuple[Tuple[int, ConditionTier], ...] = (
        (1, ConditionTier.NEW),
        (10, ConditionTier.LIKE_NEW),
        (15, ConditionTier.VERY_GOOD),
        (25, ConditionTier.GOOD),
    )
    overflow_tier: ConditionTier = ConditionTier.ACCEPTABLE

    def __post_init__(self):
        """Validate bounds after initialization."""
        previous = None
        for max_plays, tier in self.bounds:
            if not tier.is_canonical:
                raise ValueError("Play-count thresholds must map to canonical tiers")
            if previous is not None and max_plays <= previous:
                raise ValueError("Play-count thresholds must be strictly ascending")
            previous = max_plays
        if not self.overflow_tier.is_canonical:
            raise ValueError("Overflow tier must be a canonical tier")

    def tier_for(self, play_count: int) -> ConditionTier:
        """Map a play count to the first tier whose bound covers it."""
        for max_plays, tier in self.bounds:
            if play_count <= max_plays:
                return tier
        return self.overflow_tier

    @classmethod
    def from_string(cls, value: str) -> "PlayCountThresholds":
        """
        Build from a comma-separated list of bounds, e.g. "1,10,15,25".

        Bounds are assigned to tiers in priority order; the next tier
        after the last bound covers everything above it.
        """
        parts = [p.strip() for p in value.split(",") if p.strip()]
        if not parts or len(parts) >= len(CONDITION_PRIORITY):
            raise ValueError(
                f"Expected 1-{len(CONDITION_PRIORITY) - 1} play-count bounds, got {value!r}"
            )
        bounds = tuple(
            (int(part), tier) for part, tier in zip(parts, CONDITION_PRIORITY)
        )
        return cls(bounds=bounds, overflow_tier=CONDITION_PRIORITY[len(bounds)])


DEFAULT_PLAY_THRESHOLDS = PlayCountThresholds()


def parse_condition_text(text: Optional[str]) -> Optional[ConditionTier]:
    """Match free-form condition text against canonical tiers, case-insensitive."""
    if not text or not text.strip():
        return None
    normalised = text.strip().lower()
    for tier in CONDITION_PRIORITY:
        if tier.value.lower() == normalised:
            return tier
    return None


def infer_condition_from_plays(
    play_count: int,
    thresholds: PlayCountThresholds = DEFAULT_PLAY_THRESHOLDS,
) -> ConditionTier:
    """Infer condition from how often an item has been played."""
    return thresholds.tier_for(play_count)


def resolve_tier(
    item_condition_text: Optional[str] = None,
    caller_default_tier: Optional[ConditionTier] = None,
    play_count: Optional[int] = None,
    ultimate_default_tier: ConditionTier = DEFAULT_CONDITION,
    thresholds: PlayCountThresholds = DEFAULT_PLAY_THRESHOLDS,
) -> ConditionTier:
    """
    Resolve the condition tier to value an item at.

    Total and deterministic: always returns a canonical tier.

    Args:
        item_condition_text: Condition text recorded for the item
        caller_default_tier: Default chosen by the caller for all items
        play_count: Number of recorded plays
        ultimate_default_tier: Used when nothing else applies
        thresholds: Play-count bounds for inference

    Returns:
        Canonical ConditionTier (never UNKNOWN)
    """
    from_text = parse_condition_text(item_condition_text)
    if from_text is not None:
        return from_text

    if caller_default_tier is not None and caller_default_tier.is_canonical:
        return caller_default_tier

    if play_count is not None:
        return infer_condition_from_plays(play_count, thresholds)

    if ultimate_default_tier.is_canonical:
        return ultimate_default_tier
    return DEFAULT_CONDITION
