"""
Tests for the Condition Resolver

Verifies:
- Cascade order: condition text > caller default > play count > default
- Play-count thresholds are inclusive and configurable
- Resolver is total: always one of the five canonical tiers
"""

import itertools
from pathlib import Path
import sys

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.valuation_engine import (
    CONDITION_PRIORITY,
    ConditionTier,
    PlayCountThresholds,
    infer_condition_from_plays,
    parse_condition_text,
    resolve_tier,
)


# =============================================================================
# Test: Condition Text
# =============================================================================

class TestParseConditionText:
    """Case-insensitive matching of free-form text."""

    @pytest.mark.parametrize("text,expected", [
        ("New", ConditionTier.NEW),
        ("like new", ConditionTier.LIKE_NEW),
        ("  VERY GOOD ", ConditionTier.VERY_GOOD),
        ("good", ConditionTier.GOOD),
        ("Acceptable", ConditionTier.ACCEPTABLE),
    ])
    def test_canonical_names(self, text, expected):
        assert parse_condition_text(text) == expected

    @pytest.mark.parametrize("text", [None, "", "   ", "mint", "Unknown", "like-new"])
    def test_non_canonical_returns_none(self, text):
        assert parse_condition_text(text) is None


# =============================================================================
# Test: Cascade
# =============================================================================

class TestResolveTierCascade:
    """First match wins."""

    def test_condition_text_wins(self):
        tier = resolve_tier(
            item_condition_text="Good",
            caller_default_tier=ConditionTier.NEW,
            play_count=0,
        )
        assert tier == ConditionTier.GOOD

    def test_caller_default_beats_play_count(self):
        tier = resolve_tier(
            item_condition_text="shrink-wrapped",
            caller_default_tier=ConditionTier.VERY_GOOD,
            play_count=0,
        )
        assert tier == ConditionTier.VERY_GOOD

    def test_play_count_used_without_default(self):
        assert resolve_tier(play_count=30) == ConditionTier.ACCEPTABLE

    def test_ultimate_default_is_like_new(self):
        assert resolve_tier() == ConditionTier.LIKE_NEW

    def test_play_count_matches_inference(self):
        thresholds = PlayCountThresholds.from_string("2,4")
        for plays in range(8):
            assert resolve_tier(play_count=plays, thresholds=thresholds) == \
                infer_condition_from_plays(plays, thresholds)

    def test_custom_ultimate_default(self):
        assert resolve_tier(ultimate_default_tier=ConditionTier.GOOD) == ConditionTier.GOOD

    def test_unknown_caller_default_ignored(self):
        tier = resolve_tier(caller_default_tier=ConditionTier.UNKNOWN, play_count=12)
        assert tier == ConditionTier.VERY_GOOD

    def test_unknown_ultimate_default_replaced(self):
        assert resolve_tier(ultimate_default_tier=ConditionTier.UNKNOWN) == ConditionTier.LIKE_NEW


# =============================================================================
# Test: Play Count Thresholds
# =============================================================================

class TestPlayCountThresholds:
    """Inclusive upper bounds."""

    @pytest.mark.parametrize("plays,expected", [
        (0, ConditionTier.NEW),
        (1, ConditionTier.NEW),
        (2, ConditionTier.LIKE_NEW),
        (10, ConditionTier.LIKE_NEW),
        (11, ConditionTier.VERY_GOOD),
        (15, ConditionTier.VERY_GOOD),
        (16, ConditionTier.GOOD),
        (25, ConditionTier.GOOD),
        (26, ConditionTier.ACCEPTABLE),
        (500, ConditionTier.ACCEPTABLE),
    ])
    def test_default_bounds(self, plays, expected):
        assert infer_condition_from_plays(plays) == expected

    def test_bounds_from_string(self):
        thresholds = PlayCountThresholds.from_string("0,4,14,29")
        assert thresholds.tier_for(0) == ConditionTier.NEW
        assert thresholds.tier_for(1) == ConditionTier.LIKE_NEW
        assert thresholds.tier_for(29) == ConditionTier.GOOD
        assert thresholds.tier_for(30) == ConditionTier.ACCEPTABLE

    def test_fewer_bounds_shift_overflow_tier(self):
        thresholds = PlayCountThresholds.from_string("5,10")
        assert thresholds.tier_for(10) == ConditionTier.LIKE_NEW
        assert thresholds.tier_for(11) == ConditionTier.VERY_GOOD

    def test_custom_thresholds_in_resolver(self):
        thresholds = PlayCountThresholds.from_string("5,10")
        assert resolve_tier(play_count=3, thresholds=thresholds) == ConditionTier.NEW

    @pytest.mark.parametrize("value", ["10,5", "1,1", "", "1,2,3,4,5", "one"])
    def test_invalid_bounds_rejected(self, value):
        with pytest.raises(ValueError):
            PlayCountThresholds.from_string(value)

    def test_unknown_tier_rejected(self):
        with pytest.raises(ValueError):
            PlayCountThresholds(bounds=((1, ConditionTier.UNKNOWN),))


# =============================================================================
# Test: Totality
# =============================================================================

class TestResolverTotality:
    """Every input combination yields exactly one canonical tier."""

    def test_all_combinations_canonical_and_deterministic(self):
        texts = [None, "", "New", "mint", "good", "Unknown"]
        defaults = [None] + list(ConditionTier)
        plays = [None, -1, 0, 5, 100]
        ultimates = list(ConditionTier)

        for text, default, play, ultimate in itertools.product(texts, defaults, plays, ultimates):
            first = resolve_tier(text, default, play, ultimate)
            second = resolve_tier(text, default, play, ultimate)
            assert first in CONDITION_PRIORITY
            assert first == second


class TestConditionTierNames:
    """CLI names."""

    def test_from_cli(self):
        assert ConditionTier.from_cli("like-new") == ConditionTier.LIKE_NEW
        assert ConditionTier.from_cli("Very-Good") == ConditionTier.VERY_GOOD

    def test_from_cli_invalid(self):
        with pytest.raises(ValueError, match="Valid options"):
            ConditionTier.from_cli("mint")

    def test_unknown_not_a_cli_choice(self):
        with pytest.raises(ValueError):
            ConditionTier.from_cli("unknown")
