"""
Configuration management.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from core.valuation_engine import (
    ConditionTier,
    PlayCountThresholds,
    Region,
    WeightingModel,
)


@dataclass
class Config:
    """
    Application configuration.

    Loads from environment variables with sensible defaults.
    """

    # Server
    host: str = field(default_factory=lambda: os.getenv("HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    # Currencies
    base_currency: str = field(default_factory=lambda: os.getenv("BASE_CURRENCY", "USD").upper())
    display_currency: str = field(
        default_factory=lambda: os.getenv("DISPLAY_CURRENCY", "SEK").upper()
    )

    # Conditions
    region: str = field(default_factory=lambda: os.getenv("REGION", "europe"))
    default_condition: Optional[str] = field(
        default_factory=lambda: os.getenv("DEFAULT_CONDITION") or None
    )
    ultimate_condition: str = field(
        default_factory=lambda: os.getenv("ULTIMATE_CONDITION", "like-new")
    )
    play_thresholds: str = field(
        default_factory=lambda: os.getenv("PLAY_THRESHOLDS", "1,10,15,25")
    )

    # Weighting
    half_life_days: float = field(
        default_factory=lambda: float(os.getenv("HALF_LIFE_DAYS", "365.25"))
    )
    non_regional_weight: float = field(
        default_factory=lambda: float(os.getenv("NON_REGIONAL_WEIGHT", "0.3"))
    )
    regional_threshold: int = field(
        default_factory=lambda: int(os.getenv("REGIONAL_THRESHOLD", "2"))
    )

    # Batch
    workers: int = field(default_factory=lambda: int(os.getenv("WORKERS", "1")))

    @classmethod
    def load(cls) -> "Config":
        """Load configuration from environment."""
        return cls()

    def region_enum(self) -> Region:
        return Region.from_string(self.region)

    def default_condition_tier(self) -> Optional[ConditionTier]:
        if not self.default_condition:
            return None
        return ConditionTier.from_cli(self.default_condition)

    def ultimate_condition_tier(self) -> ConditionTier:
        return ConditionTier.from_cli(self.ultimate_condition)

    def thresholds(self) -> PlayCountThresholds:
        return PlayCountThresholds.from_string(self.play_thresholds)

    def weighting_model(self) -> WeightingModel:
        """Weighting parameters from configuration."""
        return WeightingModel(
            half_life_days=self.half_life_days,
            non_regional_weight=self.non_regional_weight,
            regional_threshold=self.regional_threshold,
        )

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "log_level": self.log_level,
            "base_currency": self.base_currency,
            "display_currency": self.display_currency,
            "region": self.region,
            "default_condition": self.default_condition,
            "ultimate_condition": self.ultimate_condition,
            "play_thresholds": self.play_thresholds,
            "half_life_days": self.half_life_days,
            "non_regional_weight": self.non_regional_weight,
            "regional_threshold": self.regional_threshold,
            "workers": self.workers,
        }
