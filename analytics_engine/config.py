"""
Configuration for the analytics engine.

Every tunable threshold, decay rate and multiplier lives on EngineConfig.
Instances are immutable and passed explicitly to each computation; there is
no process-wide configuration object.
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, fields
from typing import Optional


class ConfigurationError(ValueError):
    """Raised when a configuration value is out of range or unparsable."""


@dataclass(frozen=True)
class EngineConfig:
    """
    Tunable parameters of the engine.

    score_scale: multiplier turning tasks/hour into the 0-100 productivity band.
    session_gap_minutes: gaps between a user's entries below this are breaks;
        larger gaps are off-work time.
    peak_hours_count: how many peak hours insights report.
    bottleneck_multiplier: logged/estimated ratio at which a task is a bottleneck.
    min_sample_size: similar tasks needed before the predictor stops broadening.
    recency_half_life_days: age at which a historical sample weighs half as much.
    confidence_sample_scale: sample size at which the size term of confidence is 0.5.
    min_break_ratio, low_completion_rate, low_efficiency, long_task_minutes,
    low_collaboration, imbalance_share, low_team_productivity:
        thresholds for suggestion and recommendation rules.
    """

    score_scale: float = 10.0
    session_gap_minutes: float = 30.0
    peak_hours_count: int = 6
    bottleneck_multiplier: float = 1.5
    min_sample_size: int = 3
    recency_half_life_days: float = 30.0
    confidence_sample_scale: float = 3.0
    min_break_ratio: float = 0.1
    low_completion_rate: float = 50.0
    low_efficiency: float = 0.7
    long_task_minutes: float = 120.0
    low_collaboration: float = 0.1
    imbalance_share: float = 0.5
    low_team_productivity: float = 0.2

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if not math.isfinite(value):
                raise ConfigurationError(f"{item.name} must be a finite number, got {value!r}")
        positive = ("score_scale", "recency_half_life_days", "confidence_sample_scale")
        non_negative = ("session_gap_minutes", "bottleneck_multiplier", "min_break_ratio", "long_task_minutes")
        for name in positive:
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be > 0, got {getattr(self, name)!r}")
        for name in non_negative:
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {getattr(self, name)!r}")
        if self.peak_hours_count < 1 or self.peak_hours_count > 24:
            raise ConfigurationError(f"peak_hours_count must be within 1..24, got {self.peak_hours_count!r}")
        if self.min_sample_size < 1:
            raise ConfigurationError(f"min_sample_size must be >= 1, got {self.min_sample_size!r}")
        if not 0 <= self.low_completion_rate <= 100:
            raise ConfigurationError(f"low_completion_rate must be within 0..100, got {self.low_completion_rate!r}")
        for name in ("low_efficiency", "low_collaboration", "imbalance_share", "low_team_productivity"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ConfigurationError(f"{name} must be within 0..1, got {value!r}")

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "EngineConfig":
        """
        Build a config from AE_* environment variables.

        Each field maps to AE_<FIELD_NAME_UPPER>, e.g. AE_BOTTLENECK_MULTIPLIER.
        Unset variables keep their defaults; unparsable ones raise
        ConfigurationError rather than falling back silently.
        """
        source = os.environ if environ is None else environ
        overrides = {}
        for item in fields(cls):
            raw = source.get(f"AE_{item.name.upper()}")
            if raw is None:
                continue
            caster = int if item.type in ("int", int) else float
            try:
                overrides[item.name] = caster(raw.strip())
            except ValueError as exc:
                raise ConfigurationError(f"AE_{item.name.upper()}: cannot parse {raw!r}") from exc
        return cls(**overrides)
