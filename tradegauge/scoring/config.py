"""Policy constants for the risk score.

Every threshold the scorers use lives here so it can be overridden from the
YAML settings. Tier lists are ``(limit, points)`` pairs checked in order; the
comparison used for each list is noted next to it.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

Tiers = List[Tuple[float, float]]


def _tiers(*pairs: Tuple[float, float]) -> Any:
    return Field(default_factory=lambda: [tuple(pair) for pair in pairs])


class RuleScoreConfig(BaseModel):
    """Baseline rule score, used on its own whenever the advisory score is unusable."""

    model_config = ConfigDict(frozen=True)

    baseline: float = 2.0
    dte_short: Tiers = _tiers((1, 7.0), (2, 6.0), (5, 4.0), (10, 2.5))  # dte <= limit
    dte_long: Tiers = _tiers((180, -0.8), (90, -0.4))  # dte >= limit
    iv_high: Tiers = _tiers((80, 1.5), (60, 1.0))  # iv% >= limit
    iv_low: Tiers = _tiers((25, -0.4))  # iv% <= limit
    distance_far: Tiers = _tiers((20, 1.5), (10, 1.0))  # |distance%| >= limit
    # Near the money is gamma/whipsaw risk.
    distance_near: Tiers = _tiers((2, 0.3))  # |distance%| <= limit
    oi_thin: Tiers = _tiers((100, 1.0), (500, 0.5))  # oi < limit
    oi_deep: Tiers = _tiers((5000, -0.2))  # oi > limit
    breakeven_far: Tiers = _tiers((15, 1.5), (10, 1.0))  # gap% > limit
    breakeven_inside: Tiers = _tiers((-5, -0.5))  # gap% < limit
    earnings_today: float = 1.5
    earnings_soon: float = 0.8
    macro_soon: float = 0.5
    min_score: float = 0.0
    max_score: float = 10.0


class NudgeConfig(BaseModel):
    """Small secondary correction applied on top of the recentered base."""

    model_config = ConfigDict(frozen=True)

    limit: float = 0.5
    dte_short: Tiers = _tiers((5, 0.25), (10, 0.10))  # dte <= limit
    dte_long: Tiers = _tiers((90, -0.10))  # dte >= limit
    iv_low: Tiers = _tiers((18, -0.30), (25, -0.15))  # iv% <= limit
    iv_high: Tiers = _tiers((60, 0.15))  # iv% >= limit
    distance_near: Tiers = _tiers((1.5, -0.20), (3, -0.10))  # |distance%| <= limit
    distance_far: Tiers = _tiers((25, 0.30), (15, 0.20))  # |distance%| >= limit
    oi_thin: Tiers = _tiers((100, 0.30), (500, 0.15))  # oi < limit
    oi_deep: Tiers = _tiers((10000, -0.25), (5000, -0.15))  # oi >= limit
    breakeven_far: Tiers = _tiers((10, 0.25), (5, 0.10))  # gap% > limit
    breakeven_inside: Tiers = _tiers((-5, -0.25))  # gap% < limit
    breakeven_flat: Tiers = _tiers((2, -0.10))  # |gap%| <= limit


class CushionConfig(BaseModel):
    """Adjustment from the position's unrealized P&L."""

    model_config = ConfigDict(frozen=True)

    loss: Tiers = _tiers((-60, 1.8), (-40, 0.9), (-20, 0.5))  # pnl% <= limit
    gain: Tiers = _tiers((80, -1.0), (40, -0.7), (20, -0.4))  # pnl% >= limit
    losing_short_dte_days: int = 10
    losing_short_dte_points: float = 0.3
    winning_short_dte_days: int = 5
    winning_short_dte_points: float = 0.1


class BlendConfig(BaseModel):
    """Linear recentering of the advisory-or-rule base score.

    The advisory scores run optimistic; ``scale * base + bias`` pulls them
    back. Only the base is recentered, never the nudge or cushion.
    """

    model_config = ConfigDict(frozen=True)

    scale: float = 0.85
    bias: float = -1.2
    min_score: float = 0.0
    max_score: float = 10.0


class DriverConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_drivers: int = 6
    short_dte_days: int = 10
    iv_high_pct: float = 60.0
    iv_low_pct: float = 25.0
    deep_otm_pct: float = 15.0
    near_atm_pct: float = 2.0
    delta_high: float = 0.7
    delta_low: float = 0.25
    theta_large: float = 0.10
    vega_high: float = 0.15
    thin_open_interest: int = 500
    breakeven_far_pct: float = 10.0
    breakeven_inside_pct: float = -5.0


class ScoringConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    rules: RuleScoreConfig = Field(default_factory=RuleScoreConfig)
    nudge: NudgeConfig = Field(default_factory=NudgeConfig)
    cushion: CushionConfig = Field(default_factory=CushionConfig)
    blend: BlendConfig = Field(default_factory=BlendConfig)
    drivers: DriverConfig = Field(default_factory=DriverConfig)


DEFAULT_SCORING_CONFIG: Dict[str, Any] = ScoringConfig().model_dump()


def deep_merge(base: MutableMapping[str, Any], overrides: Mapping[str, Any]) -> MutableMapping[str, Any]:
    for key, value in overrides.items():
        existing = base.get(key)
        if isinstance(value, Mapping) and isinstance(existing, MutableMapping):
            base[key] = deep_merge(copy.deepcopy(existing), value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def merge_config(overrides: Optional[Mapping[str, Any]]) -> ScoringConfig:
    """Default scoring config with ``overrides`` merged section by section."""

    if isinstance(overrides, ScoringConfig):
        return overrides
    merged = copy.deepcopy(DEFAULT_SCORING_CONFIG)
    if overrides:
        merged = deep_merge(merged, overrides)
    return ScoringConfig.model_validate(merged)


__all__ = [
    "BlendConfig",
    "CushionConfig",
    "DEFAULT_SCORING_CONFIG",
    "DriverConfig",
    "NudgeConfig",
    "RuleScoreConfig",
    "ScoringConfig",
    "deep_merge",
    "merge_config",
]
