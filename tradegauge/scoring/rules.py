from __future__ import annotations

import operator
from typing import Optional

from .base import RiskInputs, clamp, first_matching_tier
from .config import RuleScoreConfig


class RuleRiskScorer:
    """Deterministic 0-10 risk score built from fixed thresholds.

    This is the fallback whenever the advisory score is missing or malformed,
    so it must never depend on anything beyond its inputs.
    """

    key = "rules"

    def __init__(self, config: Optional[RuleScoreConfig] = None):
        self.config = config or RuleScoreConfig()

    def score(self, inputs: RiskInputs) -> float:
        cfg = self.config
        total = cfg.baseline

        total += first_matching_tier(
            inputs.dte,
            (cfg.dte_short, operator.le),
            (cfg.dte_long, operator.ge),
        )
        total += first_matching_tier(
            inputs.iv_pct,
            (cfg.iv_high, operator.ge),
            (cfg.iv_low, operator.le),
        )
        distance = abs(inputs.distance_otm_pct) if inputs.distance_otm_pct is not None else None
        total += first_matching_tier(
            distance,
            (cfg.distance_far, operator.ge),
            (cfg.distance_near, operator.le),
        )
        total += first_matching_tier(
            inputs.open_interest,
            (cfg.oi_thin, operator.lt),
            (cfg.oi_deep, operator.gt),
        )
        total += first_matching_tier(
            inputs.breakeven_gap_pct,
            (cfg.breakeven_far, operator.gt),
            (cfg.breakeven_inside, operator.lt),
        )

        if inputs.earnings.same_day:
            total += cfg.earnings_today
        elif inputs.earnings.within_week:
            total += cfg.earnings_soon
        if inputs.macro_soon:
            total += cfg.macro_soon

        return clamp(round(total, 1), cfg.min_score, cfg.max_score)


__all__ = ["RuleRiskScorer"]
