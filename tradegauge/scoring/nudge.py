from __future__ import annotations

import operator
from typing import Optional

from .base import RiskInputs, abs_le, clamp, first_matching_tier
from .config import NudgeConfig


def compute_score_nudge(inputs: RiskInputs, config: Optional[NudgeConfig] = None) -> float:
    """Secondary correction in ``[-limit, +limit]``.

    Uses the same signals as the rule score with its own thresholds; kept
    small so it refines the base score rather than overriding it.
    """

    cfg = config or NudgeConfig()
    distance = abs(inputs.distance_otm_pct) if inputs.distance_otm_pct is not None else None

    nudge = first_matching_tier(inputs.dte, (cfg.dte_short, operator.le), (cfg.dte_long, operator.ge))
    nudge += first_matching_tier(inputs.iv_pct, (cfg.iv_low, operator.le), (cfg.iv_high, operator.ge))
    nudge += first_matching_tier(distance, (cfg.distance_near, operator.le), (cfg.distance_far, operator.ge))
    nudge += first_matching_tier(inputs.open_interest, (cfg.oi_thin, operator.lt), (cfg.oi_deep, operator.ge))
    nudge += first_matching_tier(
        inputs.breakeven_gap_pct,
        (cfg.breakeven_far, operator.gt),
        (cfg.breakeven_inside, operator.lt),
        (cfg.breakeven_flat, abs_le),
    )
    return clamp(nudge, -cfg.limit, cfg.limit)


__all__ = ["compute_score_nudge"]
