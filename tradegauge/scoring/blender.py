from __future__ import annotations

import logging
import math
from typing import Any, Optional, Tuple

from tradegauge.models.score import RiskBucket

from .base import clamp
from .config import BlendConfig

logger = logging.getLogger(__name__)

RISK_BUCKETS: Tuple[Tuple[float, RiskBucket], ...] = (
    (3.0, "Low"),
    (6.0, "Moderate"),
    (8.0, "High"),
)


def risk_bucket(score: float) -> RiskBucket:
    for upper, label in RISK_BUCKETS:
        if score <= upper:
            return label
    return "Very High"


def coerce_advisory_score(value: Any) -> Optional[float]:
    """Advisory score clamped to 0-10, or ``None`` when it is not a finite number."""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return clamp(float(value), 0.0, 10.0)


def recenter(score: float, config: Optional[BlendConfig] = None) -> float:
    cfg = config or BlendConfig()
    return score * cfg.scale + cfg.bias


def blend_scores(
    base: float,
    nudge: float,
    cushion: float,
    config: Optional[BlendConfig] = None,
) -> float:
    """Recentered base plus the bounded corrections, clamped and rounded."""

    cfg = config or BlendConfig()
    total = recenter(base, cfg) + nudge + cushion
    return round(clamp(total, cfg.min_score, cfg.max_score), 1)


__all__ = [
    "RISK_BUCKETS",
    "blend_scores",
    "coerce_advisory_score",
    "recenter",
    "risk_bucket",
]
