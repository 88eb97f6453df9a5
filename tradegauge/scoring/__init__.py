"""Convenient exports for scoring components."""

from .base import RiskInputs
from .blender import blend_scores, coerce_advisory_score, recenter, risk_bucket
from .config import ScoringConfig, merge_config
from .cushion import compute_cushion
from .drivers import build_score_drivers, combine_drivers
from .engine import RiskScoringEngine
from .nudge import compute_score_nudge
from .rules import RuleRiskScorer

__all__ = [
    "RiskInputs",
    "RiskScoringEngine",
    "RuleRiskScorer",
    "ScoringConfig",
    "blend_scores",
    "build_score_drivers",
    "coerce_advisory_score",
    "combine_drivers",
    "compute_cushion",
    "compute_score_nudge",
    "merge_config",
    "recenter",
    "risk_bucket",
]
