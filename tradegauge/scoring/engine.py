from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from tradegauge.models.score import ScoreResult

from .base import RiskInputs
from .blender import blend_scores, coerce_advisory_score, risk_bucket
from .config import ScoringConfig, merge_config
from .cushion import compute_cushion
from .drivers import build_score_drivers, combine_drivers
from .nudge import compute_score_nudge
from .rules import RuleRiskScorer

logger = logging.getLogger(__name__)


class RiskScoringEngine:
    """Combines the advisory score, rule score, nudge and cushion into one result."""

    def __init__(self, config: Union[ScoringConfig, Mapping[str, Any], None] = None):
        self.config = merge_config(config)
        self._rules = RuleRiskScorer(self.config.rules)

    def rule_score(self, inputs: RiskInputs) -> float:
        return self._rules.score(inputs)

    def score(
        self,
        inputs: RiskInputs,
        advisory_score: Any = None,
        *,
        pnl_pct: Optional[float] = None,
        external_drivers: Iterable[object] = (),
    ) -> ScoreResult:
        rule_score = self.rule_score(inputs)
        advisory = coerce_advisory_score(advisory_score)
        if advisory is None:
            if advisory_score is not None:
                logger.warning(f"Ignoring malformed advisory score {advisory_score!r}; using rule score")
            base, source = rule_score, "rules"
        else:
            base, source = advisory, "advisory"

        nudge = compute_score_nudge(inputs, self.config.nudge)
        cushion = compute_cushion(pnl_pct, inputs.dte, self.config.cushion)
        final = blend_scores(base, nudge, cushion, self.config.blend)
        logger.debug(
            f"Blended {source} base {base:.2f} (rules {rule_score:.1f}), "
            f"nudge {nudge:+.2f}, cushion {cushion:+.2f} -> {final:.1f}"
        )

        drivers = combine_drivers(
            build_score_drivers(inputs, self.config.drivers),
            external_drivers,
            self.config.drivers.max_drivers,
        )
        return ScoreResult(
            score=final,
            bucket=risk_bucket(final),
            drivers=drivers,
            base_score=base,
            base_source=source,
            rule_score=rule_score,
            nudge=round(nudge, 4),
            cushion=round(cushion, 4),
            pnl_pct=pnl_pct,
        )


__all__ = ["RiskScoringEngine"]
