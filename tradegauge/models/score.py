from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

RiskBucket = Literal["Low", "Moderate", "High", "Very High"]


class ScoreResult(BaseModel):
    """Final calibrated score for one analysis. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(ge=0.0, le=10.0)
    bucket: RiskBucket
    drivers: List[str] = Field(default_factory=list)
    base_score: float
    base_source: Literal["advisory", "rules"]
    rule_score: float
    nudge: float = 0.0
    cushion: float = 0.0
    pnl_pct: Optional[float] = None


class AdvisoryOpinion(BaseModel):
    """Validated view of the advisory provider's JSON answer."""

    model_config = ConfigDict(frozen=True)

    score: Optional[float] = None
    headline: str = ""
    narrative: str = ""
    advice: List[str] = Field(default_factory=list)
    explainers: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    watchlist: List[str] = Field(default_factory=list)
    strategy_notes: List[str] = Field(default_factory=list)
    confidence: Optional[float] = None


@dataclass(frozen=True)
class Valid:
    opinion: AdvisoryOpinion

    @property
    def score(self) -> Optional[float]:
        return self.opinion.score


@dataclass(frozen=True)
class Invalid:
    """Advisory output that failed validation.

    ``opinion`` keeps whatever narrative survived parsing; its score is
    always ``None`` so callers fall back to the rule score.
    """

    reason: str
    opinion: Optional[AdvisoryOpinion] = None

    @property
    def score(self) -> Optional[float]:
        return None


AdvisoryResult = Union[Valid, Invalid]
