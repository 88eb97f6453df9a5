from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .events import DangerWindow, EventContext
from .option import Contract, DerivedMetrics, MarketSnapshot, UserPosition
from .plan import ExpiryScenario, RoutesPlan, TradePlan
from .score import AdvisoryOpinion, ScoreResult


class Analysis(BaseModel):
    """Everything produced by one press of "Analyze"."""

    contract: Contract
    snapshot: MarketSnapshot
    position: UserPosition
    events: EventContext
    dte: int
    derived: DerivedMetrics
    probability_itm: Optional[int] = None
    result: ScoreResult
    opinion: Optional[AdvisoryOpinion] = None
    advisory_error: Optional[str] = None
    plan: TradePlan = Field(default_factory=TradePlan)
    routes: Optional[RoutesPlan] = None
    danger_windows: List[DangerWindow] = Field(default_factory=list)
    scenarios: List[ExpiryScenario] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = Field(default_factory=dict)
