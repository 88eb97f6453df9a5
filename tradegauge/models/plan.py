from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

RouteName = Literal["aggressive", "middle", "conservative"]


class TradePlan(BaseModel):
    likes: List[str] = Field(default_factory=list)
    watchouts: List[str] = Field(default_factory=list)
    plan: str = ""


class Route(BaseModel):
    label: str = ""
    action: str
    rationale: str = ""
    guardrail: Optional[str] = None


class RouteSet(BaseModel):
    aggressive: Route
    middle: Route
    conservative: Route


class RoutePick(BaseModel):
    route: RouteName
    reason: str = ""


class RoutesPlan(BaseModel):
    """Three ways to handle the position plus the one we would pick."""

    routes: RouteSet
    pick: RoutePick


class ExpiryScenario(BaseModel):
    pct: float
    underlying: float
    value: float
    pl: Optional[float] = None
    roi: Optional[float] = None
