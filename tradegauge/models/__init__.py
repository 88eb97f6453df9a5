from .analysis import Analysis
from .events import DangerWindow, EarningsEvent, EarningsProximity, EventContext, MacroEvent
from .option import (
    SHARES_PER_CONTRACT,
    Contract,
    DerivedMetrics,
    Greeks,
    MarketSnapshot,
    OptionKind,
    Quote,
    UserPosition,
    finite_or_none,
    parse_expiry,
    positive_or_none,
    utc_today,
)
from .plan import ExpiryScenario, Route, RoutePick, RouteSet, RoutesPlan, TradePlan
from .score import AdvisoryOpinion, AdvisoryResult, Invalid, RiskBucket, ScoreResult, Valid

__all__ = [
    "SHARES_PER_CONTRACT",
    "AdvisoryOpinion",
    "AdvisoryResult",
    "Analysis",
    "Contract",
    "DangerWindow",
    "DerivedMetrics",
    "EarningsEvent",
    "EarningsProximity",
    "EventContext",
    "ExpiryScenario",
    "Greeks",
    "Invalid",
    "MacroEvent",
    "MarketSnapshot",
    "OptionKind",
    "Quote",
    "RiskBucket",
    "Route",
    "RoutePick",
    "RouteSet",
    "RoutesPlan",
    "ScoreResult",
    "TradePlan",
    "UserPosition",
    "Valid",
    "finite_or_none",
    "parse_expiry",
    "positive_or_none",
    "utc_today",
]
