from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from tradegauge.models.events import EarningsProximity
from tradegauge.models.option import DerivedMetrics, Greeks

Tier = Tuple[float, float]
Comparator = Callable[[float, float], bool]


@dataclass(frozen=True)
class RiskInputs:
    """Signals shared by the rule scorer, the driver builder and the nudge."""

    dte: int
    iv_pct: Optional[float] = None
    distance_otm_pct: Optional[float] = None
    open_interest: Optional[int] = None
    breakeven_gap_pct: Optional[float] = None
    delta: Optional[float] = None
    theta: Optional[float] = None
    vega: Optional[float] = None
    earnings: EarningsProximity = field(default_factory=EarningsProximity)
    macro_soon: Tuple[str, ...] = ()

    @classmethod
    def from_metrics(
        cls,
        derived: DerivedMetrics,
        greeks: Greeks,
        dte: int,
        earnings: Optional[EarningsProximity] = None,
        macro_soon: Iterable[str] = (),
    ) -> "RiskInputs":
        return cls(
            dte=dte,
            iv_pct=greeks.iv_pct,
            distance_otm_pct=derived.distance_otm_pct,
            open_interest=greeks.open_interest,
            breakeven_gap_pct=derived.breakeven_gap_pct,
            delta=greeks.delta,
            theta=greeks.theta,
            vega=greeks.vega,
            earnings=earnings or EarningsProximity(),
            macro_soon=tuple(macro_soon),
        )


def first_matching_tier(
    value: Optional[float],
    *ladders: Tuple[Sequence[Tier], Comparator],
) -> float:
    """Points of the first tier whose limit ``value`` satisfies.

    Ladders are tried in order and the first hit wins, so a ladder of
    ``(limit, points)`` pairs behaves like an ``if/elif`` chain.
    """

    if value is None:
        return 0.0
    for tiers, compare in ladders:
        for limit, points in tiers:
            if compare(value, limit):
                return points
    return 0.0


def abs_le(value: float, limit: float) -> bool:
    return abs(value) <= limit


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


__all__: List[str] = [
    "RiskInputs",
    "Tier",
    "abs_le",
    "clamp",
    "first_matching_tier",
]
