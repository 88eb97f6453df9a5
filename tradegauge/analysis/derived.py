from __future__ import annotations

from typing import Optional, Union

from tradegauge.models.option import (
    SHARES_PER_CONTRACT,
    DerivedMetrics,
    Greeks,
    OptionKind,
    finite_or_none,
)


def _per_contract(value: Optional[float]) -> Optional[float]:
    return value * SHARES_PER_CONTRACT if value is not None else None


def build_derived_metrics(
    spot: Optional[float],
    strike: Optional[float],
    kind: Union[OptionKind, str],
    price_paid: Optional[float],
    greeks: Optional[Greeks] = None,
    dte: Optional[int] = None,
) -> DerivedMetrics:
    """Compute moneyness, breakeven and value split for one contract.

    Distances and gaps are percentages of spot. A positive distance means the
    strike is out of the money. Theta and vega are scaled to one contract and
    keep their sign.
    """

    is_call = OptionKind(kind).is_call
    s = finite_or_none(spot)
    k = finite_or_none(strike)
    paid = finite_or_none(price_paid)
    greeks = greeks or Greeks()

    if s is not None and s <= 0:
        s = None
    if k is not None and k <= 0:
        k = None
    if paid is not None and paid <= 0:
        paid = None

    moneyness = distance = intrinsic = None
    if s is not None and k is not None:
        moneyness = s / k if is_call else k / s
        distance = ((k - s) if is_call else (s - k)) / s * 100
        intrinsic = max(0.0, s - k) if is_call else max(0.0, k - s)

    breakeven = None
    if k is not None and paid is not None:
        breakeven = k + paid if is_call else k - paid

    breakeven_gap = None
    if breakeven is not None and s is not None:
        breakeven_gap = (breakeven - s) / s * 100

    extrinsic = extrinsic_pct = None
    if paid is not None and intrinsic is not None:
        extrinsic = max(0.0, paid - intrinsic)
        extrinsic_pct = extrinsic / paid * 100

    return DerivedMetrics(
        dte=dte,
        moneyness=moneyness,
        distance_otm_pct=distance,
        theta_per_contract=_per_contract(greeks.theta),
        vega_per_contract=_per_contract(greeks.vega),
        breakeven=breakeven,
        breakeven_gap_pct=breakeven_gap,
        intrinsic=intrinsic,
        extrinsic=extrinsic,
        extrinsic_pct=extrinsic_pct,
    )


__all__ = ["build_derived_metrics"]
