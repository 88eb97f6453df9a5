from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .base import RiskInputs
from .config import DriverConfig

# "Delta is 0.45" style lines explain nothing.
_GREEK_RESTATEMENT = re.compile(r"^(delta|theta|vega|gamma)\b.*\bis\b", re.I)


def is_greek_restatement(text: str) -> bool:
    return bool(_GREEK_RESTATEMENT.match(text.strip()))


def build_score_drivers(inputs: RiskInputs, config: Optional[DriverConfig] = None) -> List[str]:
    """Plain-language reasons behind the score, most decision-relevant first."""

    cfg = config or DriverConfig()
    drivers: List[str] = []

    if inputs.earnings.label != "none":
        drivers.append(f"Earnings {inputs.earnings.text}: event risk and IV swing")
    if inputs.macro_soon:
        drivers.append(f"{inputs.macro_soon[0]}: macro volatility risk")
    if inputs.dte <= cfg.short_dte_days:
        drivers.append(f"Short DTE ({inputs.dte}): faster theta decay")

    if inputs.iv_pct is not None:
        if inputs.iv_pct >= cfg.iv_high_pct:
            drivers.append(f"Elevated IV ({inputs.iv_pct:.0f}%): IV crush risk")
        elif inputs.iv_pct <= cfg.iv_low_pct:
            drivers.append(f"Low IV ({inputs.iv_pct:.0f}%): cheaper premium, the move matters")

    if inputs.distance_otm_pct is not None:
        distance = abs(inputs.distance_otm_pct)
        if distance >= cfg.deep_otm_pct:
            drivers.append(f"Deep OTM (~{distance:.0f}%): low hit probability")
        elif distance <= cfg.near_atm_pct:
            drivers.append(f"Near ATM (~{distance:.1f}%): higher gamma")

    if inputs.delta is not None:
        magnitude = abs(inputs.delta)
        if magnitude >= cfg.delta_high:
            drivers.append(f"High delta ({inputs.delta:.2f}): stock-like, assignment risk if ITM near expiry")
        elif magnitude <= cfg.delta_low:
            drivers.append(f"Low delta ({inputs.delta:.2f}): needs an outsized move")

    if inputs.theta is not None and abs(inputs.theta) >= cfg.theta_large:
        drivers.append(f"Large theta (~${round(abs(inputs.theta) * 100)}/day per contract)")
    if inputs.vega is not None and abs(inputs.vega) >= cfg.vega_high:
        drivers.append(f"High vega ({inputs.vega:.2f}): sensitive to IV")
    if inputs.open_interest is not None and inputs.open_interest < cfg.thin_open_interest:
        drivers.append(f"Thin liquidity (OI {inputs.open_interest}): wider spreads")

    if inputs.breakeven_gap_pct is not None:
        gap = inputs.breakeven_gap_pct
        if gap > cfg.breakeven_far_pct:
            drivers.append(f"Breakeven far (+{gap:.1f}%)")
        elif gap < cfg.breakeven_inside_pct:
            drivers.append(f"Breakeven inside (-{abs(gap):.1f}%)")

    return drivers[: cfg.max_drivers]


def combine_drivers(
    local: Iterable[str],
    external: Iterable[object] = (),
    max_drivers: int = 6,
) -> List[str]:
    """Local drivers first, then advisory ones that add interpretation."""

    combined: List[str] = []
    seen = set()
    candidates = [(text, False) for text in local] + [(text, True) for text in external]
    for raw, from_advisory in candidates:
        if not isinstance(raw, str):
            continue
        text = raw.strip()
        if not text or (from_advisory and is_greek_restatement(text)):
            continue
        key = text.lower()
        if key in seen:
            continue
        seen.add(key)
        combined.append(text)
        if len(combined) >= max_drivers:
            break
    return combined


__all__ = ["build_score_drivers", "combine_drivers", "is_greek_restatement"]
