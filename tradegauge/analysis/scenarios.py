from __future__ import annotations

from typing import List, Optional, Union

import numpy as np

from tradegauge.models.option import SHARES_PER_CONTRACT, OptionKind, positive_or_none
from tradegauge.models.plan import ExpiryScenario


def build_expiry_scenarios(
    spot: float,
    strike: float,
    kind: Union[OptionKind, str],
    price_paid: Optional[float] = None,
    step_pct: float = 2.0,
    range_pct: float = 20.0,
) -> List[ExpiryScenario]:
    """Value of one contract at expiry for a ladder of underlying moves.

    Only intrinsic value is counted. P&L and ROI are filled in when the
    premium paid is known.
    """

    is_call = OptionKind(kind).is_call
    paid = positive_or_none(price_paid)
    cost = paid * SHARES_PER_CONTRACT if paid is not None else None

    rows: List[ExpiryScenario] = []
    for pct in np.arange(-range_pct, range_pct + step_pct / 2, step_pct):
        pct = round(float(pct), 6)
        underlying = round(spot * (1 + pct / 100), 2)
        intrinsic = max(0.0, underlying - strike) if is_call else max(0.0, strike - underlying)
        value = round(intrinsic * SHARES_PER_CONTRACT, 2)
        pl = roi = None
        if cost is not None:
            pl = round(value - cost, 2)
            roi = float(round((value - cost) / cost * 100))
        rows.append(ExpiryScenario(pct=pct, underlying=underlying, value=value, pl=pl, roi=roi))
    return rows


__all__ = ["build_expiry_scenarios"]
