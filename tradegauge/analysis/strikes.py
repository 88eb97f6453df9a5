"""Choose which strikes of an expiry to show in the strike picker."""

from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from tradegauge.models.option import positive_or_none

DEFAULT_EACH_SIDE = 30
DEFAULT_PCT_WINDOW = 0.25
DEFAULT_MIN_COUNT = 30
PCT_WINDOW_GROWTH = 1.25
MAX_PCT_WINDOW = 1.0


def sanitize_strikes(values: Iterable[object]) -> np.ndarray:
    """Finite positive strikes, sorted ascending and de-duplicated."""

    series = pd.to_numeric(pd.Series(list(values), dtype=object), errors="coerce")
    strikes = series.to_numpy(dtype=float)
    strikes = strikes[np.isfinite(strikes) & (strikes > 0)]
    return np.unique(strikes)


def closest_index(strikes: np.ndarray, target: float) -> int:
    return int(np.argmin(np.abs(strikes - target)))


def _with_current(view: np.ndarray, current: Optional[float]) -> List[float]:
    if current is not None:
        view = np.union1d(view, [current])
    return [float(strike) for strike in view]


def _count_window(
    strikes: np.ndarray,
    spot: Optional[float],
    current: Optional[float],
    each_side: int,
) -> np.ndarray:
    if spot is not None:
        center = closest_index(strikes, spot)
    elif current is not None:
        center = closest_index(strikes, current)
    else:
        center = len(strikes) // 2

    last = len(strikes) - 1
    lo = center - each_side
    hi = center + each_side
    if lo < 0:
        hi = min(last, hi - lo)
        lo = 0
    if hi > last:
        lo = max(0, lo - (hi - last))
        hi = last
    return strikes[lo : hi + 1]


def _percent_window(
    strikes: np.ndarray,
    spot: Optional[float],
    pct_window: float,
    min_count: int,
) -> np.ndarray:
    min_count = max(1, int(min_count))
    if spot is None:
        return strikes[:min_count]

    width = max(0.01, pct_window)
    view = strikes[(strikes >= spot * (1 - width)) & (strikes <= spot * (1 + width))]
    while len(view) < min_count and width < MAX_PCT_WINDOW:
        width *= PCT_WINDOW_GROWTH
        view = strikes[(strikes >= spot * (1 - width)) & (strikes <= spot * (1 + width))]
    return view


def select_strike_window(
    universe: Iterable[object],
    spot: Optional[float] = None,
    current: Optional[float] = None,
    *,
    each_side: Optional[int] = DEFAULT_EACH_SIDE,
    pct_window: float = DEFAULT_PCT_WINDOW,
    min_count: int = DEFAULT_MIN_COUNT,
) -> List[float]:
    """Return a spot-centred, sorted subset of ``universe``.

    With ``each_side`` set, up to ``each_side`` strikes are taken on each side
    of the strike nearest spot (or the current selection, or the middle of the
    chain), shifting the window inward at either end of the chain so that
    ``2 * each_side + 1`` strikes are returned whenever the chain has them.
    ``each_side=None`` selects the older percentage band around spot instead.
    The currently selected strike is always part of the result.
    """

    strikes = sanitize_strikes(universe)
    if strikes.size == 0:
        return []

    spot_value = positive_or_none(spot)
    current_value = positive_or_none(current)

    if each_side is not None:
        view = _count_window(strikes, spot_value, current_value, max(0, int(each_side)))
    else:
        view = _percent_window(strikes, spot_value, pct_window, min_count)
    return _with_current(view, current_value)


__all__ = [
    "DEFAULT_EACH_SIDE",
    "closest_index",
    "sanitize_strikes",
    "select_strike_window",
]
