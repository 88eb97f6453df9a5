"""Pure, side-effect free analysis helpers."""

from .derived import build_derived_metrics
from .events import (
    build_danger_windows,
    collapse_fomc_same_day,
    earnings_proximity,
    macro_events_soon,
    merge_windows,
)
from .expiry import nearest_expiry, normalize_expiry
from .pricing import normalize_price_paid, pnl_pct
from .scenarios import build_expiry_scenarios
from .strikes import select_strike_window
from .symbols import rank_symbols

__all__ = [
    "build_danger_windows",
    "build_derived_metrics",
    "build_expiry_scenarios",
    "collapse_fomc_same_day",
    "earnings_proximity",
    "macro_events_soon",
    "merge_windows",
    "nearest_expiry",
    "normalize_expiry",
    "normalize_price_paid",
    "pnl_pct",
    "rank_symbols",
    "select_strike_window",
]
