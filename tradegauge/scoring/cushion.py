from __future__ import annotations

import logging
import operator
from typing import Optional

from .base import first_matching_tier
from .config import CushionConfig

logger = logging.getLogger(__name__)


def compute_cushion(
    pnl_pct: Optional[float],
    dte: Optional[int],
    config: Optional[CushionConfig] = None,
) -> float:
    """Score adjustment from unrealized P&L.

    Deep losses raise the risk score and solid gains lower it. A losing
    position close to expiry gets an extra bump; so does a winning one very
    close to expiry, by a smaller amount. Unknown DTE counts as far away.
    """

    if pnl_pct is None:
        return 0.0
    cfg = config or CushionConfig()

    cushion = first_matching_tier(pnl_pct, (cfg.loss, operator.le), (cfg.gain, operator.ge))
    if dte is not None:
        if dte <= cfg.losing_short_dte_days and pnl_pct < 0:
            cushion += cfg.losing_short_dte_points
        if dte <= cfg.winning_short_dte_days and pnl_pct > 0:
            cushion += cfg.winning_short_dte_points

    logger.debug(f"Cushion {cushion:+.2f} from pnl {pnl_pct:.1f}% with dte {dte}")
    return cushion


__all__ = ["compute_cushion"]
