from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional

from tradegauge.models.option import parse_expiry, utc_today

logger = logging.getLogger(__name__)


def normalize_expiry(value: object) -> Optional[date]:
    """Parse a vendor expiry value, returning ``None`` for junk."""

    if value is None or value == "":
        return None
    try:
        return parse_expiry(value)
    except (TypeError, ValueError, OverflowError, OSError):
        logger.debug(f"Ignoring unparsable expiry {value!r}")
        return None


def normalize_expiries(values: Iterable[object]) -> List[date]:
    return sorted({parsed for parsed in map(normalize_expiry, values) if parsed is not None})


def nearest_expiry(values: Iterable[object], today: Optional[date] = None) -> Optional[date]:
    """First expiry on or after today, else the latest known one."""

    expiries = normalize_expiries(values)
    if not expiries:
        return None
    reference = today or utc_today()
    upcoming = [expiry for expiry in expiries if expiry >= reference]
    return upcoming[0] if upcoming else expiries[-1]


__all__ = ["nearest_expiry", "normalize_expiries", "normalize_expiry"]
