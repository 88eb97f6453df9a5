"""Normalization of the free-form "price paid" box.

Users type premiums both as dollars (``28``, ``$28.00``) and as cents
(``2800``, ``50c``). A typed integer is read as cents when it is implausibly
large compared with the live mark: more than ``cents_threshold`` times the
mark. The threshold leaves room for genuine moves so the interpretation does
not flip back and forth while the mark ticks.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

from tradegauge.models.option import finite_or_none

DEFAULT_CENTS_THRESHOLD = 3.0
CENTS_WITHOUT_REFERENCE = 100

_LEADING_DOT = re.compile(r"^\.\d+$")
_STRIP_CHARS = re.compile(r"[$,\s]")
_CENTS_SUFFIX = re.compile(r"[c¢]$")


def _to_number(text: str) -> Optional[float]:
    try:
        value = float(text)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def normalize_price_paid(
    raw: Any,
    reference: Optional[float] = None,
    *,
    cents_threshold: float = DEFAULT_CENTS_THRESHOLD,
) -> Optional[float]:
    """Return the per-share premium typed by the user, or ``None``.

    >>> normalize_price_paid("2800", reference=28)
    28.0
    >>> normalize_price_paid("50c")
    0.5
    """

    text = "" if raw is None else str(raw).strip()
    if not text:
        return None

    if _LEADING_DOT.match(text):
        value = _to_number(text)
        return round(value, 2) if value is not None and value > 0 else None

    cleaned = _STRIP_CHARS.sub("", text).lower()
    cents = bool(_CENTS_SUFFIX.search(cleaned))
    if cents:
        cleaned = cleaned[:-1]
    if cleaned in {"", ".", "-"}:
        return None

    value = _to_number(cleaned)
    if value is None or value <= 0:
        return None
    if "." in cleaned:
        return round(value, 2)

    ref = finite_or_none(reference)
    if cents:
        value /= 100
    elif ref is not None and ref > 0:
        if value > ref * cents_threshold:
            value /= 100
    elif value >= CENTS_WITHOUT_REFERENCE:
        value /= 100
    return round(value, 2)


def pnl_pct(price_paid: Optional[float], mark: Optional[float]) -> Optional[float]:
    """Unrealized P&L in percent of the premium paid."""

    paid = finite_or_none(price_paid)
    current = finite_or_none(mark)
    if paid is None or current is None or paid <= 0:
        return None
    return (current - paid) / paid * 100


__all__ = ["DEFAULT_CENTS_THRESHOLD", "normalize_price_paid", "pnl_pct"]
