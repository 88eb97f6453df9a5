"""Validation of everything the advisory provider sends back.

The provider is a text-completion service, so its answers are untrusted:
they may be wrapped in prose, have the wrong types, or be missing entirely.
Everything is validated and clamped here, once, at the boundary.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Mapping, Optional

from pydantic import ValidationError

from tradegauge.models.plan import Route, RoutesPlan, TradePlan
from tradegauge.models.score import AdvisoryOpinion, AdvisoryResult, Invalid, Valid
from tradegauge.scoring.blender import coerce_advisory_score

logger = logging.getLogger(__name__)

HEADLINE_LIMIT = 140
NARRATIVE_LIMIT = 1200
LIST_LIMITS = {
    "advice": 6,
    "explainers": 6,
    "risks": 5,
    "watchlist": 4,
    "strategy_notes": 3,
}

_BRACE_SLICE = re.compile(r"\{.*\}", re.S)
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
_NARRATIVE_FILTERS = tuple(
    re.compile(pattern, re.I)
    for pattern in (
        r"we\s+(lack|don['’]t have)",
        r"\bunknown\b",
        r"not\s+provided",
        r"can('?|no) ?t\s+assess",
        r"hard\s+to\s+gauge",
        r"missing\s+(data|numbers|metrics)",
        r"\bdelta\b.*\bis\b",
        r"\btheta\b.*\bis\b",
        r"\bvega\b.*\bis\b",
    )
)


def load_json_object(raw: Any) -> Optional[Mapping[str, Any]]:
    """Return a mapping from a mapping or JSON text, or ``None``.

    When the text is not valid JSON the outermost ``{...}`` slice is tried,
    which recovers answers wrapped in prose or code fences.
    """

    if isinstance(raw, Mapping):
        return raw
    if not isinstance(raw, (str, bytes)):
        return None
    text = raw.decode("utf-8", "replace") if isinstance(raw, bytes) else raw
    text = text.strip()
    if not text:
        return None

    candidates = [text]
    match = _BRACE_SLICE.search(text)
    if match and match.group(0) != text:
        candidates.append(match.group(0))
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, Mapping):
            return data
    return None


def sanitize_narrative(text: Optional[str]) -> str:
    """Drop sentences that complain about missing data or just read out a Greek."""

    if not text:
        return ""
    sentences = _SENTENCE_SPLIT.split(str(text))
    kept = [s for s in sentences if not any(pattern.search(s) for pattern in _NARRATIVE_FILTERS)]
    return " ".join(kept).strip()


def _string_list(value: Any, limit: int) -> List[str]:
    if not isinstance(value, list):
        return []
    items = [str(item).strip() for item in value if isinstance(item, (str, int, float)) and str(item).strip()]
    return items[:limit]


def _confidence(value: Any) -> Optional[float]:
    score = coerce_advisory_score(value)
    if score is None:
        return None
    return min(1.0, max(0.0, float(value)))


def parse_advisory_payload(raw: Any) -> AdvisoryResult:
    """Validate the advisory answer into ``Valid`` or ``Invalid``.

    A payload whose score is not a finite number is ``Invalid`` but still
    carries the rest of the opinion so the narrative can be shown.
    """

    data = load_json_object(raw)
    if data is None:
        logger.warning("Advisory payload is not a JSON object")
        return Invalid(reason="unparsable")

    lists = {key: _string_list(data.get(key), limit) for key, limit in LIST_LIMITS.items()}
    score = coerce_advisory_score(data.get("score"))
    opinion = AdvisoryOpinion(
        score=score,
        headline=str(data.get("headline") or "")[:HEADLINE_LIMIT],
        narrative=sanitize_narrative(data.get("narrative"))[:NARRATIVE_LIMIT],
        confidence=_confidence(data.get("confidence")),
        **lists,
    )
    if score is None:
        logger.warning(f"Advisory score {data.get('score')!r} failed validation")
        return Invalid(reason="invalid-score", opinion=opinion)
    return Valid(opinion=opinion)


def parse_plan_payload(raw: Any) -> Optional[TradePlan]:
    data = load_json_object(raw)
    if data is None:
        return None
    plan = data.get("plan")
    if not isinstance(plan, str) or not plan.strip():
        return None
    return TradePlan(
        likes=_string_list(data.get("likes"), 5),
        watchouts=_string_list(data.get("watchouts"), 5),
        plan=plan.strip(),
    )


def make_fallback_plan(dte: int, iv_pct: Optional[float], spread_wide: Optional[bool]) -> TradePlan:
    """Generic plan shown when the plan provider fails or answers junk."""

    likes: List[str] = []
    watchouts: List[str] = []
    if iv_pct is not None and iv_pct < 50:
        likes.append("IV is reasonable, not nosebleed.")
    likes.append("Near the money so delta actually moves with the stock.")
    likes.append("Trend is constructive; buyers showed up on dips recently.")

    if dte <= 7:
        watchouts.append("Theta speeds up inside ~7 DTE, time matters.")
    if spread_wide is True:
        watchouts.append("Spread is wide; execution penalty is real.")
    watchouts.append("Breakeven needs a decent push; chop bleeds premium.")

    plan = (
        "Wait for a pullback to prior support plus a higher low, then take a small starter only after "
        "reclaiming yesterday's high with volume. Guardrails: skip if the spread widens past ~8%; invalid "
        "if it closes back inside yesterday's range; time stop after 2 sessions if momentum never shows."
    )
    return TradePlan(likes=likes, watchouts=watchouts, plan=plan)


def parse_routes_payload(raw: Any) -> Optional[RoutesPlan]:
    data = load_json_object(raw)
    if data is None:
        return None
    try:
        return RoutesPlan.model_validate(data)
    except ValidationError as exc:
        logger.warning(f"Routes payload failed validation: {exc.error_count()} error(s)")
        return None


_EXIT_WORDS = re.compile(r"\b(exit|close)\b", re.I)
_TRIM_WORD = re.compile(r"\btrim\b", re.I)


def _conditional_trim(route: Route) -> Route:
    if not _TRIM_WORD.search(route.action):
        return route
    line = route.action.rstrip(".")
    return route.model_copy(
        update={
            "action": (
                f"If you have more than one contract, {line}. If this is your only contract, "
                "either exit now or keep it as a tiny lotto."
            ),
            "guardrail": route.guardrail or "Keep any lotto tiny and be okay with a full loss.",
        }
    )


def normalize_routes(routes: RoutesPlan, dte: int, bid: Optional[float]) -> RoutesPlan:
    """Keep each route true to its label.

    The aggressive route only says "exit" when expiry is a day away or the
    bid is gone, and every "trim" is phrased for one-contract holders too.
    """

    aggressive = routes.routes.aggressive
    if _EXIT_WORDS.search(aggressive.action):
        imminent = dte <= 1
        dead_bid = (bid or 0) <= 0
        if not imminent and not dead_bid:
            aggressive = aggressive.model_copy(
                update={
                    "action": "Let it ride small",
                    "rationale": aggressive.rationale or "Risk-seeking route: give it a chance, but accept lotto odds.",
                    "guardrail": aggressive.guardrail or "Treat as lotto; keep size tiny.",
                }
            )

    fixed = routes.routes.model_copy(
        update={
            "aggressive": _conditional_trim(aggressive),
            "middle": _conditional_trim(routes.routes.middle),
            "conservative": _conditional_trim(routes.routes.conservative),
        }
    )
    return routes.model_copy(update={"routes": fixed})


def make_fallback_routes(score: float, dte: int, pnl_pct: Optional[float]) -> RoutesPlan:
    """Rule-of-thumb routes used when the routes provider is unavailable."""

    if score > 8 or dte <= 1:
        pick = "conservative"
        reason = "Risk is very high for the time left; protect what is left of the premium."
    elif pnl_pct is not None and pnl_pct >= 50:
        pick = "middle"
        reason = "You are well up; pay yourself and let the rest work."
    elif score <= 3:
        pick = "aggressive"
        reason = "Risk is low; there is room to let it work."
    else:
        pick = "middle"
        reason = "Balanced risk; manage with a clear stop."

    return RoutesPlan.model_validate(
        {
            "routes": {
                "aggressive": {
                    "label": "Let it ride",
                    "action": "Hold the full position into the move",
                    "rationale": "Maximum upside if the thesis plays out.",
                    "guardrail": "Treat as lotto; keep size tiny.",
                },
                "middle": {
                    "label": "Trim and trail",
                    "action": "Take partial profits and trail a stop above breakeven",
                    "rationale": "Locks in some gain while keeping exposure.",
                    "guardrail": "Exit the rest if it closes below breakeven.",
                },
                "conservative": {
                    "label": "Exit",
                    "action": "Close the position at the mark",
                    "rationale": "Removes decay and event risk entirely.",
                    "guardrail": None,
                },
            },
            "pick": {"route": pick, "reason": reason},
        }
    )


__all__ = [
    "load_json_object",
    "make_fallback_plan",
    "make_fallback_routes",
    "normalize_routes",
    "parse_advisory_payload",
    "parse_plan_payload",
    "parse_routes_payload",
    "sanitize_narrative",
]
