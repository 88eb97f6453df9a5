"""Earnings and macro event proximity.

Each known event type carries a fixed ``[pre, post]`` day window around its
date. Windows inside the look-ahead horizon are merged into the minimal set
of disjoint "danger windows" shown on the timeline.
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from tradegauge.models.events import (
    DangerWindow,
    EarningsEvent,
    EarningsProximity,
    EventContext,
    MacroEvent,
)
from tradegauge.models.option import utc_today

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 14
SOON_DAYS = 7
UPCOMING_DAYS = 30


class EventWindowRule(BaseModel):
    """Day offsets around an event whose title contains one of ``keywords``."""

    keywords: List[str]
    pre: int = Field(le=0)
    post: int = Field(ge=0)

    def matches(self, title: str) -> bool:
        lowered = title.lower()
        return any(keyword.lower() in lowered for keyword in self.keywords)


DEFAULT_EVENT_WINDOWS: Tuple[EventWindowRule, ...] = (
    EventWindowRule(keywords=["cpi"], pre=-1, post=1),
    EventWindowRule(keywords=["ppi"], pre=-1, post=1),
    EventWindowRule(keywords=["retail"], pre=-1, post=0),
    EventWindowRule(keywords=["fomc"], pre=-2, post=2),
    EventWindowRule(keywords=["powell"], pre=0, post=0),
    EventWindowRule(keywords=["jobs", "payroll"], pre=0, post=0),
    EventWindowRule(keywords=["earnings"], pre=-2, post=1),
)

_FED_PATTERN = re.compile(r"fomc|federal\s+funds\s+rate|press\s+conference|economic\s+projections", re.I)
_PROJECTION_PATTERN = re.compile(r"projection", re.I)
FOMC_DAY_TIME = "14:00"


def days_from_today(when: date, today: Optional[date] = None) -> int:
    """Signed whole days between today (UTC) and ``when``."""

    return (when - (today or utc_today())).days


def event_window_offsets(
    title: str,
    rules: Sequence[EventWindowRule] = DEFAULT_EVENT_WINDOWS,
) -> Tuple[int, int]:
    for rule in rules:
        if rule.matches(title):
            return rule.pre, rule.post
    return 0, 0


def merge_windows(windows: Iterable[DangerWindow]) -> List[DangerWindow]:
    """Merge overlapping or adjacent (gap of at most one day) windows."""

    merged: List[DangerWindow] = []
    for window in sorted(windows, key=lambda w: w.start):
        last = merged[-1] if merged else None
        if last is None or window.start > last.end + 1:
            merged.append(DangerWindow(start=window.start, end=window.end))
        else:
            last.end = max(last.end, window.end)
    return merged


def build_danger_windows(
    events: Iterable[MacroEvent],
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    today: Optional[date] = None,
    rules: Sequence[EventWindowRule] = DEFAULT_EVENT_WINDOWS,
) -> List[DangerWindow]:
    clipped: List[DangerWindow] = []
    for event in events:
        offset = days_from_today(event.date, today)
        pre, post = event_window_offsets(event.title, rules)
        start = max(0, offset + pre)
        end = min(horizon_days, offset + post)
        if start <= end:
            clipped.append(DangerWindow(start=start, end=end))
    return merge_windows(clipped)


def context_events(context: EventContext) -> List[MacroEvent]:
    """Macro events (Fed releases folded per day) plus the earnings date."""

    events = collapse_fomc_same_day(context.macro_events)
    if context.earnings is not None:
        events.append(MacroEvent(title="Earnings", date=context.earnings.date))
    return events


def earnings_proximity(
    earnings: Optional[EarningsEvent],
    today: Optional[date] = None,
    soon_days: int = SOON_DAYS,
) -> EarningsProximity:
    if earnings is None:
        return EarningsProximity()
    days_away = days_from_today(earnings.date, today)
    if days_away < 0:
        label = "none"
    elif days_away == 0:
        label = "today"
    elif days_away <= soon_days:
        label = "soon"
    elif days_away <= UPCOMING_DAYS:
        label = "upcoming"
    else:
        label = "none"
    return EarningsProximity(days_away=days_away, label=label, session=earnings.session)


def macro_events_soon(
    events: Iterable[MacroEvent],
    today: Optional[date] = None,
    within_days: int = SOON_DAYS,
) -> List[str]:
    """Descriptions of macro events between today and ``within_days`` ahead."""

    soon = []
    for event in events:
        if 0 <= days_from_today(event.date, today) <= within_days:
            soon.append(event.describe())
    return soon


def collapse_fomc_same_day(events: Sequence[MacroEvent]) -> List[MacroEvent]:
    """Fold the separate Fed releases of a decision day into one row."""

    by_date: Dict[date, List[MacroEvent]] = {}
    for event in events:
        by_date.setdefault(event.date, []).append(event)

    collapsed: List[MacroEvent] = []
    for day, items in by_date.items():
        fed = [item for item in items if _FED_PATTERN.search(item.title)]
        others = [item for item in items if not _FED_PATTERN.search(item.title)]
        if len(fed) >= 2:
            if any(_PROJECTION_PATTERN.search(item.title) for item in fed):
                title = "FOMC Day (Statement, Rate, Projections, Presser)"
            else:
                title = "FOMC Day (Statement, Rate, Presser)"
            logger.debug(f"Collapsed {len(fed)} Fed releases on {day.isoformat()}")
            collapsed.append(MacroEvent(title=title, date=day, time=FOMC_DAY_TIME))
        else:
            collapsed.extend(fed)
        collapsed.extend(others)

    return sorted(collapsed, key=lambda event: event.sort_key)


__all__ = [
    "DEFAULT_EVENT_WINDOWS",
    "DEFAULT_HORIZON_DAYS",
    "EventWindowRule",
    "build_danger_windows",
    "collapse_fomc_same_day",
    "context_events",
    "days_from_today",
    "earnings_proximity",
    "event_window_offsets",
    "macro_events_soon",
    "merge_windows",
]
