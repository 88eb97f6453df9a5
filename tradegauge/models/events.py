from __future__ import annotations

import datetime as dt
import re
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .option import parse_expiry

_TIME_PATTERN = re.compile(r"\b(\d{2}:\d{2})\b")


class EarningsEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: dt.date
    session: Optional[str] = None
    confirmed: bool = False

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> dt.date:
        return parse_expiry(value)

    @field_validator("session", mode="before")
    @classmethod
    def normalize_session(cls, value: Any) -> Optional[str]:
        text = str(value or "").strip().lower()
        return text or None


class MacroEvent(BaseModel):
    """A scheduled macro release such as CPI or an FOMC decision."""

    model_config = ConfigDict(frozen=True)

    title: str
    date: dt.date
    time: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: Any) -> dt.date:
        return parse_expiry(value)

    @field_validator("time", mode="before")
    @classmethod
    def extract_time(cls, value: Any) -> Optional[str]:
        match = _TIME_PATTERN.search(str(value or ""))
        return match.group(1) if match else None

    @property
    def sort_key(self) -> str:
        return f"{self.date.isoformat()}{self.time or ''}"

    def describe(self) -> str:
        suffix = f" {self.time}" if self.time else ""
        return f"{self.title} on {self.date.isoformat()}{suffix}"


class EventContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    earnings: Optional[EarningsEvent] = None
    macro_events: List[MacroEvent] = Field(default_factory=list)


class DangerWindow(BaseModel):
    """Inclusive range of day offsets from today with elevated event risk."""

    start: int
    end: int


class EarningsProximity(BaseModel):
    model_config = ConfigDict(frozen=True)

    days_away: Optional[int] = None
    label: Literal["today", "soon", "upcoming", "none"] = "none"
    session: Optional[str] = None

    @property
    def same_day(self) -> bool:
        return self.label == "today"

    @property
    def within_week(self) -> bool:
        return self.label in {"today", "soon"}

    @property
    def text(self) -> str:
        session = f" ({self.session})" if self.session else ""
        if self.label == "today":
            return f"today{session}"
        if self.label == "soon":
            return f"in {self.days_away} day(s){session}"
        if self.label == "upcoming":
            return f"in ~{self.days_away} day(s)"
        return "none"
