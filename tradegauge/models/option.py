from __future__ import annotations

import math
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SHARES_PER_CONTRACT = 100


def finite_or_none(value: Any) -> Optional[float]:
    """Return ``value`` as a float, or ``None`` when it is missing or not finite."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def positive_or_none(value: Any) -> Optional[float]:
    number = finite_or_none(value)
    return number if number is not None and number > 0 else None


def parse_expiry(value: Any) -> date:
    """Parse the expiry formats returned by the market data vendors."""

    if isinstance(value, datetime):
        return value.astimezone(timezone.utc).date() if value.tzinfo else value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Epoch timestamps arrive both in seconds and milliseconds.
        seconds = value / 1000 if value > 1e12 else value
        return datetime.fromtimestamp(seconds, tz=timezone.utc).date()
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 8 and text.isdigit():
            return datetime.strptime(text, "%Y%m%d").date()
        if len(text) >= 10 and text[4] == "-" and text[7] == "-":
            return datetime.strptime(text[:10], "%Y-%m-%d").date()
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise ValueError(f"Unsupported expiry format: {value!r}")


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class OptionKind(str, Enum):
    CALL = "CALL"
    PUT = "PUT"

    @classmethod
    def _missing_(cls, value: object) -> Optional["OptionKind"]:
        if isinstance(value, str):
            normalized = value.strip().upper()
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def is_call(self) -> bool:
        return self is OptionKind.CALL


class Contract(BaseModel):
    """The option contract being analysed. Immutable for one analysis."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ticker: str
    kind: OptionKind = Field(alias="type")
    strike: float = Field(gt=0)
    expiry: date

    @field_validator("ticker", mode="before")
    @classmethod
    def normalize_ticker(cls, value: Any) -> str:
        text = str(value or "").strip().upper()
        if not text:
            raise ValueError("ticker must not be empty")
        return text

    @field_validator("expiry", mode="before")
    @classmethod
    def parse_expiration(cls, value: Any) -> date:
        return parse_expiry(value)

    def days_to_expiry(self, today: Optional[date] = None) -> int:
        """Whole days from ``today`` (UTC) to expiry, never negative."""

        reference = today or utc_today()
        return max(0, (self.expiry - reference).days)


class Quote(BaseModel):
    """Latest option quote. Absent prices stay ``None``."""

    model_config = ConfigDict(frozen=True)

    bid: Optional[float] = None
    ask: Optional[float] = None
    last: Optional[float] = None
    mark: Optional[float] = None

    @field_validator("bid", "ask", "last", "mark", mode="before")
    @classmethod
    def coerce_price(cls, value: Any) -> Optional[float]:
        return positive_or_none(value)

    @property
    def effective_mark(self) -> Optional[float]:
        if self.bid is not None and self.ask is not None:
            return (self.bid + self.ask) / 2
        if self.last is not None:
            return self.last
        return self.mark

    def spread_wide(self, threshold: float = 0.15) -> Optional[bool]:
        if self.bid is None or self.ask is None:
            return None
        return (self.ask - self.bid) / self.ask > threshold


class Greeks(BaseModel):
    """Greeks, implied volatility and open interest for one contract."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    delta: Optional[float] = None
    gamma: Optional[float] = None
    theta: Optional[float] = None
    vega: Optional[float] = None
    implied_volatility: Optional[float] = Field(default=None, alias="iv")
    open_interest: Optional[int] = Field(default=None, alias="openInterest")

    @field_validator("delta", mode="before")
    @classmethod
    def coerce_delta(cls, value: Any) -> Optional[float]:
        number = finite_or_none(value)
        if number is None or not -1.0 <= number <= 1.0:
            return None
        return number

    @field_validator("gamma", "theta", "vega", mode="before")
    @classmethod
    def coerce_float(cls, value: Any) -> Optional[float]:
        return finite_or_none(value)

    @field_validator("implied_volatility", mode="before")
    @classmethod
    def coerce_iv(cls, value: Any) -> Optional[float]:
        number = finite_or_none(value)
        return number if number is not None and number >= 0 else None

    @field_validator("open_interest", mode="before")
    @classmethod
    def coerce_open_interest(cls, value: Any) -> Optional[int]:
        number = finite_or_none(value)
        return int(number) if number is not None and number >= 0 else None

    @property
    def iv_pct(self) -> Optional[float]:
        if self.implied_volatility is None:
            return None
        return float(round(self.implied_volatility * 100))


class MarketSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    spot: Optional[float] = None
    quote: Quote = Field(default_factory=Quote)
    greeks: Greeks = Field(default_factory=Greeks)

    @field_validator("spot", mode="before")
    @classmethod
    def coerce_spot(cls, value: Any) -> Optional[float]:
        return positive_or_none(value)


class UserPosition(BaseModel):
    """What the user typed in the price-paid box and what it normalized to."""

    model_config = ConfigDict(frozen=True)

    raw_price_paid: str = ""
    price_paid: Optional[float] = None

    @field_validator("price_paid", mode="before")
    @classmethod
    def coerce_paid(cls, value: Any) -> Optional[float]:
        return positive_or_none(value)

    @property
    def owns_position(self) -> bool:
        return bool(self.raw_price_paid.strip())


class DerivedMetrics(BaseModel):
    """Quantities derived from spot, strike and premium.

    Every field is ``None`` when one of its inputs is unknown; zero is a real
    distance or gap and is never used as a placeholder.
    """

    model_config = ConfigDict(frozen=True)

    dte: Optional[int] = None
    moneyness: Optional[float] = None
    distance_otm_pct: Optional[float] = None
    theta_per_contract: Optional[float] = None
    vega_per_contract: Optional[float] = None
    breakeven: Optional[float] = None
    breakeven_gap_pct: Optional[float] = None
    intrinsic: Optional[float] = None
    extrinsic: Optional[float] = None
    extrinsic_pct: Optional[float] = None
