"""Interfaces of the external collaborators the engine consumes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Mapping, Optional, Sequence

import pandas as pd
from pydantic import BaseModel, Field

from tradegauge.analysis.strikes import sanitize_strikes
from tradegauge.models.events import EarningsEvent, EventContext, MacroEvent
from tradegauge.models.option import Contract, DerivedMetrics, MarketSnapshot, OptionKind, UserPosition


class AdapterError(Exception):
    """Base exception raised for collaborator failures."""


class RateLimitError(AdapterError):
    """Raised when a provider reports rate limiting."""


class DataNotAvailable(AdapterError):
    """Raised when requested data is not available from a provider."""


@dataclass
class OptionsChain:
    """One expiry of an options chain as returned by chain-style vendors."""

    symbol: str
    expiration: date
    calls: pd.DataFrame
    puts: pd.DataFrame
    underlying_price: Optional[float] = None

    def strike_universe(self, kind: OptionKind) -> List[float]:
        frame = self.calls if OptionKind(kind).is_call else self.puts
        if frame is None or frame.empty or "strike" not in frame.columns:
            return []
        return [float(strike) for strike in sanitize_strikes(frame["strike"].tolist())]


class AdvisoryRequest(BaseModel):
    """Everything the advisory provider is shown about the contract."""

    contract: Contract
    snapshot: MarketSnapshot
    position: UserPosition
    derived: DerivedMetrics
    events: EventContext
    dte: int
    drivers: List[str] = Field(default_factory=list)
    hints: List[str] = Field(default_factory=list)
    score: Optional[float] = None


class MarketDataProvider(ABC):
    """Quotes, Greeks and strikes. Any field may come back absent."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable provider name."""

    @abstractmethod
    async def get_snapshot(self, contract: Contract) -> MarketSnapshot:
        """Return the current market snapshot for ``contract``."""

    @abstractmethod
    async def get_strikes(self, ticker: str, expiry: date, kind: OptionKind) -> Sequence[float]:
        """Return every listed strike for one expiry."""

    async def get_spot(self, ticker: str) -> Optional[float]:
        raise NotImplementedError

    async def get_expirations(self, ticker: str) -> Sequence[date]:
        raise NotImplementedError

    async def search_symbols(self, query: str) -> Sequence[Mapping[str, Optional[str]]]:
        """Return raw ticker hits (``symbol`` and ``name``) for ``query``, unranked."""

        raise NotImplementedError


class AdvisoryProvider(ABC):
    """Opaque scorer and narrator. Every answer is untrusted raw output."""

    @abstractmethod
    async def advise(self, request: AdvisoryRequest) -> Any:
        """Return the raw advisory answer (JSON text or a mapping)."""

    async def plan(self, request: AdvisoryRequest) -> Any:
        raise NotImplementedError

    async def routes(self, request: AdvisoryRequest) -> Any:
        raise NotImplementedError


class EventCalendarProvider(ABC):
    @abstractmethod
    async def get_earnings(self, ticker: str) -> Optional[EarningsEvent]:
        """Return the next earnings event for ``ticker`` if one is scheduled."""

    @abstractmethod
    async def get_macro_events(self) -> Sequence[MacroEvent]:
        """Return upcoming macro releases ordered by date."""


__all__ = [
    "AdapterError",
    "AdvisoryProvider",
    "AdvisoryRequest",
    "DataNotAvailable",
    "EventCalendarProvider",
    "MarketDataProvider",
    "OptionsChain",
    "RateLimitError",
]
