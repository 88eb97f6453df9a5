"""In-memory providers backed by data supplied up front."""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from tradegauge.models.events import EarningsEvent, MacroEvent
from tradegauge.models.option import Contract, MarketSnapshot, OptionKind

from .base import DataNotAvailable, EventCalendarProvider, MarketDataProvider, OptionsChain

StrikeKey = Tuple[str, date, OptionKind]


class StaticMarketDataProvider(MarketDataProvider):
    def __init__(
        self,
        snapshots: Optional[Dict[str, MarketSnapshot]] = None,
        strikes: Optional[Dict[StrikeKey, Sequence[float]]] = None,
        chains: Iterable[OptionsChain] = (),
        symbols: Sequence[Mapping[str, Optional[str]]] = (),
    ):
        self._snapshots = {key.upper(): value for key, value in (snapshots or {}).items()}
        self._symbols = [dict(item) for item in symbols]
        self._strikes: Dict[StrikeKey, List[float]] = {
            (ticker.upper(), expiry, OptionKind(kind)): list(values)
            for (ticker, expiry, kind), values in (strikes or {}).items()
        }
        for chain in chains:
            for kind in OptionKind:
                self._strikes[(chain.symbol.upper(), chain.expiration, kind)] = chain.strike_universe(kind)

    @property
    def name(self) -> str:
        return "static"

    async def get_snapshot(self, contract: Contract) -> MarketSnapshot:
        return self._snapshots.get(contract.ticker, MarketSnapshot())

    async def get_strikes(self, ticker: str, expiry: date, kind: OptionKind) -> Sequence[float]:
        key = (ticker.upper(), expiry, OptionKind(kind))
        if key not in self._strikes:
            raise DataNotAvailable(f"No strikes for {ticker.upper()} {expiry.isoformat()} {OptionKind(kind).value}")
        return list(self._strikes[key])

    async def get_spot(self, ticker: str) -> Optional[float]:
        snapshot = self._snapshots.get(ticker.upper())
        return snapshot.spot if snapshot else None

    async def get_expirations(self, ticker: str) -> Sequence[date]:
        return sorted({expiry for (symbol, expiry, _) in self._strikes if symbol == ticker.upper()})

    async def search_symbols(self, query: str) -> Sequence[Mapping[str, Optional[str]]]:
        needle = query.strip().upper()
        return [
            item
            for item in self._symbols
            if needle in str(item.get("symbol") or "").upper() or needle in str(item.get("name") or "").upper()
        ]


class StaticEventCalendarProvider(EventCalendarProvider):
    def __init__(
        self,
        earnings: Optional[Dict[str, EarningsEvent]] = None,
        macro_events: Sequence[MacroEvent] = (),
    ):
        self._earnings = {key.upper(): value for key, value in (earnings or {}).items()}
        self._macro = sorted(macro_events, key=lambda event: event.sort_key)

    async def get_earnings(self, ticker: str) -> Optional[EarningsEvent]:
        return self._earnings.get(ticker.upper())

    async def get_macro_events(self) -> Sequence[MacroEvent]:
        return list(self._macro)


__all__ = ["StaticEventCalendarProvider", "StaticMarketDataProvider"]
