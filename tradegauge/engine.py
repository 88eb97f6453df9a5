"""Contract risk analysis: from a selected contract to a calibrated score.

:func:`assess_contract` is the pure core and needs nothing but data.
:class:`RiskAnalyzer` wraps it with the collaborators (market data, event
calendar, advisory provider) and keeps the per-session state of the
contract picker.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar, Union

from tradegauge.adapters.base import (
    AdapterError,
    AdvisoryProvider,
    AdvisoryRequest,
    EventCalendarProvider,
    MarketDataProvider,
)
from tradegauge.advisory.parsing import (
    make_fallback_plan,
    make_fallback_routes,
    normalize_routes,
    parse_advisory_payload,
    parse_plan_payload,
    parse_routes_payload,
)
from tradegauge.analysis.derived import build_derived_metrics
from tradegauge.analysis.events import build_danger_windows, context_events, earnings_proximity, macro_events_soon
from tradegauge.analysis.expiry import nearest_expiry, normalize_expiries
from tradegauge.analysis.pricing import normalize_price_paid, pnl_pct
from tradegauge.analysis.scenarios import build_expiry_scenarios
from tradegauge.analysis.strikes import select_strike_window
from tradegauge.analysis.symbols import rank_symbols
from tradegauge.config.loader import AppSettings
from tradegauge.math.probability import probability_itm
from tradegauge.models.analysis import Analysis
from tradegauge.models.events import EarningsProximity, EventContext
from tradegauge.models.option import Contract, DerivedMetrics, MarketSnapshot, OptionKind, UserPosition
from tradegauge.models.plan import RoutesPlan, TradePlan
from tradegauge.models.score import AdvisoryResult, Invalid, ScoreResult
from tradegauge.scoring.base import RiskInputs
from tradegauge.scoring.drivers import build_score_drivers
from tradegauge.scoring.engine import RiskScoringEngine
from tradegauge.sync.sequence import SUPERSEDED, SequenceGuard
from tradegauge.sync.spot_poller import SpotPoller

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PreparedContract:
    """Everything about a contract that is known before the advisory answer."""

    contract: Contract
    snapshot: MarketSnapshot
    events: EventContext
    position: UserPosition
    dte: int
    derived: DerivedMetrics
    probability_itm: Optional[int]
    earnings: EarningsProximity
    inputs: RiskInputs
    pnl_pct: Optional[float]
    today: Optional[date] = None

    @property
    def spread_wide(self) -> Optional[bool]:
        return self.snapshot.quote.spread_wide()

    def hints(self) -> List[str]:
        hints: List[str] = []
        if self.earnings.label != "none":
            hints.append(f"Earnings {self.earnings.text}")
        hints.extend(f"Macro: {item}" for item in self.inputs.macro_soon)
        if self.spread_wide:
            hints.append("Bid/ask spread is wide")
        return hints


def prepare_contract(
    contract: Contract,
    snapshot: MarketSnapshot,
    events: Optional[EventContext] = None,
    *,
    price_paid_text: str = "",
    settings: Optional[AppSettings] = None,
    today: Optional[date] = None,
) -> PreparedContract:
    settings = settings or AppSettings()
    events = events or EventContext()
    mark = snapshot.quote.effective_mark
    paid = normalize_price_paid(price_paid_text, mark, cents_threshold=settings.pricing.cents_threshold)
    position = UserPosition(raw_price_paid=price_paid_text or "", price_paid=paid)

    dte = contract.days_to_expiry(today)
    greeks = snapshot.greeks
    derived = build_derived_metrics(snapshot.spot, contract.strike, contract.kind, paid, greeks, dte)
    earnings = earnings_proximity(events.earnings, today, settings.events.soon_days)
    macro = macro_events_soon(events.macro_events, today, settings.events.soon_days)
    return PreparedContract(
        contract=contract,
        snapshot=snapshot,
        events=events,
        position=position,
        dte=dte,
        derived=derived,
        probability_itm=probability_itm(snapshot.spot, contract.strike, contract.kind, greeks.iv_pct, dte),
        earnings=earnings,
        inputs=RiskInputs.from_metrics(derived, greeks, dte, earnings, macro),
        pnl_pct=pnl_pct(paid, mark) if position.owns_position else None,
        today=today,
    )


def finish_assessment(
    prepared: PreparedContract,
    advisory: Optional[AdvisoryResult] = None,
    *,
    settings: Optional[AppSettings] = None,
    plan: Optional[TradePlan] = None,
    routes: Optional[RoutesPlan] = None,
) -> Analysis:
    """Score a prepared contract and attach the timeline, scenarios and plans."""

    settings = settings or AppSettings()
    opinion = advisory.opinion if advisory is not None else None
    advisory_error = advisory.reason if isinstance(advisory, Invalid) else None

    result = RiskScoringEngine(settings.scoring).score(
        prepared.inputs,
        advisory.score if advisory is not None else None,
        pnl_pct=prepared.pnl_pct,
        external_drivers=opinion.explainers if opinion is not None else (),
    )

    contract = prepared.contract
    spot = prepared.snapshot.spot
    scenarios = (
        build_expiry_scenarios(spot, contract.strike, contract.kind, prepared.position.price_paid)
        if spot is not None
        else []
    )
    windows = build_danger_windows(
        context_events(prepared.events),
        settings.events.horizon_days,
        prepared.today,
        settings.events.windows,
    )
    analysis = Analysis(
        contract=contract,
        snapshot=prepared.snapshot,
        position=prepared.position,
        events=prepared.events,
        dte=prepared.dte,
        derived=prepared.derived,
        probability_itm=prepared.probability_itm,
        result=result,
        opinion=opinion,
        advisory_error=advisory_error,
        plan=plan or make_fallback_plan(prepared.dte, prepared.snapshot.greeks.iv_pct, prepared.spread_wide),
        routes=routes or make_fallback_routes(result.score, prepared.dte, prepared.pnl_pct),
        danger_windows=windows,
        scenarios=scenarios,
        metadata={"earnings": prepared.earnings.text, "macro_soon": list(prepared.inputs.macro_soon)},
    )
    logger.info(
        f"Analyzed {contract.ticker} {contract.strike:g} {contract.kind.value} {contract.expiry.isoformat()}: "
        f"score {result.score:.1f} ({result.bucket}, base from {result.base_source})"
    )
    return analysis


def assess_contract(
    contract: Contract,
    snapshot: MarketSnapshot,
    events: Optional[EventContext] = None,
    *,
    price_paid_text: str = "",
    advisory_payload: Any = None,
    settings: Optional[AppSettings] = None,
    today: Optional[date] = None,
) -> Analysis:
    """Analyze one contract without talking to any collaborator.

    ``advisory_payload`` is the raw advisory answer if one is already at
    hand; when it is absent or fails validation the rule score is used.
    Plans and routes are the local fallbacks.
    """

    prepared = prepare_contract(
        contract,
        snapshot,
        events,
        price_paid_text=price_paid_text,
        settings=settings,
        today=today,
    )
    advisory = parse_advisory_payload(advisory_payload) if advisory_payload is not None else None
    return finish_assessment(prepared, advisory, settings=settings)


class RiskAnalyzer:
    """One user session: the contract being picked and the last analysis."""

    def __init__(
        self,
        market_data: MarketDataProvider,
        advisory: Optional[AdvisoryProvider] = None,
        calendar: Optional[EventCalendarProvider] = None,
        settings: Optional[AppSettings] = None,
    ):
        self.market_data = market_data
        self.advisory = advisory
        self.calendar = calendar
        self.settings = settings or AppSettings()
        self.selection: Optional[Contract] = None
        self.expirations: List[date] = []
        self.strike_universe: List[float] = []
        self.last_analysis: Optional[Analysis] = None
        self._expiry_guard: SequenceGuard[List[date]] = SequenceGuard("expirations")
        self._strike_guard: SequenceGuard[List[float]] = SequenceGuard("strikes")
        self.symbol_matches: List[Dict[str, Optional[str]]] = []
        self._search_guard: SequenceGuard[List[Dict[str, Optional[str]]]] = SequenceGuard("search")

    @property
    def timeout_seconds(self) -> float:
        return self.settings.advisory.timeout_seconds

    async def _call(self, label: str, factory: Callable[[], Awaitable[T]]) -> Optional[T]:
        try:
            return await asyncio.wait_for(factory(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"{label} timed out after {self.timeout_seconds:.0f}s")
        except NotImplementedError:
            logger.debug(f"{label} is not supported by this provider")
        except AdapterError as exc:
            logger.warning(f"{label} failed: {exc}")
        except Exception:
            logger.exception(f"{label} raised an unexpected error")
        return None

    async def _load_events(self, ticker: str) -> EventContext:
        if self.calendar is None:
            return EventContext()
        earnings = await self._call("Earnings lookup", lambda: self.calendar.get_earnings(ticker))
        macro = await self._call("Macro calendar lookup", self.calendar.get_macro_events)
        return EventContext(earnings=earnings, macro_events=list(macro or []))

    async def _load_snapshot(self, contract: Contract) -> MarketSnapshot:
        snapshot = await self._call("Snapshot lookup", lambda: self.market_data.get_snapshot(contract))
        return snapshot or MarketSnapshot()

    def _request(self, prepared: PreparedContract, score: Optional[float] = None) -> AdvisoryRequest:
        return AdvisoryRequest(
            contract=prepared.contract,
            snapshot=prepared.snapshot,
            position=prepared.position,
            derived=prepared.derived,
            events=prepared.events,
            dte=prepared.dte,
            drivers=build_score_drivers(prepared.inputs, self.settings.scoring.drivers),
            hints=prepared.hints(),
            score=score,
        )

    async def _advise(self, prepared: PreparedContract) -> AdvisoryResult:
        if self.advisory is None:
            return Invalid(reason="unavailable")
        raw = await self._call("Advisory score", lambda: self.advisory.advise(self._request(prepared)))
        if raw is None:
            return Invalid(reason="unavailable")
        return parse_advisory_payload(raw)

    async def _plan_and_routes(self, prepared: PreparedContract, result: ScoreResult):
        if self.advisory is None:
            return None, None
        request = self._request(prepared, score=result.score)
        raw_plan, raw_routes = await asyncio.gather(
            self._call("Trade plan", lambda: self.advisory.plan(request)),
            self._call("Routes", lambda: self.advisory.routes(request)),
        )
        plan = parse_plan_payload(raw_plan) if raw_plan is not None else None
        routes = parse_routes_payload(raw_routes) if raw_routes is not None else None
        if routes is not None:
            routes = normalize_routes(routes, prepared.dte, prepared.snapshot.quote.bid)
        return plan, routes

    async def analyze(
        self,
        contract: Optional[Contract] = None,
        price_paid_text: str = "",
        today: Optional[date] = None,
    ) -> Analysis:
        """Analyze ``contract`` (or the current selection) with live collaborators.

        Every collaborator failure is logged and replaced by a local fallback,
        so this only raises when no contract is selected.
        """

        contract = contract or self.selection
        if contract is None:
            raise ValueError("No contract selected")
        self.selection = contract

        snapshot, events = await asyncio.gather(self._load_snapshot(contract), self._load_events(contract.ticker))
        prepared = prepare_contract(
            contract,
            snapshot,
            events,
            price_paid_text=price_paid_text,
            settings=self.settings,
            today=today,
        )
        advisory = await self._advise(prepared)
        analysis = finish_assessment(prepared, advisory, settings=self.settings)
        plan, routes = await self._plan_and_routes(prepared, analysis.result)
        if plan is not None or routes is not None:
            analysis = analysis.model_copy(
                update={
                    "plan": plan or analysis.plan,
                    "routes": routes or analysis.routes,
                }
            )
        self.last_analysis = analysis
        return analysis

    async def search_symbols(self, query: str) -> Optional[List[Dict[str, Optional[str]]]]:
        """Ranked ticker matches for ``query``, or ``None`` when a newer search superseded it.

        A blank query clears the list and invalidates any search in flight.
        A failing provider yields an empty list.
        """

        needle = query.strip()
        if not needle:
            self._search_guard.issue()
            self._search_guard.cancel()
            self.symbol_matches = []
            return []

        async def fetch() -> List[Dict[str, Optional[str]]]:
            hits = await self._call("Symbol search", lambda: self.market_data.search_symbols(needle))
            return rank_symbols(hits or [], needle)

        def apply(values: List[Dict[str, Optional[str]]]) -> None:
            self.symbol_matches = values

        values = await self._search_guard.run(fetch, apply)
        if values is SUPERSEDED:
            return None
        return values

    async def load_expirations(self, ticker: str, today: Optional[date] = None) -> Optional[date]:
        """Load expirations for ``ticker`` and return the nearest upcoming one.

        Returns ``None`` when a newer lookup superseded this one.
        """

        async def fetch() -> List[date]:
            return normalize_expiries(await self.market_data.get_expirations(ticker))

        def apply(values: List[date]) -> None:
            self.expirations = values
            self.strike_universe = []

        values = await self._expiry_guard.run(fetch, apply)
        if values is SUPERSEDED:
            return None
        return nearest_expiry(values, today)

    async def load_strikes(self, ticker: str, expiry: date, kind: Union[OptionKind, str]) -> Optional[List[float]]:
        """Replace the strike universe unless a newer lookup superseded this one."""

        async def fetch() -> List[float]:
            return [float(strike) for strike in await self.market_data.get_strikes(ticker, expiry, OptionKind(kind))]

        def apply(values: List[float]) -> None:
            self.strike_universe = values

        values = await self._strike_guard.run(fetch, apply)
        if values is SUPERSEDED:
            return None
        return values

    def strike_window(self, spot: Optional[float] = None, current: Optional[float] = None) -> List[float]:
        strikes = self.settings.strikes
        return select_strike_window(
            self.strike_universe,
            spot,
            current,
            each_side=strikes.window_each_side,
            pct_window=strikes.pct_window,
            min_count=strikes.min_count,
        )

    def spot_poller(
        self,
        ticker: str,
        visible: Callable[[], bool] = lambda: True,
        on_price: Optional[Callable[[float], None]] = None,
    ) -> SpotPoller:
        return SpotPoller(
            lambda: self.market_data.get_spot(ticker),
            interval_seconds=self.settings.sync.poll_interval_seconds,
            cooldown_seconds=self.settings.sync.cooldown_seconds,
            visible=visible,
            on_price=on_price,
        )


__all__ = [
    "PreparedContract",
    "RiskAnalyzer",
    "assess_contract",
    "finish_assessment",
    "prepare_contract",
]
