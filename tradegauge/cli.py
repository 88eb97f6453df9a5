"""Command line interface for contract risk analysis."""

from __future__ import annotations

import argparse
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from tradegauge.analysis.strikes import sanitize_strikes, select_strike_window
from tradegauge.config import get_settings
from tradegauge.engine import assess_contract
from tradegauge.models import Analysis, Contract, EarningsEvent, EventContext, MacroEvent, MarketSnapshot

LOGGER = logging.getLogger("tradegauge.cli")


def _parse_float_list(raw: str) -> List[float]:
    try:
        return [float(token) for token in raw.split(",") if token.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Expected a comma separated list of numbers") from exc


def _parse_date(raw: str) -> date:
    try:
        return date.fromisoformat(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("Expected a YYYY-MM-DD date") from exc


def _parse_macro(raw: str) -> MacroEvent:
    """``TITLE@YYYY-MM-DD`` with an optional ``THH:MM`` suffix."""

    title, sep, when = raw.rpartition("@")
    if not sep or not title.strip():
        raise argparse.ArgumentTypeError("Expected macro events as TITLE@YYYY-MM-DD[THH:MM]")
    day, _, time = when.partition("T")
    return MacroEvent(title=title.strip(), date=_parse_date(day), time=time or None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tradegauge", description="Score the risk of holding an option contract")
    parser.add_argument("--env", type=str, default=None, help="Settings environment (defaults to TRADEGAUGE_ENV or dev)")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    analyze = commands.add_parser("analyze", help="Analyze one contract and print the result as JSON")
    analyze.add_argument("--input", type=Path, help="JSON file with contract, snapshot and events")
    analyze.add_argument("--ticker", type=str)
    analyze.add_argument("--type", dest="kind", type=str.upper, choices=["CALL", "PUT"])
    analyze.add_argument("--strike", type=float)
    analyze.add_argument("--expiry", type=str, help="Expiry date, e.g. 2025-01-17")
    analyze.add_argument("--spot", type=float)
    analyze.add_argument("--bid", type=float)
    analyze.add_argument("--ask", type=float)
    analyze.add_argument("--last", type=float)
    analyze.add_argument("--iv", type=float, help="Implied volatility as a decimal, e.g. 0.42")
    analyze.add_argument("--delta", type=float)
    analyze.add_argument("--theta", type=float)
    analyze.add_argument("--vega", type=float)
    analyze.add_argument("--open-interest", type=int)
    analyze.add_argument("--price-paid", type=str, default="", help="Premium paid as typed, e.g. 2.35, 235, 50c")
    analyze.add_argument("--earnings", type=_parse_date, help="Next earnings date")
    analyze.add_argument("--earnings-session", type=str, default=None, help="bmo or amc")
    analyze.add_argument("--macro", type=_parse_macro, action="append", default=[], help="TITLE@YYYY-MM-DD[THH:MM]")
    analyze.add_argument("--advisory", type=Path, help="File holding a raw advisory answer")
    analyze.add_argument("--today", type=_parse_date, default=None)
    analyze.add_argument("--scenarios", action="store_true", help="Also print the expiry scenario table")

    strikes = commands.add_parser("strikes", help="Print the strike window around spot")
    strikes.add_argument("--strikes", type=_parse_float_list, required=True, help="Comma separated strikes")
    strikes.add_argument("--spot", type=float)
    strikes.add_argument("--current", type=float)
    strikes.add_argument("--each-side", type=int)
    strikes.add_argument("--mode", choices=["count", "percent"])
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _load_input(path: Optional[Path]) -> Dict[str, Any]:
    if path is None:
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Input file {path} must contain a JSON object")
    return data


def _contract_from_args(args: argparse.Namespace, data: Dict[str, Any]) -> Contract:
    fields = dict(data.get("contract") or {})
    for key, value in (("ticker", args.ticker), ("type", args.kind), ("strike", args.strike), ("expiry", args.expiry)):
        if value is not None:
            fields[key] = value
    return Contract.model_validate(fields)


def _snapshot_from_args(args: argparse.Namespace, data: Dict[str, Any]) -> MarketSnapshot:
    snapshot = dict(data.get("snapshot") or {})
    quote = dict(snapshot.get("quote") or {})
    greeks = dict(snapshot.get("greeks") or {})
    if args.spot is not None:
        snapshot["spot"] = args.spot
    for key in ("bid", "ask", "last"):
        if getattr(args, key) is not None:
            quote[key] = getattr(args, key)
    for key in ("delta", "theta", "vega", "iv", "open_interest"):
        if getattr(args, key) is not None:
            greeks["implied_volatility" if key == "iv" else key] = getattr(args, key)
    snapshot["quote"] = quote
    snapshot["greeks"] = greeks
    return MarketSnapshot.model_validate(snapshot)


def _events_from_args(args: argparse.Namespace, data: Dict[str, Any]) -> EventContext:
    events = EventContext.model_validate(data.get("events") or {})
    earnings = events.earnings
    if args.earnings is not None:
        earnings = EarningsEvent(date=args.earnings, session=args.earnings_session)
    return EventContext(earnings=earnings, macro_events=[*events.macro_events, *args.macro])


def _display_scenarios(analysis: Analysis) -> None:
    if not analysis.scenarios:
        print("No scenarios: spot price unknown.")
        return
    frame = pd.DataFrame([row.model_dump() for row in analysis.scenarios])
    with pd.option_context("display.max_columns", None, "display.width", 160):
        print(frame.to_string(index=False))


def _run_analyze(args: argparse.Namespace) -> int:
    settings = get_settings(args.env)
    data = _load_input(args.input)
    advisory = args.advisory.read_text(encoding="utf-8") if args.advisory else data.get("advisory")
    analysis = assess_contract(
        _contract_from_args(args, data),
        _snapshot_from_args(args, data),
        _events_from_args(args, data),
        price_paid_text=args.price_paid or str(data.get("price_paid") or ""),
        advisory_payload=advisory,
        settings=settings,
        today=args.today,
    )
    print(analysis.model_dump_json(indent=2))
    if args.scenarios:
        _display_scenarios(analysis)
    return 0


def _run_strikes(args: argparse.Namespace) -> int:
    configured = get_settings(args.env).strikes
    universe = sanitize_strikes(args.strikes)
    if universe.size == 0:
        LOGGER.error("No valid strikes supplied")
        return 2
    mode = args.mode or configured.mode
    each_side = args.each_side if args.each_side is not None else configured.each_side
    window = select_strike_window(
        universe,
        args.spot,
        args.current,
        each_side=each_side if mode == "count" else None,
        pct_window=configured.pct_window,
        min_count=configured.min_count,
    )
    print(json.dumps({"strikes": window, "total": int(universe.size)}))
    return 0


def run_from_args(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    LOGGER.info(f"Running {args.command} (env={args.env or 'default'})")
    if args.command == "analyze":
        return _run_analyze(args)
    if args.command == "strikes":
        return _run_strikes(args)
    parser.error("Unknown command")
    return 2


def main(argv: Sequence[str] | None = None) -> int:
    return run_from_args(argv)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
