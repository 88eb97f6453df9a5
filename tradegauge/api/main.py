"""FastAPI application exposing the in-process risk engine."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from tradegauge.analysis.strikes import sanitize_strikes, select_strike_window
from tradegauge.config import AppSettings, get_settings
from tradegauge.engine import assess_contract
from tradegauge.models import Analysis, Contract, EventContext, MarketSnapshot
from tradegauge.scoring.config import deep_merge

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="TradeGauge Risk API", version="1.0.0")


class AnalyzeRequest(BaseModel):
    contract: Contract
    snapshot: MarketSnapshot = Field(default_factory=MarketSnapshot)
    events: EventContext = Field(default_factory=EventContext)
    price_paid: str = ""
    advisory: Optional[Any] = None
    today: Optional[date] = None
    scoring_config: Dict[str, Any] = Field(default_factory=dict)


class StrikeWindowRequest(BaseModel):
    strikes: List[Any]
    spot: Optional[float] = None
    current: Optional[float] = None
    each_side: Optional[int] = Field(default=None, ge=0)
    mode: Optional[Literal["count", "percent"]] = None


class StrikeWindowResponse(BaseModel):
    strikes: List[float]
    total: int


def _get_settings(scoring_overrides: Optional[Dict[str, Any]] = None) -> AppSettings:
    settings = get_settings()
    if not scoring_overrides:
        return settings
    merged = deep_merge(settings.scoring.model_dump(), scoring_overrides)
    return settings.model_copy(update={"scoring": type(settings.scoring).model_validate(merged)})


@app.on_event("startup")
async def on_startup() -> None:
    """Load settings up front so a broken config fails at boot."""

    settings = get_settings()
    logger.info(f"Starting risk API (env={settings.env})")


@app.on_event("shutdown")
async def on_shutdown() -> None:
    logger.info("Shutting down risk API")


@app.post("/analyze", response_model=Analysis)
async def analyze(payload: AnalyzeRequest) -> Analysis:
    """Score one contract from the submitted market data and advisory answer."""

    settings = _get_settings(payload.scoring_config)
    return assess_contract(
        payload.contract,
        payload.snapshot,
        payload.events,
        price_paid_text=payload.price_paid,
        advisory_payload=payload.advisory,
        settings=settings,
        today=payload.today,
    )


@app.post("/strikes", response_model=StrikeWindowResponse)
async def strikes(payload: StrikeWindowRequest) -> StrikeWindowResponse:
    """Return the spot-centred strike window shown in the strike picker."""

    universe = sanitize_strikes(payload.strikes)
    if universe.size == 0:
        raise HTTPException(status_code=400, detail="Request must include at least one valid strike")

    configured = get_settings().strikes
    mode = payload.mode or configured.mode
    each_side = payload.each_side if payload.each_side is not None else configured.each_side
    window = select_strike_window(
        universe,
        payload.spot,
        payload.current,
        each_side=each_side if mode == "count" else None,
        pct_window=configured.pct_window,
        min_count=configured.min_count,
    )
    return StrikeWindowResponse(strikes=window, total=int(universe.size))


__all__ = ["app"]
