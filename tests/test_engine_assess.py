import math
from datetime import date

import pytest

from tradegauge.config.loader import AppSettings
from tradegauge.engine import assess_contract, prepare_contract
from tradegauge.models import Contract, EarningsEvent, EventContext, MacroEvent, MarketSnapshot

TODAY = date(2025, 1, 6)


@pytest.fixture
def contract():
    return Contract(ticker="NVDA", kind="CALL", strike=140, expiry="2025-02-07")


@pytest.fixture
def snapshot():
    return MarketSnapshot.model_validate(
        {
            "spot": 136.0,
            "quote": {"bid": 2.4, "ask": 2.6},
            "greeks": {"delta": 0.38, "theta": -0.09, "vega": 0.16, "iv": 0.52, "openInterest": 8200},
        }
    )


def test_rules_only_analysis(contract, snapshot):
    analysis = assess_contract(contract, snapshot, today=TODAY)

    assert analysis.dte == 32
    assert analysis.result.base_source == "rules"
    assert analysis.opinion is None
    assert analysis.advisory_error is None
    assert analysis.probability_itm is not None and 0 < analysis.probability_itm < 50
    assert math.isclose(analysis.derived.distance_otm_pct, 4 / 136 * 100)
    assert analysis.position.price_paid is None
    assert analysis.result.pnl_pct is None
    assert len(analysis.scenarios) == 21
    assert analysis.plan.plan
    assert analysis.routes is not None
    assert analysis.danger_windows == []


def test_price_paid_is_read_as_cents_against_the_mark(contract, snapshot):
    analysis = assess_contract(contract, snapshot, price_paid_text="255", today=TODAY)

    assert analysis.position.price_paid == 2.55
    assert analysis.position.raw_price_paid == "255"
    assert math.isclose(analysis.result.pnl_pct, (2.5 - 2.55) / 2.55 * 100)
    assert analysis.scenarios[-1].pl is not None


def test_valid_advisory_score_becomes_the_base(contract, snapshot):
    payload = '{"score": 9, "headline": "Crowded trade", "explainers": ["Momentum fading"]}'

    analysis = assess_contract(contract, snapshot, advisory_payload=payload, today=TODAY)

    assert analysis.result.base_source == "advisory"
    assert analysis.result.base_score == 9.0
    assert analysis.opinion.headline == "Crowded trade"
    assert "Momentum fading" in analysis.result.drivers


def test_invalid_advisory_falls_back_to_rules(contract, snapshot):
    analysis = assess_contract(contract, snapshot, advisory_payload={"score": "very high"}, today=TODAY)

    assert analysis.result.base_source == "rules"
    assert analysis.advisory_error == "invalid-score"
    assert analysis.opinion is not None


def test_events_drive_windows_drivers_and_metadata(contract, snapshot):
    events = EventContext(
        earnings=EarningsEvent(date="2025-01-08", session="amc"),
        macro_events=[MacroEvent(title="CPI", date="2025-01-15", time="08:30")],
    )

    analysis = assess_contract(contract, snapshot, events, today=TODAY)

    assert analysis.metadata["earnings"] == "in 2 day(s) (amc)"
    assert analysis.metadata["macro_soon"] == []
    assert analysis.result.drivers[0] == "Earnings in 2 day(s) (amc): event risk and IV swing"
    assert [(w.start, w.end) for w in analysis.danger_windows] == [(0, 3), (8, 10)]


def test_missing_market_data_degrades_gracefully(contract):
    analysis = assess_contract(contract, MarketSnapshot(), price_paid_text="2.10", today=TODAY)

    assert analysis.probability_itm is None
    assert analysis.derived.distance_otm_pct is None
    assert math.isclose(analysis.derived.breakeven, 142.1)
    assert analysis.scenarios == []
    assert analysis.result.pnl_pct is None
    assert 0.0 <= analysis.result.score <= 10.0


def test_expired_contract_has_zero_dte(contract, snapshot):
    analysis = assess_contract(contract, snapshot, today=date(2025, 3, 1))

    assert analysis.dte == 0
    assert analysis.probability_itm is None


def test_settings_are_honoured(contract, snapshot):
    settings = AppSettings.model_validate({"pricing": {"cents_threshold": 50}, "events": {"soon_days": 1}})
    events = EventContext(earnings=EarningsEvent(date="2025-01-09"))

    analysis = assess_contract(contract, snapshot, events, price_paid_text="100", settings=settings, today=TODAY)

    assert analysis.position.price_paid == 100.0
    assert analysis.metadata["earnings"] == "in ~3 day(s)"


def test_prepared_contract_hints(contract):
    snapshot = MarketSnapshot.model_validate({"spot": 136.0, "quote": {"bid": 1.0, "ask": 2.0}})
    events = EventContext(
        earnings=EarningsEvent(date="2025-01-06", session="bmo"),
        macro_events=[MacroEvent(title="CPI", date="2025-01-08")],
    )

    prepared = prepare_contract(contract, snapshot, events, today=TODAY)

    assert prepared.hints() == [
        "Earnings today (bmo)",
        "Macro: CPI on 2025-01-08",
        "Bid/ask spread is wide",
    ]
