import pytest
from fastapi.testclient import TestClient

from tradegauge.api.main import app
from tradegauge.config import reset_settings_cache
from tradegauge.config.loader import ENVIRONMENT_VARIABLE


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv(ENVIRONMENT_VARIABLE, "dev")
    reset_settings_cache()
    with TestClient(app) as test_client:
        yield test_client
    reset_settings_cache()


def analyze_payload(**overrides):
    payload = {
        "contract": {"ticker": "aapl", "type": "call", "strike": 150, "expiry": "2030-01-18"},
        "snapshot": {
            "spot": 152.0,
            "quote": {"bid": 2.4, "ask": 2.6},
            "greeks": {"delta": 0.55, "theta": -0.04, "vega": 0.18, "iv": 0.45, "openInterest": 4200},
        },
        "events": {"earnings": {"date": "2029-12-21", "session": "amc"}},
        "price_paid": "2.00",
        "advisory": {"score": 6, "headline": "Holding up", "explainers": ["Gap risk on the print"]},
        "today": "2029-12-19",
    }
    payload.update(overrides)
    return payload


def test_analyze_returns_scored_analysis(client):
    response = client.post("/analyze", json=analyze_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["contract"]["ticker"] == "AAPL"
    assert body["dte"] == 30
    assert body["position"]["price_paid"] == 2.0
    assert body["result"]["base_source"] == "advisory"
    assert 0.0 <= body["result"]["score"] <= 10.0
    assert "Gap risk on the print" in body["result"]["drivers"]
    assert body["opinion"]["headline"] == "Holding up"
    assert body["danger_windows"] == [{"start": 0, "end": 3}]
    assert len(body["scenarios"]) == 21
    assert body["routes"]["pick"]["route"] in {"aggressive", "middle", "conservative"}


def test_analyze_without_advisory_uses_rules(client):
    response = client.post("/analyze", json=analyze_payload(advisory="not json at all"))

    body = response.json()
    assert response.status_code == 200
    assert body["result"]["base_source"] == "rules"
    assert body["advisory_error"] == "unparsable"


def test_analyze_accepts_scoring_overrides(client):
    payload = analyze_payload(
        snapshot={"spot": 150.0},
        events={},
        price_paid="",
        advisory={"score": 8},
        scoring_config={"blend": {"scale": 1.0, "bias": 0.0}},
    )

    body = client.post("/analyze", json=payload).json()

    assert body["result"]["base_score"] == 8.0
    assert body["result"]["score"] == pytest.approx(8.0 + body["result"]["nudge"], abs=0.05)


def test_analyze_rejects_invalid_contract(client):
    payload = analyze_payload(contract={"ticker": "AAPL", "type": "call", "strike": -1, "expiry": "2030-01-18"})

    assert client.post("/analyze", json=payload).status_code == 422


def test_strike_window_endpoint(client):
    response = client.post("/strikes", json={"strikes": list(range(90, 155, 5)), "spot": 120, "each_side": 2})

    assert response.status_code == 200
    assert response.json() == {"strikes": [110.0, 115.0, 120.0, 125.0, 130.0], "total": 13}


def test_strike_window_percent_mode(client):
    response = client.post("/strikes", json={"strikes": list(range(1, 301)), "spot": 100, "mode": "percent"})

    strikes = response.json()["strikes"]
    assert strikes[0] == 75.0
    assert strikes[-1] == 125.0


def test_empty_strike_universe_is_rejected(client):
    response = client.post("/strikes", json={"strikes": ["n/a", None], "spot": 100})

    assert response.status_code == 400
