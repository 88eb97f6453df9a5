import json

import pytest

from tradegauge.advisory.parsing import (
    load_json_object,
    make_fallback_plan,
    make_fallback_routes,
    normalize_routes,
    parse_advisory_payload,
    parse_plan_payload,
    parse_routes_payload,
    sanitize_narrative,
)
from tradegauge.models import Invalid, RoutesPlan, Valid


def _routes_payload(aggressive="Hold into the print", middle="Sell half into strength", conservative="Close at the mark"):
    return {
        "routes": {
            "aggressive": {"label": "Ride", "action": aggressive, "rationale": "", "guardrail": None},
            "middle": {"label": "Scale", "action": middle, "rationale": "Balance", "guardrail": "Stop at breakeven"},
            "conservative": {"label": "Exit", "action": conservative, "rationale": "Done", "guardrail": None},
        },
        "pick": {"route": "middle", "reason": "Balanced"},
    }


def test_valid_payload_from_json_text():
    raw = json.dumps(
        {
            "score": 7.5,
            "headline": "H" * 200,
            "narrative": "Momentum is intact.",
            "advice": [f"tip {index}" for index in range(10)],
            "explainers": ["Gap risk on the print"],
            "risks": ["a", "b", "c", "d", "e", "f"],
            "watchlist": ["w1", "w2", "w3", "w4", "w5"],
            "strategy_notes": ["n1", "n2", "n3", "n4"],
            "confidence": 0.7,
        }
    )

    result = parse_advisory_payload(raw)

    assert isinstance(result, Valid)
    assert result.score == 7.5
    opinion = result.opinion
    assert len(opinion.headline) == 140
    assert len(opinion.advice) == 6
    assert len(opinion.risks) == 5
    assert len(opinion.watchlist) == 4
    assert len(opinion.strategy_notes) == 3
    assert opinion.explainers == ["Gap risk on the print"]
    assert opinion.confidence == 0.7


def test_payload_wrapped_in_prose_is_recovered():
    raw = 'Sure! Here is the assessment:\n```json\n{"score": 4, "headline": "Fine"}\n```\nGood luck.'

    result = parse_advisory_payload(raw)

    assert isinstance(result, Valid)
    assert result.score == 4.0
    assert result.opinion.headline == "Fine"


def test_unparsable_payload_is_invalid():
    result = parse_advisory_payload("the model is overloaded")

    assert result == Invalid(reason="unparsable")
    assert result.score is None


@pytest.mark.parametrize("score", ["7", True, None, [7], float("nan")])
def test_bad_score_keeps_the_narrative(score):
    result = parse_advisory_payload({"score": score, "headline": "Still useful"})

    assert isinstance(result, Invalid)
    assert result.reason == "invalid-score"
    assert result.score is None
    assert result.opinion.headline == "Still useful"


def test_score_and_confidence_are_clamped():
    result = parse_advisory_payload({"score": 14, "confidence": 3})

    assert result.score == 10.0
    assert result.opinion.confidence == 1.0
    assert parse_advisory_payload({"score": 5, "confidence": -2}).opinion.confidence == 0.0
    assert parse_advisory_payload({"score": 5, "confidence": "high"}).opinion.confidence is None


def test_list_fields_drop_non_strings():
    result = parse_advisory_payload({"score": 5, "advice": ["keep", {"nested": 1}, "", 3], "risks": "not a list"})

    assert result.opinion.advice == ["keep", "3"]
    assert result.opinion.risks == []


def test_load_json_object_rejects_non_objects():
    assert load_json_object("[1, 2]") is None
    assert load_json_object(42) is None
    assert load_json_object("") is None
    assert load_json_object(b'{"score": 1}') == {"score": 1}


def test_sanitize_narrative_drops_hedging_and_greek_readouts():
    text = "Strong trend into the print. We lack the IV data. Delta is 0.45. Watch the 200-day."

    assert sanitize_narrative(text) == "Strong trend into the print. Watch the 200-day."
    assert sanitize_narrative(None) == ""


def test_parse_plan_payload():
    plan = parse_plan_payload({"likes": ["trend"], "watchouts": ["theta"], "plan": " Buy the dip. "})

    assert plan.likes == ["trend"]
    assert plan.plan == "Buy the dip."
    assert parse_plan_payload({"likes": ["trend"]}) is None
    assert parse_plan_payload("nope") is None


def test_fallback_plan_reflects_dte_iv_and_spread():
    plan = make_fallback_plan(5, 40.0, True)

    assert plan.likes[0] == "IV is reasonable, not nosebleed."
    assert any("Theta speeds up" in item for item in plan.watchouts)
    assert any("Spread is wide" in item for item in plan.watchouts)
    assert plan.plan

    calm = make_fallback_plan(30, 80.0, False)
    assert "IV is reasonable, not nosebleed." not in calm.likes
    assert not any("Spread is wide" in item for item in calm.watchouts)


def test_parse_routes_payload():
    routes = parse_routes_payload(_routes_payload())

    assert isinstance(routes, RoutesPlan)
    assert routes.pick.route == "middle"

    broken = _routes_payload()
    del broken["routes"]["middle"]
    assert parse_routes_payload(broken) is None
    assert parse_routes_payload({"routes": {}, "pick": {"route": "yolo"}}) is None


def test_aggressive_exit_is_rewritten_unless_expiry_or_dead_bid():
    routes = parse_routes_payload(_routes_payload(aggressive="Exit now"))

    rewritten = normalize_routes(routes, dte=10, bid=1.2)
    assert rewritten.routes.aggressive.action == "Let it ride small"
    assert rewritten.routes.aggressive.guardrail == "Treat as lotto; keep size tiny."

    assert normalize_routes(routes, dte=1, bid=1.2).routes.aggressive.action == "Exit now"
    assert normalize_routes(routes, dte=10, bid=None).routes.aggressive.action == "Exit now"


def test_trim_actions_are_phrased_for_single_contract_holders():
    routes = parse_routes_payload(_routes_payload(middle="Trim half here.", conservative="Trim everything but one"))

    fixed = normalize_routes(routes, dte=20, bid=1.0)

    assert fixed.routes.middle.action.startswith("If you have more than one contract, Trim half here.")
    assert fixed.routes.middle.guardrail == "Stop at breakeven"
    assert fixed.routes.conservative.guardrail == "Keep any lotto tiny and be okay with a full loss."
    assert fixed.routes.aggressive.action == "Hold into the print"


@pytest.mark.parametrize(
    "score, dte, pnl, pick",
    [
        (9.0, 20, None, "conservative"),
        (4.0, 1, None, "conservative"),
        (5.0, 20, 60.0, "middle"),
        (2.0, 20, None, "aggressive"),
        (5.0, 20, -10.0, "middle"),
    ],
)
def test_fallback_routes_pick(score, dte, pnl, pick):
    routes = make_fallback_routes(score, dte, pnl)

    assert routes.pick.route == pick
    assert routes.routes.conservative.action
