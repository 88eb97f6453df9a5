import math

import pytest

from tradegauge.scoring.base import RiskInputs
from tradegauge.scoring.blender import blend_scores, coerce_advisory_score, recenter, risk_bucket
from tradegauge.scoring.config import BlendConfig, CushionConfig
from tradegauge.scoring.cushion import compute_cushion
from tradegauge.scoring.nudge import compute_score_nudge


def test_nudge_is_clamped_upward():
    inputs = RiskInputs(dte=3, iv_pct=70.0, distance_otm_pct=30.0, open_interest=50, breakeven_gap_pct=12.0)

    assert compute_score_nudge(inputs) == 0.5


def test_nudge_is_clamped_downward():
    inputs = RiskInputs(dte=100, iv_pct=15.0, distance_otm_pct=-1.0, open_interest=20000, breakeven_gap_pct=-10.0)

    assert compute_score_nudge(inputs) == -0.5


def test_nudge_breakeven_near_flat():
    assert math.isclose(compute_score_nudge(RiskInputs(dte=30, breakeven_gap_pct=1.0)), -0.10)
    assert math.isclose(compute_score_nudge(RiskInputs(dte=30, breakeven_gap_pct=7.0)), 0.10)


def test_nudge_individual_signals():
    assert math.isclose(compute_score_nudge(RiskInputs(dte=8)), 0.10)
    assert math.isclose(compute_score_nudge(RiskInputs(dte=30, iv_pct=22.0)), -0.15)
    assert math.isclose(compute_score_nudge(RiskInputs(dte=30, distance_otm_pct=16.0)), 0.20)
    assert math.isclose(compute_score_nudge(RiskInputs(dte=30, open_interest=6000)), -0.15)
    assert compute_score_nudge(RiskInputs(dte=30)) == 0.0


@pytest.mark.parametrize(
    "pnl, dte, expected",
    [
        (None, 3, 0.0),
        (-70.0, 30, 1.8),
        (-70.0, 5, 2.1),
        (-45.0, 30, 0.9),
        (-30.0, 30, 0.5),
        (-10.0, 30, 0.0),
        (-10.0, 10, 0.3),
        (10.0, 30, 0.0),
        (25.0, 30, -0.4),
        (50.0, 30, -0.7),
        (90.0, 3, -0.9),
        (90.0, None, -1.0),
    ],
)
def test_cushion_tiers(pnl, dte, expected):
    assert math.isclose(compute_cushion(pnl, dte), expected, abs_tol=1e-9)


def test_cushion_is_monotone_in_pnl():
    values = [compute_cushion(pnl, 20, CushionConfig()) for pnl in range(-100, 101, 5)]

    assert values == sorted(values, reverse=True)


def test_recenter_and_blend():
    assert math.isclose(recenter(10.0), 7.3)
    assert math.isclose(blend_scores(10.0, 0.5, 1.8), 9.6)
    assert blend_scores(0.0, -0.5, -1.0) == 0.0
    assert math.isclose(blend_scores(10.0, 0.5, 2.1), 9.9)
    assert blend_scores(10.0, 0.5, 2.5) == 10.0


def test_blend_rounds_to_one_decimal():
    score = blend_scores(6.3, 0.13, 0.0, BlendConfig())

    assert math.isclose(score * 10, round(score * 10), abs_tol=1e-9)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (7, 7.0),
        (7.25, 7.25),
        (12, 10.0),
        (-3, 0.0),
        ("7", None),
        (True, None),
        (None, None),
        (float("nan"), None),
        (float("inf"), None),
    ],
)
def test_coerce_advisory_score(raw, expected):
    assert coerce_advisory_score(raw) == expected


@pytest.mark.parametrize(
    "score, bucket",
    [(0.0, "Low"), (3.0, "Low"), (3.1, "Moderate"), (6.0, "Moderate"), (8.0, "High"), (8.1, "Very High")],
)
def test_risk_bucket(score, bucket):
    assert risk_bucket(score) == bucket
