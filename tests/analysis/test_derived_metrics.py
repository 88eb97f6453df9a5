import math

from tradegauge.analysis.derived import build_derived_metrics
from tradegauge.models import Greeks


def test_out_of_the_money_call():
    derived = build_derived_metrics(100.0, 105.0, "CALL", 2.0, Greeks(theta=-0.05, vega=0.12), dte=20)

    assert derived.dte == 20
    assert math.isclose(derived.moneyness, 100 / 105)
    assert math.isclose(derived.distance_otm_pct, 5.0)
    assert math.isclose(derived.breakeven, 107.0)
    assert math.isclose(derived.breakeven_gap_pct, 7.0)
    assert derived.intrinsic == 0.0
    assert math.isclose(derived.extrinsic, 2.0)
    assert math.isclose(derived.extrinsic_pct, 100.0)
    assert math.isclose(derived.theta_per_contract, -5.0)
    assert math.isclose(derived.vega_per_contract, 12.0)


def test_in_the_money_put():
    derived = build_derived_metrics(90.0, 100.0, "PUT", 12.0)

    assert math.isclose(derived.distance_otm_pct, -100 / 9)
    assert math.isclose(derived.intrinsic, 10.0)
    assert math.isclose(derived.extrinsic, 2.0)
    assert math.isclose(derived.breakeven, 88.0)
    assert math.isclose(derived.breakeven_gap_pct, -2 / 90 * 100)


def test_missing_spot_keeps_strike_only_metrics():
    derived = build_derived_metrics(None, 105.0, "CALL", 2.0)

    assert derived.distance_otm_pct is None
    assert derived.moneyness is None
    assert derived.breakeven == 107.0
    assert derived.breakeven_gap_pct is None
    assert derived.extrinsic is None


def test_missing_price_paid_leaves_breakeven_unknown():
    derived = build_derived_metrics(100.0, 100.0, "CALL", None)

    assert derived.distance_otm_pct == 0.0
    assert derived.breakeven is None
    assert derived.breakeven_gap_pct is None
    assert derived.theta_per_contract is None
