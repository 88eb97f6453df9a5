import math

from tradegauge.analysis.scenarios import build_expiry_scenarios


def test_call_scenarios_cover_minus_to_plus_twenty_percent():
    rows = build_expiry_scenarios(100.0, 100.0, "CALL", price_paid=2.0)

    assert len(rows) == 21
    assert rows[0].pct == -20.0
    assert rows[-1].pct == 20.0

    flat = next(row for row in rows if row.pct == 0)
    assert flat.underlying == 100.0
    assert flat.value == 0.0
    assert flat.pl == -200.0
    assert flat.roi == -100.0

    top = rows[-1]
    assert top.underlying == 120.0
    assert math.isclose(top.value, 2000.0)
    assert math.isclose(top.pl, 1800.0)
    assert top.roi == 900.0


def test_put_scenarios_gain_on_the_way_down():
    rows = build_expiry_scenarios(100.0, 95.0, "PUT")

    bottom = rows[0]
    assert bottom.underlying == 80.0
    assert math.isclose(bottom.value, 1500.0)
    assert bottom.pl is None
    assert bottom.roi is None
    assert rows[-1].value == 0.0
