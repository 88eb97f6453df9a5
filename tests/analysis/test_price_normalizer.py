import math

import pytest

from tradegauge.analysis.pricing import normalize_price_paid, pnl_pct


@pytest.mark.parametrize(
    "raw, reference, expected",
    [
        ("2800", 28, 28.0),
        (".50", None, 0.5),
        ("50c", None, 0.5),
        ("50¢", 1.0, 0.5),
        ("$1,250", 12.0, 12.5),
        ("28", 28, 28.0),
        ("80", 28, 80.0),
        ("85", 28, 0.85),
        ("2.35", 0.5, 2.35),
        ("250", None, 2.5),
        ("50", None, 50.0),
        (" $3.10 ", None, 3.1),
    ],
)
def test_normalize_price_paid(raw, reference, expected):
    assert normalize_price_paid(raw, reference) == expected


@pytest.mark.parametrize("raw", ["", "   ", None, "abc", "-5", "0", "$", "c"])
def test_unusable_input_gives_none(raw):
    assert normalize_price_paid(raw, 2.0) is None


def test_cents_threshold_is_configurable():
    assert normalize_price_paid("80", 28, cents_threshold=2.0) == 0.8
    assert normalize_price_paid("80", 28, cents_threshold=3.0) == 80.0


def test_pnl_pct():
    assert math.isclose(pnl_pct(2.0, 3.0), 50.0)
    assert math.isclose(pnl_pct(4.0, 1.0), -75.0)
    assert pnl_pct(None, 3.0) is None
    assert pnl_pct(2.0, None) is None
    assert pnl_pct(0.0, 3.0) is None
