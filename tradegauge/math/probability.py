"""Closed-form probability estimates for a single option contract.

The estimate is a retail-facing approximation rather than a pricing model:
interest rates and dividend yield are taken as zero so that the log-normal
terminal distribution is centred on today's spot. The cumulative normal uses
the Abramowitz & Stegun rational polynomial (formula 26.2.17) which is
accurate to better than 1e-7 and needs nothing beyond :mod:`math`.
"""

from __future__ import annotations

import math
from typing import Optional, Union

from tradegauge.models.option import OptionKind, finite_or_none

DAYS_PER_YEAR = 365.0
MIN_TIME_TO_EXPIRY = 1e-6

# Abramowitz & Stegun 26.2.17 coefficients.
_P = 0.2316419
_B = (0.319381530, -0.356563782, 1.781477937, -1.821255978, 1.330274429)
_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def normal_cdf(x: float) -> float:
    """Standard normal cumulative distribution function."""

    t = 1.0 / (1.0 + _P * abs(x))
    density = _INV_SQRT_2PI * math.exp(-x * x / 2.0)
    poly = t * (_B[0] + t * (_B[1] + t * (_B[2] + t * (_B[3] + t * _B[4]))))
    tail = density * poly
    return 1.0 - tail if x > 0 else tail


def d2(spot: float, strike: float, sigma: float, years: float) -> float:
    """Black-Scholes ``d2`` with zero drift."""

    return (math.log(spot / strike) - 0.5 * sigma * sigma * years) / (sigma * math.sqrt(years))


def probability_itm(
    spot: Optional[float],
    strike: Optional[float],
    kind: Union[OptionKind, str],
    iv_pct: Optional[float],
    dte: Optional[float],
) -> Optional[int]:
    """Probability (0-100, whole percent) that the option finishes in the money.

    Args:
        spot: Current underlying price.
        strike: Option strike.
        kind: ``CALL`` or ``PUT``.
        iv_pct: Implied volatility in percent, e.g. ``42`` for 42%.
        dte: Days to expiry.

    Returns:
        Whole-number percentage, or ``None`` when any input is missing,
        non-finite, or when IV or DTE is not positive.
    """

    spot_value = finite_or_none(spot)
    strike_value = finite_or_none(strike)
    iv_value = finite_or_none(iv_pct)
    dte_value = finite_or_none(dte)
    if spot_value is None or strike_value is None or iv_value is None or dte_value is None:
        return None
    if spot_value <= 0 or strike_value <= 0 or iv_value <= 0 or dte_value <= 0:
        return None

    sigma = iv_value / 100.0
    years = max(MIN_TIME_TO_EXPIRY, dte_value / DAYS_PER_YEAR)
    z = d2(spot_value, strike_value, sigma, years)
    probability = normal_cdf(z) if OptionKind(kind).is_call else normal_cdf(-z)
    return int(round(probability * 100))


__all__ = ["d2", "normal_cdf", "probability_itm"]
