"""Numerical helpers."""

from .probability import normal_cdf, probability_itm

__all__ = ["normal_cdf", "probability_itm"]
