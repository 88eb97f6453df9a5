"""Boundary handling for the advisory/narrative provider."""

from .parsing import (
    make_fallback_plan,
    make_fallback_routes,
    normalize_routes,
    parse_advisory_payload,
    parse_plan_payload,
    parse_routes_payload,
    sanitize_narrative,
)

__all__ = [
    "make_fallback_plan",
    "make_fallback_routes",
    "normalize_routes",
    "parse_advisory_payload",
    "parse_plan_payload",
    "parse_routes_payload",
    "sanitize_narrative",
]
