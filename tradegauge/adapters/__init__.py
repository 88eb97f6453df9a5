"""Collaborator interfaces and in-memory implementations."""

from __future__ import annotations

from .base import (
    AdapterError,
    AdvisoryProvider,
    AdvisoryRequest,
    DataNotAvailable,
    EventCalendarProvider,
    MarketDataProvider,
    OptionsChain,
    RateLimitError,
)
from .static import StaticEventCalendarProvider, StaticMarketDataProvider

__all__ = [
    "AdapterError",
    "AdvisoryProvider",
    "AdvisoryRequest",
    "DataNotAvailable",
    "EventCalendarProvider",
    "MarketDataProvider",
    "OptionsChain",
    "RateLimitError",
    "StaticEventCalendarProvider",
    "StaticMarketDataProvider",
]
