"""Configuration helpers for the risk engine and its surfaces."""

from __future__ import annotations

from .loader import AppSettings, get_settings, reset_settings_cache

__all__ = ["AppSettings", "get_settings", "reset_settings_cache"]
