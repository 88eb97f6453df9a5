"""Environment aware configuration loader for the risk engine."""

from __future__ import annotations

import copy
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from tradegauge.analysis.events import DEFAULT_EVENT_WINDOWS, DEFAULT_HORIZON_DAYS, SOON_DAYS, EventWindowRule
from tradegauge.analysis.pricing import DEFAULT_CENTS_THRESHOLD
from tradegauge.analysis.strikes import DEFAULT_EACH_SIDE, DEFAULT_MIN_COUNT, DEFAULT_PCT_WINDOW
from tradegauge.scoring.config import DEFAULT_SCORING_CONFIG, ScoringConfig, deep_merge
from tradegauge.sync.spot_poller import DEFAULT_COOLDOWN_SECONDS, DEFAULT_POLL_INTERVAL_SECONDS

DEFAULT_SETTINGS: Dict[str, Any] = {
    "pricing": {
        "cents_threshold": DEFAULT_CENTS_THRESHOLD,
    },
    "scoring": copy.deepcopy(DEFAULT_SCORING_CONFIG),
    "events": {
        "horizon_days": DEFAULT_HORIZON_DAYS,
        "soon_days": SOON_DAYS,
        "windows": [rule.model_dump() for rule in DEFAULT_EVENT_WINDOWS],
    },
    "strikes": {
        "mode": "count",
        "each_side": DEFAULT_EACH_SIDE,
        "pct_window": DEFAULT_PCT_WINDOW,
        "min_count": DEFAULT_MIN_COUNT,
    },
    "sync": {
        "poll_interval_seconds": DEFAULT_POLL_INTERVAL_SECONDS,
        "cooldown_seconds": DEFAULT_COOLDOWN_SECONDS,
    },
    "advisory": {
        "timeout_seconds": 20.0,
    },
}

CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"
ENVIRONMENT_VARIABLE = "TRADEGAUGE_ENV"


class PricingSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    cents_threshold: float = Field(default=DEFAULT_CENTS_THRESHOLD, gt=1.0)


class EventSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    horizon_days: int = Field(default=DEFAULT_HORIZON_DAYS, ge=0)
    soon_days: int = Field(default=SOON_DAYS, ge=0)
    windows: List[EventWindowRule] = Field(default_factory=lambda: list(DEFAULT_EVENT_WINDOWS))


class StrikeSettings(BaseModel):
    """Strike picker window. ``mode: percent`` restores the older band around spot."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["count", "percent"] = "count"
    each_side: int = Field(default=DEFAULT_EACH_SIDE, ge=0)
    pct_window: float = Field(default=DEFAULT_PCT_WINDOW, gt=0)
    min_count: int = Field(default=DEFAULT_MIN_COUNT, ge=0)

    @property
    def window_each_side(self) -> Optional[int]:
        return self.each_side if self.mode == "count" else None


class SyncSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    poll_interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL_SECONDS, gt=0)
    cooldown_seconds: float = Field(default=DEFAULT_COOLDOWN_SECONDS, ge=0)


class AdvisorySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    timeout_seconds: float = Field(default=20.0, gt=0)


class AppSettings(BaseModel):
    """Fully resolved application settings loaded from YAML."""

    model_config = ConfigDict(frozen=True)

    env: str = "dev"
    pricing: PricingSettings = Field(default_factory=PricingSettings)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    events: EventSettings = Field(default_factory=EventSettings)
    strikes: StrikeSettings = Field(default_factory=StrikeSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    advisory: AdvisorySettings = Field(default_factory=AdvisorySettings)

    @field_validator("env")
    @classmethod
    def _normalize_env(cls, value: str) -> str:
        return value.lower()


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle.read()) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping at the root.")
        return data


def _build_settings(env: str) -> AppSettings:
    config_path = CONFIG_DIR / f"{env}.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file for environment '{env}' not found at {config_path}")

    merged = copy.deepcopy(DEFAULT_SETTINGS)
    overrides = _load_yaml(config_path)
    merged = deep_merge(merged, overrides)
    merged["env"] = env
    return AppSettings.model_validate(merged)


@lru_cache(maxsize=None)
def _cached_settings(env: str) -> AppSettings:
    return _build_settings(env)


def get_settings(env: Optional[str] = None) -> AppSettings:
    """Load settings for the requested environment (default: TRADEGAUGE_ENV or 'dev')."""

    resolved_env = (env or os.getenv(ENVIRONMENT_VARIABLE, "dev")).strip().lower()
    return _cached_settings(resolved_env)


def reset_settings_cache() -> None:
    """Clear the cached settings, primarily used during tests."""

    _cached_settings.cache_clear()


__all__ = [
    "AdvisorySettings",
    "AppSettings",
    "CONFIG_DIR",
    "ENVIRONMENT_VARIABLE",
    "EventSettings",
    "PricingSettings",
    "StrikeSettings",
    "SyncSettings",
    "get_settings",
    "reset_settings_cache",
]
