"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_int(name: str, default: int) -> int:
    try:
        return int(_env_str(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(_env_str(name, str(default)))
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path
    timezone_name: str
    tax_percentage: float
    currency: str
    grc_prefix: str
    upcoming_default_days: int
    forecast_upcoming_days: int
    forecast_trend_days: int
    forecast_default_window_days: int
    seed_demo_data: bool
    demo_random_seed: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; call ``cache_clear()`` to reload."""
    return Settings(
        app_name=_env_str("APP_NAME", "Front Desk Availability Service"),
        app_version=_env_str("APP_VERSION", "1.0.0"),
        log_level=_env_str("LOG_LEVEL", "INFO"),
        database_path=Path(_env_str("DATABASE_PATH", "data/frontdesk.db")),
        timezone_name=_env_str("HOTEL_TIMEZONE", "UTC"),
        tax_percentage=_env_float("TAX_PERCENTAGE", 0.0),
        currency=_env_str("CURRENCY", "LKR"),
        grc_prefix=_env_str("GRC_PREFIX", "GRC"),
        upcoming_default_days=_env_int("UPCOMING_DEFAULT_DAYS", 30),
        forecast_upcoming_days=_env_int("FORECAST_UPCOMING_DAYS", 60),
        forecast_trend_days=_env_int("FORECAST_TREND_DAYS", 14),
        forecast_default_window_days=_env_int("FORECAST_DEFAULT_WINDOW_DAYS", 30),
        seed_demo_data=_env_bool("SEED_DEMO_DATA", True),
        demo_random_seed=_env_int("DEMO_RANDOM_SEED", 42),
    )
