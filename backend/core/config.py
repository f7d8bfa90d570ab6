"""Runtime configuration.

Thresholds are read from env vars (optionally from a `.env` file) so a host
can tune them without touching code. Defaults reproduce the stock behaviour.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

load_dotenv()

LOGGER_NAME = "query_insights"

logger = logging.getLogger(LOGGER_NAME)

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


class AnalysisSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    sample_size: int = 10
    max_chart_rows: int = 100
    max_pie_rows: int = 20
    page_size: int = 50
    outlier_sigma: float = 2.0
    trend_threshold_pct: float = 5.0
    cache_size: int = 128
    parallel: bool = False
    log_level: str = "WARNING"


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip() or default


def _env_int(key: str, default: int, *, minimum: int = 1) -> int:
    raw = _env(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {value}")
    return value


def _env_float(key: str, default: float) -> float:
    raw = _env(key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{key} must be non-negative, got {value}")
    return value


def _env_bool(key: str, default: bool) -> bool:
    raw = _env(key)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigError(f"{key} must be a boolean flag, got {raw!r}")


def load_settings() -> AnalysisSettings:
    """Build settings from the current environment (uncached)."""
    level = (_env("INSIGHTS_LOG_LEVEL", "WARNING") or "WARNING").upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"INSIGHTS_LOG_LEVEL is not a logging level: {level!r}")

    return AnalysisSettings(
        sample_size=_env_int("INSIGHTS_SAMPLE_SIZE", 10),
        max_chart_rows=_env_int("INSIGHTS_MAX_CHART_ROWS", 100),
        max_pie_rows=_env_int("INSIGHTS_MAX_PIE_ROWS", 20),
        page_size=_env_int("INSIGHTS_PAGE_SIZE", 50),
        outlier_sigma=_env_float("INSIGHTS_OUTLIER_SIGMA", 2.0),
        trend_threshold_pct=_env_float("INSIGHTS_TREND_THRESHOLD_PCT", 5.0),
        cache_size=_env_int("INSIGHTS_CACHE_SIZE", 128),
        parallel=_env_bool("INSIGHTS_PARALLEL", False),
        log_level=level,
    )


@lru_cache(maxsize=1)
def get_settings() -> AnalysisSettings:
    return load_settings()


def configure_logging(settings: Optional[AnalysisSettings] = None) -> logging.Logger:
    """Apply the configured level to the shared logger and return it."""
    settings = settings or get_settings()
    logger.setLevel(settings.log_level)
    return logger
