from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_STREAM_INTERVAL_ENV = "MONITOR_STREAM_INTERVAL_SECONDS"
_SAMPLE_INTERVAL_ENV = "MONITOR_SAMPLE_INTERVAL_MINUTES"
_BACKFILL_ENV = "MONITOR_BACKFILL_MINUTES"
_MAX_LENGTH_ENV = "MONITOR_MAX_SERIES_LENGTH"
_RANDOM_SEED_ENV = "MONITOR_RANDOM_SEED"
_SITES_PATH_ENV = "MONITOR_SITES_PATH"
_AUTOSTART_ENV = "MONITOR_STREAM_AUTOSTART"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    stream_interval_seconds: float
    sample_interval_minutes: int
    backfill_minutes: int
    max_series_length: int
    random_seed: Optional[int]
    sites_path: Optional[str]
    stream_autostart: bool
    log_level: str


def _read_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    candidate = value.strip()
    return candidate or None


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    candidate = _read_env(name)
    if candidate is None:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    candidate = _read_env(name)
    if candidate is None:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_optional_int(name: str) -> Optional[int]:
    candidate = _read_env(name)
    if candidate is None:
        return None
    try:
        return int(candidate)
    except ValueError:
        return None


def _read_bool(name: str, default: bool) -> bool:
    candidate = _read_env(name)
    if candidate is None:
        return default
    lowered = candidate.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    return default


def _read_log_level(default: str) -> str:
    candidate = _read_env(_LOG_LEVEL_ENV)
    if candidate is None:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        stream_interval_seconds=_read_positive_float(_STREAM_INTERVAL_ENV, 5.0),
        sample_interval_minutes=_read_positive_int(_SAMPLE_INTERVAL_ENV, 5),
        backfill_minutes=_read_positive_int(_BACKFILL_ENV, 180),
        max_series_length=_read_positive_int(_MAX_LENGTH_ENV, 240),
        random_seed=_read_optional_int(_RANDOM_SEED_ENV),
        sites_path=_read_optional_env(_SITES_PATH_ENV, None),
        stream_autostart=_read_bool(_AUTOSTART_ENV, True),
        log_level=_read_log_level("INFO"),
    )
