from __future__ import annotations

import json
from typing import Iterable

from services.monitor import build_default_monitor
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    sites_path = tmp_path / "sites.json"
    sites_path.write_text(
        json.dumps(
            [{"id": "HC-01", "name": "Hood Canal", "lat": 47.6, "lon": -122.9, "depth_m": 6}]
        )
    )

    monkeypatch.setenv("MONITOR_STREAM_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("MONITOR_SAMPLE_INTERVAL_MINUTES", "10")
    monkeypatch.setenv("MONITOR_BACKFILL_MINUTES", "60")
    monkeypatch.setenv("MONITOR_MAX_SERIES_LENGTH", "5")
    monkeypatch.setenv("MONITOR_RANDOM_SEED", "17")
    monkeypatch.setenv("MONITOR_SITES_PATH", str(sites_path))
    monkeypatch.setenv("MONITOR_STREAM_AUTOSTART", "no")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    caches = (get_settings, build_default_monitor)
    _clear_caches(caches)

    try:
        settings = get_settings()
        monitor = build_default_monitor()

        assert settings.random_seed == 17
        assert settings.stream_autostart is False
        assert settings.log_level == "DEBUG"
        assert [site.id for site in monitor.sites] == ["HC-01"]
        assert monitor.stream_interval == 2.5
        assert len(monitor.series("HC-01")) == 5

        monitor.tick()
        assert len(monitor.series("HC-01")) == 5
    finally:
        build_default_monitor().shutdown()
        _clear_caches(caches)


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("MONITOR_STREAM_INTERVAL_SECONDS", "soon")
    monkeypatch.setenv("MONITOR_SAMPLE_INTERVAL_MINUTES", "-3")
    monkeypatch.setenv("MONITOR_BACKFILL_MINUTES", "")
    monkeypatch.setenv("MONITOR_MAX_SERIES_LENGTH", "0")
    monkeypatch.setenv("MONITOR_RANDOM_SEED", "abc")
    monkeypatch.setenv("MONITOR_SITES_PATH", "   ")
    monkeypatch.setenv("MONITOR_STREAM_AUTOSTART", "maybe")
    get_settings.cache_clear()

    try:
        settings = get_settings()

        assert settings.stream_interval_seconds == 5.0
        assert settings.sample_interval_minutes == 5
        assert settings.backfill_minutes == 180
        assert settings.max_series_length == 240
        assert settings.random_seed is None
        assert settings.sites_path is None
        assert settings.stream_autostart is True
    finally:
        get_settings.cache_clear()


def test_seeded_monitor_is_reproducible(monkeypatch) -> None:
    monkeypatch.setenv("MONITOR_RANDOM_SEED", "3")
    _clear_caches((get_settings, build_default_monitor))

    try:
        first = [reading.salinity for reading in build_default_monitor().series("PS-ALKI")]
        build_default_monitor.cache_clear()
        second = [reading.salinity for reading in build_default_monitor().series("PS-ALKI")]
    finally:
        _clear_caches((get_settings, build_default_monitor))

    assert first == second
    assert len(first) == 37
