"""Unit tests for the per-site series buffer."""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from models.records import Site
from services.generator import ReadingGenerator
from services.series import SeriesBuffer

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
SITE_A = Site(id="A", name="Site A", lat=47.0, lon=-122.0, depth_m=3)
SITE_B = Site(id="B", name="Site B", lat=48.0, lon=-123.0, depth_m=4)


def _buffer(seed: int = 5, **kwargs) -> SeriesBuffer:
    return SeriesBuffer(ReadingGenerator(random.Random(seed)), **kwargs)


def _assert_strictly_increasing(series) -> None:
    timestamps = [reading.timestamp for reading in series]
    assert all(earlier < later for earlier, later in zip(timestamps, timestamps[1:]))


def test_seed_all_backfills_three_hours_at_five_minute_steps() -> None:
    buffer = _buffer()

    series_map = buffer.seed_all([SITE_A, SITE_B], NOW)

    assert set(series_map) == {"A", "B"}
    for series in series_map.values():
        assert len(series) == 37
        assert series[0].timestamp == NOW - timedelta(hours=3)
        assert series[-1].timestamp == NOW
        _assert_strictly_increasing(series)


def test_seed_all_length_follows_window_and_interval() -> None:
    buffer = _buffer(backfill=timedelta(minutes=60), interval=timedelta(minutes=7))

    series = buffer.seed_all([SITE_A], NOW)["A"]

    assert len(series) == 1 + 60 // 7
    _assert_strictly_increasing(series)


def test_seed_all_respects_max_length() -> None:
    buffer = _buffer(max_length=10)

    series = buffer.seed_all([SITE_A], NOW)["A"]

    assert len(series) == 10
    assert series[-1].timestamp == NOW


def test_sites_are_seeded_independently() -> None:
    series_map = _buffer().seed_all([SITE_A, SITE_B], NOW)

    assert series_map["A"] != series_map["B"]


def test_advance_appends_one_reading_at_now() -> None:
    buffer = _buffer()
    seeded = buffer.seed_all([SITE_A], NOW)
    later = NOW + timedelta(seconds=5)

    advanced = buffer.advance(seeded, [SITE_A], later)

    assert len(advanced["A"]) == 38
    assert advanced["A"][:-1] == seeded["A"]
    assert advanced["A"][-1].timestamp == later


def test_advance_returns_new_mapping_and_leaves_input_untouched() -> None:
    buffer = _buffer()
    seeded = buffer.seed_all([SITE_A, SITE_B], NOW)
    before = dict(seeded)

    advanced = buffer.advance(seeded, [SITE_A, SITE_B], NOW + timedelta(seconds=5))

    assert advanced is not seeded
    assert seeded == before
    assert len(seeded["A"]) == 37


def test_advancing_one_site_never_touches_another() -> None:
    buffer = _buffer()
    seeded = buffer.seed_all([SITE_A, SITE_B], NOW)
    site_b = seeded["B"]

    series_map = seeded
    for index in range(1, 20):
        series_map = buffer.advance(series_map, [SITE_A], NOW + timedelta(seconds=5 * index))

    assert series_map["B"] is site_b
    assert len(series_map["B"]) == 37
    assert len(series_map["A"]) == 37 + 19


def test_series_is_capped_and_evicts_one_per_append() -> None:
    buffer = _buffer(max_length=240)
    series_map = buffer.seed_all([SITE_A], NOW)

    for index in range(1, 260):
        previous = series_map["A"]
        series_map = buffer.advance(series_map, [SITE_A], NOW + timedelta(seconds=5 * index))
        current = series_map["A"]
        assert len(current) <= 240
        if len(previous) == 240:
            assert len(current) == 240
            assert current[0] == previous[1]
            assert current[-2] == previous[-1]

    assert len(series_map["A"]) == 240
    _assert_strictly_increasing(series_map["A"])


def test_advance_seeds_missing_or_empty_series() -> None:
    buffer = _buffer()

    advanced = buffer.advance({"B": ()}, [SITE_A, SITE_B], NOW)

    assert len(advanced["A"]) == 1
    assert len(advanced["B"]) == 1
    assert advanced["A"][0].timestamp == NOW


def test_advance_keeps_sites_not_being_advanced() -> None:
    buffer = _buffer()
    seeded = buffer.seed_all([SITE_A, SITE_B], NOW)

    advanced = buffer.advance(seeded, [SITE_A], NOW + timedelta(seconds=5))

    assert advanced["B"] is seeded["B"]


def test_advance_keeps_timestamps_strictly_increasing_when_clock_stalls() -> None:
    buffer = _buffer()
    seeded = buffer.seed_all([SITE_A], NOW)

    advanced = buffer.advance(seeded, [SITE_A], NOW)
    advanced = buffer.advance(advanced, [SITE_A], NOW - timedelta(minutes=1))

    assert advanced["A"][-2].timestamp == NOW + timedelta(milliseconds=1)
    assert advanced["A"][-1].timestamp == NOW + timedelta(milliseconds=2)
    _assert_strictly_increasing(advanced["A"])


def test_latest_returns_last_reading_or_none() -> None:
    buffer = _buffer()
    seeded = buffer.seed_all([SITE_A], NOW)

    assert SeriesBuffer.latest(seeded, "A") is seeded["A"][-1]
    assert SeriesBuffer.latest(seeded, "missing") is None
    assert SeriesBuffer.latest({"A": ()}, "A") is None


def test_invalid_configuration_is_rejected() -> None:
    with pytest.raises(ValueError):
        _buffer(max_length=0)
    with pytest.raises(ValueError):
        _buffer(interval=timedelta(0))
