"""Per-site rolling series of simulated readings."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Optional

from models.records import Reading, Series, SeriesMap, Site
from services.generator import ReadingGenerator

_MIN_GAP = timedelta(milliseconds=1)


class SeriesBuffer:
    """Builds and advances bounded per-site series.

    Every operation returns new containers; the mappings and tuples it is
    given are never mutated, so a caller holding an earlier mapping keeps a
    consistent snapshot.
    """

    def __init__(
        self,
        generator: ReadingGenerator,
        max_length: int = 240,
        backfill: timedelta = timedelta(hours=3),
        interval: timedelta = timedelta(minutes=5),
    ) -> None:
        if max_length < 1:
            raise ValueError("max_length must be positive.")
        if interval <= timedelta(0):
            raise ValueError("interval must be positive.")
        self.generator = generator
        self.max_length = max_length
        self.backfill = backfill
        self.interval = interval

    def seed_all(self, sites: Iterable[Site], now: datetime) -> SeriesMap:
        return {site.id: self.backfill_series(now) for site in sites}

    def backfill_series(self, now: datetime) -> Series:
        start = now - self.backfill
        reading = self.generator.seed(start)
        readings: list[Reading] = []
        timestamp = start
        while timestamp <= now:
            reading = self.generator.step(reading, timestamp)
            readings.append(reading)
            timestamp += self.interval
        return tuple(readings[-self.max_length:])

    def advance(self, series_map: SeriesMap, sites: Iterable[Site], now: datetime) -> SeriesMap:
        updated: SeriesMap = dict(series_map)
        for site in sites:
            updated[site.id] = self._append(updated.get(site.id, ()), now)
        return updated

    def _append(self, series: Series, now: datetime) -> Series:
        if series:
            last = series[-1]
            timestamp = now if now > last.timestamp else last.timestamp + _MIN_GAP
        else:
            last = self.generator.seed(now)
            timestamp = now
        following = self.generator.step(last, timestamp)
        return (series + (following,))[-self.max_length:]

    @staticmethod
    def latest(series_map: SeriesMap, site_id: str) -> Optional[Reading]:
        series = series_map.get(site_id)
        if not series:
            return None
        return series[-1]
