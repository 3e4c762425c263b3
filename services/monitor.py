"""Coordinating service owning the live series, thresholds and stream."""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from threading import Lock
from typing import Callable, Dict, Iterable, List, NamedTuple, Optional, Sequence

from models.parameters import Parameter
from models.records import Reading, Series, SeriesMap, Site
from models.thresholds import Severity, ThresholdSpec, ThresholdTable
from services.classifier import AlertRecord, active_alerts, severity_map
from services.export import export_filename, to_csv
from services.generator import ReadingGenerator
from services.series import SeriesBuffer
from services.sites import load_sites
from services.ticker import PeriodicTicker
from settings import get_settings

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SiteView(NamedTuple):
    """A site's series and its latest reading classified from one snapshot."""

    site: Site
    series: Series
    reading: Optional[Reading]
    severities: Dict[Parameter, Severity]
    alerts: List[AlertRecord]


class MonitorService:
    """Owns the current series mapping and the live threshold table.

    Only :meth:`tick` and :meth:`seed` replace the mapping, and they do so by
    swapping in a new one; readers never need to lock.
    """

    def __init__(
        self,
        sites: Sequence[Site],
        generator: ReadingGenerator,
        thresholds: Optional[ThresholdTable] = None,
        max_length: int = 240,
        backfill: timedelta = timedelta(hours=3),
        sample_interval: timedelta = timedelta(minutes=5),
        stream_interval: float = 5.0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.sites: tuple[Site, ...] = tuple(sites)
        self._sites_by_id: Dict[str, Site] = {site.id: site for site in self.sites}
        self.generator = generator
        self.thresholds = thresholds if thresholds is not None else ThresholdTable.defaults()
        self.buffer = SeriesBuffer(
            generator,
            max_length=max_length,
            backfill=backfill,
            interval=sample_interval,
        )
        self.clock = clock
        self.tick_count = 0
        self._series: SeriesMap = {}
        self._write_lock = Lock()
        self.ticker = PeriodicTicker(stream_interval, self.tick, name="monitor-stream")

        for parameter in self.thresholds.inconsistencies():
            self._warn_inconsistent(parameter, self.thresholds[parameter])

    def seed(self, now: Optional[datetime] = None) -> SeriesMap:
        moment = now if now is not None else self.clock()
        with self._write_lock:
            self._series = self.buffer.seed_all(self.sites, moment)
            self.tick_count = 0
            series = self._series
        logger.info(
            "Seeded site history",
            extra={"site_count": len(self.sites), "series_length": self._longest(series)},
        )
        return series

    def tick(self, now: Optional[datetime] = None) -> SeriesMap:
        moment = now if now is not None else self.clock()
        with self._write_lock:
            self._series = self.buffer.advance(self._series, self.sites, moment)
            self.tick_count += 1
            series = self._series
            tick_count = self.tick_count
        logger.debug(
            "Advanced site series",
            extra={"tick_count": tick_count, "series_length": self._longest(series)},
        )
        return series

    def snapshot(self) -> SeriesMap:
        return self._series

    def get_site(self, site_id: str) -> Site:
        site = self._sites_by_id.get(site_id)
        if site is None:
            raise KeyError(f"Site {site_id!r} not found.")
        return site

    def series(self, site_id: str) -> Series:
        self.get_site(site_id)
        return self._series.get(site_id, ())

    def latest(self, site_id: str) -> Optional[Reading]:
        self.get_site(site_id)
        return self.buffer.latest(self._series, site_id)

    def view(self, site_id: str) -> SiteView:
        """Classify a site's latest reading against one series and threshold snapshot."""
        site = self.get_site(site_id)
        series = self._series.get(site_id, ())
        if not series:
            return SiteView(site, series, None, {}, [])
        reading = series[-1]
        thresholds = self.thresholds.snapshot()
        return SiteView(
            site,
            series,
            reading,
            severity_map(reading, thresholds),
            active_alerts(reading, thresholds),
        )

    def alerts(self, site_id: str) -> List[AlertRecord]:
        return self.view(site_id).alerts

    def severities(self, site_id: str) -> Dict[Parameter, Severity]:
        return self.view(site_id).severities

    def export_csv(self, site_id: str) -> tuple[str, str]:
        """Return ``(filename, csv_text)`` for a site's current series."""
        site = self.get_site(site_id)
        return export_filename(site), to_csv(self.series(site_id))

    def update_threshold(
        self,
        parameter: Parameter,
        warning: Optional[float] = None,
        critical: Optional[float] = None,
    ) -> ThresholdSpec:
        if warning is None and critical is None:
            raise ValueError("Provide a warning or critical level to update.")
        for level in (warning, critical):
            if level is not None and not math.isfinite(level):
                raise ValueError("Threshold levels must be finite numbers.")
        spec = self.thresholds.update(parameter, warning=warning, critical=critical)
        logger.info(
            "Threshold updated",
            extra={"parameter": parameter, "warning": spec.warning, "critical": spec.critical},
        )
        if not spec.is_consistent():
            self._warn_inconsistent(parameter, spec)
        return spec

    @property
    def streaming(self) -> bool:
        return self.ticker.running

    @property
    def stream_interval(self) -> float:
        return self.ticker.interval

    def start_streaming(self) -> bool:
        return self.ticker.start()

    def stop_streaming(self) -> bool:
        return self.ticker.stop()

    def shutdown(self) -> None:
        """Stop the stream during application shutdown."""
        self.ticker.stop()

    @staticmethod
    def _longest(series: SeriesMap) -> int:
        return max((len(readings) for readings in series.values()), default=0)

    @staticmethod
    def _warn_inconsistent(parameter: Parameter, spec: ThresholdSpec) -> None:
        logger.warning(
            "Critical level is less extreme than warning level",
            extra={
                "parameter": parameter,
                "warning": spec.warning,
                "critical": spec.critical,
                "direction": spec.direction,
            },
        )


def build_monitor(
    sites: Iterable[Site],
    seed: Optional[int] = None,
    max_length: int = 240,
    backfill_minutes: int = 180,
    sample_interval_minutes: int = 5,
    stream_interval: float = 5.0,
) -> MonitorService:
    """Wire a seeded monitor from plain configuration values."""
    generator = ReadingGenerator(random.Random(seed))
    monitor = MonitorService(
        sites=tuple(sites),
        generator=generator,
        max_length=max_length,
        backfill=timedelta(minutes=backfill_minutes),
        sample_interval=timedelta(minutes=sample_interval_minutes),
        stream_interval=stream_interval,
    )
    monitor.seed()
    return monitor


@lru_cache
def build_default_monitor() -> MonitorService:
    """Factory that wires the monitor from settings."""
    settings = get_settings()
    return build_monitor(
        load_sites(settings.sites_path),
        seed=settings.random_seed,
        max_length=settings.max_series_length,
        backfill_minutes=settings.backfill_minutes,
        sample_interval_minutes=settings.sample_interval_minutes,
        stream_interval=settings.stream_interval_seconds,
    )
