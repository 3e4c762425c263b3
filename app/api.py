"""HTTP route definitions for the service."""

from __future__ import annotations

import re
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.schemas import (
    AlertSchema,
    AlertsResponse,
    LatestReading,
    ParameterSchema,
    ReadingSchema,
    SeriesResponse,
    SiteSchema,
    StreamStatus,
    ThresholdSchema,
    ThresholdUpdate,
    parameter_catalogue,
)
from models.parameters import PARAMETERS, parse_parameter, values_of
from models.records import Site
from services.generator import ReadingGenerator
from services.monitor import MonitorService, build_default_monitor
from services.sites import filter_sites

router = APIRouter()

_ASCII_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def get_monitor() -> MonitorService:
    return build_default_monitor()


def _require_site(monitor: MonitorService, site_id: str) -> Site:
    try:
        return monitor.get_site(site_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Site {site_id!r} not found.",
        ) from exc


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII ``filename`` and an RFC 5987 ``filename*``."""
    fallback = _ASCII_UNSAFE.sub("_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def stream_status(monitor: MonitorService) -> StreamStatus:
    return StreamStatus(
        streaming=monitor.streaming,
        interval_seconds=monitor.stream_interval,
        tick_count=monitor.tick_count,
    )


@router.get(
    "/parameters",
    response_model=List[ParameterSchema],
    summary="Describe the monitored parameters.",
)
async def list_parameters() -> List[ParameterSchema]:
    return parameter_catalogue(ReadingGenerator.bounds)


@router.get(
    "/sites",
    response_model=List[SiteSchema],
    summary="List monitoring sites, optionally filtered by name or id.",
)
async def list_sites(
    search: Optional[str] = Query(None, description="Case-insensitive name or id filter."),
    monitor: MonitorService = Depends(get_monitor),
) -> List[SiteSchema]:
    return [SiteSchema.from_site(site) for site in filter_sites(monitor.sites, search)]


@router.get(
    "/sites/{site_id}",
    response_model=SiteSchema,
    summary="Fetch one monitoring site.",
)
async def get_site(
    site_id: str,
    monitor: MonitorService = Depends(get_monitor),
) -> SiteSchema:
    return SiteSchema.from_site(_require_site(monitor, site_id))


@router.get(
    "/sites/{site_id}/readings",
    response_model=SeriesResponse,
    summary="Fetch the rolling series for a site, oldest first.",
)
async def get_readings(
    site_id: str,
    limit: Optional[int] = Query(None, ge=1, description="Return only the newest N readings."),
    monitor: MonitorService = Depends(get_monitor),
) -> SeriesResponse:
    _require_site(monitor, site_id)
    series = monitor.series(site_id)
    if limit is not None:
        series = series[-limit:]
    return SeriesResponse(
        site_id=site_id,
        count=len(series),
        readings=[ReadingSchema.from_reading(reading) for reading in series],
    )


@router.get(
    "/sites/{site_id}/latest",
    response_model=LatestReading,
    summary="Fetch the latest reading for a site with per-parameter severity.",
)
async def get_latest(
    site_id: str,
    monitor: MonitorService = Depends(get_monitor),
) -> LatestReading:
    _require_site(monitor, site_id)
    view = monitor.view(site_id)
    if view.reading is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Site {site_id!r} has no readings yet.",
        )
    return LatestReading(
        site_id=site_id,
        timestamp=view.reading.timestamp,
        values=values_of(view.reading),
        severities=view.severities,
    )


@router.get(
    "/sites/{site_id}/alerts",
    response_model=AlertsResponse,
    summary="Active alerts for a site's latest reading, critical first.",
)
async def get_alerts(
    site_id: str,
    monitor: MonitorService = Depends(get_monitor),
) -> AlertsResponse:
    _require_site(monitor, site_id)
    view = monitor.view(site_id)
    alerts = [
        AlertSchema(
            parameter=alert.parameter,
            label=PARAMETERS[alert.parameter].label,
            unit=PARAMETERS[alert.parameter].unit,
            severity=alert.severity,
            value=alert.value,
        )
        for alert in view.alerts
    ]
    return AlertsResponse(
        site_id=site_id,
        timestamp=view.reading.timestamp if view.reading is not None else None,
        alerts=alerts,
    )


@router.get(
    "/sites/{site_id}/export.csv",
    summary="Download the site's current series as CSV.",
    response_class=Response,
    responses={200: {"content": {"text/csv": {}}}},
)
async def export_csv(
    site_id: str,
    monitor: MonitorService = Depends(get_monitor),
) -> Response:
    _require_site(monitor, site_id)
    filename, body = monitor.export_csv(site_id)
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": content_disposition(filename)},
    )


@router.get(
    "/thresholds",
    response_model=List[ThresholdSchema],
    summary="Current alert thresholds.",
)
async def list_thresholds(
    monitor: MonitorService = Depends(get_monitor),
) -> List[ThresholdSchema]:
    return [
        ThresholdSchema.from_spec(parameter, spec)
        for parameter, spec in monitor.thresholds.snapshot().items()
    ]


@router.put(
    "/thresholds/{parameter_key}",
    response_model=ThresholdSchema,
    summary="Edit the warning and/or critical level of a parameter.",
)
async def update_threshold(
    parameter_key: str,
    update: ThresholdUpdate,
    monitor: MonitorService = Depends(get_monitor),
) -> ThresholdSchema:
    try:
        parameter = parse_parameter(parameter_key)
        spec = monitor.update_threshold(
            parameter, warning=update.warning, critical=update.critical
        )
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown parameter {parameter_key!r}.",
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return ThresholdSchema.from_spec(parameter, spec)


@router.get(
    "/stream",
    response_model=StreamStatus,
    summary="Streaming state of the simulation.",
)
async def get_stream(monitor: MonitorService = Depends(get_monitor)) -> StreamStatus:
    return stream_status(monitor)


@router.post(
    "/stream/start",
    response_model=StreamStatus,
    summary="Start streaming new readings (no-op when already streaming).",
)
async def start_stream(monitor: MonitorService = Depends(get_monitor)) -> StreamStatus:
    monitor.start_streaming()
    return stream_status(monitor)


@router.post(
    "/stream/stop",
    response_model=StreamStatus,
    summary="Stop streaming new readings (no-op when already stopped).",
)
async def stop_stream(monitor: MonitorService = Depends(get_monitor)) -> StreamStatus:
    monitor.stop_streaming()
    return stream_status(monitor)


@router.post(
    "/stream/tick",
    response_model=StreamStatus,
    summary="Advance every site's series by one reading.",
)
async def tick_stream(monitor: MonitorService = Depends(get_monitor)) -> StreamStatus:
    monitor.tick()
    return stream_status(monitor)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /ui for the dashboard and /docs for the API."}
