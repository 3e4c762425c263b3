from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from models.parameters import PARAMETERS, Parameter, ParameterGroup, parameters_in, value_of
from models.records import Reading
from models.thresholds import Direction, Severity
from services.monitor import MonitorService, build_default_monitor
from services.sites import filter_sites


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

_RECENT_ROWS = 12


def get_monitor() -> MonitorService:
    return build_default_monitor()


def _tiles(
    reading: Optional[Reading],
    severities: Dict[Parameter, Severity],
    group: ParameterGroup,
) -> List[dict]:
    if reading is None:
        return []
    return [
        {
            "key": parameter.value,
            "label": PARAMETERS[parameter].label,
            "unit": PARAMETERS[parameter].unit,
            "value": value_of(reading, parameter),
            "severity": severities.get(parameter, Severity.ok).value,
        }
        for parameter in parameters_in(group)
    ]


def _direction_text(direction: Direction) -> str:
    return "higher is worse" if direction is Direction.over else "lower is worse"


router = APIRouter(include_in_schema=False)


@router.get("/ui", name="ui_index", response_class=HTMLResponse)
async def ui_index(
    request: Request,
    site: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    monitor: MonitorService = Depends(get_monitor),
) -> HTMLResponse:
    active_id = site or monitor.sites[0].id
    try:
        view = monitor.view(active_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    latest = view.reading
    thresholds = [
        {
            "label": PARAMETERS[parameter].label,
            "warning": spec.warning,
            "critical": spec.critical,
            "direction": _direction_text(spec.direction),
            "consistent": spec.is_consistent(),
        }
        for parameter, spec in monitor.thresholds.snapshot().items()
    ]
    alerts = [
        {
            "label": PARAMETERS[alert.parameter].label,
            "unit": PARAMETERS[alert.parameter].unit,
            "severity": alert.severity.value,
            "value": alert.value,
        }
        for alert in view.alerts
    ]
    recent = [
        {"timestamp": reading.timestamp, "values": [value_of(reading, p) for p in PARAMETERS]}
        for reading in reversed(view.series[-_RECENT_ROWS:])
    ]

    return templates.TemplateResponse(
        request,
        "ui/index.html",
        {
            "sites": filter_sites(monitor.sites, search),
            "search": search or "",
            "site": view.site,
            "latest": latest,
            "water_tiles": _tiles(latest, view.severities, ParameterGroup.water_quality),
            "bio_tiles": _tiles(latest, view.severities, ParameterGroup.bioindicator),
            "alerts": alerts,
            "thresholds": thresholds,
            "columns": [PARAMETERS[p].label for p in PARAMETERS],
            "recent": recent,
            "streaming": monitor.streaming,
            "interval": monitor.stream_interval,
        },
    )


@router.get("/ui/sites/{site_id}", name="ui_site")
async def ui_site(
    request: Request,
    site_id: str,
    monitor: MonitorService = Depends(get_monitor),
) -> RedirectResponse:
    try:
        monitor.get_site(site_id)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    target = request.url_for("ui_index").include_query_params(site=site_id)
    return RedirectResponse(url=str(target), status_code=status.HTTP_303_SEE_OTHER)
