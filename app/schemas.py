"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from models.parameters import PARAMETERS, Parameter, ParameterGroup, values_of
from models.records import Reading, Site
from models.thresholds import Direction, Severity, ThresholdSpec


class SiteSchema(BaseModel):
    """A monitoring location as exposed by the API and read from site files."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    depth_m: float = Field(..., ge=0)

    @classmethod
    def from_site(cls, site: Site) -> "SiteSchema":
        return cls(id=site.id, name=site.name, lat=site.lat, lon=site.lon, depth_m=site.depth_m)

    def to_site(self) -> Site:
        return Site(id=self.id, name=self.name, lat=self.lat, lon=self.lon, depth_m=self.depth_m)


class ParameterSchema(BaseModel):
    key: Parameter
    label: str
    unit: str
    group: ParameterGroup
    min_value: float
    max_value: float


class ReadingSchema(BaseModel):
    """One reading with values keyed by parameter."""

    timestamp: datetime
    values: Dict[Parameter, float]

    @classmethod
    def from_reading(cls, reading: Reading) -> "ReadingSchema":
        return cls(timestamp=reading.timestamp, values=values_of(reading))


class LatestReading(ReadingSchema):
    site_id: str
    severities: Dict[Parameter, Severity] = Field(default_factory=dict)


class SeriesResponse(BaseModel):
    site_id: str
    count: int = Field(..., ge=0)
    readings: List[ReadingSchema] = Field(default_factory=list)


class AlertSchema(BaseModel):
    parameter: Parameter
    label: str
    unit: str
    severity: Severity
    value: float


class AlertsResponse(BaseModel):
    site_id: str
    timestamp: Optional[datetime] = None
    alerts: List[AlertSchema] = Field(default_factory=list)


class ThresholdSchema(BaseModel):
    parameter: Parameter
    warning: float
    critical: float
    direction: Direction
    consistent: bool = Field(
        default=True, description="False when critical is less extreme than warning."
    )

    @classmethod
    def from_spec(cls, parameter: Parameter, spec: ThresholdSpec) -> "ThresholdSchema":
        return cls(
            parameter=parameter,
            warning=spec.warning,
            critical=spec.critical,
            direction=spec.direction,
            consistent=spec.is_consistent(),
        )


class ThresholdUpdate(BaseModel):
    """Partial threshold edit; at least one level must be provided."""

    warning: Optional[float] = Field(None, allow_inf_nan=False)
    critical: Optional[float] = Field(None, allow_inf_nan=False)


class StreamStatus(BaseModel):
    streaming: bool
    interval_seconds: float = Field(..., gt=0)
    tick_count: int = Field(..., ge=0)


def parameter_catalogue(
    bounds: Callable[[Parameter], Tuple[float, float]],
) -> List[ParameterSchema]:
    """Describe every parameter; ``bounds`` maps a parameter to its (min, max)."""
    items: List[ParameterSchema] = []
    for parameter, info in PARAMETERS.items():
        minimum, maximum = bounds(parameter)
        items.append(
            ParameterSchema(
                key=parameter,
                label=info.label,
                unit=info.unit,
                group=info.group,
                min_value=minimum,
                max_value=maximum,
            )
        )
    return items
