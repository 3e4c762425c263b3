"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Tuple


@dataclass(frozen=True, slots=True)
class Reading:
    """One simulated sample for one site."""

    timestamp: datetime
    temperature: float
    salinity: float
    ph: float
    dissolved_oxygen: float
    turbidity: float
    chlorophyll: float
    gene_expression: float
    methylation_fraction: float
    metabolite_index: float
    lipid_oxidation_ratio: float


@dataclass(frozen=True, slots=True)
class Site:
    """A fixed monitoring location."""

    id: str
    name: str
    lat: float
    lon: float
    depth_m: float


Series = Tuple[Reading, ...]
SeriesMap = Dict[str, Series]
