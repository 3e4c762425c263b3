"""Synthetic reading generation via bounded random walks."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Mapping, Optional, Protocol, Tuple

from models.parameters import PARAMETERS, Parameter, value_of
from models.records import Reading


class UniformSource(Protocol):
    """Anything producing uniform floats in ``[0, 1)``."""

    def random(self) -> float: ...


@dataclass(frozen=True)
class WalkSpec:
    seed_low: float
    seed_span: float
    step_size: float
    minimum: float
    maximum: float


# Seed ranges describe "normal" conditions; walk bounds are hard limits.
WALKS: Mapping[Parameter, WalkSpec] = {
    Parameter.temp: WalkSpec(16.0, 4.0, 0.3, 8.0, 26.0),
    Parameter.sal: WalkSpec(28.0, 3.0, 0.3, 10.0, 33.0),
    Parameter.ph: WalkSpec(7.8, 0.2, 0.05, 7.3, 8.3),
    Parameter.do: WalkSpec(7.0, 2.0, 0.4, 1.5, 12.0),
    Parameter.turb: WalkSpec(10.0, 25.0, 6.0, 1.0, 300.0),
    Parameter.chl: WalkSpec(3.0, 10.0, 3.0, 0.1, 120.0),
    Parameter.gene_expr: WalkSpec(20.0, 20.0, 4.0, 0.0, 100.0),
    Parameter.methyl: WalkSpec(0.4, 0.1, 0.03, 0.0, 1.0),
    Parameter.metabo: WalkSpec(20.0, 20.0, 5.0, 0.0, 100.0),
    Parameter.lipid_ox: WalkSpec(0.25, 0.1, 0.03, 0.0, 1.0),
}


def random_walk(previous: float, draw: float, spec: WalkSpec) -> float:
    candidate = previous + (draw - 0.5) * spec.step_size
    return max(spec.minimum, min(spec.maximum, candidate))


class ReadingGenerator:
    """Produces seeded and stepped readings from an injected uniform source."""

    def __init__(self, rng: Optional[UniformSource] = None) -> None:
        self.rng: UniformSource = rng if rng is not None else random.Random()

    def seed(self, timestamp: datetime) -> Reading:
        values: Dict[str, float] = {}
        for parameter, info in PARAMETERS.items():
            spec = WALKS[parameter]
            values[info.field_name] = spec.seed_low + self.rng.random() * spec.seed_span
        return Reading(timestamp=timestamp, **values)

    def step(self, previous: Reading, timestamp: datetime) -> Reading:
        values: Dict[str, float] = {}
        for parameter, info in PARAMETERS.items():
            values[info.field_name] = random_walk(
                value_of(previous, parameter), self.rng.random(), WALKS[parameter]
            )
        return Reading(timestamp=timestamp, **values)

    @staticmethod
    def bounds(parameter: Parameter) -> Tuple[float, float]:
        spec = WALKS[parameter]
        return spec.minimum, spec.maximum
