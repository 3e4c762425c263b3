"""Alert thresholds and the live, editable threshold table."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from threading import Lock
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from models.parameters import Parameter


class Direction(str, Enum):
    """Which way a value has to move to become worse."""

    over = "over"
    under = "under"


class Severity(str, Enum):
    ok = "ok"
    warning = "warning"
    critical = "critical"


@dataclass
class ThresholdSpec:
    warning: float
    critical: float
    direction: Direction

    def is_consistent(self) -> bool:
        """Whether ``critical`` is at least as extreme as ``warning``."""
        if self.direction is Direction.over:
            return self.critical >= self.warning
        return self.critical <= self.warning


DEFAULT_THRESHOLDS: Mapping[Parameter, Tuple[float, float, Direction]] = {
    Parameter.temp: (20.0, 24.0, Direction.over),
    Parameter.sal: (20.0, 15.0, Direction.under),
    Parameter.ph: (7.7, 7.6, Direction.under),
    Parameter.do: (6.0, 4.0, Direction.under),
    Parameter.turb: (50.0, 150.0, Direction.over),
    Parameter.chl: (15.0, 40.0, Direction.over),
    Parameter.gene_expr: (40.0, 70.0, Direction.over),
    Parameter.methyl: (0.55, 0.7, Direction.over),
    Parameter.metabo: (50.0, 75.0, Direction.over),
    Parameter.lipid_ox: (0.35, 0.55, Direction.over),
}


class ThresholdTable:
    """Mutable mapping of parameter to threshold spec.

    Classification reads entries at call time, so edits made through
    :meth:`update` affect every later classification. Looking up a parameter
    that has no entry raises ``KeyError``.
    """

    def __init__(self, specs: Mapping[Parameter, ThresholdSpec]) -> None:
        self._specs: Dict[Parameter, ThresholdSpec] = dict(specs)
        self._lock = Lock()

    @classmethod
    def defaults(cls) -> "ThresholdTable":
        return cls(
            {
                parameter: ThresholdSpec(warning=warning, critical=critical, direction=direction)
                for parameter, (warning, critical, direction) in DEFAULT_THRESHOLDS.items()
            }
        )

    def __getitem__(self, parameter: Parameter) -> ThresholdSpec:
        return self._specs[parameter]

    def __contains__(self, parameter: object) -> bool:
        return parameter in self._specs

    def __iter__(self) -> Iterator[Parameter]:
        return iter(list(self._specs))

    def __len__(self) -> int:
        return len(self._specs)

    def update(
        self,
        parameter: Parameter,
        warning: Optional[float] = None,
        critical: Optional[float] = None,
    ) -> ThresholdSpec:
        """Edit an entry in place and return a copy of the result."""
        with self._lock:
            spec = self._specs[parameter]
            if warning is not None:
                spec.warning = warning
            if critical is not None:
                spec.critical = critical
            return replace(spec)

    def snapshot(self) -> Dict[Parameter, ThresholdSpec]:
        with self._lock:
            return {parameter: replace(spec) for parameter, spec in self._specs.items()}

    def inconsistencies(self) -> List[Parameter]:
        """Parameters whose critical level is less extreme than the warning level."""
        with self._lock:
            return [
                parameter
                for parameter, spec in self._specs.items()
                if not spec.is_consistent()
            ]
