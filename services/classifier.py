"""Threshold-based alert classification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping

from models.parameters import PARAMETERS, Parameter, value_of
from models.records import Reading
from models.thresholds import Direction, Severity, ThresholdSpec

Thresholds = Mapping[Parameter, ThresholdSpec]


@dataclass(frozen=True, slots=True)
class AlertRecord:
    parameter: Parameter
    severity: Severity
    value: float


def classify(parameter: Parameter, value: float, thresholds: Thresholds) -> Severity:
    spec = thresholds[parameter]
    if spec.direction is Direction.over:
        if value >= spec.critical:
            return Severity.critical
        if value >= spec.warning:
            return Severity.warning
        return Severity.ok
    if value <= spec.critical:
        return Severity.critical
    if value <= spec.warning:
        return Severity.warning
    return Severity.ok


def severity_map(reading: Reading, thresholds: Thresholds) -> Dict[Parameter, Severity]:
    return {
        parameter: classify(parameter, value_of(reading, parameter), thresholds)
        for parameter in PARAMETERS
    }


def active_alerts(reading: Reading, thresholds: Thresholds) -> List[AlertRecord]:
    """Non-ok parameters of ``reading``, critical ones first.

    Within each severity the order is the parameter enumeration order; no
    further ranking is applied.
    """
    critical: List[AlertRecord] = []
    warning: List[AlertRecord] = []
    for parameter in PARAMETERS:
        value = value_of(reading, parameter)
        severity = classify(parameter, value, thresholds)
        if severity is Severity.critical:
            critical.append(AlertRecord(parameter=parameter, severity=severity, value=value))
        elif severity is Severity.warning:
            warning.append(AlertRecord(parameter=parameter, severity=severity, value=value))
    return critical + warning
