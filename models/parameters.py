"""Catalogue of monitored parameters and how to read them from a reading."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from operator import attrgetter
from typing import Callable, Dict, Tuple

from models.records import Reading


class Parameter(str, Enum):
    """Monitored quantities, in display and classification order."""

    temp = "temp"
    sal = "sal"
    ph = "ph"
    do = "do"
    turb = "turb"
    chl = "chl"
    gene_expr = "gene_expr"
    methyl = "methyl"
    metabo = "metabo"
    lipid_ox = "lipid_ox"


class ParameterGroup(str, Enum):
    water_quality = "water_quality"
    bioindicator = "bioindicator"


@dataclass(frozen=True)
class ParameterInfo:
    parameter: Parameter
    field_name: str
    label: str
    unit: str
    group: ParameterGroup
    accessor: Callable[[Reading], float]


def _info(
    parameter: Parameter,
    field_name: str,
    label: str,
    unit: str,
    group: ParameterGroup = ParameterGroup.water_quality,
) -> ParameterInfo:
    return ParameterInfo(
        parameter=parameter,
        field_name=field_name,
        label=label,
        unit=unit,
        group=group,
        accessor=attrgetter(field_name),
    )


PARAMETERS: Dict[Parameter, ParameterInfo] = {
    info.parameter: info
    for info in (
        _info(Parameter.temp, "temperature", "Temperature", "°C"),
        _info(Parameter.sal, "salinity", "Salinity", "PSU"),
        _info(Parameter.ph, "ph", "pH", ""),
        _info(Parameter.do, "dissolved_oxygen", "Dissolved O₂", "mg/L"),
        _info(Parameter.turb, "turbidity", "Turbidity", "NTU"),
        _info(Parameter.chl, "chlorophyll", "Chlorophyll-a", "µg/L"),
        _info(
            Parameter.gene_expr,
            "gene_expression",
            "HAB gene expression",
            "AU",
            ParameterGroup.bioindicator,
        ),
        _info(
            Parameter.methyl,
            "methylation_fraction",
            "Stress methylation",
            "",
            ParameterGroup.bioindicator,
        ),
        _info(
            Parameter.metabo,
            "metabolite_index",
            "Toxin metabolites",
            "AU",
            ParameterGroup.bioindicator,
        ),
        _info(
            Parameter.lipid_ox,
            "lipid_oxidation_ratio",
            "Lipid oxidation",
            "",
            ParameterGroup.bioindicator,
        ),
    )
}


def value_of(reading: Reading, parameter: Parameter) -> float:
    return PARAMETERS[parameter].accessor(reading)


def values_of(reading: Reading) -> Dict[Parameter, float]:
    """All parameter values of a reading, keyed in enumeration order."""
    return {parameter: info.accessor(reading) for parameter, info in PARAMETERS.items()}


def parameters_in(group: ParameterGroup) -> Tuple[Parameter, ...]:
    return tuple(info.parameter for info in PARAMETERS.values() if info.group is group)


def parse_parameter(key: str) -> Parameter:
    """Resolve a parameter key, raising ``KeyError`` for unknown keys."""
    try:
        return Parameter(key.strip().lower())
    except ValueError as exc:
        raise KeyError(f"Unknown parameter {key!r}.") from exc

