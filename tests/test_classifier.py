"""Unit tests for threshold classification and alert ordering."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from models.parameters import Parameter
from models.records import Reading
from models.thresholds import Direction, Severity, ThresholdSpec, ThresholdTable
from services.classifier import AlertRecord, active_alerts, classify, severity_map


def _reading(**overrides: float) -> Reading:
    """Reading whose values are all within the default thresholds."""

    base = Reading(
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
        temperature=18.0,
        salinity=29.0,
        ph=8.0,
        dissolved_oxygen=8.0,
        turbidity=20.0,
        chlorophyll=5.0,
        gene_expression=25.0,
        methylation_fraction=0.45,
        metabolite_index=25.0,
        lipid_oxidation_ratio=0.3,
    )
    return replace(base, **overrides)


@pytest.mark.parametrize(
    "value, expected",
    [(19.9, Severity.ok), (20.0, Severity.warning), (23.99, Severity.warning), (24.0, Severity.critical)],
)
def test_classify_over_direction_boundaries(value: float, expected: Severity) -> None:
    table = ThresholdTable({Parameter.temp: ThresholdSpec(20.0, 24.0, Direction.over)})

    assert classify(Parameter.temp, value, table) is expected


@pytest.mark.parametrize(
    "value, expected",
    [(6.1, Severity.ok), (6.0, Severity.warning), (4.01, Severity.warning), (4.0, Severity.critical)],
)
def test_classify_under_direction_boundaries(value: float, expected: Severity) -> None:
    table = ThresholdTable({Parameter.do: ThresholdSpec(6.0, 4.0, Direction.under)})

    assert classify(Parameter.do, value, table) is expected


def test_classify_reads_live_edits() -> None:
    table = ThresholdTable.defaults()
    assert classify(Parameter.temp, 21.0, table) is Severity.warning

    table.update(Parameter.temp, warning=22.0)

    assert classify(Parameter.temp, 21.0, table) is Severity.ok


def test_classify_missing_entry_raises_key_error() -> None:
    table = ThresholdTable({Parameter.temp: ThresholdSpec(20.0, 24.0, Direction.over)})

    with pytest.raises(KeyError):
        classify(Parameter.sal, 25.0, table)


def test_inverted_thresholds_classify_as_written() -> None:
    table = ThresholdTable({Parameter.do: ThresholdSpec(4.0, 6.0, Direction.under)})

    assert classify(Parameter.do, 5.0, table) is Severity.critical
    assert classify(Parameter.do, 7.0, table) is Severity.ok
    assert table.inconsistencies() == [Parameter.do]


def test_active_alerts_reports_only_non_ok_parameters() -> None:
    reading = _reading(temperature=25.0, salinity=22.0, dissolved_oxygen=3.0)

    alerts = active_alerts(reading, ThresholdTable.defaults())

    assert alerts == [
        AlertRecord(parameter=Parameter.temp, severity=Severity.critical, value=25.0),
        AlertRecord(parameter=Parameter.do, severity=Severity.critical, value=3.0),
    ]


def test_active_alerts_puts_critical_before_warning_in_enumeration_order() -> None:
    reading = _reading(
        temperature=21.0,
        ph=7.5,
        chlorophyll=20.0,
        lipid_oxidation_ratio=0.6,
    )

    alerts = active_alerts(reading, ThresholdTable.defaults())

    assert [(alert.parameter, alert.severity) for alert in alerts] == [
        (Parameter.ph, Severity.critical),
        (Parameter.lipid_ox, Severity.critical),
        (Parameter.temp, Severity.warning),
        (Parameter.chl, Severity.warning),
    ]


def test_active_alerts_empty_when_all_ok() -> None:
    assert active_alerts(_reading(), ThresholdTable.defaults()) == []


def test_severity_map_covers_every_parameter() -> None:
    severities = severity_map(_reading(turbidity=160.0), ThresholdTable.defaults())

    assert list(severities) == list(Parameter)
    assert severities[Parameter.turb] is Severity.critical
    assert all(
        severity is Severity.ok
        for parameter, severity in severities.items()
        if parameter is not Parameter.turb
    )


def test_threshold_table_update_and_snapshot_are_independent() -> None:
    table = ThresholdTable.defaults()
    snapshot = table.snapshot()

    updated = table.update(Parameter.sal, critical=12.0)

    assert updated.critical == 12.0
    assert table[Parameter.sal].critical == 12.0
    assert snapshot[Parameter.sal].critical == 15.0
    updated.warning = 99.0
    assert table[Parameter.sal].warning == 20.0


def test_default_thresholds_are_consistent() -> None:
    table = ThresholdTable.defaults()

    assert len(table) == len(Parameter)
    assert table.inconsistencies() == []
