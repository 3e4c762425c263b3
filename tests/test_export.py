"""Unit tests for CSV serialization."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from models.records import Reading, Site
from services.export import CSV_HEADER, epoch_millis, export_filename, fixed, iso_utc, to_csv

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _reading(timestamp: datetime = START) -> Reading:
    return Reading(
        timestamp=timestamp,
        temperature=18.123,
        salinity=29.5,
        ph=7.8456,
        dissolved_oxygen=7.25,
        turbidity=12.34,
        chlorophyll=5.04,
        gene_expression=33.33,
        methylation_fraction=0.4567,
        metabolite_index=41.0,
        lipid_oxidation_ratio=0.3,
    )


def test_header_lists_fixed_columns() -> None:
    assert ",".join(CSV_HEADER) == (
        "timestamp,time_local,temp_c,sal_psu,ph,do_mgL,turb_ntu,chl_ugL,"
        "gene_expr_AU,methyl_frac,metabo_AU,lipid_ox_frac"
    )


def test_row_uses_fixed_precision_per_column() -> None:
    text = to_csv([_reading()])

    header, row = text.split("\n")
    assert header == ",".join(CSV_HEADER)
    assert row == (
        "1704067200000,2024-01-01T00:00:00.000Z,"
        "18.12,29.50,7.85,7.25,12.3,5.0,33.3,0.457,41.0,0.300"
    )


def test_rows_follow_series_order_without_trailing_newline() -> None:
    series = [_reading(START + timedelta(minutes=5 * index)) for index in range(3)]

    text = to_csv(series)

    lines = text.split("\n")
    assert len(lines) == 4
    assert not text.endswith("\n")
    assert [line.split(",")[1] for line in lines[1:]] == [
        "2024-01-01T00:00:00.000Z",
        "2024-01-01T00:05:00.000Z",
        "2024-01-01T00:10:00.000Z",
    ]


def test_empty_series_emits_header_only() -> None:
    assert to_csv([]) == ",".join(CSV_HEADER)


def test_timestamp_helpers_keep_milliseconds() -> None:
    moment = datetime(2024, 1, 1, 0, 0, 0, 123000, tzinfo=timezone.utc)

    assert epoch_millis(moment) == 1704067200123
    assert iso_utc(moment) == "2024-01-01T00:00:00.123Z"


def test_timestamp_helpers_convert_to_utc() -> None:
    moment = datetime(2024, 1, 1, 2, 0, tzinfo=timezone(timedelta(hours=2)))

    assert iso_utc(moment) == "2024-01-01T00:00:00.000Z"
    assert epoch_millis(moment) == 1704067200000


def test_export_filename_replaces_whitespace() -> None:
    site = Site(id="PS-SKAGIT", name="Skagit  Bay Farm", lat=48.3, lon=-122.5, depth_m=2)

    assert export_filename(site) == "Skagit_Bay_Farm_export.csv"


def test_exact_ties_round_away_from_zero() -> None:
    assert fixed(0.125, 2) == "0.13"
    assert fixed(0.0625, 3) == "0.063"
    assert fixed(-0.125, 2) == "-0.13"
    assert fixed(2.5, 0) == "3"


def test_values_just_below_a_tie_round_down() -> None:
    # 1.005 and 0.3 are stored slightly below their decimal spelling.
    assert fixed(1.005, 2) == "1.00"
    assert fixed(0.3, 3) == "0.300"
    assert fixed(41.0, 1) == "41.0"
