"""CSV serialization of a site's series."""

from __future__ import annotations

import csv
import io
import re
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Tuple

from models.parameters import Parameter, value_of
from models.records import Reading, Site

# Column name and decimal places, in output order.
CSV_COLUMNS: Tuple[Tuple[Parameter, str, int], ...] = (
    (Parameter.temp, "temp_c", 2),
    (Parameter.sal, "sal_psu", 2),
    (Parameter.ph, "ph", 2),
    (Parameter.do, "do_mgL", 2),
    (Parameter.turb, "turb_ntu", 1),
    (Parameter.chl, "chl_ugL", 1),
    (Parameter.gene_expr, "gene_expr_AU", 1),
    (Parameter.methyl, "methyl_frac", 3),
    (Parameter.metabo, "metabo_AU", 1),
    (Parameter.lipid_ox, "lipid_ox_frac", 3),
)

CSV_HEADER: Tuple[str, ...] = ("timestamp", "time_local") + tuple(
    column for _, column, _ in CSV_COLUMNS
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_WHITESPACE = re.compile(r"\s+")


def epoch_millis(timestamp: datetime) -> int:
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return (timestamp - _EPOCH) // timedelta(milliseconds=1)


def iso_utc(timestamp: datetime) -> str:
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    rendered = timestamp.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return rendered.replace("+00:00", "Z")


def fixed(value: float, places: int) -> str:
    """Render ``value`` with ``places`` decimals, rounding exact ties away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return f"{Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP):f}"


def _row(reading: Reading) -> list[str]:
    row = [str(epoch_millis(reading.timestamp)), iso_utc(reading.timestamp)]
    for parameter, _, places in CSV_COLUMNS:
        row.append(fixed(value_of(reading, parameter), places))
    return row


def to_csv(series: Iterable[Reading]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for reading in series:
        writer.writerow(_row(reading))
    return buffer.getvalue().rstrip("\n")


def export_filename(site: Site) -> str:
    stem = _WHITESPACE.sub("_", site.name.strip())
    return f"{stem}_export.csv"
