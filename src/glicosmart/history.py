"""Filtros de historial, resumen estadistico y filas para exportar."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo

import pandas as pd

from glicosmart.forms import local_tz
from glicosmart.glucose import GlucoseStatus, chart_category, classify
from glicosmart.model import Period, Reading

FRAME_COLUMNS = ["datetime", "date", "time", "value", "period", "status"]
EXPORT_COLUMNS = ["value", "period", "date", "time", "status", "message"]


@dataclass(frozen=True)
class ReadingSummary:
    """Aggregate numbers shown on the statistics page."""

    count: int
    average: int
    minimum: int | None
    maximum: int | None
    low: int
    normal: int
    high: int
    average_status: GlucoseStatus | None


@dataclass(frozen=True)
class ExportRow:
    """One row of the tabular export."""

    value: int
    period: str
    date: str
    time: str
    status: str
    message: str


def filter_readings(
    readings: Sequence[Reading],
    period: Period | None = None,
    start: date | None = None,
    end: date | None = None,
    zone: tzinfo | None = None,
) -> list[Reading]:
    """Filtra por periodo y rango de dias (inclusivo, en hora local).

    Args:
        readings: Readings in display order.
        period: Only keep this period; None keeps all.
        start: First day included (from 00:00 local time).
        end: Last day included (until 23:59:59.999999 local time).
        zone: Timezone used to build day boundaries.

    Returns:
        Matching readings, order preserved.
    """
    zone = zone or local_tz()
    start_at = datetime.combine(start, time.min, tzinfo=zone) if start else None
    end_at = datetime.combine(end, time.max, tzinfo=zone) if end else None
    out: list[Reading] = []
    for reading in readings:
        if period is not None and reading.period is not period:
            continue
        if start_at is not None and reading.timestamp < start_at:
            continue
        if end_at is not None and reading.timestamp > end_at:
            continue
        out.append(reading)
    return out


def readings_to_frame(
    readings: Sequence[Reading], zone: tzinfo | None = None
) -> pd.DataFrame:
    """Convert readings to a DataFrame with local date/time columns."""
    zone = zone or local_tz()
    rows = []
    for r in readings:
        local = r.timestamp.astimezone(zone)
        rows.append(
            {
                "datetime": local,
                "date": local.date(),
                "time": local.time().replace(second=0, microsecond=0),
                "value": r.value,
                "period": r.period.value,
                "status": classify(r.value).status.value,
            }
        )
    if not rows:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def summarize(readings: Sequence[Reading]) -> ReadingSummary:
    """Count, average and low/normal/high split of the given readings."""
    if not readings:
        return ReadingSummary(
            count=0,
            average=0,
            minimum=None,
            maximum=None,
            low=0,
            normal=0,
            high=0,
            average_status=None,
        )
    values = pd.Series([r.value for r in readings], dtype="int64")
    categories = values.map(lambda v: chart_category(classify(int(v)).status))
    counts = categories.value_counts()
    average = _round_half_up(float(values.mean()))
    return ReadingSummary(
        count=int(values.count()),
        average=average,
        minimum=int(values.min()),
        maximum=int(values.max()),
        low=int(counts.get("low", 0)),
        normal=int(counts.get("normal", 0)),
        high=int(counts.get("high", 0)),
        average_status=classify(average).status,
    )


def chart_points(readings: Sequence[Reading], limit: int = 15) -> list[Reading]:
    """Ultimas ``limit`` mediciones en orden cronologico (para el grafico)."""
    return list(reversed(list(readings)[:limit]))


def export_rows(
    readings: Sequence[Reading], zone: tzinfo | None = None
) -> list[ExportRow]:
    """Per-reading tuples for the Excel collaborator."""
    zone = zone or local_tz()
    out: list[ExportRow] = []
    for r in readings:
        local = r.timestamp.astimezone(zone)
        analysis = classify(r.value)
        out.append(
            ExportRow(
                value=r.value,
                period=r.period.value,
                date=local.strftime("%d/%m/%Y"),
                time=local.strftime("%H:%M"),
                status=analysis.status.value,
                message=analysis.message,
            )
        )
    return out


def export_frame(rows: Sequence[ExportRow]) -> pd.DataFrame:
    """DataFrame view of export rows, columns in export order."""
    if not rows:
        return pd.DataFrame(columns=EXPORT_COLUMNS)
    return pd.DataFrame(
        [[getattr(row, col) for col in EXPORT_COLUMNS] for row in rows],
        columns=EXPORT_COLUMNS,
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
