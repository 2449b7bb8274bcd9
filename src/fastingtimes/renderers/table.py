"""Timetable rows: the flat, string-formatted view of a BatchResult.

Every export (terminal, CSV, PDF, Streamlit) is built from these rows.
"""

import csv
import io
from dataclasses import astuple, dataclass, fields
from datetime import tzinfo
from pathlib import Path
from typing import TextIO

from fastingtimes.models import BatchResult
from fastingtimes.rounding import (
    format_date_label,
    format_precise,
    format_rounded,
    round_sunset_up,
    round_twilight_down,
)

NOT_AVAILABLE = "N/A"

TITLE = "Ramadan Fasting Times"
SUBTITLE = "Suhoor (Fajr) and Iftar (Sunset) Times"


@dataclass(frozen=True)
class TimetableRow:
    """One printable line of the timetable."""

    day: int  # 1-based position in the batch ("day N")
    date_label: str
    twilight_precise: str
    sunset_precise: str
    twilight_rounded: str  # floored to the minute
    sunset_rounded: str  # ceiled to the minute
    failure_reason: str = ""


def column_titles(angle: float) -> tuple[str, ...]:
    return (
        "Day",
        "Date",
        f"Twilight ({angle:g}°)",
        "Sunset",
        "Twilight (rounded down)",
        "Sunset (rounded up)",
    )


def build_rows(batch: BatchResult, tz: tzinfo | None = None) -> tuple[TimetableRow, ...]:
    """Format every DayResult, applying safety rounding to found instants.

    Args:
        batch: Computed batch.
        tz: Display zone. None keeps each instant's own zone.

    Returns:
        One row per day, in batch order. Failed days show N/A times.
    """
    rows: list[TimetableRow] = []
    for index, result in enumerate(batch, start=1):
        label = format_date_label(result.date)
        if result.twilight is None or result.sunset is None:
            rows.append(
                TimetableRow(
                    day=index,
                    date_label=label,
                    twilight_precise=NOT_AVAILABLE,
                    sunset_precise=NOT_AVAILABLE,
                    twilight_rounded=NOT_AVAILABLE,
                    sunset_rounded=NOT_AVAILABLE,
                    failure_reason=result.failure_reason or "",
                )
            )
            continue
        twilight = result.twilight if tz is None else result.twilight.astimezone(tz)
        sunset = result.sunset if tz is None else result.sunset.astimezone(tz)
        rows.append(
            TimetableRow(
                day=index,
                date_label=label,
                twilight_precise=format_precise(twilight),
                sunset_precise=format_precise(sunset),
                twilight_rounded=format_rounded(round_twilight_down(twilight)),
                sunset_rounded=format_rounded(round_sunset_up(sunset)),
            )
        )
    return tuple(rows)


def header_lines(batch: BatchResult) -> tuple[str, str, str]:
    """Title, subtitle, and the metadata line (span, location, angle)."""
    span = batch.date_range
    meta = (
        f"{format_date_label(span.start)} to {format_date_label(span.end)}"
        f" ({span.days} days)"
        f" | Location: {batch.observer.lat:g}°, {batch.observer.lng:g}°"
        f" | Fajr Angle: {batch.angle:g}°"
    )
    return TITLE, SUBTITLE, meta


def export_filename(batch: BatchResult, ext: str) -> str:
    span = batch.date_range
    return f"ramadan-fasting-times-{span.start.isoformat()}-to-{span.end.isoformat()}.{ext}"


def render_text(batch: BatchResult, rows: tuple[TimetableRow, ...]) -> str:
    """Plain-text table for terminals."""
    titles = column_titles(batch.angle)
    body = [astuple(r)[: len(titles)] for r in rows]
    widths = [
        max(len(str(cell)) for cell in column)
        for column in zip(titles, *body)
    ]
    lines = list(header_lines(batch)) + [""]
    lines.append("  ".join(t.ljust(w) for t, w in zip(titles, widths)))
    lines.append("  ".join("-" * w for w in widths))
    for cells in body:
        lines.append("  ".join(str(c).ljust(w) for c, w in zip(cells, widths)))
    return "\n".join(line.rstrip() for line in lines)


def _write_csv_rows(
    batch: BatchResult, rows: tuple[TimetableRow, ...], stream: TextIO
) -> None:
    names = [f.name for f in fields(TimetableRow)]
    writer = csv.writer(stream)
    writer.writerow(list(column_titles(batch.angle)) + ["Note"])
    for row in rows:
        writer.writerow([getattr(row, name) for name in names])


def csv_text(batch: BatchResult, rows: tuple[TimetableRow, ...]) -> str:
    buffer = io.StringIO()
    _write_csv_rows(batch, rows, buffer)
    return buffer.getvalue()


def write_csv(batch: BatchResult, rows: tuple[TimetableRow, ...], path: Path) -> Path:
    """Write rows as CSV with a header row; returns the path written."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        _write_csv_rows(batch, rows, f)
    return path
