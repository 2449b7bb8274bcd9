"""Matplotlib PDF renderer: paginated timetable with header metadata."""

from io import BytesIO
from pathlib import Path
from typing import BinaryIO

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.backends.backend_pdf import PdfPages  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from fastingtimes.models import BatchResult  # noqa: E402
from fastingtimes.renderers.table import (  # noqa: E402
    NOT_AVAILABLE,
    TimetableRow,
    column_titles,
    export_filename,
    header_lines,
)

_ROOT = Path(__file__).parent.parent.parent.parent

A4_PORTRAIT = (8.27, 11.69)
A4_LANDSCAPE = (11.69, 8.27)
LANDSCAPE_AFTER_DAYS = 60
ROWS_PER_PAGE = {"portrait": 40, "landscape": 25}


def page_orientation(batch: BatchResult) -> str:
    return "landscape" if batch.date_range.days > LANDSCAPE_AFTER_DAYS else "portrait"


def paginate(
    rows: tuple[TimetableRow, ...], per_page: int
) -> list[tuple[TimetableRow, ...]]:
    """Split rows into pages. Every row lands on exactly one page."""
    if not rows:
        return [()]
    return [rows[i : i + per_page] for i in range(0, len(rows), per_page)]


def render_pdf_pages(
    batch: BatchResult, rows: tuple[TimetableRow, ...]
) -> list[Figure]:
    """Render the timetable as one matplotlib Figure per A4 page.

    Args:
        batch: Computed batch; supplies the header metadata.
        rows: Formatted timetable rows.

    Returns:
        Figures in page order. Caller closes them.
    """
    orientation = page_orientation(batch)
    size = A4_LANDSCAPE if orientation == "landscape" else A4_PORTRAIT
    per_page = ROWS_PER_PAGE[orientation]
    title, subtitle, meta = header_lines(batch)
    titles = column_titles(batch.angle)
    pages = paginate(rows, per_page)

    figures: list[Figure] = []
    for number, page_rows in enumerate(pages, start=1):
        fig = plt.figure(figsize=size)
        fig.patch.set_facecolor("white")
        fig.text(0.5, 0.97, title, ha="center", va="top", fontsize=14, weight="bold")
        fig.text(0.5, 0.945, subtitle, ha="center", va="top", fontsize=8, color="#666666")
        fig.text(0.5, 0.925, meta, ha="center", va="top", fontsize=7, color="#666666")
        fig.text(0.5, 0.02, f"Page {number} of {len(pages)}", ha="center", fontsize=6)

        ax = fig.add_axes((0.05, 0.05, 0.9, 0.86))
        ax.axis("off")
        cells = [
            [
                str(r.day),
                r.date_label,
                r.twilight_precise,
                r.sunset_precise,
                r.twilight_rounded,
                r.sunset_rounded,
            ]
            for r in page_rows
        ] or [[""] * len(titles)]
        # Fixed row height: a short last page keeps the same row size.
        height = (len(cells) + 1) / (per_page + 1)
        table = ax.table(
            cellText=cells,
            colLabels=titles,
            cellLoc="center",
            bbox=(0.0, 1.0 - height, 1.0, height),
        )
        table.auto_set_font_size(False)
        table.set_fontsize(7)
        for (row_idx, _), cell in table.get_celld().items():
            cell.set_edgecolor("black")
            if row_idx == 0:
                cell.set_facecolor("black")
                cell.get_text().set_color("white")
            elif cell.get_text().get_text() == NOT_AVAILABLE:
                cell.get_text().set_color("#b00020")
        figures.append(fig)
    return figures


def write_pdf(
    batch: BatchResult, rows: tuple[TimetableRow, ...], target: Path | BinaryIO
) -> None:
    title, _, meta = header_lines(batch)
    with PdfPages(target, metadata={"Title": title, "Subject": meta}) as pdf:
        for fig in render_pdf_pages(batch, rows):
            pdf.savefig(fig)
            plt.close(fig)


def pdf_bytes(batch: BatchResult, rows: tuple[TimetableRow, ...]) -> bytes:
    """Render the PDF in memory (for download buttons)."""
    buffer = BytesIO()
    write_pdf(batch, rows, buffer)
    return buffer.getvalue()


def save_pdf(
    batch: BatchResult,
    rows: tuple[TimetableRow, ...],
    output_path: Path | None = None,
) -> Path:
    """Save the timetable as a multi-page PDF.

    Args:
        batch: Computed batch.
        rows: Formatted timetable rows.
        output_path: Destination path. Auto-generated under results/ if None.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        output_path = _ROOT / "results" / export_filename(batch, "pdf")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    write_pdf(batch, rows, output_path)
    return output_path
