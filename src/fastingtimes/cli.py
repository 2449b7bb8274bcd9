"""CLI entry point for fasting timetable generation.

    uv run fasting-times --start 2025-03-01 --end 2025-03-30 --lat 51.5 --lng -0.12 --pdf t.pdf
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from fastingtimes.compute import run
from fastingtimes.config import Settings, configure_logging
from fastingtimes.ephemeris import EphemerisError
from fastingtimes.models import QueryInput
from fastingtimes.renderers.table import build_rows, render_text, write_csv
from fastingtimes.validation import InputValidationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fasting-times",
        description="Daily twilight (fast start) and sunset (fast end) times.",
    )
    parser.add_argument("--start", required=True, help="First date, YYYY-MM-DD")
    parser.add_argument("--end", required=True, help="Last date, YYYY-MM-DD")
    parser.add_argument("--lat", required=True, help="Latitude in degrees")
    parser.add_argument("--lng", required=True, help="Longitude in degrees")
    parser.add_argument(
        "--angle", default="-18", help="Twilight sun altitude in degrees (default -18)"
    )
    parser.add_argument(
        "--tz",
        default=None,
        help='IANA zone, "auto" (from coordinates) or "" for the system clock',
    )
    parser.add_argument("--pdf", type=Path, help="Also write a PDF timetable here")
    parser.add_argument("--csv", type=Path, help="Also write a CSV timetable here")
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    args = build_parser().parse_args(argv)
    query = QueryInput(
        start=args.start, end=args.end, lat=args.lat, lng=args.lng, angle=args.angle
    )
    try:
        batch = run(query, timezone_name=args.tz)
    except InputValidationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except EphemerisError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    rows = build_rows(batch)
    print(render_text(batch, rows))

    if args.csv:
        print(f"Saved: {write_csv(batch, rows, args.csv)}")
    if args.pdf:
        from fastingtimes.renderers.pdf import save_pdf

        print(f"Saved: {save_pdf(batch, rows, args.pdf)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
