"""Computation layer: per-day solar event resolution and the batch scheduler."""

import logging
from datetime import date, datetime, time, tzinfo
from functools import lru_cache
from typing import Callable

from fastingtimes.config import Settings, resolve_timezone
from fastingtimes.ephemeris import (
    ASCENDING,
    DESCENDING,
    EphemerisPort,
    EventNotFoundError,
    SkyfieldEphemeris,
    require_event,
)
from fastingtimes.models import (
    BatchResult,
    DateRange,
    DayOutcome,
    DayResult,
    Found,
    NotFound,
    Observer,
    QueryInput,
)
from fastingtimes.validation import validate_query

logger = logging.getLogger(__name__)

SEARCH_WINDOW_DAYS = 1.0
TWILIGHT_NOT_FOUND = "Twilight time not found"
SUNSET_NOT_FOUND = "Sunset time not found"

ProgressCallback = Callable[[int, int, DayResult], None]


@lru_cache(maxsize=1)
def default_ephemeris() -> SkyfieldEphemeris:
    """Skyfield ephemeris from the configured kernel, loaded once per process."""
    settings = Settings.from_env()
    return SkyfieldEphemeris(settings.ephemeris_dir, settings.ephemeris_file)


def local_midnight(day: date, tz: tzinfo | None = None) -> datetime:
    """Start of `day` on the local wall clock (system clock when tz is None)."""
    naive = datetime.combine(day, time())
    if tz is None:
        return naive.astimezone()
    if hasattr(tz, "localize"):
        return tz.localize(naive)  # type: ignore[attr-defined]
    return naive.replace(tzinfo=tz)


def resolve_day(
    day: date,
    observer: Observer,
    angle: float,
    ephemeris: EphemerisPort,
    tz: tzinfo | None = None,
) -> DayOutcome:
    """Find the twilight and sunset instants for one calendar date.

    Both searches start at local midnight and look one day ahead. Twilight is
    the sun climbing through `angle`; sunset is the sun's setting. If either
    is missing the whole day is NotFound, reporting the first missing event.

    Args:
        day: Calendar date to resolve.
        observer: Validated location.
        angle: Twilight altitude in degrees (negative = below the horizon).
        ephemeris: Event search backend.
        tz: Zone for local midnight and returned instants; None = system clock.

    Returns:
        Found with local-time instants, or NotFound with a reason.
    """
    origin = local_midnight(day, tz)
    try:
        twilight = require_event(
            ephemeris.search_altitude(
                "sun", observer, ASCENDING, origin, SEARCH_WINDOW_DAYS, angle
            ),
            TWILIGHT_NOT_FOUND,
        )
        sunset = require_event(
            ephemeris.search_rise_set(
                "sun", observer, DESCENDING, origin, SEARCH_WINDOW_DAYS
            ),
            SUNSET_NOT_FOUND,
        )
    except EventNotFoundError as e:
        return NotFound(reason=str(e))
    return Found(twilight=twilight.astimezone(tz), sunset=sunset.astimezone(tz))


def _failure_message(exc: Exception) -> str:
    return str(exc) or type(exc).__name__


def run_batch(
    date_range: DateRange,
    observer: Observer,
    angle: float,
    ephemeris: EphemerisPort,
    tz: tzinfo | None = None,
    on_progress: ProgressCallback | None = None,
) -> BatchResult:
    """Resolve every date in the range, isolating per-day failures.

    Inputs are assumed validated. A day whose events cannot be found, or whose
    ephemeris call raises, becomes a failed DayResult and the loop moves on.

    Args:
        date_range: Inclusive dates to compute.
        observer: Validated location.
        angle: Twilight altitude in degrees.
        ephemeris: Event search backend.
        tz: Local zone; None = system clock.
        on_progress: Optional observer called as (done, total, day_result).

    Returns:
        BatchResult with exactly one DayResult per date, in date order.
    """
    total = date_range.days
    logger.info(
        "Computing %d days from %s at (%s, %s), angle %s°",
        total,
        date_range.start,
        observer.lat,
        observer.lng,
        angle,
    )

    results: list[DayResult] = []
    for index, day in enumerate(date_range.dates(), start=1):
        try:
            outcome = resolve_day(day, observer, angle, ephemeris, tz)
        except Exception as e:
            logger.warning("Day %s failed: %s", day, e, exc_info=True)
            result = DayResult.failed(day, _failure_message(e))
        else:
            if isinstance(outcome, Found):
                result = DayResult(
                    date=day, twilight=outcome.twilight, sunset=outcome.sunset
                )
            else:
                logger.warning("Day %s: %s", day, outcome.reason)
                result = DayResult.failed(day, outcome.reason)
        results.append(result)

        if on_progress is not None:
            try:
                on_progress(index, total, result)
            except Exception:
                logger.exception("Progress callback failed on day %s", day)

    batch = BatchResult(
        date_range=date_range, observer=observer, angle=angle, days=tuple(results)
    )
    logger.info("Finished %d days, %d without times", len(batch), len(batch.failures))
    return batch


def run(
    query: QueryInput,
    ephemeris: EphemerisPort | None = None,
    timezone_name: str | None = None,
    on_progress: ProgressCallback | None = None,
) -> BatchResult:
    """Top-level entry point: takes a QueryInput and returns a BatchResult.

    Args:
        query: User input (dates, coordinates, angle as strings).
        ephemeris: Event search backend. Defaults to the configured skyfield kernel.
        timezone_name: "" for the system clock, "auto", or an IANA zone.
            Defaults to the FASTING_TIMEZONE setting.
        on_progress: Optional per-day progress observer.

    Returns:
        Fully computed BatchResult.

    Raises:
        InputValidationError: Before any computation, on bad input.
    """
    date_range, observer, angle = validate_query(query)
    if timezone_name is None:
        timezone_name = Settings.from_env().timezone
    tz = resolve_timezone(timezone_name, observer)
    if ephemeris is None:
        ephemeris = default_ephemeris()
    return run_batch(date_range, observer, angle, ephemeris, tz, on_progress)
