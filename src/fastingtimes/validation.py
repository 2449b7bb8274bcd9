"""Input validation boundary. Everything here runs before any computation starts."""

import math
from datetime import date

from fastingtimes.models import MAX_SPAN_DAYS, DateRange, Observer, QueryInput


class InputValidationError(ValueError):
    """Malformed or out-of-range user input. Fatal to the whole request."""


def parse_date(value: str) -> date:
    """Parse an ISO "YYYY-MM-DD" string into a date."""
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise InputValidationError(f"Invalid date: {value}") from e


def _parse_finite(value: str | float) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_coordinate(value: str | float, limit: float, name: str) -> float:
    """Parse a latitude/longitude and check it lies within ±limit degrees."""
    number = _parse_finite(value)
    if number is None or not -limit <= number <= limit:
        raise InputValidationError(
            f"{name} must be between -{limit:g} and {limit:g} degrees"
        )
    return number


def parse_angle(value: str | float) -> float:
    """Parse a twilight angle. Any finite number is accepted."""
    number = _parse_finite(value)
    if number is None:
        raise InputValidationError("Please enter a valid angle")
    return number


def make_observer(lat: str | float, lng: str | float) -> Observer:
    return Observer(
        lat=parse_coordinate(lat, 90, "Latitude"),
        lng=parse_coordinate(lng, 180, "Longitude"),
    )


def make_date_range(start: date, end: date) -> DateRange:
    """Build a DateRange, enforcing ordering and the maximum span."""
    if start > end:
        raise InputValidationError("Start date must be before or equal to end date")
    date_range = DateRange(start=start, end=end)
    if date_range.days > MAX_SPAN_DAYS:
        raise InputValidationError(f"Date range cannot exceed {MAX_SPAN_DAYS} days")
    return date_range


def requested_days(start: date | None, end: date | None) -> int:
    """Inclusive day count of a not-yet-validated range; 0 when it is empty or reversed."""
    if start is None or end is None:
        return 0
    return max((end - start).days + 1, 0)


def validate_query(query: QueryInput) -> tuple[DateRange, Observer, float]:
    """Validate raw input in the same order the form reports problems.

    Args:
        query: Raw strings as entered by the user.

    Returns:
        (date range, observer, twilight angle)

    Raises:
        InputValidationError: On the first problem found.
    """
    if not query.start.strip() or not query.end.strip():
        raise InputValidationError("Please select both start and end dates")
    if not query.lat.strip() or not query.lng.strip():
        raise InputValidationError("Please enter both latitude and longitude")
    if not query.angle.strip():
        raise InputValidationError("Please enter the twilight angle")

    observer = make_observer(query.lat, query.lng)
    angle = parse_angle(query.angle)
    date_range = make_date_range(parse_date(query.start), parse_date(query.end))
    return date_range, observer, angle
