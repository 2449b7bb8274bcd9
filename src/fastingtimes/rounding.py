"""Safety rounding and time formatting for published fasting times.

Twilight (fasting start) is floored to the minute so it is never later than
the true instant; sunset (fasting end) is ceiled so it is never earlier.
Both work on the instant's own wall clock and are applied at display time only.
"""

from datetime import date, datetime, timedelta


def _normalize(dt: datetime) -> datetime:
    # pytz zones need normalize() after arithmetic to pick the right offset.
    tz = dt.tzinfo
    if tz is not None and hasattr(tz, "normalize"):
        return tz.normalize(dt)  # type: ignore[attr-defined]
    return dt


def round_twilight_down(instant: datetime) -> datetime:
    """Floor to the containing minute."""
    return instant.replace(second=0, microsecond=0)


def round_sunset_up(instant: datetime) -> datetime:
    """Ceil to the next minute unless already exactly on one.

    23:59:30.500 becomes 00:00:00 of the following day.
    """
    if instant.second or instant.microsecond:
        instant = _normalize(instant + timedelta(minutes=1))
    return instant.replace(second=0, microsecond=0)


def format_precise(instant: datetime) -> str:
    """HH:MM:SS.mmm, milliseconds truncated."""
    return f"{instant:%H:%M:%S}.{instant.microsecond // 1000:03d}"


def format_rounded(instant: datetime) -> str:
    return f"{instant:%H:%M:%S}"


def format_date_label(day: date) -> str:
    """Short weekday/month label, e.g. "Sat, Mar 1, 2025"."""
    return f"{day:%a, %b} {day.day}, {day.year}"
