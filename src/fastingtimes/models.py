"""Data model definitions: explicit boundaries between input, compute, and render layers."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterator

MAX_SPAN_DAYS = 365


@dataclass(frozen=True)
class QueryInput:
    """Raw user input. Not yet validated."""

    start: str  # "YYYY-MM-DD"
    end: str  # "YYYY-MM-DD"
    lat: str  # Latitude as typed
    lng: str  # Longitude as typed
    angle: str  # Twilight angle as typed ("-18", "-15.5")


@dataclass(frozen=True)
class Observer:
    """Validated observer location. Elevation is always sea level."""

    lat: float  # Latitude (decimal degrees, -90..90)
    lng: float  # Longitude (decimal degrees, -180..180)
    elevation_m: float = 0.0


@dataclass(frozen=True)
class DateRange:
    """Inclusive span of calendar dates, start <= end."""

    start: date
    end: date

    @property
    def days(self) -> int:
        """Number of calendar dates in the range, both ends included."""
        return (self.end - self.start).days + 1

    def dates(self) -> Iterator[date]:
        # Calendar arithmetic on date objects: no clock shifts involved.
        for offset in range(self.days):
            yield self.start + timedelta(days=offset)


@dataclass(frozen=True)
class Found:
    """Both events located for a day."""

    twilight: datetime
    sunset: datetime


@dataclass(frozen=True)
class NotFound:
    """At least one event missing for a day."""

    reason: str


DayOutcome = Found | NotFound


@dataclass(frozen=True)
class DayResult:
    """One row of a batch. Either both instants are set or failure_reason is."""

    date: date
    twilight: datetime | None = None
    sunset: datetime | None = None
    failure_reason: str | None = None

    def __post_init__(self) -> None:
        complete = self.twilight is not None and self.sunset is not None
        empty = self.twilight is None and self.sunset is None
        if complete and self.failure_reason is None:
            return
        if empty and self.failure_reason:
            return
        raise ValueError(
            f"DayResult for {self.date} must have both instants or a failure reason"
        )

    @property
    def ok(self) -> bool:
        return self.failure_reason is None

    @classmethod
    def failed(cls, day: date, reason: str) -> "DayResult":
        return cls(date=day, failure_reason=reason)


@dataclass(frozen=True)
class BatchResult:
    """The sole input to renderers. One DayResult per date, chronological."""

    date_range: DateRange
    observer: Observer
    angle: float
    days: tuple[DayResult, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.days)

    def __iter__(self) -> Iterator[DayResult]:
        return iter(self.days)

    def __getitem__(self, index: int) -> DayResult:
        return self.days[index]

    @property
    def failures(self) -> tuple[DayResult, ...]:
        return tuple(d for d in self.days if not d.ok)
