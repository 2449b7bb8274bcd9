"""Ephemeris port: solar event searches backed by skyfield."""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Protocol

from skyfield import almanac
from skyfield.api import Loader, wgs84

from fastingtimes.models import Observer

logger = logging.getLogger(__name__)

ASCENDING = +1
DESCENDING = -1

# Refraction plus the sun's upper limb, the usual almanac convention.
SUN_HORIZON_DEG = -0.8333


class EphemerisError(Exception):
    """Ephemeris kernel could not be loaded."""


class EventNotFoundError(Exception):
    """The requested event does not occur inside the search window."""


class EphemerisPort(Protocol):
    """Searches for the first matching event after a start instant."""

    def search_altitude(
        self,
        body: str,
        observer: Observer,
        direction: int,
        start: datetime,
        limit_days: float,
        altitude: float,
    ) -> datetime | None:
        """Return the first crossing of `altitude` in `direction`, or None."""

    def search_rise_set(
        self,
        body: str,
        observer: Observer,
        direction: int,
        start: datetime,
        limit_days: float,
    ) -> datetime | None:
        """Return the first rising (+1) or setting (-1), or None."""


def require_event(instant: datetime | None, reason: str) -> datetime:
    """Return instant, raising EventNotFoundError(reason) when it is None."""
    if instant is None:
        raise EventNotFoundError(reason)
    return instant


def _truncate_to_millis(dt: datetime) -> datetime:
    return dt.replace(microsecond=dt.microsecond // 1000 * 1000)


class SkyfieldEphemeris:
    """EphemerisPort implementation using a JPL kernel through skyfield.

    Altitudes are geometric (no refraction). Rise/set uses the standard solar
    horizon of -0.8333 degrees. Instants come back as UTC datetimes truncated
    to whole milliseconds.
    """

    def __init__(self, directory: Path, filename: str = "de421.bsp") -> None:
        self._loader = Loader(str(directory))
        try:
            self._eph = self._loader(filename)
        except (OSError, ValueError) as e:
            raise EphemerisError(
                f"Cannot load ephemeris {filename} from {directory}: {e}"
            ) from e
        self._ts = self._loader.timescale()
        self._earth = self._eph["earth"]

    def _window(self, start: datetime, limit_days: float):
        t0 = self._ts.from_datetime(start)
        t1 = self._ts.from_datetime(start + timedelta(days=limit_days))
        return t0, t1

    def _site(self, observer: Observer):
        return self._earth + wgs84.latlon(
            latitude_degrees=observer.lat,
            longitude_degrees=observer.lng,
            elevation_m=observer.elevation_m,
        )

    def search_altitude(
        self,
        body: str,
        observer: Observer,
        direction: int,
        start: datetime,
        limit_days: float,
        altitude: float,
    ) -> datetime | None:
        target = self._eph[body]
        site = self._site(observer)
        t0, t1 = self._window(start, limit_days)

        def above(t):
            alt, _, _ = site.at(t).observe(target).apparent().altaz()
            return alt.degrees >= altitude

        above.step_days = 1 / 24  # type: ignore[attr-defined]

        times, values = almanac.find_discrete(t0, t1, above)
        wanted = direction == ASCENDING
        for t, value in zip(times, values):
            if bool(value) == wanted:
                logger.debug("%s altitude %s° crossed at %s", body, altitude, t.utc_iso())
                return _truncate_to_millis(t.utc_datetime())
        return None

    def search_rise_set(
        self,
        body: str,
        observer: Observer,
        direction: int,
        start: datetime,
        limit_days: float,
    ) -> datetime | None:
        target = self._eph[body]
        site = self._site(observer)
        t0, t1 = self._window(start, limit_days)

        find = almanac.find_risings if direction == ASCENDING else almanac.find_settings
        times, actual = find(site, target, t0, t1, horizon_degrees=SUN_HORIZON_DEG)

        # actual=False marks a grazing approach where the body never crosses.
        for t, crossed in zip(times, actual):
            if crossed:
                logger.debug("%s rise/set (%+d) at %s", body, direction, t.utc_iso())
                return _truncate_to_millis(t.utc_datetime())
        return None
