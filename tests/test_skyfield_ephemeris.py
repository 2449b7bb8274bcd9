"""Checks against the real JPL kernel.

Skipped unless the kernel is already on disk or FASTING_FETCH_EPHEMERIS=1
lets skyfield download it (the CI workflow caches it between runs).
"""

import os
from datetime import date, datetime, timedelta

import pytest
from pytz import timezone, utc

from fastingtimes.compute import SUNSET_NOT_FOUND, TWILIGHT_NOT_FOUND, resolve_day, run_batch
from fastingtimes.config import Settings
from fastingtimes.ephemeris import ASCENDING, DESCENDING, SkyfieldEphemeris
from fastingtimes.models import DateRange, Found, NotFound, Observer

_settings = Settings.from_env()
_kernel = _settings.ephemeris_dir / _settings.ephemeris_file

_fetch = os.environ.get("FASTING_FETCH_EPHEMERIS") == "1"

pytestmark = pytest.mark.skipif(
    not (_kernel.exists() or _fetch),
    reason=f"ephemeris kernel not found at {_kernel} (set FASTING_FETCH_EPHEMERIS=1 to download)",
)

LONDON = Observer(lat=51.5, lng=-0.12)
TROMSO = Observer(lat=69.65, lng=18.96)


@pytest.fixture(scope="module")
def ephemeris() -> SkyfieldEphemeris:
    return SkyfieldEphemeris(_settings.ephemeris_dir, _settings.ephemeris_file)


def test_london_single_day_astronomical_twilight(ephemeris):
    span = DateRange(date(2025, 3, 1), date(2025, 3, 1))
    batch = run_batch(span, LONDON, -18.0, ephemeris, utc)

    assert len(batch) == 1
    day = batch[0]
    assert day.failure_reason is None
    assert day.twilight is not None and day.sunset is not None
    # Astronomical dawn around 04:55 UTC, sunset around 17:40 UTC.
    assert datetime(2025, 3, 1, 4, 30, tzinfo=utc) < day.twilight < datetime(2025, 3, 1, 5, 30, tzinfo=utc)
    assert datetime(2025, 3, 1, 17, 20, tzinfo=utc) < day.sunset < datetime(2025, 3, 1, 18, 0, tzinfo=utc)


def test_instants_have_millisecond_resolution(ephemeris):
    start = utc.localize(datetime(2025, 3, 1))
    instant = ephemeris.search_rise_set("sun", LONDON, DESCENDING, start, 1.0)
    assert instant is not None
    assert instant.microsecond % 1000 == 0


def test_ascending_crossing_precedes_descending(ephemeris):
    start = utc.localize(datetime(2025, 3, 1))
    up = ephemeris.search_altitude("sun", LONDON, ASCENDING, start, 1.0, -18.0)
    down = ephemeris.search_altitude("sun", LONDON, DESCENDING, start, 1.0, -18.0)
    assert up is not None and down is not None
    assert up < down


def test_midsummer_arctic_has_no_twilight_or_sunset(ephemeris):
    outcome = resolve_day(date(2025, 6, 21), TROMSO, -18.0, ephemeris, utc)
    assert isinstance(outcome, NotFound)
    assert outcome.reason == TWILIGHT_NOT_FOUND


def test_midnight_sun_without_twilight_search_failure(ephemeris):
    # A positive angle is reached, but the sun never sets.
    outcome = resolve_day(date(2025, 6, 21), TROMSO, 10.0, ephemeris, utc)
    assert outcome == NotFound(reason=SUNSET_NOT_FOUND)


def test_high_latitude_failures_do_not_stop_the_batch(ephemeris):
    # Around mid-May the sun stops reaching -18° at 55°N; later days fail,
    # earlier ones resolve, and every date still gets a row.
    edinburgh = Observer(lat=55.95, lng=-3.19)
    span = DateRange(date(2025, 4, 1), date(2025, 6, 30))
    batch = run_batch(span, edinburgh, -18.0, ephemeris, timezone("Europe/London"))

    assert len(batch) == span.days
    assert batch[0].ok
    assert not batch[-10].ok
    assert batch[-10].failure_reason == TWILIGHT_NOT_FOUND
    assert [r.date for r in batch] == [span.start + timedelta(days=i) for i in range(span.days)]


def test_found_instants_are_local(ephemeris):
    karachi = timezone("Asia/Karachi")
    outcome = resolve_day(date(2025, 3, 1), Observer(lat=24.86, lng=67.01), -18.0, ephemeris, karachi)
    assert isinstance(outcome, Found)
    assert outcome.twilight.utcoffset() == timedelta(hours=5)
    assert outcome.twilight.date() == date(2025, 3, 1)
    assert 4 <= outcome.twilight.hour <= 6
    assert 17 <= outcome.sunset.hour <= 19
