# tests/conftest.py
"""
Shared fixtures for the fasting-times suite.

- Registers Hypothesis profiles for local dev and CI.
- Provides a scripted ephemeris so the core runs without a JPL kernel.
"""

from __future__ import annotations

import os
from datetime import date, timedelta

import pytest
from hypothesis import HealthCheck, settings

from fastingtimes.models import Observer

settings.register_profile(
    "dev",
    settings(deadline=None, max_examples=60, suppress_health_check=[HealthCheck.too_slow]),
)
settings.register_profile(
    "ci",
    settings(deadline=None, max_examples=200, suppress_health_check=[HealthCheck.too_slow]),
)

_profile = (
    "ci"
    if (os.getenv("CI") or os.getenv("GITHUB_ACTIONS"))
    else os.getenv("HYPOTHESIS_PROFILE", "dev")
)
settings.load_profile(_profile)

TWILIGHT_OFFSET = timedelta(hours=5, minutes=2, seconds=13, milliseconds=456)
SUNSET_OFFSET = timedelta(hours=17, minutes=45, seconds=30, milliseconds=500)


class FakeEphemeris:
    """Scripted EphemerisPort.

    Twilight and sunset are fixed offsets from the search origin. Dates listed
    in `no_twilight` / `no_sunset` return None; dates in `raises` raise the
    mapped exception. Every call is recorded.
    """

    def __init__(
        self,
        no_twilight: set[date] | None = None,
        no_sunset: set[date] | None = None,
        raises: dict[date, Exception] | None = None,
    ) -> None:
        self.no_twilight = no_twilight or set()
        self.no_sunset = no_sunset or set()
        self.raises = raises or {}
        self.calls: list[tuple] = []

    def search_altitude(self, body, observer, direction, start, limit_days, altitude):
        self.calls.append(("altitude", body, observer, direction, start, limit_days, altitude))
        day = start.date()
        if day in self.raises:
            raise self.raises[day]
        if day in self.no_twilight:
            return None
        return start + TWILIGHT_OFFSET

    def search_rise_set(self, body, observer, direction, start, limit_days):
        self.calls.append(("rise_set", body, observer, direction, start, limit_days))
        day = start.date()
        if day in self.no_sunset:
            return None
        return start + SUNSET_OFFSET


@pytest.fixture
def fake_ephemeris() -> FakeEphemeris:
    return FakeEphemeris()


@pytest.fixture
def london() -> Observer:
    return Observer(lat=51.5, lng=-0.12)

