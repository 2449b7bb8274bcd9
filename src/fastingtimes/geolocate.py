"""Location sources for the observer: address geocoding and GPS fix refinement.

Nothing here is used by the batch scheduler; a location becomes an Observer
through the same validation as typed coordinates.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable

import httpx

from fastingtimes.models import Observer
from fastingtimes.validation import make_observer

logger = logging.getLogger(__name__)

GOOD_ACCURACY_M = 50.0
MAX_ATTEMPTS = 3
PAUSE_S = 1.0  # Between readings

_ERROR_MESSAGES = {
    1: "Location permission denied. Please enable location access in your browser settings.",
    2: "Location information unavailable. Make sure GPS is enabled.",
    3: "Location request timed out. Please try again.",
}


class GeolocationError(Exception):
    """No usable location could be obtained."""

    @classmethod
    def from_code(cls, code: int | None) -> "GeolocationError":
        """Map a browser PositionError code to a user-facing message."""
        return cls(_ERROR_MESSAGES.get(code or 0, "Unable to retrieve your location"))


@dataclass(frozen=True)
class Fix:
    """A single location reading."""

    lat: float
    lng: float
    accuracy_m: float | None = None  # Radius of uncertainty; None if unknown
    label: str = ""


def _geocode_nominatim(address: str) -> tuple[float, float, str] | None:
    """Nominatim (OpenStreetMap) geocoder. Returns (lat, lng, display_name) or None."""
    params = {"q": address, "format": "json", "limit": 1}
    headers = {"User-Agent": "FastingTimes/1.0"}
    resp = httpx.get(
        "https://nominatim.openstreetmap.org/search",
        params=params,
        headers=headers,
        timeout=10,
    )
    resp.raise_for_status()
    results = resp.json()
    if not results:
        return None
    r = results[0]
    return float(r["lat"]), float(r["lon"]), r["display_name"]


def geocode_address(address: str) -> Fix:
    """Resolve an address string to a Fix.

    Raises:
        GeolocationError: On HTTP failure or when the address cannot be found.
    """
    try:
        result = _geocode_nominatim(address)
    except httpx.HTTPError as e:
        raise GeolocationError(f"Geocoder request failed: {e}") from e
    if result is None:
        raise GeolocationError(f"Address not found: {address}")
    lat, lng, display = result
    return Fix(lat=lat, lng=lng, label=display)


def _accuracy_key(fix: Fix) -> float:
    return fix.accuracy_m if fix.accuracy_m is not None else float("inf")


def best_fix(fixes: Iterable[Fix]) -> Fix | None:
    """Most accurate fix (smallest radius), or None if there are none."""
    return min(fixes, key=_accuracy_key, default=None)


def needs_refinement(
    samples: list[Fix],
    max_attempts: int = MAX_ATTEMPTS,
    good_enough_m: float = GOOD_ACCURACY_M,
) -> bool:
    """True while another reading is worth taking."""
    if len(samples) >= max_attempts:
        return False
    return not samples or _accuracy_key(samples[-1]) >= good_enough_m


def fix_from_browser(payload: dict) -> Fix:
    """Convert a navigator.geolocation result ({"coords": ...} or {"error": ...})."""
    if "error" in payload:
        raise GeolocationError.from_code(payload["error"].get("code"))
    coords = payload["coords"]
    return Fix(
        lat=float(coords["latitude"]),
        lng=float(coords["longitude"]),
        accuracy_m=(
            float(coords["accuracy"]) if coords.get("accuracy") is not None else None
        ),
    )


def take_sample(
    samples: list[Fix],
    sampler: Callable[[], Fix],
    max_attempts: int = MAX_ATTEMPTS,
    good_enough_m: float = GOOD_ACCURACY_M,
) -> bool:
    """Take one reading into `samples`; True if another reading is worth taking.

    A failure on the first reading propagates. A later failure ends sampling
    with the readings taken so far.
    """
    try:
        samples.append(sampler())
    except Exception:
        if not samples:
            raise
        logger.info("Location sample %d failed, keeping best so far", len(samples) + 1)
        return False
    return needs_refinement(samples, max_attempts, good_enough_m)


def settle(samples: list[Fix]) -> Fix:
    best = best_fix(samples)
    if best is None:
        raise GeolocationError("Could not get location")
    return best


def sample_best_fix(
    sampler: Callable[[], Fix],
    max_attempts: int = MAX_ATTEMPTS,
    good_enough_m: float = GOOD_ACCURACY_M,
    pause_s: float = PAUSE_S,
    sleep: Callable[[float], None] = time.sleep,
) -> Fix:
    """Take up to `max_attempts` readings and keep the most accurate one.

    Sampling stops early once a reading is better than `good_enough_m`.
    The Streamlit app drives the same `take_sample` step once per rerun.
    """
    samples: list[Fix] = []
    more = needs_refinement(samples, max_attempts, good_enough_m)
    while more:
        if samples:
            logger.debug("Refining location (%d/%d)", len(samples), max_attempts)
            sleep(pause_s)
        more = take_sample(samples, sampler, max_attempts, good_enough_m)
    return settle(samples)


def describe_accuracy(accuracy_m: float) -> str:
    if accuracy_m < 1000:
        return f"±{round(accuracy_m)}m"
    return f"±{accuracy_m / 1000:.1f}km"


def accuracy_grade(accuracy_m: float) -> str:
    """Grade a fix: low above 1 km, found above 100 m, otherwise precise."""
    if accuracy_m > 1000:
        return "low"
    if accuracy_m > 100:
        return "found"
    return "precise"


def observer_from_fix(fix: Fix) -> Observer:
    return make_observer(fix.lat, fix.lng)
