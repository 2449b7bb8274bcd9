"""Runtime configuration from environment variables (optionally loaded from .env)."""

import logging
import os
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path

from pytz import UnknownTimeZoneError, timezone
from timezonefinder import TimezoneFinder

from fastingtimes.models import Observer
from fastingtimes.validation import InputValidationError

_ROOT = Path(__file__).parent.parent.parent

AUTO_TIMEZONE = "auto"

_tf: TimezoneFinder | None = None


@dataclass(frozen=True)
class Settings:
    """Environment-derived settings shared by the CLI and the Streamlit app."""

    ephemeris_dir: Path
    ephemeris_file: str
    timezone: str  # "" = system clock, "auto" = from coordinates, else IANA name
    log_level: str

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            ephemeris_dir=Path(
                os.environ.get("FASTING_EPHEMERIS_DIR") or _ROOT / "resources"
            ),
            ephemeris_file=os.environ.get("FASTING_EPHEMERIS_FILE") or "de421.bsp",
            timezone=os.environ.get("FASTING_TIMEZONE", "").strip(),
            log_level=os.environ.get("FASTING_LOG_LEVEL", "WARNING").upper(),
        )


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def resolve_timezone(name: str, observer: Observer) -> tzinfo | None:
    """Turn a timezone setting into a tzinfo.

    Args:
        name: "" for the system clock, "auto" to look the zone up from the
            observer's coordinates, otherwise an IANA zone name.
        observer: Used only for "auto".

    Returns:
        A pytz zone, or None meaning "use the system clock".

    Raises:
        InputValidationError: Unknown zone name, or no zone at the coordinates.
    """
    global _tf
    if not name:
        return None
    if name.lower() == AUTO_TIMEZONE:
        if _tf is None:
            _tf = TimezoneFinder()
        tz_str = _tf.timezone_at(lat=observer.lat, lng=observer.lng)
        if tz_str is None:
            raise InputValidationError(
                f"Timezone not found: lat={observer.lat}, lng={observer.lng}"
            )
        name = tz_str
    try:
        return timezone(name)
    except UnknownTimeZoneError as e:
        raise InputValidationError(f"Unknown timezone: {name}") from e
