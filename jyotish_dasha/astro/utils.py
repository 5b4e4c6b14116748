from datetime import datetime, timezone, timedelta
from typing import Optional
import pytz
from timezonefinder import TimezoneFinder

# Initialize timezone finder (expensive operation, so do it once)
_tf = TimezoneFinder()


def detect_timezone_from_coordinates(latitude: float, longitude: float) -> str:
    """Timezone name at the birth place, UTC over open sea"""
    return _tf.timezone_at(lat=latitude, lng=longitude) or "UTC"


def to_utc(
    dt_iso: str,
    tz: Optional[str] = None,
    offset_minutes: Optional[int] = None,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
) -> datetime:
    """Convert ISO datetime string to UTC datetime, treating input as local time"""
    naive = parse_iso(dt_iso)

    # Explicit offset in the string wins over everything else
    if naive.tzinfo is not None:
        return naive.astimezone(timezone.utc)

    if not tz and offset_minutes is None and latitude is not None and longitude is not None:
        tz = detect_timezone_from_coordinates(latitude, longitude)

    if tz:
        tz_obj = pytz.timezone(tz)
        return tz_obj.localize(naive).astimezone(pytz.UTC)

    if offset_minutes is not None:
        return naive.replace(tzinfo=timezone(timedelta(minutes=offset_minutes))).astimezone(timezone.utc)

    # Default: treat as UTC (fallback)
    return naive.replace(tzinfo=timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_iso(value: str) -> datetime:
    """Parse ISO-8601, accepting a trailing 'Z' for UTC"""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def iso_z(dt: datetime) -> str:
    return as_utc(dt).isoformat().replace("+00:00", "Z")


def days(delta: timedelta) -> float:
    return delta.total_seconds() / 86400.0


def norm360(x: float) -> float:
    """Normalize longitude to [0, 360) range"""
    lon = x % 360.0
    # tiny negatives wrap to exactly 360.0 in float arithmetic
    if lon >= 360.0:
        lon = 0.0
    return lon
