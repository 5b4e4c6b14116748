import math
import logging
from dataclasses import dataclass

from .constants import NAKSHATRA_COUNT, NAKSHATRA_LORDS, NAKSHATRA_NAMES, NAKSHATRA_SPAN_DEG
from .errors import OutOfRangeError
from .utils import norm360

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NakshatraPosition:
    """Lunar sector at birth and how far the Moon had travelled through it."""

    sector_index: int  # 0..26
    elapsed_fraction: float  # [0, 1)
    longitude: float = 0.0

    @property
    def number(self) -> int:
        return self.sector_index + 1

    @property
    def name(self) -> str:
        return NAKSHATRA_NAMES[self.sector_index]

    @property
    def lord(self) -> str:
        return NAKSHATRA_LORDS[self.sector_index]

    @property
    def pada(self) -> int:
        return min(int(self.elapsed_fraction * 4) + 1, 4)

    def to_dict(self):
        return {
            "name": self.name,
            "index": self.number,
            "pada": self.pada,
            "lord": self.lord,
            "elapsedFraction": self.elapsed_fraction,
        }


def locate(longitude_sidereal: float) -> NakshatraPosition:
    """Map a sidereal longitude in degrees to its nakshatra and elapsed fraction.

    Any finite input is accepted and wrapped into [0, 360) first, since
    ephemeris output can arrive un-normalised. Non-finite input raises
    OutOfRangeError.
    """
    try:
        value = float(longitude_sidereal)
    except (TypeError, ValueError, OverflowError):
        raise OutOfRangeError(f"Longitude must be a finite number of degrees, got {type(longitude_sidereal).__name__}")
    if not math.isfinite(value):
        raise OutOfRangeError(f"Longitude must be a finite number of degrees, got {longitude_sidereal!r}")

    lon = norm360(value)
    idx0 = int(lon // NAKSHATRA_SPAN_DEG)
    fraction = (lon % NAKSHATRA_SPAN_DEG) / NAKSHATRA_SPAN_DEG

    # The remainder can round up to a full span right below a boundary
    if fraction >= 1.0:
        idx0 += 1
        fraction = 0.0
    idx0 %= NAKSHATRA_COUNT

    logger.debug("Longitude %.6f -> nakshatra %d, fraction %.9f", lon, idx0, fraction)
    return NakshatraPosition(sector_index=idx0, elapsed_fraction=fraction, longitude=lon)
