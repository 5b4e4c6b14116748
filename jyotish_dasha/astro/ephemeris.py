"""
Swiss Ephemeris boundary: birth instant -> sidereal Moon longitude.

The period engine never imports this module; only the HTTP layer does, when
a request does not carry the Moon longitude itself.
"""

import logging
from datetime import datetime

import swisseph as swe

from .utils import as_utc, norm360

# Module-level logger
logger = logging.getLogger(__name__)

AYANAMSHA = {
    "LAHIRI": swe.SIDM_LAHIRI,
    "RAMAN": swe.SIDM_RAMAN,
    "KRISHNAMURTI": swe.SIDM_KRISHNAMURTI,
    # Lahiri + 6 arc minutes, offset applied after calculation
    "VEDANJANAM": swe.SIDM_LAHIRI,
}

VEDANJANAM_OFFSET_DEG = 0.1

# Geocentric, apparent, sidereal
SEFLAGS = swe.FLG_SWIEPH | swe.FLG_SPEED | swe.FLG_SIDEREAL

# Module-level variable to track current ayanamsha
_current_ayanamsha_key = None


def init_ephemeris(ephe_path, ayanamsha_key: str):
    """Initialize Swiss Ephemeris with path and ayanamsha"""
    global _current_ayanamsha_key
    if ayanamsha_key not in AYANAMSHA:
        raise ValueError(f"Unknown ayanamsha {ayanamsha_key!r}, expected one of {sorted(AYANAMSHA)}")
    if ephe_path:
        swe.set_ephe_path(ephe_path)
    _current_ayanamsha_key = ayanamsha_key
    swe.set_sid_mode(AYANAMSHA[ayanamsha_key])


def julian_day_utc(dt_utc: datetime) -> float:
    """Convert UTC datetime to Julian Day"""
    dt_utc = as_utc(dt_utc)
    ut = dt_utc.hour + dt_utc.minute/60 + dt_utc.second/3600 + dt_utc.microsecond/3.6e9
    return swe.julday(dt_utc.year, dt_utc.month, dt_utc.day, ut)


def moon_sidereal_longitude(jd_ut: float) -> float:
    """
    Sidereal longitude of the Moon in degrees (0-360), using the ayanamsha
    set by init_ephemeris.

    Raises:
        RuntimeError: If Swiss Ephemeris calculation fails
    """
    try:
        result = swe.calc_ut(jd_ut, swe.MOON, SEFLAGS)
    except Exception as e:
        raise RuntimeError(f"Failed to calculate Moon position: {e}") from e

    lng = norm360(float(result[0][0]))
    # Increasing the ayanamsha by 0.1 decreases every sidereal longitude by 0.1
    if _current_ayanamsha_key == "VEDANJANAM":
        lng = norm360(lng - VEDANJANAM_OFFSET_DEG)
    logger.debug("Moon sidereal longitude %.6f at JD %.6f (%s)", lng, jd_ut, _current_ayanamsha_key)
    return lng
