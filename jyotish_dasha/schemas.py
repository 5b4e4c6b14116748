from pydantic import BaseModel, Field, field_validator
from typing import Optional

from .astro.constants import DAYS_PER_YEAR, MAX_DEPTH, VIMSHOTTARI_YEARS
from .astro.sandhi import MAX_TRANSITION_LEVELS
from .astro.timeline import MAX_TIMELINE_DEPTH
from .config import ALLOWED_AYANAMSHA, ALLOWED_YOGINI_MAPPINGS

# Nothing is ever more than one full Vimshottari cycle away
MAX_LOOKAHEAD_DAYS = VIMSHOTTARI_YEARS * DAYS_PER_YEAR


def _check_iso(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    try:
        from datetime import datetime
        datetime.fromisoformat(v.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError("must be in ISO-8601 format")
    return v


class BirthRequest(BaseModel):
    datetime: str
    tz: Optional[str] = None
    utcOffsetMinutes: Optional[int] = None
    # Birth place, used to find the timezone when neither tz nor offset is given
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    # Sidereal Moon longitude; computed with Swiss Ephemeris when omitted
    moonLongitude: Optional[float] = None
    ayanamsha: Optional[str] = None

    @field_validator("datetime")
    @classmethod
    def _dt(cls, v):
        try:
            from datetime import datetime
            datetime.fromisoformat(v.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError("datetime must be in ISO-8601 format")
        return v

    @field_validator("tz")
    @classmethod
    def _tz(cls, v):
        if v is None:
            return v
        try:
            from zoneinfo import ZoneInfo
            ZoneInfo(v)
        except Exception:
            raise ValueError(f"Invalid timezone: {v}")
        return v

    @field_validator("ayanamsha")
    @classmethod
    def _ay(cls, v):
        if v is not None and v not in ALLOWED_AYANAMSHA:
            raise ValueError(f"ayanamsha must be one of {ALLOWED_AYANAMSHA}")
        return v


# ---------------- Dasha API Schemas ----------------

class DashaRequest(BirthRequest):
    atDate: Optional[str] = None  # ISO-8601 UTC; defaults to now
    depth: Optional[int] = None  # 1..6; server default when omitted
    sandhiDays: Optional[float] = Field(default=None, ge=0, le=MAX_LOOKAHEAD_DAYS, allow_inf_nan=False)

    @field_validator("atDate")
    @classmethod
    def _at(cls, v):
        return _check_iso(v)

    @field_validator("depth")
    @classmethod
    def _depth(cls, v):
        if v is not None and (v < 1 or v > MAX_DEPTH):
            raise ValueError(f"depth must be between 1 and {MAX_DEPTH}")
        return v


class TimelineRequest(BirthRequest):
    depth: int = 3
    fromDate: Optional[str] = None  # ISO-8601 UTC (e.g., 1991-03-25T04:16:00Z)
    toDate: Optional[str] = None
    atDate: Optional[str] = None

    @field_validator("fromDate", "toDate", "atDate")
    @classmethod
    def _dates(cls, v):
        return _check_iso(v)

    @field_validator("depth")
    @classmethod
    def _depth(cls, v):
        if v < 1 or v > MAX_TIMELINE_DEPTH:
            raise ValueError(f"depth must be between 1 and {MAX_TIMELINE_DEPTH}")
        return v


class TransitionsRequest(BirthRequest):
    fromDate: Optional[str] = None  # defaults to now
    lookaheadDays: float = Field(default=365, ge=0, le=MAX_LOOKAHEAD_DAYS, allow_inf_nan=False)
    levels: int = Field(default=2, ge=1, le=MAX_TRANSITION_LEVELS)

    @field_validator("fromDate")
    @classmethod
    def _from(cls, v):
        return _check_iso(v)


class YoginiRequest(BirthRequest):
    atDate: Optional[str] = None
    depth: int = Field(default=2, ge=1, le=2)
    sandhiDays: Optional[float] = Field(default=None, ge=0, le=MAX_LOOKAHEAD_DAYS, allow_inf_nan=False)
    mapping: Optional[str] = None

    @field_validator("atDate")
    @classmethod
    def _at(cls, v):
        return _check_iso(v)

    @field_validator("mapping")
    @classmethod
    def _mapping(cls, v):
        if v is not None and v not in ALLOWED_YOGINI_MAPPINGS:
            raise ValueError(f"mapping must be one of {ALLOWED_YOGINI_MAPPINGS}")
        return v
