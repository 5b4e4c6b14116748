from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .dasha import Period, cycle_index, subdivide
from .nakshatra import locate
from .systems import PeriodSystem, balance_of_first, root_periods
from .utils import as_utc, days, iso_z

# Listing every period is only bounded for the first few levels
MAX_TIMELINE_DEPTH = 3

CHILD_KEYS = {2: "antardasha", 3: "pratyantardasha"}


def _overlaps(a_start: datetime, a_end: datetime, window_start: datetime, window_end: datetime) -> bool:
    return not (a_end <= window_start or a_start >= window_end)


def _trim_to_window(start: datetime, end: datetime, window_start: datetime, window_end: datetime) -> Tuple[datetime, datetime]:
    s = start if start >= window_start else window_start
    e = end if end <= window_end else window_end
    return s, e


def _node(
    system: PeriodSystem,
    period: Period,
    depth: int,
    window_start: datetime,
    window_end: datetime,
    at_dt: Optional[datetime],
) -> Dict[str, object]:
    s, e = _trim_to_window(period.start, period.end, window_start, window_end)
    node: Dict[str, object] = {
        "lord": period.element,
        "level": period.level,
        "start": iso_z(s),
        "end": iso_z(e),
        "durationDays": days(e - s),
        "yearsShare": period.weight,
    }
    if at_dt is not None:
        node["active"] = bool(s <= at_dt < e)

    # Children come from the full period and are clipped afterwards, so a
    # window edge never rescales them.
    if period.level < depth:
        children = subdivide(
            period.start,
            period.end,
            system.cycle,
            cycle_index(system.cycle, period.element),
            level=period.level + 1,
        )
        nested = [
            _node(system, child, depth, window_start, window_end, at_dt)
            for child in children
            if _overlaps(child.start, child.end, window_start, window_end)
        ]
        if nested:
            node[CHILD_KEYS[period.level + 1]] = nested
    return node


def calculate_timeline(
    system: PeriodSystem,
    birth_utc: datetime,
    moon_longitude_sidereal: float,
    *,
    depth: int = 3,
    from_date: Optional[datetime] = None,
    to_date: Optional[datetime] = None,
    at_date: Optional[datetime] = None,
) -> Tuple[List[Dict[str, object]], Dict[str, object]]:
    """
    Compute a dasha timeline up to depth 3.

    - birth_utc: naive or aware UTC; will be treated/returned as UTC Z.
    - moon_longitude_sidereal: degrees; wrapped into [0, 360).
    - depth: 1..3 levels, further capped by the system's own level count.
    - from_date/to_date: UTC window to emit. Defaults to the whole root span.
    - at_date: mark active periods.
    """
    depth = max(1, min(depth, MAX_TIMELINE_DEPTH, system.levels))

    birth_utc = as_utc(birth_utc)
    position = locate(moon_longitude_sidereal)
    roots = root_periods(system, birth_utc, position)

    window_start = as_utc(from_date) if from_date is not None else roots[0].start
    window_end = as_utc(to_date) if to_date is not None else roots[-1].end
    if window_end <= window_start:
        raise ValueError("toDate must be after fromDate")
    at_dt = as_utc(at_date) if at_date is not None else None

    timeline = [
        _node(system, period, depth, window_start, window_end, at_dt)
        for period in roots
        if _overlaps(period.start, period.end, window_start, window_end)
    ]

    metadata = {
        "system": system.name,
        "depth": depth,
        "fromDate": iso_z(window_start),
        "toDate": iso_z(window_end),
        "nakshatra": position.to_dict(),
        "balanceYears": balance_of_first(roots),
    }
    return timeline, metadata
