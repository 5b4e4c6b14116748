"""
Sandhi (junction) detection near period boundaries.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from .constants import (
    CycleEntry,
    DAYS_PER_YEAR,
    SANDHI_MAX_DAYS,
    SANDHI_MIN_DAYS,
    SANDHI_SHARE,
    VIMSHOTTARI_CYCLE,
)
from .dasha import Period, PeriodChain, cycle_index, subdivide
from .utils import as_utc, days, iso_z

logger = logging.getLogger(__name__)

MAX_TRANSITION_LEVELS = 3


@dataclass(frozen=True)
class SandhiFlag:
    level: int
    time_until_boundary: timedelta
    element: str = ""
    boundary: Optional[datetime] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "level": self.level,
            "lord": self.element,
            "boundary": iso_z(self.boundary) if self.boundary else None,
            "daysUntilBoundary": days(self.time_until_boundary),
        }


@dataclass(frozen=True)
class Transition:
    level: int
    from_element: str
    to_element: str
    instant: datetime
    window_start: datetime
    window_end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.window_start <= instant <= self.window_end

    def to_dict(self) -> Dict[str, object]:
        return {
            "level": self.level,
            "fromLord": self.from_element,
            "toLord": self.to_element,
            "date": iso_z(self.instant),
            "sandhiStart": iso_z(self.window_start),
            "sandhiEnd": iso_z(self.window_end),
        }


def scan(chain: PeriodChain, lookahead: timedelta) -> List[SandhiFlag]:
    """Flag every level of ``chain`` whose period ends within ``lookahead``."""
    if lookahead < timedelta(0):
        raise ValueError("lookahead must not be negative")
    flags = []
    for period in chain:
        remaining = period.end - chain.query_instant
        if remaining <= lookahead:
            flags.append(SandhiFlag(
                level=period.level,
                time_until_boundary=remaining,
                element=period.element,
                boundary=period.end,
            ))
    return flags


def sandhi_window(period: Period) -> timedelta:
    """Width of the junction around the end of ``period``: a level-dependent share, 1 to 30 days."""
    share = SANDHI_SHARE.get(period.level, SANDHI_SHARE[max(SANDHI_SHARE)])
    years = days(period.duration) / DAYS_PER_YEAR
    width_days = round(years * share * DAYS_PER_YEAR)
    width_days = max(SANDHI_MIN_DAYS, min(SANDHI_MAX_DAYS, width_days))
    return timedelta(days=width_days)


def _transition(current: Period, following: Period) -> Transition:
    # Whole days either side, so a one day window collapses onto the boundary
    half = timedelta(days=sandhi_window(current).days // 2)
    return Transition(
        level=current.level,
        from_element=current.element,
        to_element=following.element,
        instant=current.end,
        window_start=current.end - half,
        window_end=current.end + half,
    )


def upcoming_transitions(
    root_periods: Sequence[Period],
    from_instant: datetime,
    lookahead: timedelta,
    cycle: Sequence[CycleEntry] = VIMSHOTTARI_CYCLE,
    levels: int = 2,
) -> List[Transition]:
    """
    Period changes within (from_instant, from_instant + lookahead], down to
    ``levels`` deep, ordered by date. Only periods overlapping the window are
    subdivided.
    """
    if not 1 <= levels <= MAX_TRANSITION_LEVELS:
        raise ValueError(f"levels must be between 1 and {MAX_TRANSITION_LEVELS}")
    if not root_periods:
        raise ValueError("root_periods must not be empty")
    if lookahead < timedelta(0):
        raise ValueError("lookahead must not be negative")

    start = as_utc(from_instant)
    # No transitions exist past the last root period
    horizon = start + min(lookahead, max(root_periods[-1].end - start, timedelta(0)))
    found: List[Transition] = []

    def visit(siblings: Sequence[Period], level: int) -> None:
        for pos, period in enumerate(siblings):
            if period.end <= start or period.start >= horizon:
                continue
            # The last sibling's end is the parent's boundary, reported one level up
            if pos + 1 < len(siblings) and period.end <= horizon:
                found.append(_transition(period, siblings[pos + 1]))
            if level < levels:
                children = subdivide(
                    period.start,
                    period.end,
                    cycle,
                    cycle_index(cycle, period.element),
                    level=level + 1,
                )
                visit(children, level + 1)

    visit(root_periods, 1)
    found.sort(key=lambda t: (t.instant, t.level))
    logger.debug("Found %d transitions between %s and %s", len(found), iso_z(start), iso_z(horizon))
    return found
