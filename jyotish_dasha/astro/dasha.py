"""
Lazy nested period computation.

A period tree is never built. Children of any period are recomputed on
demand from (parent interval, parent element), so resolving the active chain
at six levels touches 6 x 9 periods instead of 9^6.
"""

import math
import logging
from bisect import bisect_right
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_EVEN, localcontext
from typing import Dict, List, Optional, Sequence, Tuple

from .constants import CycleEntry, DAYS_PER_YEAR, MAX_DEPTH, VIMSHOTTARI_CYCLE
from .errors import DepthUnsupportedError, QueryOutOfBoundsError
from .nakshatra import NakshatraPosition
from .utils import as_utc, days, iso_z

logger = logging.getLogger(__name__)

# Elapsed fractions this close to 1 mean the birth fell on a sector boundary
FRACTION_EPSILON: float = 1e-10

_MICROSECOND = timedelta(microseconds=1)


@dataclass(frozen=True)
class Period:
    element: str
    level: int
    start: datetime
    end: datetime
    index_in_parent: int
    weight: int = 0

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def to_dict(self) -> Dict[str, object]:
        return {
            "lord": self.element,
            "level": self.level,
            "start": iso_z(self.start),
            "end": iso_z(self.end),
            "durationDays": days(self.duration),
            "yearsShare": self.weight,
        }


@dataclass(frozen=True)
class PeriodProgress:
    elapsed: timedelta
    remaining: timedelta
    percent: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "elapsedDays": days(self.elapsed),
            "remainingDays": days(self.remaining),
            "progressPercent": self.percent,
        }


def progress(period: Period, at: datetime) -> PeriodProgress:
    """How far ``at`` is into ``period``, clamped to the period's own span."""
    at = as_utc(at)
    duration = period.duration
    elapsed = min(max(at - period.start, timedelta(0)), duration)
    return PeriodProgress(
        elapsed=elapsed,
        remaining=duration - elapsed,
        percent=100.0 * (elapsed / duration),
    )


@dataclass(frozen=True)
class PeriodChain:
    """Active periods at ``query_instant``, one per level starting at level 1."""

    query_instant: datetime
    periods: Tuple[Period, ...]
    warning: Optional[DepthUnsupportedError] = field(default=None, compare=False)

    def __len__(self) -> int:
        return len(self.periods)

    def __iter__(self):
        return iter(self.periods)

    def __getitem__(self, i: int) -> Period:
        return self.periods[i]

    @property
    def depth(self) -> int:
        return len(self.periods)

    @property
    def lords(self) -> List[str]:
        return [p.element for p in self.periods]

    @property
    def truncated(self) -> bool:
        return self.warning is not None


def _to_microseconds(delta: timedelta) -> int:
    return delta // _MICROSECOND


def _child_microseconds(parent_us: int, weights: Sequence[int], elapsed_fraction: float) -> List[int]:
    """Split ``parent_us`` proportionally, the first weight reduced by the elapsed fraction."""
    with localcontext() as ctx:
        ctx.prec = 40
        f = Decimal(elapsed_fraction)
        emitted = [Decimal(w) for w in weights]
        emitted[0] = emitted[0] * (1 - f)
        effective_total = sum(emitted)
        return [
            int((Decimal(parent_us) * w / effective_total).to_integral_value(rounding=ROUND_HALF_EVEN))
            for w in emitted
        ]


def subdivide(
    parent_start: datetime,
    parent_end: datetime,
    cycle: Sequence[CycleEntry],
    start_index: int,
    elapsed_fraction_of_first: float = 0.0,
    *,
    level: int = 1,
) -> List[Period]:
    """
    Split [parent_start, parent_end) into contiguous children, one per cycle
    element, starting at ``start_index`` and wrapping once around the cycle.

    Durations are proportional to weight. With a non-zero elapsed fraction
    the first child only gets the unelapsed part of its share, and the parent
    interval is read as the unelapsed remainder of the whole cycle. The last
    child always ends at ``parent_end`` itself so rounding never accumulates
    across levels.

    Raises ValueError for an empty cycle, an empty interval or a fraction
    outside [0, 1], and DepthUnsupportedError if any child would be shorter
    than one microsecond.
    """
    if not cycle:
        raise ValueError("cycle must not be empty")
    if parent_end <= parent_start:
        raise ValueError(f"parent interval is empty: {parent_start} .. {parent_end}")
    f = float(elapsed_fraction_of_first)
    if not math.isfinite(f) or f < 0.0 or f > 1.0:
        raise ValueError(f"elapsed fraction must be within [0, 1], got {elapsed_fraction_of_first!r}")

    n = len(cycle)
    order = [(start_index + i) % n for i in range(n)]
    parent_us = _to_microseconds(parent_end - parent_start)

    if f >= 1.0 - FRACTION_EPSILON:
        # Boundary: the first element is already over, begin at the next one
        order = order[1:]
        f = 0.0
    if not order:
        raise ValueError("no cycle elements left to subdivide")

    durations = _child_microseconds(parent_us, [cycle[i].weight for i in order], f)
    if f > 0.0 and durations[0] == 0 and len(order) > 1:
        order = order[1:]
        durations = _child_microseconds(parent_us, [cycle[i].weight for i in order], 0.0)

    children: List[Period] = []
    cursor = parent_start
    last = len(order) - 1
    for pos, (idx, child_us) in enumerate(zip(order, durations)):
        if pos == last:
            child_end = parent_end
        else:
            child_end = cursor + timedelta(microseconds=child_us)
        if child_end <= cursor:
            raise DepthUnsupportedError(
                f"level {level} period of {cycle[idx].element} is shorter than {_MICROSECOND}",
                level=level,
            )
        children.append(Period(
            element=cycle[idx].element,
            level=level,
            start=cursor,
            end=child_end,
            index_in_parent=pos,
            weight=cycle[idx].weight,
        ))
        cursor = child_end
    return children


def cycle_index(cycle: Sequence[CycleEntry], element: str) -> int:
    for i, entry in enumerate(cycle):
        if entry.element == element:
            return i
    raise ValueError(f"{element!r} is not part of the cycle")


def build_root_periods(
    birth_utc: datetime,
    position: NakshatraPosition,
    cycle: Sequence[CycleEntry],
    start_index: int,
    cycle_years: int,
    days_per_year: float = DAYS_PER_YEAR,
) -> List[Period]:
    """
    Level-1 periods from birth: the balance of the running period, then the
    remaining elements of one full cycle.
    """
    birth_utc = as_utc(birth_utc)
    cycle_us = _to_microseconds(timedelta(days=cycle_years * days_per_year))
    total = sum(e.weight for e in cycle)

    f = position.elapsed_fraction
    if f >= 1.0 - FRACTION_EPSILON:
        f = 1.0
    with localcontext() as ctx:
        ctx.prec = 40
        consumed = Decimal(cycle_us) * cycle[start_index].weight * Decimal(f) / total
        consumed_us = int(consumed.to_integral_value(rounding=ROUND_HALF_EVEN))

    root_end = birth_utc + timedelta(microseconds=cycle_us - consumed_us)
    logger.debug(
        "Root span %s .. %s starting at %s (%.6f elapsed)",
        iso_z(birth_utc), iso_z(root_end), cycle[start_index].element, f,
    )
    return subdivide(birth_utc, root_end, cycle, start_index, f, level=1)


def _containing(periods: Sequence[Period], instant: datetime) -> Period:
    starts = [p.start for p in periods]
    return periods[bisect_right(starts, instant) - 1]


def resolve(
    root_periods: Sequence[Period],
    query_instant: datetime,
    max_depth: int,
    cycle: Sequence[CycleEntry] = VIMSHOTTARI_CYCLE,
) -> PeriodChain:
    """
    Walk down from the root periods to the chain active at ``query_instant``.

    Only the containing period is subdivided at each level; below level 1 the
    subdivision starts at the period's own element. If a level cannot be
    represented the shorter chain is returned with ``warning`` set.
    """
    if not 1 <= max_depth <= MAX_DEPTH:
        raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH}, got {max_depth}")
    if not root_periods:
        raise ValueError("root_periods must not be empty")

    at = as_utc(query_instant)
    first, last = root_periods[0], root_periods[-1]
    if at < first.start or at >= last.end:
        raise QueryOutOfBoundsError(
            f"{iso_z(at)} is outside the period system span {iso_z(first.start)} .. {iso_z(last.end)}"
        )

    chain: List[Period] = []
    warning: Optional[DepthUnsupportedError] = None
    siblings: Sequence[Period] = root_periods
    for level in range(1, max_depth + 1):
        current = _containing(siblings, at)
        chain.append(current)
        if level == max_depth:
            break
        try:
            siblings = subdivide(
                current.start,
                current.end,
                cycle,
                cycle_index(cycle, current.element),
                level=level + 1,
            )
        except DepthUnsupportedError as exc:
            logger.debug("Stopping at level %d: %s", level, exc)
            warning = exc
            break

    return PeriodChain(query_instant=at, periods=tuple(chain), warning=warning)
