"""
Period systems and the end-to-end pipeline.

A system is plain data: a cycle table, its length in years, how many levels
it nests, and the rule mapping the birth nakshatra to the first element. The
subdivision and resolution code in ``dasha`` is shared by all systems.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Tuple

from .constants import (
    CycleEntry,
    DAYS_PER_YEAR,
    NAKSHATRA_LORDS,
    VIMSHOTTARI_CYCLE,
    VIMSHOTTARI_LEVEL_NAMES,
    VIMSHOTTARI_YEARS,
)
from .dasha import Period, PeriodChain, build_root_periods, cycle_index, progress, resolve
from .nakshatra import NakshatraPosition, locate
from .utils import days

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodSystem:
    name: str
    cycle: Tuple[CycleEntry, ...]
    cycle_years: int
    levels: int
    level_names: Dict[int, str]
    start_index_for: Callable[[int], int]

    def start_index(self, position: NakshatraPosition) -> int:
        return self.start_index_for(position.sector_index)

    def level_name(self, level: int) -> str:
        return self.level_names.get(level, f"Level {level}")


def vimshottari_start_index(sector_index: int) -> int:
    """Start at the lord of the birth nakshatra."""
    return cycle_index(VIMSHOTTARI_CYCLE, NAKSHATRA_LORDS[sector_index])


VIMSHOTTARI = PeriodSystem(
    name="vimshottari",
    cycle=VIMSHOTTARI_CYCLE,
    cycle_years=VIMSHOTTARI_YEARS,
    levels=6,
    level_names=VIMSHOTTARI_LEVEL_NAMES,
    start_index_for=vimshottari_start_index,
)


def root_periods(system: PeriodSystem, birth_utc: datetime, position: NakshatraPosition) -> List[Period]:
    return build_root_periods(
        birth_utc,
        position,
        system.cycle,
        system.start_index(position),
        system.cycle_years,
    )


def active_chain(
    system: PeriodSystem,
    birth_utc: datetime,
    moon_longitude_sidereal: float,
    at: datetime,
    depth: int,
) -> PeriodChain:
    """Locate the nakshatra, lay out the root periods and resolve the chain at ``at``."""
    if not 1 <= depth <= system.levels:
        raise ValueError(f"depth must be between 1 and {system.levels} for {system.name}")
    position = locate(moon_longitude_sidereal)
    roots = root_periods(system, birth_utc, position)
    return resolve(roots, at, depth, system.cycle)


def balance_of_first(roots: List[Period]) -> float:
    """Years of the first period still to run at birth."""
    return days(roots[0].duration) / DAYS_PER_YEAR


def chain_label(chain: PeriodChain) -> str:
    return "-".join(chain.lords)


def chain_to_dicts(system: PeriodSystem, chain: PeriodChain) -> List[Dict[str, object]]:
    out = []
    for period in chain:
        entry = period.to_dict()
        entry["name"] = system.level_name(period.level)
        entry.update(progress(period, chain.query_instant).to_dict())
        out.append(entry)
    return out
