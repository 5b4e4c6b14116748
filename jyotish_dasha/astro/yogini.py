"""
Yogini dasha: the 8-yogini, 36-year cycle, nested two levels deep.

It runs on the same subdivision and resolution code as Vimshottari and only
differs in its cycle table and starting rule.
"""

from typing import Dict

from .constants import YOGINI_CYCLE, YOGINI_LEVEL_NAMES, YOGINI_PLANETS, YOGINI_YEARS
from .systems import PeriodSystem


def yogini_start_index(sector_index: int) -> int:
    return sector_index % len(YOGINI_CYCLE)


def yogini_start_index_traditional(sector_index: int) -> int:
    """Offset by three, so Ashwini starts at Bhramari."""
    return (sector_index + 3) % len(YOGINI_CYCLE)


def _yogini_system(start_index_for) -> PeriodSystem:
    return PeriodSystem(
        name="yogini",
        cycle=YOGINI_CYCLE,
        cycle_years=YOGINI_YEARS,
        levels=2,
        level_names=YOGINI_LEVEL_NAMES,
        start_index_for=start_index_for,
    )


YOGINI = _yogini_system(yogini_start_index)
YOGINI_TRADITIONAL = _yogini_system(yogini_start_index_traditional)

YOGINI_MAPPINGS = {
    "MODULO": YOGINI,
    "TRADITIONAL": YOGINI_TRADITIONAL,
}


def yogini_system(mapping: str = "MODULO") -> PeriodSystem:
    try:
        return YOGINI_MAPPINGS[mapping]
    except KeyError:
        raise ValueError(f"Unknown yogini mapping {mapping!r}, expected one of {sorted(YOGINI_MAPPINGS)}")


def yogini_details(yogini: str) -> Dict[str, str]:
    planet, nature = YOGINI_PLANETS[yogini]
    return {"yogini": yogini, "planet": planet, "nature": nature}
