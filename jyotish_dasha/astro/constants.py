from typing import NamedTuple, Tuple


class CycleEntry(NamedTuple):
    element: str
    weight: int


# Vimshottari: 9 lords, 120 years
VIMSHOTTARI_CYCLE: Tuple[CycleEntry, ...] = (
    CycleEntry("Ketu", 7),
    CycleEntry("Venus", 20),
    CycleEntry("Sun", 6),
    CycleEntry("Moon", 10),
    CycleEntry("Mars", 7),
    CycleEntry("Rahu", 18),
    CycleEntry("Jupiter", 16),
    CycleEntry("Saturn", 19),
    CycleEntry("Mercury", 17),
)
VIMSHOTTARI_YEARS = 120

# Yogini: 8 yoginis, 36 years
YOGINI_CYCLE: Tuple[CycleEntry, ...] = (
    CycleEntry("Mangala", 1),
    CycleEntry("Pingala", 2),
    CycleEntry("Dhanya", 3),
    CycleEntry("Bhramari", 4),
    CycleEntry("Bhadrika", 5),
    CycleEntry("Ulka", 6),
    CycleEntry("Siddha", 7),
    CycleEntry("Sankata", 8),
)
YOGINI_YEARS = 36

# Planet ruling each yogini, and its traditional nature
YOGINI_PLANETS = {
    "Mangala": ("Moon", "BENEFIC"),
    "Pingala": ("Sun", "MIXED"),
    "Dhanya": ("Jupiter", "BENEFIC"),
    "Bhramari": ("Mars", "MALEFIC"),
    "Bhadrika": ("Mercury", "BENEFIC"),
    "Ulka": ("Saturn", "MALEFIC"),
    "Siddha": ("Venus", "BENEFIC"),
    "Sankata": ("Rahu", "MALEFIC"),
}

NAKSHATRA_NAMES = [
    "Ashwini", "Bharani", "Krittika", "Rohini", "Mrigashira", "Ardra",
    "Punarvasu", "Pushya", "Ashlesha", "Magha", "Purva Phalguni", "Uttara Phalguni",
    "Hasta", "Chitra", "Swati", "Vishakha", "Anuradha", "Jyeshtha",
    "Mula", "Purva Ashadha", "Uttara Ashadha", "Shravana", "Dhanishta", "Shatabhisha",
    "Purva Bhadrapada", "Uttara Bhadrapada", "Revati",
]

# Vimshottari lord of each nakshatra (0 = Ashwini ... 26 = Revati)
NAKSHATRA_LORDS: Tuple[str, ...] = (
    "Ketu", "Venus", "Sun", "Moon", "Mars", "Rahu", "Jupiter", "Saturn", "Mercury",
    "Ketu", "Venus", "Sun", "Moon", "Mars", "Rahu", "Jupiter", "Saturn", "Mercury",
    "Ketu", "Venus", "Sun", "Moon", "Mars", "Rahu", "Jupiter", "Saturn", "Mercury",
)

NAKSHATRA_COUNT = 27

# Geometric spans in degrees
NAKSHATRA_SPAN_DEG = 360.0 / 27.0

# Astronomical constants
DAYS_PER_YEAR: float = 365.25

MAX_DEPTH = 6

VIMSHOTTARI_LEVEL_NAMES = {
    1: "Mahadasha",
    2: "Antardasha",
    3: "Pratyantardasha",
    4: "Sookshmadasha",
    5: "Pranadasha",
    6: "Dehadasha",
}

YOGINI_LEVEL_NAMES = {
    1: "Yogini Dasha",
    2: "Yogini Antardasha",
}

# Sandhi window as a share of the ending period, per level
SANDHI_SHARE = {1: 0.05, 2: 0.10, 3: 0.15, 4: 0.20, 5: 0.20, 6: 0.20}
SANDHI_MIN_DAYS = 1
SANDHI_MAX_DAYS = 30
