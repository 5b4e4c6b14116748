import os
from pathlib import Path
from typing import Any, Dict

from .astro.constants import DAYS_PER_YEAR, MAX_DEPTH, VIMSHOTTARI_YEARS

ALLOWED_AYANAMSHA = {"LAHIRI", "RAMAN", "KRISHNAMURTI", "VEDANJANAM"}
ALLOWED_YOGINI_MAPPINGS = {"MODULO", "TRADITIONAL"}


class Config:
    """Application configuration, read from the environment"""

    @classmethod
    def from_env(cls) -> Dict[str, Any]:
        return {
            "EPHE_PATH": os.environ.get("EPHE_PATH") or None,
            "FLASK_ENV": os.environ.get("FLASK_ENV", "development"),
            "ALLOWED_ORIGINS": os.environ.get("ALLOWED_ORIGINS", "*").split(","),
            "LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO"),
            "AYANAMSHA": os.environ.get("AYANAMSHA", "LAHIRI"),
            "DEFAULT_DEPTH": int(os.environ.get("DEFAULT_DEPTH", 3)),
            "SANDHI_LOOKAHEAD_DAYS": float(os.environ.get("SANDHI_LOOKAHEAD_DAYS", 30)),
            "YOGINI_MAPPING": os.environ.get("YOGINI_MAPPING", "MODULO"),
        }

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> bool:
        """Validate configuration, raising RuntimeError on the first bad value"""
        ephe = config.get("EPHE_PATH")
        if ephe and not Path(ephe).is_dir():
            raise RuntimeError(f"EPHE_PATH {ephe} is not a valid directory")

        ayanamsha = config["AYANAMSHA"]
        if ayanamsha not in ALLOWED_AYANAMSHA:
            raise RuntimeError(f"Invalid AYANAMSHA value: {ayanamsha}. Must be one of {ALLOWED_AYANAMSHA}")

        depth = config["DEFAULT_DEPTH"]
        if not 1 <= depth <= MAX_DEPTH:
            raise RuntimeError(f"Invalid DEFAULT_DEPTH value: {depth}. Must be between 1 and {MAX_DEPTH}")

        lookahead = config["SANDHI_LOOKAHEAD_DAYS"]
        if not 0 <= lookahead <= VIMSHOTTARI_YEARS * DAYS_PER_YEAR:
            raise RuntimeError(f"Invalid SANDHI_LOOKAHEAD_DAYS value: {lookahead}. Must be between 0 and one full cycle")

        mapping = config["YOGINI_MAPPING"]
        if mapping not in ALLOWED_YOGINI_MAPPINGS:
            raise RuntimeError(f"Invalid YOGINI_MAPPING value: {mapping}. Must be one of {ALLOWED_YOGINI_MAPPINGS}")

        return True
