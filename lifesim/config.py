"""
Lifesim Configuration

Loads configuration from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


class Config:
    """Application configuration loaded from environment variables."""

    # Database Configuration (PostgresPersistence)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "postgresql://localhost/lifesim")

    # Directory used by JsonPersistence when no path is passed explicitly
    DATA_DIR: Path = Path(os.getenv("LIFESIM_DATA_DIR", "lifesim_worlds"))

    # Seed for the default random source. Unset means OS entropy.
    SEED: Optional[int] = _optional_int("LIFESIM_SEED")

    # Logging
    # QUIET silences per-tick output; VERBOSE prints every hire/election/promotion
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Government
    MIN_OFFICE_AGE: int = int(os.getenv("MIN_OFFICE_AGE", "30"))
    MAX_OFFICE_AGE: int = int(os.getenv("MAX_OFFICE_AGE", "75"))
    MAX_GOVERNMENT_OFFICES: int = int(os.getenv("MAX_GOVERNMENT_OFFICES", "8"))

    # Scouting age band for youth prospects
    YOUTH_MIN_AGE: int = int(os.getenv("YOUTH_MIN_AGE", "15"))
    YOUTH_MAX_AGE: int = int(os.getenv("YOUTH_MAX_AGE", "23"))

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are inconsistent."""
        if cls.MIN_OFFICE_AGE > cls.MAX_OFFICE_AGE:
            raise ValueError(
                f"MIN_OFFICE_AGE ({cls.MIN_OFFICE_AGE}) must not exceed "
                f"MAX_OFFICE_AGE ({cls.MAX_OFFICE_AGE})"
            )

        if cls.YOUTH_MIN_AGE > cls.YOUTH_MAX_AGE:
            raise ValueError(
                f"YOUTH_MIN_AGE ({cls.YOUTH_MIN_AGE}) must not exceed "
                f"YOUTH_MAX_AGE ({cls.YOUTH_MAX_AGE})"
            )

        if cls.LOG_LEVEL not in ("QUIET", "INFO", "VERBOSE"):
            raise ValueError(
                f"LOG_LEVEL must be one of QUIET, INFO, VERBOSE (got {cls.LOG_LEVEL!r})"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Lifesim Configuration:",
            f"  Database: {cls.DATABASE_URL}",
            f"  Data dir: {cls.DATA_DIR}",
            f"  Seed: {cls.SEED if cls.SEED is not None else 'random'}",
            f"  Log level: {cls.LOG_LEVEL}",
            f"  Office ages: {cls.MIN_OFFICE_AGE}-{cls.MAX_OFFICE_AGE}",
            f"  Youth ages: {cls.YOUTH_MIN_AGE}-{cls.YOUTH_MAX_AGE}",
        ]
        return "\n".join(lines)
