"""
Stat model: the canonical ability keys, random generation and ratings.

Every person carries 24 integer abilities in four categories of six. The lists
below are the single source of truth for which stats exist. Generation,
development, personality scoring and the pydantic ``PersonStats`` model all
iterate ``STAT_KEYS`` so they can never disagree about the set of stats.

Scale (BBGM-style): 50 is an average adult, 60 good, 70 elite, above 80 rare.
Baseline generation clamps to [20, 80] on purpose; only development can push a
person toward the lifetime bounds [1, 99].
"""

from enum import Enum
from typing import Dict, Mapping, Optional, Tuple

from .randomness import RandomSource, default_rng, normal, rand_int, weighted_choice

STAT_MIN = 1
STAT_MAX = 99

BASELINE_MEAN = 50
BASELINE_SD = 15
BASELINE_MIN = 20
BASELINE_MAX = 80

STAT_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "cognitive": (
        "intelligence",
        "memory",
        "creativity",
        "discipline",
        "judgment",
        "adaptability",
    ),
    "social": (
        "charisma",
        "leadership",
        "empathy",
        "communication",
        "confidence",
        "negotiation",
    ),
    "physical": (
        "strength",
        "endurance",
        "athleticism",
        "vitality",
        "reflexes",
        "appearance",
    ),
    "personality": (
        "ambition",
        "integrity",
        "risk_taking",
        "patience",
        "agreeableness",
        "stability",
    ),
}

STAT_KEYS: Tuple[str, ...] = tuple(
    key for keys in STAT_CATEGORIES.values() for key in keys
)


class DevelopmentStyle(str, Enum):
    """How a person's growth is distributed around their peak age."""

    EARLY = "EARLY"
    NORMAL = "NORMAL"
    LATE = "LATE"
    VOLATILE = "VOLATILE"


DEVELOPMENT_STYLE_WEIGHTS: Tuple[Tuple[DevelopmentStyle, float], ...] = (
    (DevelopmentStyle.EARLY, 0.20),
    (DevelopmentStyle.NORMAL, 0.50),
    (DevelopmentStyle.LATE, 0.20),
    (DevelopmentStyle.VOLATILE, 0.10),
)

PEAK_AGE_RANGES: Dict[DevelopmentStyle, Tuple[int, int]] = {
    DevelopmentStyle.EARLY: (25, 35),
    DevelopmentStyle.NORMAL: (30, 45),
    DevelopmentStyle.LATE: (40, 55),
    DevelopmentStyle.VOLATILE: (25, 50),
}


def clamp_stat(value: float) -> int:
    """Round and clamp a stat to the lifetime range [1, 99]."""
    return max(STAT_MIN, min(STAT_MAX, int(round(value))))


def generate_stat(
    mean: float = BASELINE_MEAN,
    sd: float = BASELINE_SD,
    min_value: int = BASELINE_MIN,
    max_value: int = BASELINE_MAX,
    rng: Optional[RandomSource] = None,
) -> int:
    """Draw one stat from a normal distribution, rounded and clamped."""
    rng = rng or default_rng()
    value = normal(rng, mean, sd)
    return max(min_value, min(max_value, int(round(value))))


def generate_base_stats(rng: Optional[RandomSource] = None) -> Dict[str, int]:
    """Generate a full baseline profile; every stat shares the same distribution."""
    rng = rng or default_rng()
    return {key: generate_stat(rng=rng) for key in STAT_KEYS}


def compute_overall_rating(stats: Mapping[str, float]) -> int:
    """Rounded arithmetic mean of all 24 stats."""
    return int(round(sum(stats[key] for key in STAT_KEYS) / len(STAT_KEYS)))


def category_average(stats: Mapping[str, float], category: str) -> float:
    keys = STAT_CATEGORIES[category]
    return sum(stats[key] for key in keys) / len(keys)


def generate_potential_overall(
    current_overall: int, rng: Optional[RandomSource] = None
) -> int:
    """Draw the lifetime ceiling for a person.

    Biased upward from current ability with a floor of 45 on the mean, so even
    weak baselines keep some upside. 85+ only appears in the distribution's tail.
    The result is never below ``current_overall``.
    """
    rng = rng or default_rng()
    potential = generate_stat(max(current_overall, 45) + 5, 12, 40, 99, rng=rng)
    return max(potential, current_overall)


def generate_development_style(rng: Optional[RandomSource] = None) -> DevelopmentStyle:
    """EARLY 20%, NORMAL 50%, LATE 20%, VOLATILE 10%."""
    rng = rng or default_rng()
    return weighted_choice(rng, DEVELOPMENT_STYLE_WEIGHTS)


def generate_peak_age(style: DevelopmentStyle, rng: Optional[RandomSource] = None) -> int:
    """Uniform integer peak age within the style's range."""
    rng = rng or default_rng()
    low, high = PEAK_AGE_RANGES[DevelopmentStyle(style)]
    return rand_int(rng, low, high)
