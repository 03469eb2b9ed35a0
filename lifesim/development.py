"""
Development engine: one year of stat evolution for one person.

BBGM-style model. Each year every stat moves a bounded step toward a soft
target derived from the person's potential, in a direction set by whether the
person is before or after their (per-stat) peak age, plus Gaussian noise whose
width depends on the development style.

Physical stats peak five years before the overall peak and three cognitive
stats five years after, so bodies decline before minds do.
"""

from typing import Dict, Mapping, Optional, Tuple

from .randomness import RandomSource, default_rng, normal
from .stats import STAT_KEYS, DevelopmentStyle, clamp_stat, compute_overall_rating

EARLY_PEAK_STATS = frozenset({"strength", "endurance", "athleticism", "reflexes", "appearance"})
LATE_PEAK_STATS = frozenset({"intelligence", "judgment", "memory"})
STAT_PEAK_OFFSET = 5

POTENTIAL_PULL = 0.4
STEP_FRACTION = 0.25
STEP_SLACK = 0.5


def base_growth_for_distance(distance: int) -> float:
    """Growth intensity by distance (years) from peak; strongest near the peak."""
    if distance > 15:
        return 0.3
    if distance > 8:
        return 0.7
    if distance > 3:
        return 1.2
    return 1.8


def style_modifiers(style: DevelopmentStyle, before_peak: bool) -> Tuple[float, float]:
    """Return ``(growth multiplier, noise sd)`` for a development style."""
    style = DevelopmentStyle(style)
    if style is DevelopmentStyle.EARLY:
        return (1.3 if before_peak else 0.7), 0.5
    if style is DevelopmentStyle.LATE:
        return (0.8 if before_peak else 1.2), 0.4
    if style is DevelopmentStyle.VOLATILE:
        return 1.0, 1.2
    return 1.0, 0.4


def stat_peak_age(stat: str, peak_age: int) -> int:
    if stat in EARLY_PEAK_STATS:
        return peak_age - STAT_PEAK_OFFSET
    if stat in LATE_PEAK_STATS:
        return peak_age + STAT_PEAK_OFFSET
    return peak_age


def develop_stats(
    stats: Mapping[str, int],
    new_age: int,
    potential_overall: int,
    peak_age: int,
    style: DevelopmentStyle,
    rng: Optional[RandomSource] = None,
) -> Dict[str, int]:
    """Produce next year's full stat vector, every value clamped to [1, 99].

    Args:
        stats: Current stats keyed by ``STAT_KEYS``
        new_age: Age the person turns this year
        potential_overall: Lifetime ceiling the overall is pulled toward
        peak_age: Overall peak age
        style: Development style
        rng: Random source for the per-stat noise

    Returns:
        New dict of stats; ``stats`` is not modified.
    """
    rng = rng or default_rng()

    current_overall = compute_overall_rating(stats)
    years_to_peak = peak_age - new_age
    before_peak = years_to_peak > 0
    growth_direction = 1 if before_peak else -1

    base_growth = base_growth_for_distance(abs(years_to_peak))
    multiplier, volatility = style_modifiers(style, before_peak)
    signed_growth = base_growth * multiplier * growth_direction

    # Same pull for every stat: the gap between potential and current overall
    pull = (potential_overall - current_overall) * POTENTIAL_PULL
    max_step = abs(signed_growth) + STEP_SLACK

    next_stats: Dict[str, int] = {}
    for key in STAT_KEYS:
        current = stats[key]
        stat_direction = 1 if stat_peak_age(key, peak_age) - new_age > 0 else -1

        stat_target = current + pull
        step = min(abs(stat_target - current) * STEP_FRACTION, max_step)

        next_value = current + step * stat_direction + normal(rng, 0.0, volatility)
        next_stats[key] = clamp_stat(next_value)

    return next_stats
