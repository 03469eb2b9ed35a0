"""Unit tests for the stat model."""

import random
from collections import Counter
from statistics import mean, median

import pytest

from lifesim.schemas import PersonStats
from lifesim.stats import (
    STAT_CATEGORIES,
    STAT_KEYS,
    DevelopmentStyle,
    PEAK_AGE_RANGES,
    clamp_stat,
    compute_overall_rating,
    generate_base_stats,
    generate_development_style,
    generate_peak_age,
    generate_potential_overall,
)


def test_stat_keys_cover_every_category_once():
    assert len(STAT_KEYS) == 24
    assert len(set(STAT_KEYS)) == 24
    assert all(len(keys) == 6 for keys in STAT_CATEGORIES.values())


def test_person_stats_fields_match_stat_keys():
    assert tuple(PersonStats.model_fields) == STAT_KEYS
    stats = PersonStats.from_mapping({key: 42 for key in STAT_KEYS})
    assert stats.as_dict() == {key: 42 for key in STAT_KEYS}
    assert stats.overall == 42


def test_person_stats_reject_out_of_range_values():
    stats = PersonStats()
    with pytest.raises(ValueError):
        stats.intelligence = 0
    with pytest.raises(ValueError):
        PersonStats(charisma=100)


def test_clamp_stat_rounds_and_bounds():
    assert clamp_stat(-5) == 1
    assert clamp_stat(120) == 99
    assert clamp_stat(49.6) == 50


def test_generated_baseline_stays_in_band():
    rng = random.Random(7)
    for _ in range(50):
        stats = generate_base_stats(rng)
        assert set(stats) == set(STAT_KEYS)
        assert all(20 <= value <= 80 for value in stats.values())


def test_overall_is_rounded_mean():
    stats = {key: 50 for key in STAT_KEYS}
    stats["intelligence"] = 74  # +24 over 24 stats -> mean 51
    assert compute_overall_rating(stats) == 51


def test_potential_never_below_current_overall():
    rng = random.Random(3)
    for current in (10, 45, 80, 99):
        for _ in range(20):
            potential = generate_potential_overall(current, rng)
            assert current <= potential <= 99


def test_peak_age_within_style_range():
    rng = random.Random(11)
    for _ in range(100):
        style = generate_development_style(rng)
        low, high = PEAK_AGE_RANGES[style]
        assert low <= generate_peak_age(style, rng) <= high
    assert DevelopmentStyle("LATE") is DevelopmentStyle.LATE


def test_development_style_frequencies():
    rng = random.Random(2024)
    trials = 10_000
    counts = Counter(generate_development_style(rng) for _ in range(trials))
    expected = {
        DevelopmentStyle.EARLY: 0.20,
        DevelopmentStyle.NORMAL: 0.50,
        DevelopmentStyle.LATE: 0.20,
        DevelopmentStyle.VOLATILE: 0.10,
    }
    for style, share in expected.items():
        assert abs(counts[style] / trials - share) <= 0.02, style


def test_potential_centres_above_current_ability():
    rng = random.Random(99)
    trials = 10_000

    weak = [generate_potential_overall(30, rng) for _ in range(trials)]
    # Centre is max(30, 45) + 5; the floor at 40 pulls the mean slightly up
    assert 49 <= median(weak) <= 51
    assert 50 <= mean(weak) <= 53
    assert min(weak) >= 40

    strong = [generate_potential_overall(70, rng) for _ in range(trials)]
    # Centre is 70 + 5; results below 70 are lifted to 70
    assert 74 <= median(strong) <= 76
    assert 76 <= mean(strong) <= 79
    assert min(strong) >= 70
    assert max(strong) <= 99
