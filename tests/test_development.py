"""Tests for yearly stat development."""

import random

import pytest

from lifesim.development import (
    base_growth_for_distance,
    develop_stats,
    stat_peak_age,
    style_modifiers,
)
from lifesim.randomness import SequenceRandom
from lifesim.stats import STAT_KEYS, DevelopmentStyle


def test_base_growth_branches():
    assert base_growth_for_distance(0) == 1.8
    assert base_growth_for_distance(3) == 1.8
    assert base_growth_for_distance(4) == 1.2
    assert base_growth_for_distance(9) == 0.7
    assert base_growth_for_distance(20) == 0.3


def test_style_modifiers():
    assert style_modifiers(DevelopmentStyle.EARLY, True) == (1.3, 0.5)
    assert style_modifiers(DevelopmentStyle.LATE, False) == (1.2, 0.4)
    assert style_modifiers(DevelopmentStyle.VOLATILE, True)[1] == 1.2


def test_physical_stats_peak_early_and_cognitive_late():
    assert stat_peak_age("strength", 30) == 25
    assert stat_peak_age("intelligence", 30) == 35
    assert stat_peak_age("charisma", 30) == 30


@pytest.mark.parametrize("style", list(DevelopmentStyle))
def test_development_keeps_every_stat_in_bounds(style):
    rng = random.Random(2024)
    for start in (1, 99):
        stats = {key: start for key in STAT_KEYS}
        for age in range(0, 100, 7):
            stats = develop_stats(stats, age, 99 if start == 1 else 1, 35, style, rng)
            assert set(stats) == set(STAT_KEYS)
            assert all(1 <= value <= 99 for value in stats.values())


def test_young_person_grows_toward_potential():
    stats = {key: 40 for key in STAT_KEYS}
    # Noise draws u=1.0 give log(1)=0, so development is noise-free
    rng = SequenceRandom([1.0])
    grown = develop_stats(stats, 20, 80, 40, DevelopmentStyle.NORMAL, rng)
    assert all(value > 40 for value in grown.values())


def test_input_stats_are_not_modified():
    stats = {key: 50 for key in STAT_KEYS}
    develop_stats(stats, 30, 60, 30, DevelopmentStyle.NORMAL, random.Random(1))
    assert stats == {key: 50 for key in STAT_KEYS}
