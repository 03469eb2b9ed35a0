"""Tests for personality archetype and subtype selection."""

import random

from lifesim.personality import (
    ARCHETYPE_SUBTYPES,
    PersonalityArchetype,
    archetype_weights,
    generate_personality,
    pick_archetype,
)
from lifesim.randomness import SequenceRandom
from lifesim.stats import STAT_KEYS


def test_every_archetype_has_seven_subtypes():
    assert set(ARCHETYPE_SUBTYPES) == set(PersonalityArchetype)
    assert all(len(subtypes) == 7 for subtypes in ARCHETYPE_SUBTYPES.values())


def test_same_seed_same_personality():
    stats = {key: 55 for key in STAT_KEYS}
    first = generate_personality(stats, random.Random(99))
    second = generate_personality(stats, random.Random(99))
    assert first == second


def test_archetype_drawn_even_when_raw_weights_are_not_positive():
    stats = {key: 1 for key in STAT_KEYS}
    assert any(weight <= 0 for weight in archetype_weights(stats).values())
    for value in (0.0, 0.5, 0.999):
        assert pick_archetype(stats, SequenceRandom([value])) in set(PersonalityArchetype)


def test_creative_profile_favours_visionary():
    stats = {key: 30 for key in STAT_KEYS}
    stats.update(creativity=99, intelligence=95, memory=95, judgment=95)
    weights = archetype_weights(stats)
    assert max(weights, key=weights.get) is PersonalityArchetype.VISIONARY


def test_subtype_belongs_to_archetype():
    rng = random.Random(4)
    for _ in range(30):
        stats = {key: rng.randint(1, 99) for key in STAT_KEYS}
        archetype, subtype = generate_personality(stats, rng)
        assert subtype in ARCHETYPE_SUBTYPES[archetype]
