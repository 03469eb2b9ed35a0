"""Tests for the injectable random helpers."""

import random

import pytest

from lifesim.randomness import (
    SequenceRandom,
    chance,
    pick,
    rand_int,
    shuffled,
    weighted_choice,
)


def test_sequence_random_cycles():
    rng = SequenceRandom([0.1, 0.9])
    assert [rng.random() for _ in range(4)] == [0.1, 0.9, 0.1, 0.9]


def test_sequence_random_requires_values():
    with pytest.raises(ValueError):
        SequenceRandom([])


def test_weighted_choice_scans_cumulatively():
    options = [("a", 1.0), ("b", 2.0), ("c", 1.0)]
    assert weighted_choice(SequenceRandom([0.0]), options) == "a"
    assert weighted_choice(SequenceRandom([0.3]), options) == "b"
    assert weighted_choice(SequenceRandom([0.99]), options) == "c"


def test_weighted_choice_all_zero_returns_last_item():
    assert weighted_choice(SequenceRandom([0.5]), [("a", 0.0), ("b", -1.0)]) == "b"


def test_weighted_choice_rejects_empty_options():
    with pytest.raises(ValueError):
        weighted_choice(SequenceRandom([0.5]), [])


def test_rand_int_is_inclusive():
    assert rand_int(SequenceRandom([0.0]), -5, 5) == -5
    assert rand_int(SequenceRandom([0.999]), -5, 5) == 5


def test_chance_edges():
    rng = random.Random(1)
    assert not any(chance(rng, 0.0) for _ in range(100))
    assert all(chance(rng, 1.0) for _ in range(100))


def test_pick_and_shuffle_keep_items():
    rng = random.Random(5)
    items = list(range(10))
    assert pick(rng, items) in items
    assert sorted(shuffled(rng, items)) == items
    assert items == list(range(10))
