"""Tests for marriages, divorces and friendships."""

import random

import pytest

from conftest import PinnedRules, build_person, tick_context

from lifesim.lifecycle.relationships import (
    apply_divorces,
    apply_friendship_drift,
    apply_new_friendships,
    apply_new_marriages,
)
from lifesim.schemas import Friendship, Marriage, relation_key


def test_relation_key_is_order_independent():
    assert relation_key(7, 3) == relation_key(3, 7) == (3, 7)
    with pytest.raises(ValueError):
        relation_key(4, 4)


def test_pair_relations_store_sorted_ids():
    marriage = Marriage(id=1, person_a_id=5, person_b_id=2, start_year=2000)
    assert (marriage.person_a_id, marriage.person_b_id) == (2, 5)
    assert marriage.other(2) == 5
    friendship = Friendship(id=1, person_a_id=9, person_b_id=1, strength=40)
    assert friendship.key == (1, 9)


def test_adding_the_same_pair_twice_keeps_one_row(snapshot):
    first = snapshot.add_friendship(3, 1, 30)
    second = snapshot.add_friendship(1, 3, 80)
    assert first is second
    assert len(snapshot.friendships) == 1
    assert snapshot.find_friendship(3, 1).strength == 30

    snapshot.add_marriage(2, 4, 2020)
    snapshot.add_marriage(4, 2, 2021)
    assert len(snapshot.marriages) == 1


def test_singles_marry_within_country(snapshot):
    snapshot.persons.extend([build_person(10, 50, 2000), build_person(11, 50, 2001)])

    ctx = tick_context(snapshot, PinnedRules(marriage=1.0))
    apply_new_marriages(ctx)

    assert [m.key for m in snapshot.marriages] == [(10, 11)]
    assert ctx.result.marriages == 1


def test_married_people_do_not_remarry(snapshot):
    snapshot.persons.extend([build_person(10, 50, 2000), build_person(11, 50, 2001)])
    snapshot.add_marriage(10, 11, 2024)

    apply_new_marriages(tick_context(snapshot, PinnedRules(marriage=1.0)))

    assert len(snapshot.marriages) == 1


def test_divorce_ends_marriage(snapshot):
    snapshot.add_marriage(1, 2, 2010)
    ctx = tick_context(snapshot, PinnedRules(divorce=1.0))
    apply_divorces(ctx)
    assert snapshot.marriages[0].end_year == 2026
    assert ctx.result.divorces == 1
    assert snapshot.find_marriage(1, 2) is None


def test_friendship_drift_stays_in_range(snapshot):
    snapshot.add_friendship(1, 2, 1)
    snapshot.add_friendship(3, 4, 100)
    ctx = tick_context(snapshot, rng=random.Random(6))
    for _ in range(200):
        apply_friendship_drift(ctx)
        assert all(1 <= f.strength <= 100 for f in snapshot.friendships)


def test_new_friendships_have_unique_keys(snapshot):
    ctx = tick_context(snapshot, PinnedRules(friendship=1.0), random.Random(2))
    for _ in range(5):
        apply_new_friendships(ctx)

    keys = [f.key for f in snapshot.friendships]
    assert len(keys) == len(set(keys))
    assert all(5 not in key for key in keys)
    assert all(20 <= f.strength <= 50 for f in snapshot.friendships)
