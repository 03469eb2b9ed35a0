"""Unit tests for the world model schemas."""

import pytest

from lifesim.schemas import (
    ENTITY_COLLECTIONS,
    Employment,
    Person,
    TickResult,
    WorldSnapshot,
)


def test_age_is_derived_from_year(snapshot):
    ada = snapshot.get_person(1)
    assert ada.age_in(2025) == 40
    assert ada.age_in(2030) == 45
    assert ada.overall == 90


def test_next_id_continues_after_existing_rows(snapshot):
    assert snapshot.next_id("employments") == 4
    assert snapshot.next_id("employments") == 5
    assert snapshot.id_counters["employments"] == 5
    with pytest.raises(KeyError):
        snapshot.next_id("company_performances")


def test_lookups(snapshot):
    assert snapshot.get_company(2).name == "Globex"
    assert snapshot.get_role(4).industry == "FINANCE"
    assert snapshot.get_country(3) is None
    assert snapshot.active_employment_for(1).company_id == 1
    assert snapshot.active_employment_for(4) is None
    assert snapshot.active_term_for_office(1) is None


def test_closed_employment_is_not_active():
    job = Employment(id=1, person_id=1, company_id=1, title="Intern", salary=10, start_year=2000, end_year=2001)
    assert not job.is_active
    with pytest.raises(ValueError):
        Employment(id=2, person_id=1, company_id=1, title="Intern", salary=-1, start_year=2000)


def test_person_requires_birth_attributes():
    with pytest.raises(ValueError):
        Person(id=1, world_id=1, name="Nobody", birth_year=2000)


def test_snapshot_json_round_trip(snapshot):
    snapshot.add_marriage(2, 1, 2010)
    restored = WorldSnapshot.model_validate_json(snapshot.model_dump_json())
    assert restored == snapshot
    assert restored.marriages[0].key == (1, 2)


def test_every_entity_collection_exists_on_snapshot(snapshot):
    for collection in ENTITY_COLLECTIONS:
        assert isinstance(getattr(snapshot, collection), list)


def test_tick_result_promotions_sum():
    result = TickResult(world_id=1, previous_year=1, new_year=2, job_promotions=2, position_promotions=3)
    assert result.promotions == 5
