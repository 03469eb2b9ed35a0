"""Tests for office fit, the government overview and election eligibility."""

import pytest

from conftest import CURRENT_YEAR, build_person

from lifesim.government import (
    election_due,
    government_overview,
    office_candidates,
    office_fit,
)
from lifesim.schemas import Office, OfficeLevel, Term


def test_office_fit_is_weighted_and_bounded():
    assert office_fit(build_person(1, 60, 1980)) == pytest.approx(60)
    assert 0 <= office_fit(build_person(2, 1, 1980)) <= 100


def test_election_due_rules():
    office = Office(id=1, world_id=1, country_id=1, name="President", term_length=4)
    open_ended = Office(id=2, world_id=1, country_id=1, name="Monarch")
    term = Term(id=1, office_id=1, person_id=1, start_year=2020)

    assert election_due(office, None, 2025)
    assert not election_due(office, term, 2023)
    assert election_due(office, term, 2024)
    assert not election_due(open_ended, term, 2100)
    locked = term.model_copy(update={"player_locked": True})
    assert not election_due(office, locked, 2100)


def test_overview_sorted_by_prestige_and_capped(snapshot):
    snapshot.offices.extend(
        [
            Office(id=2, world_id=1, country_id=1, name="Chancellor", prestige=90),
            Office(id=3, world_id=1, country_id=1, name="Speaker", prestige=80),
            Office(id=4, world_id=1, country_id=1, name="Mayor", prestige=99, level=OfficeLevel.CITY),
        ]
    )
    snapshot.terms.append(Term(id=1, office_id=1, person_id=2, start_year=2023))

    overview = government_overview(snapshot, 1, CURRENT_YEAR)

    assert [row.office_id for row in overview] == [2, 1, 3]
    president = overview[1]
    assert president.holder_id == 2
    assert president.term_years_served == 2
    assert president.term_years_remaining == 2
    assert president.fit_score == pytest.approx(60)
    assert overview[0].holder_id is None

    assert len(government_overview(snapshot, 1, CURRENT_YEAR, max_offices=1)) == 1


def test_candidates_exclude_other_officeholders_and_young(snapshot):
    snapshot.offices.append(Office(id=2, world_id=1, country_id=1, name="Chancellor", prestige=50))
    snapshot.terms.append(Term(id=1, office_id=2, person_id=1, start_year=2024))
    snapshot.persons.append(build_person(6, 99, CURRENT_YEAR - 20))

    office = snapshot.get_office(1)
    candidates = office_candidates(snapshot, office, CURRENT_YEAR)

    # 1 holds another office, 5 is stateless, 6 is too young
    assert [p.id for p in candidates] == [2, 4, 3]


def test_current_holder_may_stand_again(snapshot):
    snapshot.terms.append(Term(id=1, office_id=1, person_id=1, start_year=2020))
    candidates = office_candidates(snapshot, snapshot.get_office(1), CURRENT_YEAR)
    assert candidates[0].id == 1


def test_office_minimum_age_overrides_default(snapshot):
    office = snapshot.get_office(1)
    office.min_age = 45
    assert office_candidates(snapshot, office, CURRENT_YEAR) == []
