"""Shared fixtures: a small hand-built world.

Layout (current year 2025, controlled country 1):
- Country 1 "Avalon": company 1 Acme (TECH, 3-rank ladder), a primary school,
  the Presidency (term length 4)
- Country 2 "Borduria": company 2 Globex (FINANCE, 1-rank ladder)
- Persons 1-3 work at Acme with flat stats 90 / 60 / 30, none holds a position
- Person 4 (Avalon, 40) is unemployed, person 5 is stateless
"""

import random
from typing import Optional

import pytest

from lifesim.schemas import (
    Company,
    Country,
    Employment,
    IndustryRole,
    Office,
    Person,
    PersonStats,
    School,
    SchoolLevel,
    TickResult,
    World,
    WorldSnapshot,
)
from lifesim.lifecycle import TickContext
from lifesim.simulation_rules import DefaultSimulationRules
from lifesim.stats import STAT_KEYS, DevelopmentStyle

WORLD_ID = 1
CURRENT_YEAR = 2025


def flat_stats(value: int) -> PersonStats:
    return PersonStats.from_mapping({key: value for key in STAT_KEYS})


def build_person(
    person_id: int,
    level: int,
    birth_year: int,
    country_id: Optional[int] = 1,
    name: Optional[str] = None,
) -> Person:
    return Person(
        id=person_id,
        world_id=WORLD_ID,
        country_id=country_id,
        name=name or f"Person {person_id}",
        birth_year=birth_year,
        stats=flat_stats(level),
        potential_overall=level,
        peak_age=35,
        development_style=DevelopmentStyle.NORMAL,
    )


def build_world() -> WorldSnapshot:
    return WorldSnapshot(
        world=World(id=WORLD_ID, name="Testland", current_year=CURRENT_YEAR, controlled_country_id=1),
        countries=[
            Country(id=1, world_id=WORLD_ID, name="Avalon", code="AVA"),
            Country(id=2, world_id=WORLD_ID, name="Borduria", code="BOR"),
        ],
        companies=[
            Company(id=1, world_id=WORLD_ID, country_id=1, name="Acme", industry="TECH"),
            Company(id=2, world_id=WORLD_ID, country_id=2, name="Globex", industry="FINANCE"),
        ],
        schools=[
            School(id=1, world_id=WORLD_ID, country_id=1, name="Avalon Primary", level=SchoolLevel.PRIMARY),
        ],
        offices=[
            Office(id=1, world_id=WORLD_ID, country_id=1, name="President", prestige=80, term_length=4),
        ],
        roles=[
            IndustryRole(id=1, industry="TECH", name="CEO", rank=0),
            IndustryRole(id=2, industry="TECH", name="CTO", rank=1),
            IndustryRole(id=3, industry="TECH", name="Engineer", rank=2),
            IndustryRole(id=4, industry="FINANCE", name="Chairman", rank=0),
        ],
        persons=[
            build_person(1, 90, 1985, name="Ada"),
            build_person(2, 60, 1985, name="Bo"),
            build_person(3, 30, 1985, name="Cy"),
            build_person(4, 50, 1985, name="Dee"),
            build_person(5, 50, 1985, country_id=None, name="Eli"),
        ],
        employments=[
            Employment(id=1, person_id=1, company_id=1, title="Analyst", salary=60000, start_year=2020),
            Employment(id=2, person_id=2, company_id=1, title="Analyst", salary=50000, start_year=2020),
            Employment(id=3, person_id=3, company_id=1, title="Intern", salary=30000, start_year=2020),
        ],
    )


@pytest.fixture
def snapshot() -> WorldSnapshot:
    return build_world()


class PinnedRules(DefaultSimulationRules):
    """Every stochastic rule pinned; zero unless overridden by keyword.

    Keys: death, birth, admission, dropout, hire, quit, promotion, divorce,
    marriage, friendship.
    """

    def __init__(self, **chances: float):
        self.chances = chances

    def _get(self, key: str) -> float:
        return self.chances.get(key, 0.0)

    def death_probability(self, age: int) -> float:
        return self._get("death")

    def birth_chance(self, person, age):
        return self._get("birth")

    def university_admission_chance(self, person):
        return self._get("admission")

    def university_dropout_chance(self, person):
        return self._get("dropout")

    def hire_chance(self, person, has_degree):
        return self._get("hire")

    def quit_chance(self, person):
        return self._get("quit")

    def promotion_chance(self, person):
        return self._get("promotion")

    def divorce_chance(self):
        return self._get("divorce")

    def marriage_chance(self):
        return self._get("marriage")

    def new_friendship_chance(self):
        return self._get("friendship")


def tick_context(snapshot: WorldSnapshot, rules=None, rng=None) -> TickContext:
    """Context for simulating the year after the snapshot's current year."""
    year = snapshot.world.current_year + 1
    result = TickResult(world_id=snapshot.world_id, previous_year=year - 1, new_year=year)
    return TickContext(snapshot, year, rng or random.Random(0), rules or PinnedRules(), result)
