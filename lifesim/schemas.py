"""
Pydantic schemas for the lifesim world model.

All data structures read and written by the yearly tick are defined here.

Design Philosophy:
- One ``WorldSnapshot`` holds every entity of one world and is the unit the
  persistence layer loads and commits. A tick works on a deep copy and swaps it
  in atomically, so a failed tick never leaves a half-applied world behind.
- Time-bounded relations (employment, enrollment, positions, terms, marriages)
  are never deleted by the simulation. They are closed by setting ``end_year``;
  ``end_year is None`` means active.
- Persons are never removed. Death is ``is_alive=False`` plus ``death_year``.
- Pydantic validation enforces the stat range [1, 99] at every boundary.
"""

from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .stats import STAT_KEYS, DevelopmentStyle, compute_overall_rating


# ============================================================================
# Enumerations
# ============================================================================


class SchoolLevel(str, Enum):
    PRIMARY = "Primary"
    SECONDARY = "Secondary"
    UNIVERSITY = "University"


class OfficeLevel(str, Enum):
    COUNTRY = "Country"
    REGION = "Region"
    CITY = "City"


# ============================================================================
# Person Schemas
# ============================================================================


class PersonStats(BaseModel):
    """The 24 ability stats of a person, each an integer in [1, 99].

    Fields mirror ``lifesim.stats.STAT_KEYS`` one-to-one (checked at import).
    Code that treats stats uniformly should go through ``as_dict()`` and
    ``from_mapping()`` rather than naming fields.
    """

    model_config = ConfigDict(validate_assignment=True)

    # Cognitive
    intelligence: int = Field(50, ge=1, le=99)
    memory: int = Field(50, ge=1, le=99)
    creativity: int = Field(50, ge=1, le=99)
    discipline: int = Field(50, ge=1, le=99)
    judgment: int = Field(50, ge=1, le=99)
    adaptability: int = Field(50, ge=1, le=99)

    # Social / influence
    charisma: int = Field(50, ge=1, le=99)
    leadership: int = Field(50, ge=1, le=99)
    empathy: int = Field(50, ge=1, le=99)
    communication: int = Field(50, ge=1, le=99)
    confidence: int = Field(50, ge=1, le=99)
    negotiation: int = Field(50, ge=1, le=99)

    # Physical
    strength: int = Field(50, ge=1, le=99)
    endurance: int = Field(50, ge=1, le=99)
    athleticism: int = Field(50, ge=1, le=99)
    vitality: int = Field(50, ge=1, le=99)
    reflexes: int = Field(50, ge=1, le=99)
    appearance: int = Field(50, ge=1, le=99)

    # Personality
    ambition: int = Field(50, ge=1, le=99)
    integrity: int = Field(50, ge=1, le=99)
    risk_taking: int = Field(50, ge=1, le=99)
    patience: int = Field(50, ge=1, le=99)
    agreeableness: int = Field(50, ge=1, le=99)
    stability: int = Field(50, ge=1, le=99)

    def as_dict(self) -> Dict[str, int]:
        return {key: getattr(self, key) for key in STAT_KEYS}

    @classmethod
    def from_mapping(cls, values: Dict[str, int]) -> "PersonStats":
        return cls(**{key: values[key] for key in STAT_KEYS})

    @property
    def overall(self) -> int:
        return compute_overall_rating(self.as_dict())


if tuple(PersonStats.model_fields) != STAT_KEYS:  # pragma: no cover - import-time guard
    raise RuntimeError("PersonStats fields are out of sync with STAT_KEYS")


class Person(BaseModel):
    """A simulated individual.

    Age is not stored: it is always ``year - birth_year`` for the year being
    simulated, so it can never drift from the world clock.

    ``potential_overall``, ``peak_age``, ``development_style`` and the
    personality labels are assigned once at birth and never reassigned by the
    tick. Only the stat block, ``prestige`` and the life/death fields change.
    """

    id: int = Field(..., description="Unique person identifier within the world")
    world_id: int = Field(..., description="World this person lives in")
    # Stateless persons exist; they never get schooled, hired or elected
    country_id: Optional[int] = Field(None, description="Country of citizenship")
    name: str = Field(..., description="Full name")
    birth_year: int = Field(..., description="Simulated year of birth")
    is_alive: bool = Field(True, description="False once a mortality roll hits")
    death_year: Optional[int] = Field(None, description="Year of death if dead")
    is_player: bool = Field(False, description="Player-controlled person")
    parent1_id: Optional[int] = Field(None, description="First parent, if born in-sim")
    parent2_id: Optional[int] = Field(None, description="Second parent, if any")
    prestige: float = Field(0.0, ge=0, le=100, description="Public standing (elections)")

    stats: PersonStats = Field(default_factory=PersonStats, description="Ability profile")
    potential_overall: int = Field(..., ge=1, le=99, description="Lifetime ceiling")
    peak_age: int = Field(..., ge=0, description="Age where growth turns to decline")
    development_style: DevelopmentStyle = Field(..., description="Growth curve shape")
    personality_archetype: Optional[str] = Field(None, description="Coarse personality type")
    personality_subtype: Optional[str] = Field(None, description="Flavor sub-label")

    def age_in(self, year: int) -> int:
        return year - self.birth_year

    @property
    def overall(self) -> int:
        return self.stats.overall


# ============================================================================
# World & Institution Schemas
# ============================================================================


class World(BaseModel):
    """Top-level container. ``current_year`` is the last fully simulated year."""

    id: int = Field(..., description="Unique world identifier")
    name: str = Field(..., description="Display name")
    current_year: int = Field(..., description="Last committed simulation year")
    controlled_country_id: Optional[int] = Field(
        None, description="Country the player controls (player overrides are limited to it)"
    )
    revision: int = Field(
        0, ge=0, description="Incremented by every commit (ticks and player overrides)"
    )


class Country(BaseModel):
    id: int
    world_id: int
    name: str
    code: Optional[str] = None


class Company(BaseModel):
    id: int
    world_id: int
    country_id: int
    name: str
    # Free-form so new industries can appear; aggregators bucket unknown ones as OTHER
    industry: str = Field(..., description="Industry key, e.g. TECH, FINANCE, RESEARCH")


class School(BaseModel):
    id: int
    world_id: int
    country_id: int
    name: str
    level: SchoolLevel


class Office(BaseModel):
    """A political office. Only one person may hold it at a time."""

    id: int
    world_id: int
    country_id: Optional[int] = Field(None, description="None for offices above country level")
    name: str
    level: OfficeLevel = OfficeLevel.COUNTRY
    prestige: float = Field(0.0, ge=0, le=100)
    # None = open-ended term (never triggers a scheduled election)
    term_length: Optional[int] = Field(None, ge=1, description="Years per term")
    # None falls back to the rules' minimum office age
    min_age: Optional[int] = Field(None, ge=0, description="Minimum age of a candidate")


class IndustryRole(BaseModel):
    """A ranked slot in an industry's hierarchy. Rank 0 is the top."""

    id: int
    industry: str
    name: str
    rank: int = Field(..., ge=0)


# ============================================================================
# Relation Schemas (time-bounded)
# ============================================================================


class Employment(BaseModel):
    id: int
    person_id: int
    company_id: int
    title: str
    salary: int = Field(..., ge=0)
    start_year: int
    end_year: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.end_year is None


class Enrollment(BaseModel):
    id: int
    person_id: int
    school_id: int
    level: SchoolLevel
    start_year: int
    end_year: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.end_year is None


class CompanyPosition(BaseModel):
    """Occupancy of an IndustryRole at a company.

    ``locked`` is a player override: the yearly hierarchy pass never moves,
    replaces or promotes a locked occupant.
    """

    id: int
    company_id: int
    role_id: int
    person_id: int
    locked: bool = False
    start_year: int
    end_year: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.end_year is None


class Term(BaseModel):
    """Occupancy of an Office. ``player_locked`` blocks automatic elections."""

    id: int
    office_id: int
    person_id: int
    start_year: int
    end_year: Optional[int] = None
    player_locked: bool = False

    @property
    def is_active(self) -> bool:
        return self.end_year is None


def relation_key(person_a_id: int, person_b_id: int) -> Tuple[int, int]:
    """Order-independent key for an undirected relation between two persons."""
    if person_a_id == person_b_id:
        raise ValueError("A relation needs two distinct persons")
    return (min(person_a_id, person_b_id), max(person_a_id, person_b_id))


class _PairRelation(BaseModel):
    person_a_id: int
    person_b_id: int

    @model_validator(mode="before")
    @classmethod
    def _order_pair(cls, data: Any) -> Any:
        # Store (min, max) so (A, B) and (B, A) are the same relation
        if isinstance(data, dict) and "person_a_id" in data and "person_b_id" in data:
            low, high = relation_key(data["person_a_id"], data["person_b_id"])
            data = {**data, "person_a_id": low, "person_b_id": high}
        return data

    @property
    def key(self) -> Tuple[int, int]:
        return (self.person_a_id, self.person_b_id)

    def other(self, person_id: int) -> int:
        return self.person_b_id if person_id == self.person_a_id else self.person_a_id


class Marriage(_PairRelation):
    id: int
    start_year: int
    end_year: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.end_year is None


class Friendship(_PairRelation):
    id: int
    strength: int = Field(..., ge=1, le=100)


# ============================================================================
# Performance Schemas (append-only, one row per entity per year)
# ============================================================================


class CompanyYearPerformance(BaseModel):
    company_id: int
    world_id: int
    year: int
    talent_score: float = 0.0
    leadership_score: float = 0.0
    reliability_score: float = 0.0
    output_score: float = 0.0


class CountryYearPerformance(BaseModel):
    country_id: int
    world_id: int
    year: int
    num_companies: int = 0
    total_output: float = 0.0
    average_output: Optional[float] = None
    talent_score: float = 0.0
    leadership_score: float = 0.0
    reliability_score: float = 0.0
    # 1 = best total output in the world for this year
    rank: int = Field(..., ge=1)


# ============================================================================
# Snapshot
# ============================================================================

# Collection name -> id counter key. Performance rows are keyed by (entity, year)
# and need no ids.
ENTITY_COLLECTIONS: Tuple[str, ...] = (
    "countries",
    "companies",
    "schools",
    "offices",
    "roles",
    "persons",
    "employments",
    "enrollments",
    "positions",
    "terms",
    "marriages",
    "friendships",
)


class WorldSnapshot(BaseModel):
    """Every entity belonging to one world at one committed year.

    Immutable-by-convention: the orchestrator deep-copies the loaded snapshot,
    mutates the copy, and hands the copy to ``PersistenceStrategy.commit_tick``.
    """

    world: World
    countries: List[Country] = Field(default_factory=list)
    companies: List[Company] = Field(default_factory=list)
    schools: List[School] = Field(default_factory=list)
    offices: List[Office] = Field(default_factory=list)
    # Roles are global per industry but travel with the world so a snapshot is self-contained
    roles: List[IndustryRole] = Field(default_factory=list)
    persons: List[Person] = Field(default_factory=list)
    employments: List[Employment] = Field(default_factory=list)
    enrollments: List[Enrollment] = Field(default_factory=list)
    positions: List[CompanyPosition] = Field(default_factory=list)
    terms: List[Term] = Field(default_factory=list)
    marriages: List[Marriage] = Field(default_factory=list)
    friendships: List[Friendship] = Field(default_factory=list)
    company_performances: List[CompanyYearPerformance] = Field(default_factory=list)
    country_performances: List[CountryYearPerformance] = Field(default_factory=list)
    # Highest id handed out per collection; lets new rows get ids without a database
    id_counters: Dict[str, int] = Field(default_factory=dict)

    @property
    def world_id(self) -> int:
        return self.world.id

    def next_id(self, collection: str) -> int:
        """Allocate the next id for ``collection`` (one of ENTITY_COLLECTIONS)."""
        if collection not in ENTITY_COLLECTIONS:
            raise KeyError(f"Unknown collection '{collection}'")
        current = self.id_counters.get(collection)
        if current is None:
            current = max((row.id for row in getattr(self, collection)), default=0)
        current += 1
        self.id_counters[collection] = current
        return current

    # Lookups -------------------------------------------------------------------
    # Linear scans; the tick builds its own indexes for hot paths.

    def get_person(self, person_id: int) -> Optional[Person]:
        return next((p for p in self.persons if p.id == person_id), None)

    def get_company(self, company_id: int) -> Optional[Company]:
        return next((c for c in self.companies if c.id == company_id), None)

    def get_office(self, office_id: int) -> Optional[Office]:
        return next((o for o in self.offices if o.id == office_id), None)

    def get_role(self, role_id: int) -> Optional[IndustryRole]:
        return next((r for r in self.roles if r.id == role_id), None)

    def get_country(self, country_id: int) -> Optional[Country]:
        return next((c for c in self.countries if c.id == country_id), None)

    def living_persons(self) -> Iterator[Person]:
        return (p for p in self.persons if p.is_alive)

    def active_term_for_office(self, office_id: int) -> Optional[Term]:
        return next(
            (t for t in self.terms if t.office_id == office_id and t.end_year is None), None
        )

    def active_employment_for(self, person_id: int) -> Optional[Employment]:
        return next(
            (e for e in self.employments if e.person_id == person_id and e.end_year is None),
            None,
        )

    def find_marriage(self, person_a_id: int, person_b_id: int) -> Optional[Marriage]:
        key = relation_key(person_a_id, person_b_id)
        return next((m for m in self.marriages if m.key == key and m.is_active), None)

    def find_friendship(self, person_a_id: int, person_b_id: int) -> Optional[Friendship]:
        key = relation_key(person_a_id, person_b_id)
        return next((f for f in self.friendships if f.key == key), None)

    def add_friendship(self, person_a_id: int, person_b_id: int, strength: int) -> Friendship:
        """Create the friendship or return the existing one for the same pair."""
        existing = self.find_friendship(person_a_id, person_b_id)
        if existing is not None:
            return existing
        friendship = Friendship(
            id=self.next_id("friendships"),
            person_a_id=person_a_id,
            person_b_id=person_b_id,
            strength=strength,
        )
        self.friendships.append(friendship)
        return friendship

    def add_marriage(self, person_a_id: int, person_b_id: int, start_year: int) -> Marriage:
        """Create the marriage or return the active one for the same pair."""
        existing = self.find_marriage(person_a_id, person_b_id)
        if existing is not None:
            return existing
        marriage = Marriage(
            id=self.next_id("marriages"),
            person_a_id=person_a_id,
            person_b_id=person_b_id,
            start_year=start_year,
        )
        self.marriages.append(marriage)
        return marriage


# ============================================================================
# Tick Result
# ============================================================================


class TickResult(BaseModel):
    """What one yearly tick did. Returned by ``Orchestrator.run_yearly_tick``."""

    world_id: int
    previous_year: int
    new_year: int
    persons_aged: int = 0
    deaths: int = 0
    births: int = 0
    new_employments: int = 0
    employments_ended: int = 0
    job_promotions: int = 0
    enrollments_started: int = 0
    enrollments_ended: int = 0
    positions_filled: int = 0
    position_promotions: int = 0
    positions_closed: int = 0
    elections_held: int = 0
    marriages: int = 0
    divorces: int = 0
    friendships_formed: int = 0
    performance_rows: int = 0

    @property
    def promotions(self) -> int:
        """Job-ladder plus hierarchy promotions."""
        return self.job_promotions + self.position_promotions
