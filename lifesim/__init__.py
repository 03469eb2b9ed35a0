"""
lifesim - yearly population and institution simulation.

Simulates persons, families, schools, companies and governments one year at
a time. Each tick is computed on a private copy of the world and committed
atomically, or not at all.

No file I/O required. No database required. No global config.
All dependencies (persistence, rules, random source) injected by user.
"""

__version__ = "0.1.0"

# Main simulation components
from .orchestrator import Orchestrator

# Core interfaces
from .simulation_rules import SimulationRules, DefaultSimulationRules
from .persistence import (
    PersistenceStrategy,
    InMemoryPersistence,
    PostgresPersistence,
    JsonPersistence,
    CountryInstitutions,
)
from .randomness import RandomSource, SequenceRandom, default_rng, weighted_choice
from .errors import LifesimError, ValidationError, ConsistencyViolation, StorageFailure

# Core schemas
from .schemas import (
    World,
    Country,
    Company,
    School,
    SchoolLevel,
    Office,
    OfficeLevel,
    IndustryRole,
    Person,
    PersonStats,
    Employment,
    Enrollment,
    CompanyPosition,
    Term,
    Marriage,
    Friendship,
    CompanyYearPerformance,
    CountryYearPerformance,
    WorldSnapshot,
    TickResult,
)

# Engines and read-side helpers
from .stats import STAT_KEYS, DevelopmentStyle, compute_overall_rating, generate_base_stats
from .development import develop_stats
from .personality import PersonalityArchetype, generate_personality
from .prospects import compute_prospect_score, youth_prospects
from .performance import (
    compute_company_performance,
    compute_country_performance,
    country_performance_summary,
    world_standings,
)
from .government import government_overview, office_fit
from .lifecycle import create_person
from .player import (
    appoint_officeholder,
    assign_company_position,
    clear_company_position,
    office_candidates_for,
    position_candidates,
)

__all__ = [
    # Main class
    "Orchestrator",
    # Core interfaces
    "SimulationRules",
    "DefaultSimulationRules",
    "PersistenceStrategy",
    "InMemoryPersistence",
    "PostgresPersistence",
    "JsonPersistence",
    "CountryInstitutions",
    "RandomSource",
    "SequenceRandom",
    "default_rng",
    "weighted_choice",
    # Errors
    "LifesimError",
    "ValidationError",
    "ConsistencyViolation",
    "StorageFailure",
    # Schemas
    "World",
    "Country",
    "Company",
    "School",
    "SchoolLevel",
    "Office",
    "OfficeLevel",
    "IndustryRole",
    "Person",
    "PersonStats",
    "Employment",
    "Enrollment",
    "CompanyPosition",
    "Term",
    "Marriage",
    "Friendship",
    "CompanyYearPerformance",
    "CountryYearPerformance",
    "WorldSnapshot",
    "TickResult",
    # Engines
    "STAT_KEYS",
    "DevelopmentStyle",
    "compute_overall_rating",
    "generate_base_stats",
    "develop_stats",
    "PersonalityArchetype",
    "generate_personality",
    "compute_prospect_score",
    "youth_prospects",
    "compute_company_performance",
    "compute_country_performance",
    "country_performance_summary",
    "world_standings",
    "government_overview",
    "office_fit",
    "create_person",
    # Player overrides
    "appoint_officeholder",
    "assign_company_position",
    "clear_company_position",
    "office_candidates_for",
    "position_candidates",
]
