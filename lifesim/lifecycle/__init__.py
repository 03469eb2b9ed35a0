"""Life-cycle passes of the yearly tick, in the order the orchestrator runs them."""

from .aging import age_and_mortality, develop_population, rolls_death
from .births import apply_births, create_person
from .context import TickContext
from .elections import apply_elections
from .employment import JOB_LADDER, apply_employment, base_salary, next_job_title
from .hierarchy import apply_hierarchy, role_fit
from .relationships import apply_relationships
from .schooling import apply_schooling

# (label, pass) pairs; order matters, see Orchestrator.run_yearly_tick
TICK_PASSES = (
    ("Aging", age_and_mortality),
    ("Development", develop_population),
    ("Births", apply_births),
    ("Schooling", apply_schooling),
    ("Employment", apply_employment),
    ("Hierarchy", apply_hierarchy),
    ("Elections", apply_elections),
    ("Relationships", apply_relationships),
)

__all__ = [
    "TICK_PASSES",
    "TickContext",
    "JOB_LADDER",
    "age_and_mortality",
    "develop_population",
    "rolls_death",
    "apply_births",
    "create_person",
    "apply_schooling",
    "apply_employment",
    "base_salary",
    "next_job_title",
    "apply_hierarchy",
    "role_fit",
    "apply_elections",
    "apply_relationships",
]
