"""
Aging, mortality and development: the population half of the tick.

Mortality runs first so nobody who died this year is developed, schooled,
hired or elected afterwards. Death closes every open relation of the person
(employment, enrollment, positions, terms, marriages) with ``end_year`` set
to the year of death. The person row itself is kept, marked dead.
"""

from ..development import develop_stats
from ..logging_utils import log_event
from ..randomness import RandomSource, chance
from ..schemas import Person, PersonStats
from ..simulation_rules import SimulationRules
from .context import TickContext


def rolls_death(age: int, rules: SimulationRules, rng: RandomSource) -> bool:
    """One mortality roll for a person of ``age``."""
    return chance(rng, rules.death_probability(age))


def close_relations_on_death(ctx: TickContext, person: Person) -> None:
    snapshot = ctx.snapshot
    year = ctx.year
    result = ctx.result

    for employment in snapshot.employments:
        if employment.person_id == person.id and employment.is_active:
            employment.end_year = year
            result.employments_ended += 1

    for enrollment in snapshot.enrollments:
        if enrollment.person_id == person.id and enrollment.is_active:
            enrollment.end_year = year
            result.enrollments_ended += 1

    for position in snapshot.positions:
        if position.person_id == person.id and position.is_active:
            position.end_year = year
            result.positions_closed += 1

    # Player-locked terms end too; a dead holder cannot serve
    for term in snapshot.terms:
        if term.person_id == person.id and term.is_active:
            term.end_year = year

    for marriage in snapshot.marriages:
        if marriage.is_active and person.id in marriage.key:
            marriage.end_year = year


def age_and_mortality(ctx: TickContext) -> None:
    """Age every living person by one year and roll for death."""
    for person in ctx.living_persons():
        age = ctx.age_of(person)
        ctx.result.persons_aged += 1

        if rolls_death(age, ctx.rules, ctx.rng):
            person.is_alive = False
            person.death_year = ctx.year
            ctx.result.deaths += 1
            close_relations_on_death(ctx, person)
            log_event(f"Death: {person.name} (#{person.id}) at {age}")


def develop_population(ctx: TickContext) -> None:
    """Replace every living person's stats with next year's development."""
    for person in ctx.living_persons():
        next_stats = develop_stats(
            person.stats.as_dict(),
            new_age=ctx.age_of(person),
            potential_overall=person.potential_overall,
            peak_age=person.peak_age,
            style=person.development_style,
            rng=ctx.rng,
        )
        person.stats = PersonStats.from_mapping(next_stats)
