"""Schooling transitions: close finished enrollments, open new ones."""

from collections import defaultdict
from typing import Dict, List, Optional, Set, Tuple

from ..logging_utils import log_event
from ..randomness import chance, pick
from ..schemas import Enrollment, Person, School, SchoolLevel
from .context import TickContext


def completed_levels(enrollments: List[Enrollment]) -> Set[SchoolLevel]:
    """Levels with a closed enrollment. A university dropout counts as done."""
    return {e.level for e in enrollments if not e.is_active}


def enrollment_finished(ctx: TickContext, enrollment: Enrollment, age: int) -> bool:
    rules = ctx.rules
    if enrollment.level == SchoolLevel.PRIMARY:
        return age >= rules.primary_exit_age
    if enrollment.level == SchoolLevel.SECONDARY:
        return age >= rules.secondary_exit_age
    return (
        ctx.year - enrollment.start_year >= rules.university_years
        or age >= rules.university_exit_age
    )


def next_level(ctx: TickContext, age: int, done: Set[SchoolLevel]) -> Optional[SchoolLevel]:
    """The level a person of ``age`` should be starting, if any."""
    rules = ctx.rules
    if rules.primary_ages[0] <= age <= rules.primary_ages[1]:
        if SchoolLevel.PRIMARY not in done:
            return SchoolLevel.PRIMARY
        return None
    if rules.secondary_ages[0] <= age <= rules.secondary_ages[1]:
        if SchoolLevel.PRIMARY in done and SchoolLevel.SECONDARY not in done:
            return SchoolLevel.SECONDARY
        return None
    if rules.university_ages[0] <= age <= rules.university_ages[1]:
        if SchoolLevel.SECONDARY in done and SchoolLevel.UNIVERSITY not in done:
            return SchoolLevel.UNIVERSITY
    return None


def _schools_by_country_level(ctx: TickContext) -> Dict[Tuple[int, SchoolLevel], List[School]]:
    grouped: Dict[Tuple[int, SchoolLevel], List[School]] = defaultdict(list)
    for school in sorted(ctx.snapshot.schools, key=lambda s: s.id):
        grouped[(school.country_id, school.level)].append(school)
    return grouped


def _enroll(ctx: TickContext, person: Person, school: School) -> None:
    enrollment = Enrollment(
        id=ctx.snapshot.next_id("enrollments"),
        person_id=person.id,
        school_id=school.id,
        level=school.level,
        start_year=ctx.year,
    )
    ctx.snapshot.enrollments.append(enrollment)
    ctx.result.enrollments_started += 1
    log_event(f"Enrolled: {person.name} (#{person.id}) at {school.name}")


def apply_schooling(ctx: TickContext) -> None:
    """Advance every living person through Primary, Secondary and University.

    A person with no school of the right level in their country simply stays
    out of school this year. Stateless persons are never enrolled.
    """
    schools = _schools_by_country_level(ctx)
    enrollments = ctx.enrollments_by_person()

    for person in ctx.living_persons():
        age = ctx.age_of(person)
        history = enrollments.get(person.id, [])
        current = next((e for e in history if e.is_active), None)

        if current is not None:
            finished = enrollment_finished(ctx, current, age)
            dropped = (
                not finished
                and current.level == SchoolLevel.UNIVERSITY
                and chance(ctx.rng, ctx.rules.university_dropout_chance(person))
            )
            if finished or dropped:
                current.end_year = ctx.year
                ctx.result.enrollments_ended += 1
                current = None

        if current is not None or person.country_id is None:
            continue

        level = next_level(ctx, age, completed_levels(history))
        if level is None:
            continue
        candidates = schools.get((person.country_id, level))
        if not candidates:
            continue

        if level == SchoolLevel.UNIVERSITY and not chance(
            ctx.rng, ctx.rules.university_admission_chance(person)
        ):
            continue
        _enroll(ctx, person, pick(ctx.rng, candidates))
