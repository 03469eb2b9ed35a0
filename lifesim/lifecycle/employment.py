"""
Employment transitions: hiring, raises, ladder promotions, quits, retirement.

A ladder promotion closes the current Employment row and opens a new one at
the same company with the next title, so salary history survives. At most one
Employment per person is ever active.
"""

from collections import defaultdict
from typing import Dict, List

from ..logging_utils import log_event
from ..randomness import chance, pick, uniform
from ..schemas import Company, Employment, Person, SchoolLevel
from ..simulation_rules import skill_score
from .context import TickContext

JOB_LADDER = (
    "Intern",
    "Junior Analyst",
    "Analyst",
    "Senior Analyst",
    "Manager",
    "Director",
    "VP",
)
ENTRY_TITLES = JOB_LADDER[:3]

SALARY_FLOOR = 25000
SALARY_SPAN = 125000


def next_job_title(current: str) -> str:
    """One rung up the ladder. Unknown titles and the top rung stay put."""
    if current not in JOB_LADDER:
        return current
    index = JOB_LADDER.index(current)
    return JOB_LADDER[min(index + 1, len(JOB_LADDER) - 1)]


def base_salary(person: Person) -> int:
    """Map skill linearly from the baseline band [20, 80] to [25k, 150k].

    Skills below the band extrapolate downward but never below zero.
    """
    salary = SALARY_FLOOR + (skill_score(person) - 20) * (SALARY_SPAN / 60)
    return max(0, int(round(salary)))


def _companies_by_country(ctx: TickContext) -> Dict[int, List[Company]]:
    grouped: Dict[int, List[Company]] = defaultdict(list)
    for company in sorted(ctx.snapshot.companies, key=lambda c: c.id):
        grouped[company.country_id].append(company)
    return grouped


def _end(ctx: TickContext, employment: Employment) -> None:
    employment.end_year = ctx.year
    ctx.result.employments_ended += 1


def _advance_employed(ctx: TickContext, person: Person, job: Employment, age: int) -> None:
    rules = ctx.rules

    if age > rules.retirement_age:
        _end(ctx, job)
        log_event(f"Retired: {person.name} (#{person.id}) at {age}")
        return

    if chance(ctx.rng, rules.quit_chance(person)):
        _end(ctx, job)
        log_event(f"Quit: {person.name} (#{person.id})")
        return

    if chance(ctx.rng, rules.promotion_chance(person)):
        low, high = rules.promotion_raise_range()
        job.end_year = ctx.year
        promoted = Employment(
            id=ctx.snapshot.next_id("employments"),
            person_id=person.id,
            company_id=job.company_id,
            title=next_job_title(job.title),
            salary=int(round(job.salary * uniform(ctx.rng, low, high))),
            start_year=ctx.year,
        )
        ctx.snapshot.employments.append(promoted)
        ctx.result.job_promotions += 1
        log_event(f"Promoted: {person.name} (#{person.id}) {job.title} -> {promoted.title}")
        return

    low, high = rules.yearly_raise_range()
    job.salary = int(round(job.salary * uniform(ctx.rng, low, high)))


def apply_employment(ctx: TickContext) -> None:
    """Run the job system for every living person.

    Employed persons retire past the retirement age, may quit, may be promoted
    one rung, and otherwise get a small raise. Unemployed persons of working
    age may be hired by a random company of their own country. A person who
    left a job this year is not rehired in the same year.
    """
    rules = ctx.rules
    companies = _companies_by_country(ctx)
    enrollments = ctx.enrollments_by_person()
    active_jobs = {e.person_id: e for e in ctx.snapshot.employments if e.is_active}
    work_low, work_high = rules.working_ages

    for person in ctx.living_persons():
        age = ctx.age_of(person)
        job = active_jobs.get(person.id)

        if job is not None:
            _advance_employed(ctx, person, job, age)
            continue

        if age < work_low or age > work_high or person.country_id is None:
            continue
        options = companies.get(person.country_id)
        if not options:
            continue

        has_degree = any(
            e.level == SchoolLevel.UNIVERSITY and not e.is_active
            for e in enrollments.get(person.id, [])
        )
        if not chance(ctx.rng, rules.hire_chance(person, has_degree)):
            continue

        company = pick(ctx.rng, options)
        hired = Employment(
            id=ctx.snapshot.next_id("employments"),
            person_id=person.id,
            company_id=company.id,
            title=pick(ctx.rng, ENTRY_TITLES),
            salary=base_salary(person),
            start_year=ctx.year,
        )
        ctx.snapshot.employments.append(hired)
        ctx.result.new_employments += 1
        log_event(f"Hired: {person.name} (#{person.id}) at {company.name} as {hired.title}")
