"""
Reference validation and invariant checks for world snapshots.

``validate_references`` runs before a tick touches anything: a dangling id in
the stored world is a ValidationError. ``check_invariants`` runs after all
passes and before the commit: a broken invariant is a ConsistencyViolation
and the tick is thrown away.
"""

from collections import Counter
from typing import Iterable, List, Optional, Tuple

from .errors import ConsistencyViolation, ValidationError
from .schemas import WorldSnapshot


def _duplicates(keys: Iterable[Tuple]) -> List[Tuple]:
    return sorted(key for key, count in Counter(keys).items() if count > 1)


def find_reference_problems(snapshot: WorldSnapshot) -> List[str]:
    problems: List[str] = []
    countries = {c.id for c in snapshot.countries}
    companies = {c.id for c in snapshot.companies}
    schools = {s.id for s in snapshot.schools}
    offices = {o.id for o in snapshot.offices}
    roles = {r.id for r in snapshot.roles}
    persons = {p.id for p in snapshot.persons}

    if snapshot.world.controlled_country_id is not None and snapshot.world.controlled_country_id not in countries:
        problems.append(f"world controls unknown country {snapshot.world.controlled_country_id}")

    for collection in ("countries", "companies", "schools", "offices", "persons"):
        for row in getattr(snapshot, collection):
            if row.world_id != snapshot.world_id:
                problems.append(f"{collection} #{row.id} belongs to world {row.world_id}")

    for company in snapshot.companies:
        if company.country_id not in countries:
            problems.append(f"company #{company.id} references unknown country {company.country_id}")
    for school in snapshot.schools:
        if school.country_id not in countries:
            problems.append(f"school #{school.id} references unknown country {school.country_id}")
    for office in snapshot.offices:
        if office.country_id is not None and office.country_id not in countries:
            problems.append(f"office #{office.id} references unknown country {office.country_id}")
    for person in snapshot.persons:
        if person.country_id is not None and person.country_id not in countries:
            problems.append(f"person #{person.id} references unknown country {person.country_id}")
        for parent_id in (person.parent1_id, person.parent2_id):
            if parent_id is not None and parent_id not in persons:
                problems.append(f"person #{person.id} references unknown parent {parent_id}")

    for employment in snapshot.employments:
        if employment.person_id not in persons or employment.company_id not in companies:
            problems.append(f"employment #{employment.id} has a dangling person or company")
    for enrollment in snapshot.enrollments:
        if enrollment.person_id not in persons or enrollment.school_id not in schools:
            problems.append(f"enrollment #{enrollment.id} has a dangling person or school")
    for position in snapshot.positions:
        if (
            position.person_id not in persons
            or position.company_id not in companies
            or position.role_id not in roles
        ):
            problems.append(f"position #{position.id} has a dangling person, company or role")
    for term in snapshot.terms:
        if term.person_id not in persons or term.office_id not in offices:
            problems.append(f"term #{term.id} has a dangling person or office")
    for relation in list(snapshot.marriages) + list(snapshot.friendships):
        if relation.person_a_id not in persons or relation.person_b_id not in persons:
            kind = type(relation).__name__.lower()
            problems.append(f"{kind} #{relation.id} references an unknown person")

    for collection in ("countries", "companies", "schools", "offices", "roles", "persons"):
        for dup in _duplicates((row.id,) for row in getattr(snapshot, collection)):
            problems.append(f"duplicate id {dup[0]} in {collection}")

    return problems


def validate_references(snapshot: WorldSnapshot) -> None:
    """Raise ValidationError listing every dangling or foreign reference."""
    problems = find_reference_problems(snapshot)
    if problems:
        raise ValidationError(
            f"World {snapshot.world_id} has invalid references",
            world_id=snapshot.world_id,
            problems=problems,
        )


def find_violations(
    snapshot: WorldSnapshot, previous: Optional[WorldSnapshot] = None
) -> List[str]:
    """Every invariant the snapshot breaks, as readable strings."""
    violations: List[str] = []
    persons = {p.id: p for p in snapshot.persons}

    for key in _duplicates((e.person_id,) for e in snapshot.employments if e.is_active):
        violations.append(f"person #{key[0]} has more than one active employment")

    active_positions = [p for p in snapshot.positions if p.is_active]
    for company_id, role_id in _duplicates((p.company_id, p.role_id) for p in active_positions):
        violations.append(f"company #{company_id} role #{role_id} is filled more than once")
    for company_id, person_id in _duplicates((p.company_id, p.person_id) for p in active_positions):
        violations.append(f"person #{person_id} holds more than one position at company #{company_id}")

    active_terms = [t for t in snapshot.terms if t.is_active]
    for key in _duplicates((t.office_id,) for t in active_terms):
        violations.append(f"office #{key[0]} has more than one active term")
    for key in _duplicates((t.person_id,) for t in active_terms):
        violations.append(f"person #{key[0]} holds more than one office")

    for key in _duplicates(m.key for m in snapshot.marriages if m.is_active):
        violations.append(f"marriage {key} is recorded more than once")
    for key in _duplicates(f.key for f in snapshot.friendships):
        violations.append(f"friendship {key} is recorded more than once")

    for key in _duplicates((r.company_id, r.year) for r in snapshot.company_performances):
        violations.append(f"company #{key[0]} has more than one performance row for {key[1]}")
    for key in _duplicates((r.country_id, r.year) for r in snapshot.country_performances):
        violations.append(f"country #{key[0]} has more than one performance row for {key[1]}")

    dead = {p.id for p in snapshot.persons if not p.is_alive}
    for rows, label in (
        (snapshot.employments, "employment"),
        (snapshot.enrollments, "enrollment"),
        (snapshot.positions, "position"),
        (snapshot.terms, "term"),
    ):
        for row in rows:
            if row.is_active and row.person_id in dead:
                violations.append(f"{label} #{row.id} is still active for dead person #{row.person_id}")

    if previous is not None:
        for before in previous.persons:
            after = persons.get(before.id)
            if after is None:
                violations.append(f"person #{before.id} was removed")
                continue
            if after.potential_overall != before.potential_overall:
                violations.append(f"person #{before.id} had potential reassigned")
            if not before.is_alive and after.is_alive:
                violations.append(f"person #{before.id} came back to life")

    return violations


def check_invariants(
    snapshot: WorldSnapshot, year: int, previous: Optional[WorldSnapshot] = None
) -> None:
    """Raise ConsistencyViolation if ``snapshot`` breaks any world invariant.

    When ``previous`` is given, also check that no person was removed, no
    potential was reassigned and nobody came back to life.
    """
    violations = find_violations(snapshot, previous)
    if violations:
        raise ConsistencyViolation(world_id=snapshot.world_id, year=year, violations=violations)
