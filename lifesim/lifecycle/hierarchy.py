"""
Company hierarchy maintenance.

Each company has one slot per IndustryRole of its industry. Every tick:

1. Active positions that are no longer valid are closed: the holder died,
   moved to another country, left the company, or the role belongs to a
   different industry than the company.
2. Vacant slots are filled top-down (rank 0 first). Candidates for a vacant
   slot are the company's active employees without a position there, plus
   the holders of strictly lower-ranked unlocked slots. The best role fit
   wins (ties by person id). Moving a lower incumbent up vacates their old
   slot, which is then considered further down the same pass.

Locked positions are never moved, closed (unless invalid) or filled over, and
nobody is ever evicted to make room.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from ..logging_utils import log_event
from ..schemas import Company, CompanyPosition, IndustryRole, Person
from .context import TickContext


def role_fit(person: Person) -> float:
    """Weighted sum of intelligence, discipline, charisma and leadership."""
    s = person.stats
    return 0.3 * s.intelligence + 0.2 * s.discipline + 0.2 * s.charisma + 0.3 * s.leadership


def _rank_key(person: Person) -> Tuple[float, int]:
    return (-role_fit(person), person.id)


def position_invalid_reason(
    position: CompanyPosition,
    company: Optional[Company],
    role: Optional[IndustryRole],
    person: Optional[Person],
    employer_id: Optional[int],
) -> Optional[str]:
    if company is None or role is None or person is None:
        return "dangling reference"
    if not person.is_alive:
        return "holder dead"
    if person.country_id is None or person.country_id != company.country_id:
        return "holder left the country"
    if role.industry != company.industry:
        return "role industry mismatch"
    if employer_id != company.id:
        return "holder no longer employed"
    return None


def close_invalid_positions(ctx: TickContext) -> None:
    snapshot = ctx.snapshot
    companies = {c.id: c for c in snapshot.companies}
    roles = {r.id: r for r in snapshot.roles}
    persons = ctx.persons_by_id()
    employers = {e.person_id: e.company_id for e in snapshot.employments if e.is_active}

    for position in snapshot.positions:
        if not position.is_active:
            continue
        reason = position_invalid_reason(
            position,
            companies.get(position.company_id),
            roles.get(position.role_id),
            persons.get(position.person_id),
            employers.get(position.person_id),
        )
        if reason is not None:
            position.end_year = ctx.year
            ctx.result.positions_closed += 1
            log_event(f"Position #{position.id} closed: {reason}")


def _open_position(ctx: TickContext, company: Company, role: IndustryRole, person: Person) -> CompanyPosition:
    position = CompanyPosition(
        id=ctx.snapshot.next_id("positions"),
        company_id=company.id,
        role_id=role.id,
        person_id=person.id,
        start_year=ctx.year,
    )
    ctx.snapshot.positions.append(position)
    return position


def fill_company_hierarchy(
    ctx: TickContext,
    company: Company,
    roles: List[IndustryRole],
    employees: List[Person],
) -> None:
    """Fill the vacant slots of one company, top-down."""
    persons = ctx.persons_by_id()
    ladder = sorted(roles, key=lambda r: (r.rank, r.id))

    slots: Dict[int, Optional[CompanyPosition]] = {role.id: None for role in ladder}
    for position in ctx.snapshot.positions:
        if position.is_active and position.company_id == company.id and position.role_id in slots:
            slots[position.role_id] = position

    placed = {p.person_id for p in ctx.snapshot.positions if p.is_active and p.company_id == company.id}
    unplaced = [person for person in employees if person.id not in placed]

    for index, role in enumerate(ladder):
        if slots[role.id] is not None:
            continue

        movable = [
            slots[lower.id]
            for lower in ladder[index + 1:]
            if lower.rank > role.rank
            and slots[lower.id] is not None
            and not slots[lower.id].locked
        ]
        pool: List[Tuple[Person, Optional[CompanyPosition]]] = [(p, None) for p in unplaced]
        pool.extend((persons[pos.person_id], pos) for pos in movable)
        if not pool:
            continue

        person, previous = min(pool, key=lambda entry: _rank_key(entry[0]))
        slots[role.id] = _open_position(ctx, company, role, person)

        if previous is None:
            unplaced.remove(person)
            ctx.result.positions_filled += 1
            log_event(f"[{company.name}] {person.name} fills {role.name}")
        else:
            previous.end_year = ctx.year
            slots[previous.role_id] = None
            ctx.result.position_promotions += 1
            log_event(f"[{company.name}] {person.name} promoted to {role.name}")


def apply_hierarchy(ctx: TickContext) -> None:
    """Close invalid positions, then fill every company's ladder."""
    close_invalid_positions(ctx)

    snapshot = ctx.snapshot
    roles_by_industry: Dict[str, List[IndustryRole]] = defaultdict(list)
    for role in snapshot.roles:
        roles_by_industry[role.industry].append(role)

    persons = ctx.persons_by_id()
    employees: Dict[int, List[Person]] = defaultdict(list)
    for employment in sorted(snapshot.employments, key=lambda e: e.person_id):
        if not employment.is_active:
            continue
        person = persons.get(employment.person_id)
        if person is not None and person.is_alive:
            employees[employment.company_id].append(person)

    for company in sorted(snapshot.companies, key=lambda c: c.id):
        roles = roles_by_industry.get(company.industry)
        if not roles:
            continue
        eligible = [p for p in employees.get(company.id, []) if p.country_id == company.country_id]
        fill_company_hierarchy(ctx, company, roles, eligible)
