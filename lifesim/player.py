"""
Player overrides: appoint officeholders and place people in company roles.

These functions edit a snapshot in place and raise ValidationError, without
touching anything, when the choice is not allowed. They are meant to run
through ``Orchestrator.update_world`` so the change is serialised with ticks
and committed atomically:

    await orchestrator.update_world(
        world_id, lambda snapshot: appoint_officeholder(snapshot, office_id, person_id)
    )

Overrides are limited to the world's controlled country. Everything a player
puts in place is locked by default, so the yearly tick leaves it alone.
"""

from typing import List, Optional

from .config import Config
from .errors import ValidationError
from .government import office_candidates
from .lifecycle.hierarchy import role_fit
from .logging_utils import log_info
from .schemas import Company, CompanyPosition, Office, Person, Term, WorldSnapshot


def _reject(snapshot: WorldSnapshot, message: str) -> ValidationError:
    return ValidationError(message, world_id=snapshot.world_id)


def _require_controlled(snapshot: WorldSnapshot, country_id: Optional[int], what: str) -> None:
    controlled = snapshot.world.controlled_country_id
    if controlled is None:
        raise _reject(snapshot, f"World {snapshot.world_id} has no controlled country")
    if country_id != controlled:
        raise _reject(snapshot, f"{what} is outside the controlled country {controlled}")


def _require_office(snapshot: WorldSnapshot, office_id: int) -> Office:
    office = snapshot.get_office(office_id)
    if office is None:
        raise _reject(snapshot, f"Office {office_id} does not exist")
    _require_controlled(snapshot, office.country_id, f"Office '{office.name}'")
    return office


def _require_company(snapshot: WorldSnapshot, company_id: int) -> Company:
    company = snapshot.get_company(company_id)
    if company is None:
        raise _reject(snapshot, f"Company {company_id} does not exist")
    _require_controlled(snapshot, company.country_id, f"Company '{company.name}'")
    return company


def office_candidates_for(snapshot: WorldSnapshot, office_id: int) -> List[Person]:
    """Persons the player may appoint to ``office_id``, best fit first."""
    office = _require_office(snapshot, office_id)
    return office_candidates(
        snapshot, office, snapshot.world.current_year, Config.MIN_OFFICE_AGE, Config.MAX_OFFICE_AGE
    )


def appoint_officeholder(snapshot: WorldSnapshot, office_id: int, person_id: int) -> Term:
    """Replace the holder of an office with a player-locked term.

    The active term (if any) ends in the current year and the new term starts
    in it. The appointee must be an eligible candidate; the current holder
    may be re-appointed, which turns their term into a locked one.
    """
    office = _require_office(snapshot, office_id)
    year = snapshot.world.current_year

    eligible = {p.id for p in office_candidates(snapshot, office, year, Config.MIN_OFFICE_AGE, Config.MAX_OFFICE_AGE)}
    if person_id not in eligible:
        raise _reject(
            snapshot,
            f"Person {person_id} cannot hold '{office.name}' "
            "(must be alive, in the country, old enough and hold no other office)",
        )

    current = snapshot.active_term_for_office(office.id)
    if current is not None:
        current.end_year = year

    term = Term(
        id=snapshot.next_id("terms"),
        office_id=office.id,
        person_id=person_id,
        start_year=year,
        player_locked=True,
    )
    snapshot.terms.append(term)
    log_info(f"Appointed person #{person_id} to {office.name} in {year}")
    return term


def position_candidates(snapshot: WorldSnapshot, company_id: int) -> List[Person]:
    """Living employees of the company in its country, best role fit first."""
    company = _require_company(snapshot, company_id)
    employee_ids = {
        e.person_id for e in snapshot.employments if e.is_active and e.company_id == company.id
    }
    candidates = [
        person
        for person in snapshot.living_persons()
        if person.id in employee_ids and person.country_id == company.country_id
    ]
    candidates.sort(key=lambda person: (-role_fit(person), person.id))
    return candidates


def _active_position(
    snapshot: WorldSnapshot,
    company_id: int,
    *,
    role_id: Optional[int] = None,
    person_id: Optional[int] = None,
) -> Optional[CompanyPosition]:
    for position in snapshot.positions:
        if not position.is_active or position.company_id != company_id:
            continue
        if role_id is not None and position.role_id != role_id:
            continue
        if person_id is not None and position.person_id != person_id:
            continue
        return position
    return None


def assign_company_position(
    snapshot: WorldSnapshot,
    company_id: int,
    role_id: int,
    person_id: Optional[int],
    locked: Optional[bool] = None,
) -> Optional[CompanyPosition]:
    """Put ``person_id`` in the company's ``role_id`` slot.

    The current occupant of the slot loses it. A person who already holds
    another position at the company moves: the old row is closed and a new
    one opened, keeping the old lock unless ``locked`` is given. A newly
    placed person is locked unless ``locked=False``. ``person_id=None``
    clears the slot and returns None.
    """
    company = _require_company(snapshot, company_id)
    role = snapshot.get_role(role_id)
    if role is None:
        raise _reject(snapshot, f"Role {role_id} does not exist")
    if role.industry != company.industry:
        raise _reject(
            snapshot, f"Role '{role.name}' belongs to {role.industry}, not {company.industry}"
        )

    year = snapshot.world.current_year

    if person_id is not None and person_id not in {p.id for p in position_candidates(snapshot, company.id)}:
        raise _reject(
            snapshot,
            f"Person {person_id} is not a living employee of '{company.name}' in its country",
        )

    occupant = _active_position(snapshot, company.id, role_id=role.id)
    if occupant is not None and occupant.person_id == person_id:
        if locked is not None:
            occupant.locked = locked
        return occupant
    if occupant is not None:
        occupant.end_year = year

    if person_id is None:
        return None

    lock = True if locked is None else locked
    existing = _active_position(snapshot, company.id, person_id=person_id)
    if existing is not None:
        existing.end_year = year
        if locked is None:
            lock = existing.locked

    position = CompanyPosition(
        id=snapshot.next_id("positions"),
        company_id=company.id,
        role_id=role.id,
        person_id=person_id,
        locked=lock,
        start_year=year,
    )
    snapshot.positions.append(position)
    log_info(f"Assigned person #{person_id} to {role.name} at {company.name}")
    return position


def clear_company_position(snapshot: WorldSnapshot, company_id: int, role_id: int) -> None:
    """Vacate a slot; the next tick's hierarchy pass may refill it."""
    assign_company_position(snapshot, company_id, role_id, None)
