"""Government offices: office fit, overview and election eligibility."""

from typing import List, Optional, Set

from pydantic import BaseModel

from .config import Config
from .schemas import Office, OfficeLevel, Person, Term, WorldSnapshot


class GovernmentOfficeSummary(BaseModel):
    office_id: int
    office_name: str
    prestige: float
    holder_id: Optional[int] = None
    holder_name: Optional[str] = None
    # 0-100 when the office has a holder
    fit_score: Optional[float] = None
    term_length: Optional[int] = None
    term_start_year: Optional[int] = None
    term_end_year: Optional[int] = None
    term_years_served: Optional[int] = None
    # None when there is no active term or the office has no term length
    term_years_remaining: Optional[int] = None


def office_fit(person: Person) -> float:
    """0-100 suitability of a person for high office."""
    s = person.stats
    raw = 0.3 * s.leadership + 0.3 * s.judgment + 0.2 * s.integrity + 0.2 * s.charisma
    return max(0.0, min(100.0, raw))


def government_overview(
    snapshot: WorldSnapshot,
    country_id: int,
    current_year: int,
    max_offices: Optional[int] = None,
) -> List[GovernmentOfficeSummary]:
    """Top country-level offices of a country with their active holder.

    Offices are ordered by prestige descending (ties by id) and capped at
    ``max_offices`` (default ``Config.MAX_GOVERNMENT_OFFICES``).
    """
    limit = Config.MAX_GOVERNMENT_OFFICES if max_offices is None else max_offices

    offices = [
        office
        for office in snapshot.offices
        if office.country_id == country_id and office.level == OfficeLevel.COUNTRY
    ]
    offices.sort(key=lambda office: (-office.prestige, office.id))

    summaries: List[GovernmentOfficeSummary] = []
    for office in offices[:limit]:
        term = snapshot.active_term_for_office(office.id)
        holder = snapshot.get_person(term.person_id) if term is not None else None

        served = None
        remaining = None
        if term is not None:
            served = current_year - term.start_year
            if office.term_length:
                remaining = max(0, office.term_length - served)

        summaries.append(
            GovernmentOfficeSummary(
                office_id=office.id,
                office_name=office.name,
                prestige=office.prestige,
                holder_id=holder.id if holder else None,
                holder_name=holder.name if holder else None,
                fit_score=office_fit(holder) if holder else None,
                term_length=office.term_length,
                term_start_year=term.start_year if term else None,
                term_end_year=term.end_year if term else None,
                term_years_served=served,
                term_years_remaining=remaining,
            )
        )
    return summaries


def election_due(office: Office, term: Optional[Term], year: int) -> bool:
    """Whether ``office`` should hold an election in ``year``.

    An empty office is always due. A player-locked term never is. Otherwise the
    active term must have served its full length; open-ended offices
    (``term_length`` None) never expire.
    """
    if term is None:
        return True
    if term.player_locked:
        return False
    if office.term_length is None:
        return False
    return year - term.start_year >= office.term_length


def office_holders(snapshot: WorldSnapshot) -> Set[int]:
    """Ids of persons currently holding any office."""
    return {term.person_id for term in snapshot.terms if term.is_active}


def is_office_eligible(
    person: Person,
    office: Office,
    year: int,
    holders: Set[int],
    min_age: int,
    max_age: Optional[int] = None,
) -> bool:
    """Alive, in the office's country, old enough and not holding another office.

    ``holders`` should already exclude the office's own outgoing holder when
    that person may stand again.
    """
    if not person.is_alive:
        return False
    if office.country_id is not None and person.country_id != office.country_id:
        return False
    age = person.age_in(year)
    if age < (office.min_age if office.min_age is not None else min_age):
        return False
    if max_age is not None and age > max_age:
        return False
    return person.id not in holders


def office_candidates(
    snapshot: WorldSnapshot,
    office: Office,
    year: int,
    min_age: Optional[int] = None,
    max_age: Optional[int] = None,
) -> List[Person]:
    """Eligible persons for ``office``, best fit first (ties by id).

    The current holder of this office is allowed to stand again.
    """
    min_age = Config.MIN_OFFICE_AGE if min_age is None else min_age
    holders = office_holders(snapshot)
    current = snapshot.active_term_for_office(office.id)
    if current is not None:
        holders.discard(current.person_id)

    candidates = [
        person
        for person in snapshot.living_persons()
        if is_office_eligible(person, office, year, holders, min_age, max_age)
    ]
    candidates.sort(key=lambda person: (-office_fit(person), person.id))
    return candidates
