"""Government terms and elections."""

from ..government import election_due, is_office_eligible, office_fit, office_holders
from ..logging_utils import log_event
from ..randomness import weighted_choice
from ..schemas import Office, Person, Term
from ..stats import clamp_stat
from .context import TickContext

MIN_ELECTION_WEIGHT = 0.1
CHARISMA_BONUS = 1
LEADERSHIP_BONUS = 2


def reward_winner(person: Person, office: Office) -> None:
    """Winning office raises charisma, leadership and prestige."""
    person.stats.charisma = clamp_stat(person.stats.charisma + CHARISMA_BONUS)
    person.stats.leadership = clamp_stat(person.stats.leadership + LEADERSHIP_BONUS)
    person.prestige = max(0.0, min(100.0, round(person.prestige + office.prestige / 5)))


def apply_elections(ctx: TickContext) -> None:
    """Hold every due election, one office at a time in id order.

    The outgoing holder may stand again. A person who wins one office this
    year cannot win another. With no eligible candidate the office is left
    as it is.
    """
    snapshot = ctx.snapshot
    min_age, max_age = ctx.rules.office_age_bounds()
    holders = office_holders(snapshot)
    living = ctx.living_persons()

    for office in sorted(snapshot.offices, key=lambda o: o.id):
        current = snapshot.active_term_for_office(office.id)
        if not election_due(office, current, ctx.year):
            continue

        allowed = set(holders)
        if current is not None:
            allowed.discard(current.person_id)
        candidates = [
            person
            for person in living
            if is_office_eligible(person, office, ctx.year, allowed, min_age, max_age)
        ]
        if not candidates:
            continue

        winner = weighted_choice(
            ctx.rng,
            [(person, max(MIN_ELECTION_WEIGHT, office_fit(person))) for person in candidates],
        )

        if current is not None:
            current.end_year = ctx.year
            holders.discard(current.person_id)
        snapshot.terms.append(
            Term(
                id=snapshot.next_id("terms"),
                office_id=office.id,
                person_id=winner.id,
                start_year=ctx.year,
            )
        )
        holders.add(winner.id)
        reward_winner(winner, office)
        ctx.result.elections_held += 1
        log_event(f"Election: {winner.name} (#{winner.id}) wins {office.name}")
