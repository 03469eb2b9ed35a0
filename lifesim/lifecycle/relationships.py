"""
Relationship drift: divorces, new marriages and friendships.

Marriages that ended by death were already closed by the mortality pass.
Every pair goes through ``WorldSnapshot.add_marriage``/``add_friendship``,
which key the relation by (min id, max id), so (A, B) and (B, A) can never
produce two rows.
"""

from collections import defaultdict
from typing import Dict, List

from ..logging_utils import log_event
from ..randomness import chance, pick, rand_int, shuffled
from ..schemas import Person
from .context import TickContext

NEW_FRIENDSHIP_STRENGTH = (20, 50)


def _within(age: int, band) -> bool:
    return band[0] <= age <= band[1]


def apply_divorces(ctx: TickContext) -> None:
    persons = ctx.persons_by_id()
    for marriage in ctx.snapshot.marriages:
        if not marriage.is_active:
            continue
        a = persons.get(marriage.person_a_id)
        b = persons.get(marriage.person_b_id)
        if a is None or b is None or not (a.is_alive and b.is_alive):
            continue
        band = ctx.rules.divorce_ages
        if not (_within(ctx.age_of(a), band) and _within(ctx.age_of(b), band)):
            continue
        if chance(ctx.rng, ctx.rules.divorce_chance()):
            marriage.end_year = ctx.year
            ctx.result.divorces += 1
            log_event(f"Divorce: #{a.id} and #{b.id}")


def apply_new_marriages(ctx: TickContext) -> None:
    """Pair up singles of the same country and let each pair marry by chance."""
    married = set()
    for marriage in ctx.snapshot.marriages:
        if marriage.is_active:
            married.update(marriage.key)

    singles: Dict[int, List[Person]] = defaultdict(list)
    for person in ctx.living_persons():
        if person.country_id is None or person.id in married:
            continue
        if _within(ctx.age_of(person), ctx.rules.marriage_ages):
            singles[person.country_id].append(person)

    for country_id in sorted(singles):
        pool = shuffled(ctx.rng, singles[country_id])
        for i in range(0, len(pool) - 1, 2):
            a, b = pool[i], pool[i + 1]
            if chance(ctx.rng, ctx.rules.marriage_chance()):
                ctx.snapshot.add_marriage(a.id, b.id, ctx.year)
                ctx.result.marriages += 1
                log_event(f"Marriage: {a.name} (#{a.id}) and {b.name} (#{b.id})")


def apply_friendship_drift(ctx: TickContext) -> None:
    persons = ctx.persons_by_id()
    drift = ctx.rules.friendship_drift()
    for friendship in ctx.snapshot.friendships:
        a = persons.get(friendship.person_a_id)
        b = persons.get(friendship.person_b_id)
        if a is None or b is None or not (a.is_alive and b.is_alive):
            continue
        delta = rand_int(ctx.rng, -drift, drift)
        friendship.strength = max(1, min(100, friendship.strength + delta))


def apply_new_friendships(ctx: TickContext) -> None:
    adults: Dict[int, List[Person]] = defaultdict(list)
    for person in ctx.living_persons():
        if person.country_id is not None and ctx.age_of(person) >= ctx.rules.friendship_min_age:
            adults[person.country_id].append(person)

    for country_id in sorted(adults):
        group = adults[country_id]
        if len(group) < 2:
            continue
        for person in group:
            if not chance(ctx.rng, ctx.rules.new_friendship_chance()):
                continue
            other = pick(ctx.rng, [p for p in group if p.id != person.id])
            if ctx.snapshot.find_friendship(person.id, other.id) is not None:
                continue
            ctx.snapshot.add_friendship(
                person.id, other.id, rand_int(ctx.rng, *NEW_FRIENDSHIP_STRENGTH)
            )
            ctx.result.friendships_formed += 1


def apply_relationships(ctx: TickContext) -> None:
    apply_divorces(ctx)
    apply_new_marriages(ctx)
    apply_friendship_drift(ctx)
    apply_new_friendships(ctx)
