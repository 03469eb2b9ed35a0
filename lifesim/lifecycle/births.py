"""
Births and the person factory.

``create_person`` is the single place a Person comes into existence, both for
in-tick births and for callers that build a world programmatically. It draws
everything that is fixed at birth: development style, peak age, potential
and personality. Those fields are never reassigned afterwards.
"""

from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Tuple

from ..logging_utils import log_event
from ..personality import generate_personality
from ..randomness import RandomSource, chance, default_rng, pick, rand_int
from ..schemas import Person, PersonStats, WorldSnapshot
from ..stats import (
    STAT_KEYS,
    compute_overall_rating,
    generate_base_stats,
    generate_development_style,
    generate_peak_age,
    generate_potential_overall,
)
from .context import TickContext

FIRST_NAMES = ("Lena", "Kai", "Mara", "Jace", "Noa", "Theo", "Iris", "Ravi")
LAST_NAMES = ("Halden", "Kerr", "Novak", "Saeed", "Kato", "Silva", "Ibrahim")


def random_name(rng: RandomSource) -> str:
    return f"{pick(rng, FIRST_NAMES)} {pick(rng, LAST_NAMES)}"


def create_person(
    snapshot: WorldSnapshot,
    *,
    birth_year: int,
    country_id: Optional[int],
    stats: Optional[Mapping[str, int]] = None,
    name: Optional[str] = None,
    parent1_id: Optional[int] = None,
    parent2_id: Optional[int] = None,
    is_player: bool = False,
    rng: Optional[RandomSource] = None,
) -> Person:
    """Create a person, append it to ``snapshot`` and return it.

    Args:
        snapshot: World the person is born into (receives the new row)
        birth_year: Simulated year of birth
        country_id: Country of citizenship, or None for a stateless person
        stats: Full stat mapping; a fresh baseline profile when omitted
        name: Display name; random when omitted
        parent1_id / parent2_id: Parents, if born in-sim
        is_player: Mark as player-controlled
        rng: Random source for every draw

    Returns:
        The new Person, with potential never below its starting overall.
    """
    rng = rng or default_rng()
    stat_values = dict(stats) if stats is not None else generate_base_stats(rng)

    overall = compute_overall_rating(stat_values)
    style = generate_development_style(rng)
    peak_age = generate_peak_age(style, rng)
    potential = generate_potential_overall(overall, rng)
    archetype, subtype = generate_personality(stat_values, rng)

    person = Person(
        id=snapshot.next_id("persons"),
        world_id=snapshot.world_id,
        country_id=country_id,
        name=name or random_name(rng),
        birth_year=birth_year,
        is_player=is_player,
        parent1_id=parent1_id,
        parent2_id=parent2_id,
        stats=PersonStats.from_mapping(stat_values),
        potential_overall=potential,
        peak_age=peak_age,
        development_style=style,
        personality_archetype=archetype.value,
        personality_subtype=subtype.label,
    )
    snapshot.persons.append(person)
    return person


def inherit_stats(
    parent1: Person,
    parent2: Optional[Person],
    rng: RandomSource,
    noise: int = 10,
    bounds: Tuple[int, int] = (10, 99),
) -> Dict[str, int]:
    """Child stats: parent average plus uniform integer noise, clamped to ``bounds``."""
    low, high = bounds
    first = parent1.stats.as_dict()
    second = parent2.stats.as_dict() if parent2 is not None else None

    child: Dict[str, int] = {}
    for key in STAT_KEYS:
        base = first[key] if second is None else (first[key] + second[key]) / 2
        value = int(round(base + rand_int(rng, -noise, noise)))
        child[key] = max(low, min(high, value))
    return child


def _spouses(snapshot: WorldSnapshot) -> Dict[int, List[int]]:
    spouses: Dict[int, List[int]] = defaultdict(list)
    for marriage in snapshot.marriages:
        if marriage.is_active:
            spouses[marriage.person_a_id].append(marriage.person_b_id)
            spouses[marriage.person_b_id].append(marriage.person_a_id)
    return spouses


def apply_births(ctx: TickContext) -> None:
    """Each fertile person may have a child this year.

    Ages are measured at the start of the tick. The co-parent is a living
    spouse in the co-parent age band if there is one, otherwise a random
    fertile person of the same country within the allowed age gap.
    """
    rules = ctx.rules
    snapshot = ctx.snapshot
    start_year = ctx.previous_year
    low, high = rules.fertile_ages
    co_low, co_high = rules.co_parent_ages

    persons = ctx.persons_by_id()
    spouses = _spouses(snapshot)
    fertile = [
        person
        for person in ctx.living_persons()
        if low <= person.age_in(start_year) <= high
    ]

    for parent1 in fertile:
        age1 = parent1.age_in(start_year)
        if not chance(ctx.rng, rules.birth_chance(parent1, age1)):
            continue

        parent2: Optional[Person] = None
        spouse_ids = spouses.get(parent1.id)
        if spouse_ids:
            spouse = persons.get(pick(ctx.rng, spouse_ids))
            if spouse is not None and spouse.is_alive and co_low <= spouse.age_in(start_year) <= co_high:
                parent2 = spouse

        if parent2 is None:
            candidates = [
                other
                for other in fertile
                if other.id != parent1.id
                and other.country_id == parent1.country_id
                and abs(other.age_in(start_year) - age1) <= rules.co_parent_max_age_gap
            ]
            if candidates:
                parent2 = pick(ctx.rng, candidates)

        child = create_person(
            snapshot,
            birth_year=ctx.year,
            country_id=parent1.country_id,
            stats=inherit_stats(
                parent1,
                parent2,
                ctx.rng,
                noise=rules.child_stat_noise,
                bounds=rules.child_stat_bounds,
            ),
            parent1_id=parent1.id,
            parent2_id=parent2.id if parent2 is not None else None,
            rng=ctx.rng,
        )
        ctx.result.births += 1
        log_event(f"Birth: {child.name} (#{child.id}) to #{parent1.id}")
