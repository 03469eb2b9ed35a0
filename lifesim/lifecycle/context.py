"""Shared state handed to every life-cycle pass of one tick."""

from collections import defaultdict
from typing import Dict, List

from ..randomness import RandomSource
from ..schemas import Enrollment, Person, TickResult, WorldSnapshot
from ..simulation_rules import SimulationRules


class TickContext:
    """Working set of one yearly tick.

    ``snapshot`` is the orchestrator's private deep copy; passes mutate it in
    place. ``year`` is the year being simulated (the world's current year plus
    one). Passes record what they did on ``result``.
    """

    def __init__(
        self,
        snapshot: WorldSnapshot,
        year: int,
        rng: RandomSource,
        rules: SimulationRules,
        result: TickResult,
    ) -> None:
        self.snapshot = snapshot
        self.year = year
        self.rng = rng
        self.rules = rules
        self.result = result

    @property
    def previous_year(self) -> int:
        return self.year - 1

    def age_of(self, person: Person) -> int:
        """Age in the year being simulated."""
        return person.age_in(self.year)

    def living_persons(self) -> List[Person]:
        """Living persons in id order, materialised so passes may append births."""
        return sorted(self.snapshot.living_persons(), key=lambda p: p.id)

    def persons_by_id(self) -> Dict[int, Person]:
        return {person.id: person for person in self.snapshot.persons}

    def enrollments_by_person(self) -> Dict[int, List[Enrollment]]:
        grouped: Dict[int, List[Enrollment]] = defaultdict(list)
        for enrollment in self.snapshot.enrollments:
            grouped[enrollment.person_id].append(enrollment)
        return grouped
