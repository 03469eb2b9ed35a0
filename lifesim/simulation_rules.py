"""
SimulationRules interface for the tunable probabilities of the yearly tick.

The life-cycle passes never hard-code a probability or an age band. They ask
the rules object injected into the Orchestrator. Users subclass
``DefaultSimulationRules`` (or ``SimulationRules`` directly) to model a
harsher or gentler world without touching the tick itself.

Design principle: the passes decide WHAT can happen, the rules decide HOW
LIKELY it is. Every method is a pure function of its arguments; all
randomness stays in the passes, drawn from the injected random source.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from .config import Config
from .schemas import Person, WorldSnapshot


class SimulationRules(ABC):
    """Abstract base class for the yearly tick's tunable rules.

    Only ``death_probability`` is abstract: mortality is the one rule every
    world must define. Everything else has the default behaviour of a modern
    society and can be overridden piecemeal.

    Design pattern: SimulationRules subclasses are dependency-injected into
    Orchestrator. Tests use this to pin probabilities to 0 or 1 so a single
    branch of a pass can be exercised without scripting the random source.
    """

    # Age bands (inclusive)
    fertile_ages: Tuple[int, int] = (20, 40)
    co_parent_ages: Tuple[int, int] = (20, 50)
    co_parent_max_age_gap: int = 10
    working_ages: Tuple[int, int] = (18, 65)
    retirement_age: int = 75
    marriage_ages: Tuple[int, int] = (20, 40)
    divorce_ages: Tuple[int, int] = (25, 75)
    friendship_min_age: int = 18

    # School age bands (inclusive) and exit ages
    primary_ages: Tuple[int, int] = (6, 11)
    secondary_ages: Tuple[int, int] = (12, 17)
    university_ages: Tuple[int, int] = (18, 22)
    primary_exit_age: int = 12
    secondary_exit_age: int = 18
    university_exit_age: int = 23
    university_years: int = 4

    # Child stats: parent average plus uniform integer noise, then clamped
    child_stat_noise: int = 10
    child_stat_bounds: Tuple[int, int] = (10, 99)

    @abstractmethod
    def death_probability(self, age: int) -> float:
        """
        Probability that a person of ``age`` (after this year's increment) dies.

        Args:
            age: Age the person turns in the year being simulated

        Returns:
            Probability in [0, 1]
        """
        pass

    def birth_chance(self, person: Person, age: int) -> float:
        """Chance that a fertile person has a child this year."""
        return 0.05

    def university_admission_chance(self, person: Person) -> float:
        """Admission odds grow with intelligence and discipline, capped at 70%."""
        academic = (person.stats.intelligence + person.stats.discipline) / 2
        return max(0.0, min(0.7, 0.25 + (academic - 20) * (0.4 / 60)))

    def university_dropout_chance(self, person: Person) -> float:
        return 0.03

    def hire_chance(self, person: Person, has_degree: bool) -> float:
        """Chance an unemployed working-age person finds a job this year.

        Rises with skill ((intelligence + discipline + charisma) / 3), plus a
        flat bonus for university graduates, capped at 40%.
        """
        skill = skill_score(person)
        chance = 0.05 + (skill - 20) * (0.25 / 60) + (0.1 if has_degree else 0.0)
        return max(0.0, min(0.4, chance))

    def quit_chance(self, person: Person) -> float:
        return 0.02

    def promotion_chance(self, person: Person) -> float:
        """Ladder promotion odds: 5% scaled by (discipline + leadership) / 160."""
        return 0.05 * (person.stats.discipline + person.stats.leadership) / 160

    def promotion_raise_range(self) -> Tuple[float, float]:
        return (1.10, 1.15)

    def yearly_raise_range(self) -> Tuple[float, float]:
        return (1.02, 1.04)

    def divorce_chance(self) -> float:
        return 0.01

    def marriage_chance(self) -> float:
        return 0.05

    def new_friendship_chance(self) -> float:
        return 0.02

    def friendship_drift(self) -> int:
        """Maximum absolute yearly change of a friendship's strength."""
        return 5

    def office_age_bounds(self) -> Tuple[int, Optional[int]]:
        """(minimum, maximum) candidate age for elections."""
        return Config.MIN_OFFICE_AGE, Config.MAX_OFFICE_AGE

    def should_stop(self, snapshot: WorldSnapshot, year: int) -> bool:
        """
        Signal that ``Orchestrator.run`` should stop after the committed year.

        Default never stops. Override to end a run early, e.g. once nobody is
        left alive.
        """
        return False


def skill_score(person: Person) -> float:
    """(intelligence + discipline + charisma) / 3, the basis for hiring and salary."""
    stats = person.stats
    return (stats.intelligence + stats.discipline + stats.charisma) / 3


class DefaultSimulationRules(SimulationRules):
    """Stock rules: mortality rises steeply by age bracket."""

    # (exclusive upper age, probability); the last bracket covers everyone older
    DEATH_BRACKETS: Tuple[Tuple[int, float], ...] = (
        (50, 0.001),
        (65, 0.005),
        (80, 0.02),
        (95, 0.08),
    )
    OLDEST_BRACKET_PROBABILITY = 0.25

    def death_probability(self, age: int) -> float:
        for upper, probability in self.DEATH_BRACKETS:
            if age < upper:
                return probability
        return self.OLDEST_BRACKET_PROBABILITY
