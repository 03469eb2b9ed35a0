"""
Injectable randomness for every stochastic step of the simulation.

Every draw in lifesim (stat generation, development noise, archetype selection,
death rolls, hiring, elections) goes through a random source passed in by the
caller. The only method a source must provide is ``random() -> float`` in
[0, 1), so both ``random.Random(seed)`` and a scripted sequence work:

    rng = random.Random(42)             # reproducible production wiring
    rng = SequenceRandom([0.1, 0.9])    # exact draws in tests

All helpers here are built on ``random()`` alone. That keeps a seeded run
reproducible across Python versions (no reliance on ``randint``/``gauss``
implementation details) and lets tests drive each branch precisely.
"""

import math
import random
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple, TypeVar

from .config import Config

T = TypeVar("T")


class RandomSource(Protocol):
    """Anything that yields uniform floats in [0, 1)."""

    def random(self) -> float:  # pragma: no cover - protocol
        ...


class SequenceRandom:
    """Deterministic source that replays a fixed list of floats.

    Cycles through the values so long runs never exhaust it. Intended for
    tests that need to force a particular branch (death roll, election winner).
    """

    def __init__(self, values: Sequence[float]):
        if not values:
            raise ValueError("SequenceRandom needs at least one value")
        self._values = list(values)
        self._index = 0

    def random(self) -> float:
        value = self._values[self._index % len(self._values)]
        self._index += 1
        return value


def default_rng(seed: Optional[int] = None) -> random.Random:
    """Return the production random source.

    Uses ``seed`` if given, otherwise ``Config.SEED`` (``LIFESIM_SEED``), and
    falls back to OS entropy when neither is set.
    """
    if seed is None:
        seed = Config.SEED
    return random.Random(seed)


def normal(rng: RandomSource, mean: float = 0.0, sd: float = 1.0) -> float:
    """Draw from N(mean, sd) using the Box-Muller transform."""
    if sd <= 0:
        return mean
    u = 0.0
    v = 0.0
    # log(0) is undefined; resample zeros like the classic formulation
    while u == 0.0:
        u = rng.random()
    while v == 0.0:
        v = rng.random()
    z = math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)
    return mean + sd * z


def rand_int(rng: RandomSource, low: int, high: int) -> int:
    """Uniform integer in [low, high], both inclusive."""
    return low + int(rng.random() * (high - low + 1))


def uniform(rng: RandomSource, low: float, high: float) -> float:
    """Uniform float in [low, high)."""
    return low + (high - low) * rng.random()


def chance(rng: RandomSource, probability: float) -> bool:
    """Bernoulli trial: True with the given probability."""
    return rng.random() < probability


def pick(rng: RandomSource, items: Sequence[T]) -> T:
    """Uniformly pick one element. ``items`` must not be empty."""
    if not items:
        raise ValueError("Cannot pick from an empty sequence")
    return items[min(int(rng.random() * len(items)), len(items) - 1)]


def shuffled(rng: RandomSource, items: Iterable[T]) -> List[T]:
    """Return a Fisher-Yates shuffled copy of ``items``."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = int(rng.random() * (i + 1))
        result[i], result[j] = result[j], result[i]
    return result


def weighted_choice(rng: RandomSource, options: Sequence[Tuple[T, float]]) -> T:
    """Pick an item with probability proportional to its weight.

    ``options`` is a sequence of ``(item, weight)`` pairs. Negative weights
    count as zero. If every weight is zero the last item is returned, so the
    result is never None for a non-empty input. This is the single
    cumulative-scan implementation used for archetypes, subtypes, election
    winners and candidate picks.
    """
    if not options:
        raise ValueError("weighted_choice needs at least one option")

    total = sum(max(0.0, weight) for _, weight in options)
    if total <= 0:
        return options[-1][0]

    remaining = rng.random() * total
    for item, weight in options:
        weight = max(0.0, weight)
        if remaining < weight:
            return item
        remaining -= weight
    return options[-1][0]
