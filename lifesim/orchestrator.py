"""
Yearly tick orchestrator.

Fully decoupled from file I/O, database, and config.
All dependencies (persistence, rules, random source) are injected by the user.

Coordinates one simulated year for one world:
1. Load the world and validate its references
2. Run the life-cycle passes on a private deep copy, in order:
   aging & mortality, development, births, schooling, employment,
   company hierarchy, elections, relationships
3. Recompute company and country performance rows for the new year
4. Check world invariants against the snapshot the tick started from
5. Commit atomically with current_year + 1 via the injected strategy

Nothing reaches storage until step 5, and step 5 is a compare-and-swap on the
stored revision (bumped by every tick and every player override) and year, so
a failed or raced tick leaves the world exactly as it was. This holds across
orchestrator instances and processes, not only within one orchestrator.
"""

import asyncio
import weakref
from typing import Callable, List, Optional

from .errors import LifesimError, StorageFailure, ValidationError
from .invariants import check_invariants, validate_references
from .lifecycle import TICK_PASSES, TickContext
from .logging_utils import (
    colored,
    Color,
    is_quiet,
    log_deterministic,
    log_error,
    log_info,
    log_success,
)
from .performance import compute_company_performance, compute_country_performance
from .persistence import InMemoryPersistence, PersistenceStrategy
from .randomness import RandomSource, default_rng
from .schemas import TickResult, WorldSnapshot
from .simulation_rules import DefaultSimulationRules, SimulationRules

TickListener = Callable[[int, WorldSnapshot, WorldSnapshot, TickResult], None]
WorldMutator = Callable[[WorldSnapshot], None]


class Orchestrator:
    """
    Yearly tick orchestrator.

    Fully decoupled - accepts all dependencies as parameters.
    One orchestrator can drive any number of worlds stored in the same
    backend; ticks on the same world are serialised by a per-world lock,
    ticks on different worlds run independently.
    """

    def __init__(
        self,
        persistence: Optional[PersistenceStrategy] = None,
        rules: Optional[SimulationRules] = None,
        rng: Optional[RandomSource] = None,
        tick_listeners: Optional[List[TickListener]] = None,
    ):
        """Initialize orchestrator with all dependencies injected.

        Args:
            persistence: Optional persistence strategy (defaults to InMemory)
            rules: Optional SimulationRules (defaults to DefaultSimulationRules)
            rng: Optional random source; defaults to ``random.Random`` seeded
                from LIFESIM_SEED when set
            tick_listeners: Optional callables invoked after each committed
                tick. Each listener receives (new_year, previous_snapshot,
                new_snapshot, result).
        """
        self.persistence = persistence or InMemoryPersistence()
        self.rules = rules or DefaultSimulationRules()
        self.rng = rng if rng is not None else default_rng()
        self.tick_listeners = tick_listeners or []
        # Entries vanish once no tick or override holds or awaits the lock
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, world_id: int) -> asyncio.Lock:
        lock = self._locks.get(world_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[world_id] = lock
        return lock

    async def _load(self, world_id: int) -> WorldSnapshot:
        try:
            snapshot = await self.persistence.load_world(world_id)
        except LifesimError:
            raise
        except Exception as exc:
            raise StorageFailure(world_id=world_id, reason="load failed", underlying=exc) from exc

        if snapshot is None:
            raise ValidationError(f"World {world_id} does not exist", world_id=world_id)
        validate_references(snapshot)
        return snapshot

    async def _commit(self, world_id: int, loaded: WorldSnapshot, snapshot: WorldSnapshot) -> None:
        """Commit ``snapshot`` only if the stored world is still ``loaded``."""
        snapshot.world.revision = loaded.world.revision + 1
        try:
            await self.persistence.commit_tick(
                world_id, loaded.world.current_year, loaded.world.revision, snapshot
            )
        except LifesimError:
            raise
        except Exception as exc:
            raise StorageFailure(world_id=world_id, reason="commit failed", underlying=exc) from exc

    async def run_yearly_tick(self, world_id: int) -> TickResult:
        """Advance one world by exactly one year.

        Args:
            world_id: World to advance

        Returns:
            TickResult with the counts of everything the tick did

        Raises:
            ValidationError: World missing or holding dangling references
            ConsistencyViolation: The passes produced an invalid world
            StorageFailure: The commit failed or the world changed underneath
        """
        async with self._lock_for(world_id):
            try:
                return await self._run_tick(world_id)
            except Exception as e:
                log_error(f"Tick aborted for world {world_id}: {e}")
                raise

    async def _run_tick(self, world_id: int) -> TickResult:
        snapshot = await self._load(world_id)
        previous_year = snapshot.world.current_year
        new_year = previous_year + 1

        if not is_quiet():
            print(colored(f"=== World {world_id}: {previous_year} -> {new_year} ===", Color.CYAN, bold=True))

        # Passes mutate this copy only; ``snapshot`` stays the pre-tick state
        # so invariants can compare against it and listeners can diff.
        working = snapshot.model_copy(deep=True)
        result = TickResult(world_id=world_id, previous_year=previous_year, new_year=new_year)
        ctx = TickContext(working, new_year, self.rng, self.rules, result)

        for label, apply_pass in TICK_PASSES:
            log_deterministic(f"[{label}] year {new_year}")
            apply_pass(ctx)

        log_deterministic(f"[Performance] aggregating year {new_year}")
        company_rows = compute_company_performance(working, new_year)
        country_rows = compute_country_performance(working, new_year, company_rows)
        working.company_performances.extend(company_rows)
        working.country_performances.extend(country_rows)
        result.performance_rows = len(company_rows) + len(country_rows)

        check_invariants(working, new_year, previous=snapshot)
        working.world.current_year = new_year

        await self._commit(world_id, snapshot, working)

        for listener in self.tick_listeners:
            listener(new_year, snapshot, working, result)

        log_success(
            f"[Commit] world {world_id} now in {new_year}: "
            f"{result.deaths} deaths, {result.births} births, "
            f"{result.new_employments} hires, {result.elections_held} elections"
        )
        return result

    async def run(self, world_id: int, num_years: int) -> List[TickResult]:
        """Run ``num_years`` consecutive ticks on one world.

        Initializes the persistence backend first and closes it afterwards,
        even when a tick fails. Stops early when the rules' ``should_stop``
        returns True.

        Returns:
            TickResult of every committed tick, in order
        """
        await self.persistence.initialize()

        try:
            log_info(f"Running world {world_id} for {num_years} years")
            results: List[TickResult] = []
            for _ in range(num_years):
                result = await self.run_yearly_tick(world_id)
                results.append(result)

                snapshot = await self.persistence.load_world(world_id)
                if snapshot is not None and self.rules.should_stop(snapshot, result.new_year):
                    log_info(f"Stopped early in {result.new_year} (signaled by simulation rules).")
                    break

            return results

        finally:
            await self.persistence.close()

    async def update_world(self, world_id: int, mutator: WorldMutator) -> WorldSnapshot:
        """Apply an out-of-tick change (player override) atomically.

        ``mutator`` receives a private copy of the world and edits it in
        place. The result is checked against the same invariants as a tick
        and committed without changing the year. Holds the world lock, so it
        never interleaves with a tick on the same world.

        Returns:
            The committed snapshot
        """
        async with self._lock_for(world_id):
            snapshot = await self._load(world_id)
            year = snapshot.world.current_year
            working = snapshot.model_copy(deep=True)

            mutator(working)

            check_invariants(working, year, previous=snapshot)
            await self._commit(world_id, snapshot, working)
            return working
