"""Tests covering the yearly tick end to end against in-memory storage."""

import asyncio
import gc
import random

import pytest

from conftest import PinnedRules, build_person, build_world

from lifesim.errors import ConsistencyViolation, StorageFailure, ValidationError
from lifesim.invariants import find_violations
from lifesim.orchestrator import Orchestrator
from lifesim.persistence import InMemoryPersistence
from lifesim.player import appoint_officeholder
from lifesim.schemas import Company, Country, Employment, IndustryRole, Term, World, WorldSnapshot
from lifesim.simulation_rules import DefaultSimulationRules


class ExplodingRules(PinnedRules):
    """Fails in the employment pass, after several passes already mutated."""

    def hire_chance(self, person, has_degree):
        raise RuntimeError("boom")


class FailingCommitPersistence(InMemoryPersistence):
    async def commit_tick(self, world_id, expected_year, expected_revision, snapshot):
        raise OSError("disk full")


class YieldingLoadPersistence(InMemoryPersistence):
    """Yields to the event loop after reading, so concurrent writers interleave."""

    async def load_world(self, world_id):
        snapshot = await super().load_world(world_id)
        await asyncio.sleep(0)
        return snapshot


class StopAfterFirstYear(PinnedRules):
    def should_stop(self, snapshot, year):
        return year >= 2026


async def _orchestrator(rules=None, persistence=None, **kwargs):
    persistence = persistence or InMemoryPersistence()
    await persistence.initialize()
    await persistence.save_world(build_world())
    return Orchestrator(
        persistence=persistence,
        rules=rules or PinnedRules(),
        rng=random.Random(2024),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_tick_fills_hierarchy_and_advances_year():
    orchestrator = await _orchestrator()

    result = await orchestrator.run_yearly_tick(1)

    assert (result.previous_year, result.new_year) == (2025, 2026)
    assert result.positions_filled == 3
    assert result.persons_aged == 5
    assert result.elections_held == 1
    assert result.performance_rows == 4

    stored = await orchestrator.persistence.load_world(1)
    assert stored.world.current_year == 2026
    filled = {p.role_id: p.person_id for p in stored.positions if p.is_active}
    assert filled == {1: 1, 2: 2, 3: 3}
    assert all(p.start_year == 2026 for p in stored.positions)
    assert {row.year for row in stored.company_performances} == {2026}
    assert [row.rank for row in stored.country_performances] == [1, 2]


@pytest.mark.asyncio
async def test_many_ticks_keep_invariants():
    orchestrator = await _orchestrator(rules=DefaultSimulationRules())
    original = build_world()

    for year in range(2026, 2036):
        result = await orchestrator.run_yearly_tick(1)
        assert result.new_year == year

    stored = await orchestrator.persistence.load_world(1)
    assert stored.world.current_year == 2035
    assert find_violations(stored, original) == []
    for before in original.persons:
        assert stored.get_person(before.id).potential_overall == before.potential_overall
    active_terms = [t for t in stored.terms if t.is_active and t.office_id == 1]
    assert len(active_terms) <= 1


@pytest.mark.asyncio
async def test_failed_pass_leaves_world_untouched():
    orchestrator = await _orchestrator(rules=ExplodingRules())

    with pytest.raises(RuntimeError):
        await orchestrator.run_yearly_tick(1)

    assert await orchestrator.persistence.load_world(1) == build_world()


@pytest.mark.asyncio
async def test_consistency_violation_aborts_commit():
    persistence = InMemoryPersistence()
    world = build_world()
    world.terms.extend(
        [
            Term(id=1, office_id=1, person_id=1, start_year=2024),
            Term(id=2, office_id=1, person_id=2, start_year=2024),
        ]
    )
    await persistence.save_world(world)
    orchestrator = Orchestrator(persistence=persistence, rules=PinnedRules(), rng=random.Random(1))

    with pytest.raises(ConsistencyViolation):
        await orchestrator.run_yearly_tick(1)

    assert (await persistence.load_world(1)).world.current_year == 2025


@pytest.mark.asyncio
async def test_missing_world_and_dangling_reference_are_validation_errors():
    orchestrator = await _orchestrator()
    with pytest.raises(ValidationError):
        await orchestrator.run_yearly_tick(99)

    broken = build_world()
    broken.employments.append(Employment(id=9, person_id=77, company_id=1, title="Intern", salary=1, start_year=2025))
    await orchestrator.persistence.save_world(broken)
    with pytest.raises(ValidationError):
        await orchestrator.run_yearly_tick(1)


@pytest.mark.asyncio
async def test_backend_errors_become_storage_failures():
    orchestrator = await _orchestrator(persistence=FailingCommitPersistence())

    with pytest.raises(StorageFailure) as excinfo:
        await orchestrator.run_yearly_tick(1)

    assert isinstance(excinfo.value.underlying, OSError)
    assert (await orchestrator.persistence.load_world(1)).world.current_year == 2025


@pytest.mark.asyncio
async def test_concurrent_ticks_on_one_world_are_serialised():
    orchestrator = await _orchestrator()

    results = await asyncio.gather(orchestrator.run_yearly_tick(1), orchestrator.run_yearly_tick(1))

    assert sorted(r.new_year for r in results) == [2026, 2027]
    assert (await orchestrator.persistence.load_world(1)).world.current_year == 2027


@pytest.mark.asyncio
async def test_tick_listeners_receive_before_and_after():
    seen = []

    def listener(year, before, after, result):
        seen.append((year, before.world.current_year, after.world.current_year, result.new_year))

    orchestrator = await _orchestrator(tick_listeners=[listener])

    await orchestrator.run_yearly_tick(1)

    assert seen == [(2026, 2025, 2026, 2026)]


@pytest.mark.asyncio
async def test_run_honours_should_stop():
    orchestrator = await _orchestrator(rules=StopAfterFirstYear())
    results = await orchestrator.run(1, 5)
    assert [r.new_year for r in results] == [2026]

    orchestrator = await _orchestrator()
    results = await orchestrator.run(1, 3)
    assert [r.new_year for r in results] == [2026, 2027, 2028]


@pytest.mark.asyncio
async def test_update_world_commits_without_advancing_year():
    orchestrator = await _orchestrator()

    def rename(snapshot):
        snapshot.world.name = "Renamed"

    updated = await orchestrator.update_world(1, rename)

    stored = await orchestrator.persistence.load_world(1)
    assert stored.world.name == updated.world.name == "Renamed"
    assert stored.world.current_year == 2025


@pytest.mark.asyncio
async def test_update_world_error_leaves_world_untouched():
    orchestrator = await _orchestrator()

    def half_done(snapshot):
        snapshot.world.name = "Half"
        raise ValidationError("nope", world_id=1)

    with pytest.raises(ValidationError):
        await orchestrator.update_world(1, half_done)

    assert (await orchestrator.persistence.load_world(1)).world.name == "Testland"


@pytest.mark.asyncio
async def test_every_commit_bumps_revision():
    orchestrator = await _orchestrator()

    await orchestrator.run_yearly_tick(1)
    updated = await orchestrator.update_world(1, lambda snapshot: None)

    stored = await orchestrator.persistence.load_world(1)
    assert stored.world.revision == updated.world.revision == 2
    assert stored.world.current_year == 2026


@pytest.mark.asyncio
async def test_tick_from_before_an_override_is_rejected():
    persistence = YieldingLoadPersistence()
    await persistence.save_world(build_world())
    player = Orchestrator(persistence=persistence, rules=PinnedRules(), rng=random.Random(1))
    ticker = Orchestrator(persistence=persistence, rules=PinnedRules(), rng=random.Random(2))

    results = await asyncio.gather(
        player.update_world(1, lambda snapshot: appoint_officeholder(snapshot, 1, 2)),
        ticker.run_yearly_tick(1),
        return_exceptions=True,
    )

    assert isinstance(results[0], WorldSnapshot)
    assert isinstance(results[1], StorageFailure)

    stored = await persistence.load_world(1)
    assert stored.world.current_year == 2025
    assert stored.world.revision == 1
    locked = [(t.person_id, t.office_id) for t in stored.terms if t.is_active and t.player_locked]
    assert locked == [(2, 1)]

    # Retrying the tick starts from the override and keeps it
    await ticker.run_yearly_tick(1)
    stored = await persistence.load_world(1)
    assert stored.world.current_year == 2026
    assert [t.person_id for t in stored.terms if t.is_active and t.office_id == 1] == [2]


@pytest.mark.asyncio
async def test_world_locks_are_released_after_use():
    orchestrator = await _orchestrator()

    await orchestrator.run_yearly_tick(1)
    await orchestrator.update_world(1, lambda snapshot: None)
    gc.collect()

    assert 1 not in orchestrator._locks


@pytest.mark.asyncio
async def test_single_role_filled_by_only_employee():
    world = WorldSnapshot(
        world=World(id=3, name="Tiny", current_year=2000),
        countries=[Country(id=1, world_id=3, name="Solo")],
        companies=[Company(id=1, world_id=3, country_id=1, name="OneCo", industry="RESEARCH")],
        roles=[IndustryRole(id=1, industry="RESEARCH", name="Lead", rank=0)],
        persons=[build_person(1, 55, 1970).model_copy(update={"world_id": 3})],
        employments=[Employment(id=1, person_id=1, company_id=1, title="Analyst", salary=50000, start_year=1995)],
    )
    persistence = InMemoryPersistence()
    await persistence.save_world(world)
    orchestrator = Orchestrator(persistence=persistence, rules=PinnedRules(), rng=random.Random(0))

    await orchestrator.run_yearly_tick(3)

    stored = await persistence.load_world(3)
    assert [(p.role_id, p.person_id) for p in stored.positions if p.is_active] == [(1, 1)]
