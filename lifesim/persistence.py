"""
PersistenceStrategy interface for pluggable world storage.

This module provides the abstract PersistenceStrategy interface and three concrete
implementations for storing world snapshots. The orchestrator only ever talks
to this interface, so the simulation runs unchanged against memory, files or a
database.

Three included implementations:
1. InMemoryPersistence - Dict-based storage, data lost on exit (testing, prototyping)
2. JsonPersistence - One human-readable JSON file per world (small worlds)
3. PostgresPersistence - JSONB snapshot per world in PostgreSQL (production)

Key responsibilities:
- Save/load a complete WorldSnapshot by world id
- Commit atomically with a compare-and-swap on the stored revision and year,
  so a change computed from a stale snapshot can never overwrite a newer world
- Serve the read queries the tick needs (living persons, a country's
  institutions)

Failure contract:
- Backend I/O errors are wrapped in StorageFailure (``raise ... from exc``)
- A commit whose expected revision or year no longer matches the stored
  world raises StorageFailure and writes nothing

Usage pattern:
    persistence = InMemoryPersistence()  # or JsonPersistence(), PostgresPersistence()
    await persistence.initialize()

    await persistence.save_world(snapshot)
    snapshot = await persistence.load_world(world_id)

    await persistence.close()
"""

import asyncio
import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel

from .config import Config
from .errors import StorageFailure
from .schemas import Company, IndustryRole, Office, Person, School, World, WorldSnapshot

try:  # Optional dependency (only needed for PostgresPersistence)
    import asyncpg
except ImportError:  # pragma: no cover - optional dependency
    asyncpg = None


class CountryInstitutions(BaseModel):
    """Companies, schools and offices of one country, plus the roles of its industries."""

    country_id: int
    companies: List[Company]
    schools: List[School]
    offices: List[Office]
    roles: List[IndustryRole]


class PersistenceStrategy(ABC):
    """Abstract base class for world snapshot persistence.

    PersistenceStrategy defines the interface that all storage backends must implement.
    This enables pluggable persistence - swap backends without changing simulation code.

    Async interface rationale:
    - All methods are async to support I/O-bound operations (database, files)
    - initialize() and close() manage connection pools, directories, etc.
    - Async is no-op for InMemoryPersistence but critical for database backends

    Method categories:
    1. Lifecycle: initialize(), close()
    2. Worlds: save_world(), load_world(), list_worlds(), delete_world()
    3. Tick commit: commit_tick()
    4. Read helpers (concrete, built on load_world): get_living_persons(),
       get_country_institutions()

    Design pattern: Strategy pattern - behavior varies (in-memory vs database)
    but interface remains consistent. Orchestrator depends on interface, not implementation.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """
        Initialize the persistence backend.

        Called once before use. Used to set up database connections, create
        tables, create directories, etc.

        Raises:
            StorageFailure: If the backend cannot be reached
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections and handles. Stored data is kept."""
        pass

    @abstractmethod
    async def save_world(self, snapshot: WorldSnapshot) -> None:
        """
        Store a snapshot unconditionally, creating or replacing the world.

        Used to seed worlds. Ticks must go through commit_tick() instead.

        Args:
            snapshot: Complete world snapshot
        """
        pass

    @abstractmethod
    async def load_world(self, world_id: int) -> Optional[WorldSnapshot]:
        """
        Load the latest committed snapshot of a world.

        Args:
            world_id: World identifier

        Returns:
            WorldSnapshot if found, None otherwise. Callers get their own
            copy; mutating it never changes stored data.
        """
        pass

    @abstractmethod
    async def list_worlds(self) -> List[World]:
        """Return the World header of every stored world, ordered by id."""
        pass

    @abstractmethod
    async def delete_world(self, world_id: int) -> None:
        """Remove a world and everything in it. Missing worlds are ignored."""
        pass

    @abstractmethod
    async def commit_tick(
        self,
        world_id: int,
        expected_year: int,
        expected_revision: int,
        snapshot: WorldSnapshot,
    ) -> None:
        """
        Atomically replace a world's snapshot if nobody committed since it was loaded.

        Every commit (a tick or a player override) bumps ``world.revision``,
        so two writers that loaded the same snapshot can never both succeed,
        even when neither changes the year.

        Args:
            world_id: World identifier
            expected_year: ``current_year`` the caller loaded
            expected_revision: ``revision`` the caller loaded
            snapshot: New snapshot to store; its ``world.revision`` is
                ``expected_revision + 1``

        Raises:
            StorageFailure: If the world is gone, its stored revision or year
                differs from the expected one, or the backend failed. Nothing
                is written.
        """
        pass

    async def get_living_persons(self, world_id: int) -> List[Person]:
        """All living persons of a world, ordered by id."""
        snapshot = await self.load_world(world_id)
        if snapshot is None:
            return []
        return sorted(snapshot.living_persons(), key=lambda p: p.id)

    async def get_country_institutions(
        self, world_id: int, country_id: int
    ) -> CountryInstitutions:
        """Companies, schools, offices and relevant roles of one country."""
        snapshot = await self.load_world(world_id)
        if snapshot is None:
            return CountryInstitutions(
                country_id=country_id, companies=[], schools=[], offices=[], roles=[]
            )

        companies = [c for c in snapshot.companies if c.country_id == country_id]
        industries = {c.industry for c in companies}
        return CountryInstitutions(
            country_id=country_id,
            companies=companies,
            schools=[s for s in snapshot.schools if s.country_id == country_id],
            offices=[o for o in snapshot.offices if o.country_id == country_id],
            roles=sorted(
                (r for r in snapshot.roles if r.industry in industries),
                key=lambda r: (r.industry, r.rank, r.id),
            ),
        )


def _read_json(path: Path) -> dict:
    with open(path, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _check_unchanged(
    world_id: int, expected_year: int, expected_revision: int, stored: Optional[World]
) -> None:
    if stored is None:
        raise StorageFailure(world_id=world_id, reason="world no longer exists")
    if stored.revision != expected_revision or stored.current_year != expected_year:
        raise StorageFailure(
            world_id=world_id,
            reason=(
                f"stored world is at year {stored.current_year} revision {stored.revision}, "
                f"expected year {expected_year} revision {expected_revision} "
                "(world changed underneath the commit)"
            ),
        )


class InMemoryPersistence(PersistenceStrategy):
    """In-memory persistence using a Python dict (no database, no files).

    Snapshots are deep-copied on the way in and on the way out, so neither the
    caller nor the orchestrator can mutate stored state by accident. Data is
    lost when the process exits.

    Perfect for:
    - Unit testing (fast, isolated, no cleanup needed)
    - Short experiments and notebooks

    NOT suitable for:
    - Persistence across restarts
    - Multi-process access
    """

    def __init__(self):
        """Initialize in-memory storage."""
        self.worlds: Dict[int, WorldSnapshot] = {}

    async def initialize(self) -> None:
        """No-op for in-memory implementation."""
        pass

    async def close(self) -> None:
        """
        No-op for in-memory: we do NOT clear data on close so callers can
        perform post-run reads. Use delete_world() for explicit cleanup.
        """
        pass

    async def save_world(self, snapshot: WorldSnapshot) -> None:
        self.worlds[snapshot.world_id] = snapshot.model_copy(deep=True)

    async def load_world(self, world_id: int) -> Optional[WorldSnapshot]:
        stored = self.worlds.get(world_id)
        return stored.model_copy(deep=True) if stored is not None else None

    async def list_worlds(self) -> List[World]:
        return [self.worlds[key].world.model_copy() for key in sorted(self.worlds)]

    async def delete_world(self, world_id: int) -> None:
        self.worlds.pop(world_id, None)

    async def commit_tick(
        self,
        world_id: int,
        expected_year: int,
        expected_revision: int,
        snapshot: WorldSnapshot,
    ) -> None:
        stored = self.worlds.get(world_id)
        _check_unchanged(
            world_id, expected_year, expected_revision, stored.world if stored is not None else None
        )
        self.worlds[world_id] = snapshot.model_copy(deep=True)


class JsonPersistence(PersistenceStrategy):
    """File-based persistence using JSON for human-readable storage.

    Directory structure:
    ```
    {base_path}/
      world_00001.json          # WorldSnapshot of world 1
      world_00002.json          # WorldSnapshot of world 2
    ```

    File format details:
    - Pretty-printed JSON (indent=2) for readability
    - World id padding: 5 digits for lexicographic sorting

    Atomicity:
    - Each write goes to a temporary file in the same directory and is moved
      over the old file with os.replace, so a crash never leaves a truncated
      world behind
    - commit_tick() holds an asyncio.Lock between the revision check and the write

    Async operations:
    - All file I/O runs in a thread pool (asyncio.to_thread)
    """

    def __init__(self, base_path: Optional[Path | str] = None):
        self.base_path = Path(base_path) if base_path is not None else Config.DATA_DIR
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        try:
            await asyncio.to_thread(self.base_path.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFailure(
                world_id=None, reason=f"cannot create {self.base_path}", underlying=exc
            ) from exc

    async def close(self) -> None:
        # Nothing to clean up for JSON persistence
        return None

    async def save_world(self, snapshot: WorldSnapshot) -> None:
        async with self._lock:
            await self._write(snapshot)

    async def load_world(self, world_id: int) -> Optional[WorldSnapshot]:
        path = self._world_path(world_id)
        if not path.exists():
            return None

        try:
            payload = await asyncio.to_thread(_read_json, path)
        except (OSError, ValueError) as exc:
            raise StorageFailure(
                world_id=world_id, reason=f"cannot read {path}", underlying=exc
            ) from exc
        return WorldSnapshot.model_validate(payload)

    async def list_worlds(self) -> List[World]:
        if not self.base_path.exists():
            return []

        worlds: List[World] = []
        for path in sorted(self.base_path.glob("world_*.json")):
            payload = await asyncio.to_thread(_read_json, path)
            worlds.append(World.model_validate(payload["world"]))
        return sorted(worlds, key=lambda w: w.id)

    async def delete_world(self, world_id: int) -> None:
        path = self._world_path(world_id)
        if path.exists():
            await asyncio.to_thread(path.unlink)

    async def commit_tick(
        self,
        world_id: int,
        expected_year: int,
        expected_revision: int,
        snapshot: WorldSnapshot,
    ) -> None:
        async with self._lock:
            stored = await self.load_world(world_id)
            _check_unchanged(
                world_id, expected_year, expected_revision, stored.world if stored is not None else None
            )
            await self._write(snapshot)

    async def _write(self, snapshot: WorldSnapshot) -> None:
        path = self._world_path(snapshot.world_id)
        payload = json.dumps(snapshot.model_dump(mode="json"), indent=2)

        def _replace() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=path.stem, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise

        try:
            await asyncio.to_thread(_replace)
        except OSError as exc:
            raise StorageFailure(
                world_id=snapshot.world_id, reason=f"cannot write {path}", underlying=exc
            ) from exc

    def _world_path(self, world_id: int) -> Path:
        return self.base_path / f"world_{world_id:05d}.json"


class PostgresPersistence(PersistenceStrategy):
    """PostgreSQL-backed persistence for production worlds.

    Stores one JSONB snapshot per world using async connection pooling
    (asyncpg). The stored ``revision`` and ``current_year`` columns make the
    compare-and-swap of commit_tick() a single conditional UPDATE inside a
    transaction.

    Database schema (created by initialize() if missing):
    - lifesim_worlds: id, name, current_year, revision, snapshot JSONB, updated_at

    Connection management:
    - initialize() creates connection pool (reusable connections)
    - close() releases pool (clean shutdown)
    """

    SCHEMA = """
        CREATE TABLE IF NOT EXISTS lifesim_worlds (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            current_year INTEGER NOT NULL,
            revision INTEGER NOT NULL DEFAULT 0,
            snapshot JSONB NOT NULL,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
        ALTER TABLE lifesim_worlds ADD COLUMN IF NOT EXISTS revision INTEGER NOT NULL DEFAULT 0;
    """

    def __init__(self, database_url: Optional[str] = None):
        if asyncpg is None:  # pragma: no cover - handled during runtime when dependency missing
            raise ImportError(
                "asyncpg is required for PostgresPersistence. Install with `pip install asyncpg`."
            )

        self.database_url = database_url or Config.DATABASE_URL
        self.pool: Optional[asyncpg.Pool] = None

    async def initialize(self) -> None:
        if self.pool is not None:
            return
        try:
            self.pool = await asyncpg.create_pool(self.database_url)
            async with self.pool.acquire() as conn:
                await conn.execute(self.SCHEMA)
        except (OSError, asyncpg.PostgresError) as exc:
            raise StorageFailure(
                world_id=None, reason="cannot connect to PostgreSQL", underlying=exc
            ) from exc

    async def close(self) -> None:
        if self.pool is not None:
            await self.pool.close()
            self.pool = None

    async def save_world(self, snapshot: WorldSnapshot) -> None:
        assert self.pool is not None, "Persistence not initialized"

        query = """
            INSERT INTO lifesim_worlds (id, name, current_year, revision, snapshot, updated_at)
            VALUES ($1, $2, $3, $4, $5::jsonb, now())
            ON CONFLICT (id) DO UPDATE
            SET name = $2, current_year = $3, revision = $4, snapshot = $5::jsonb, updated_at = now()
        """

        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    query,
                    snapshot.world_id,
                    snapshot.world.name,
                    snapshot.world.current_year,
                    snapshot.world.revision,
                    snapshot.model_dump_json(),
                )
        except asyncpg.PostgresError as exc:
            raise StorageFailure(
                world_id=snapshot.world_id, reason="save failed", underlying=exc
            ) from exc

    async def load_world(self, world_id: int) -> Optional[WorldSnapshot]:
        assert self.pool is not None, "Persistence not initialized"

        query = "SELECT snapshot FROM lifesim_worlds WHERE id = $1"

        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, world_id)
        except asyncpg.PostgresError as exc:
            raise StorageFailure(world_id=world_id, reason="load failed", underlying=exc) from exc

        if not row:
            return None

        return WorldSnapshot.model_validate_json(row["snapshot"])

    async def list_worlds(self) -> List[World]:
        assert self.pool is not None, "Persistence not initialized"

        query = """
            SELECT snapshot -> 'world' AS world
            FROM lifesim_worlds
            ORDER BY id
        """

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query)

        return [World.model_validate_json(row["world"]) for row in rows]

    async def delete_world(self, world_id: int) -> None:
        assert self.pool is not None, "Persistence not initialized"

        async with self.pool.acquire() as conn:
            await conn.execute("DELETE FROM lifesim_worlds WHERE id = $1", world_id)

    async def commit_tick(
        self,
        world_id: int,
        expected_year: int,
        expected_revision: int,
        snapshot: WorldSnapshot,
    ) -> None:
        assert self.pool is not None, "Persistence not initialized"

        query = """
            UPDATE lifesim_worlds
            SET current_year = $4, revision = $5, snapshot = $6::jsonb, name = $7, updated_at = now()
            WHERE id = $1 AND revision = $2 AND current_year = $3
        """

        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    status = await conn.execute(
                        query,
                        world_id,
                        expected_revision,
                        expected_year,
                        snapshot.world.current_year,
                        snapshot.world.revision,
                        snapshot.model_dump_json(),
                        snapshot.world.name,
                    )
                    if status == "UPDATE 1":
                        return
                    row = await conn.fetchrow(
                        "SELECT snapshot -> 'world' AS world FROM lifesim_worlds WHERE id = $1",
                        world_id,
                    )
        except asyncpg.PostgresError as exc:
            raise StorageFailure(world_id=world_id, reason="commit failed", underlying=exc) from exc

        stored = World.model_validate_json(row["world"]) if row else None
        _check_unchanged(world_id, expected_year, expected_revision, stored)
        # The row matched on read but not on write: a concurrent commit won
        raise StorageFailure(world_id=world_id, reason="world changed underneath the commit")
