"""Concurrent writers on both storage backends.

Tests:
    - Two simultaneous creates with the same name: exactly one wins, the other conflicts
    - The same race against a file-backed SQLite database ends at its unique index
    - Interleaved creates under distinct names all land, and listing sees each once
"""

import asyncio

from vtn.core.errors import ConflictError
from vtn.core.principal import Principal
from vtn.infrastructure.database import DatabaseSessionManager
from vtn.infrastructure.memory_store import MemoryStorage
from vtn.infrastructure.sql_store import SqlStorage
from vtn.services.program_service import ProgramService

ADMIN = Principal(is_admin=True)


async def test_same_name_race_has_one_winner():
    service = ProgramService(MemoryStorage())

    results = await asyncio.gather(
        service.create(ADMIN, {"programName": "dup"}),
        service.create(ADMIN, {"programName": "dup"}),
        return_exceptions=True,
    )

    conflicts = [r for r in results if isinstance(r, ConflictError)]
    winners = [r for r in results if not isinstance(r, Exception)]
    assert len(conflicts) == 1
    assert len(winners) == 1
    assert [p.id for p in await service.list_visible(ADMIN)] == [winners[0].id]


async def test_distinct_names_all_land():
    service = ProgramService(MemoryStorage())

    created = await asyncio.gather(*(
        service.create(ADMIN, {"programName": f"p{i}", "businessId": "b1"})
        for i in range(20)
    ))

    listed = await service.list_visible(
        Principal(controlled_business_ids=frozenset({"b1"})),
    )
    assert sorted(p.id for p in listed) == sorted(p.id for p in created)


async def test_same_name_race_on_sql_has_one_winner(tmp_path):
    # A file database: every session gets its own connection, as in production
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    await manager.create_all()
    service = ProgramService(SqlStorage(manager))
    try:
        results = await asyncio.gather(
            service.create(ADMIN, {"programName": "dup"}),
            service.create(ADMIN, {"programName": "dup"}),
            return_exceptions=True,
        )

        conflicts = [r for r in results if isinstance(r, ConflictError)]
        winners = [r for r in results if not isinstance(r, Exception)]
        assert len(conflicts) == 1
        assert len(winners) == 1
        assert [p.id for p in await service.list_visible(ADMIN)] == [winners[0].id]
    finally:
        await manager.dispose()
