"""Service test fixtures: both storage backends and a seeded dataset.

Invariants:
    - Every test gets a fresh storage: a new MemoryStorage, or a new in-memory SQLite
      database created through DatabaseSessionManager.create_all
    - `storage` is parametrized, so each service test runs once per backend
    - `seeded` builds its rows through the services as an admin

Design Decisions:
    - SQLite in-memory: fast, no external dependency; PostgreSQL-only behavior
      (row locks, enforced foreign keys) is not exercised here
"""

from types import SimpleNamespace

import pytest

from vtn.core.principal import Principal
from vtn.infrastructure.database import DatabaseSessionManager
from vtn.infrastructure.memory_store import MemoryStorage
from vtn.infrastructure.sql_store import SqlStorage
from vtn.services.event_service import EventService
from vtn.services.program_service import ProgramService
from vtn.services.report_service import ReportService
from vtn.services.resource_service import ResourceService
from vtn.services.ven_service import VenService

ADMIN = Principal(is_admin=True)


@pytest.fixture
async def sql_manager():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest.fixture(params=["memory", "sql"])
async def storage(request):
    if request.param == "memory":
        yield MemoryStorage()
    else:
        manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
        await manager.create_all()
        yield SqlStorage(manager)
        await manager.dispose()


@pytest.fixture
def services(storage):
    return SimpleNamespace(
        programs=ProgramService(storage),
        events=EventService(storage),
        reports=ReportService(storage),
        vens=VenService(storage),
        resources=ResourceService(storage),
    )


@pytest.fixture
async def seeded(services):
    """Two businesses, one unowned program, two VENs, one event per program.

    p1 (business b1) targets ven1; p2 (business b2) targets ven2; "open" has no
    owner and no VEN association.
    """
    vens = services.vens
    ven1 = await vens.create(ADMIN, {"venName": "ven-1"})
    ven2 = await vens.create(ADMIN, {"venName": "ven-2"})

    programs = services.programs
    p1 = await programs.create(ADMIN, {
        "programName": "p1", "businessId": "b1",
        "targets": [{"type": "GROUP", "values": ["g1"]}],
    })
    p2 = await programs.create(ADMIN, {"programName": "p2", "businessId": "b2"})
    open_program = await programs.create(ADMIN, {"programName": "open"})
    await programs.set_vens(ADMIN, p1.id, [ven1.id])
    await programs.set_vens(ADMIN, p2.id, [ven2.id])

    events = services.events
    e1 = await events.create(ADMIN, {
        "programID": p1.id, "eventName": "e1", "intervals": [],
        "targets": [
            {"type": "GROUP", "values": ["group-1"]},
            {"type": "PRIVATE_LABEL", "values": ["x"]},
        ],
    })
    e2 = await events.create(ADMIN, {"programID": p2.id, "eventName": "e2", "intervals": []})
    e3 = await events.create(ADMIN, {
        "programID": open_program.id, "eventName": "e3", "intervals": [],
    })
    return SimpleNamespace(
        ven1=ven1, ven2=ven2, p1=p1, p2=p2, open=open_program, e1=e1, e2=e2, e3=e3,
    )
