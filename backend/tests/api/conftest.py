"""API test fixtures: the real app over ASGITransport with a fresh MemoryStorage.

Design Decisions:
    - get_storage is overridden instead of running the lifespan; each test gets
      its own MemoryStorage and the overrides are cleared afterwards
"""

import httpx
import pytest

from vtn.infrastructure.memory_store import MemoryStorage
from vtn.infrastructure.storage import get_storage
from vtn.main import app


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
async def client(memory_storage):
    app.dependency_overrides[get_storage] = lambda: memory_storage
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
