"""Storage Selection: builds the configured backend once per process.

Invariants:
    - Exactly one Storage per process, created in the FastAPI lifespan
    - storage_backend = "memory" never touches the database settings

Design Decisions:
    - Module-level singleton mirrors db_manager: routes reach it through get_storage,
      tests override that dependency
"""

import logging

from vtn.config import Settings
from vtn.core.repository_protocols import Storage
from vtn.infrastructure.database import init_db
from vtn.infrastructure.memory_store import MemoryStorage
from vtn.infrastructure.sql_store import SqlStorage

logger = logging.getLogger(__name__)

storage: Storage | None = None


async def init_storage(settings: Settings) -> Storage:
    global storage
    if settings.storage_backend == "memory":
        storage = MemoryStorage()
    else:
        manager = init_db(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
        if settings.database_auto_create:
            await manager.create_all()
        storage = SqlStorage(manager)
    logger.info(f"Storage backend: {settings.storage_backend}")
    return storage


def get_storage() -> Storage:
    """FastAPI dependency for the configured storage backend."""
    if storage is None:
        raise RuntimeError("Storage not initialized")
    return storage
