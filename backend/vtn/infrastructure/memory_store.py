"""In-Memory Storage: process-local data source behind one asyncio.Lock.

Invariants:
    - Every read and mutation runs under the same lock: check-then-write is atomic
    - Non-null names are unique per kind; null names may repeat
    - Deleting a Program or Ven drops its ven_program association rows
    - Rows are immutable Entity values; updates swap the stored value

Design Decisions:
    - Dict per kind keyed by id; the predicate is evaluated over every row of the kind
    - Used for tests and single-process deployments (storage_backend = "memory")
"""

import asyncio
from datetime import datetime

from vtn.core.access_filter import AccessQuery, RecordView, record_view
from vtn.core.domain_types import EntityKind
from vtn.core.entities import Entity, update_entity
from vtn.core.errors import ConflictError, ErrorContext, NotFoundError


class MemoryStorage:
    """All five kinds plus the ven_program relation, guarded by one lock."""

    def __init__(self):
        self.lock = asyncio.Lock()
        self.rows: dict[EntityKind, dict[str, Entity]] = {
            kind: {} for kind in EntityKind
        }
        self.ven_program: set[tuple[str, str]] = set()
        self._repositories = {
            kind: MemoryRepository(self, kind) for kind in EntityKind
        }

    def repository(self, kind: EntityKind) -> "MemoryRepository":
        return self._repositories[kind]

    async def count_referencing(
        self, kind: EntityKind, field: str, value: str,
    ) -> int:
        async with self.lock:
            return sum(
                1 for e in self.rows[kind].values()
                if getattr(e.content, field) == value
            )

    async def set_program_vens(
        self, program_id: str, ven_ids: frozenset[str],
    ) -> frozenset[str]:
        async with self.lock:
            self.ven_program = {
                pair for pair in self.ven_program if pair[0] != program_id
            }
            self.ven_program.update((program_id, v) for v in ven_ids)
            return frozenset(ven_ids)

    async def program_vens(self, program_id: str) -> frozenset[str]:
        async with self.lock:
            return self._vens_of(program_id)

    # ─── Lock-held helpers ──────────────────────────────────────

    def _vens_of(self, program_id: str) -> frozenset[str]:
        return frozenset(v for p, v in self.ven_program if p == program_id)

    def view(self, entity: Entity) -> RecordView:
        if entity.kind is EntityKind.PROGRAM:
            return record_view(entity, program_ven_ids=self._vens_of(entity.id))
        if entity.kind in (EntityKind.EVENT, EntityKind.REPORT):
            program_id = entity.content.program_id
            return record_view(
                entity,
                self.rows[EntityKind.PROGRAM].get(program_id),
                self._vens_of(program_id),
            )
        return record_view(entity)

    def drop_associations(self, kind: EntityKind, entity_id: str) -> None:
        position = 0 if kind is EntityKind.PROGRAM else 1
        self.ven_program = {
            pair for pair in self.ven_program if pair[position] != entity_id
        }


class MemoryRepository:
    """EntityRepository for one kind of MemoryStorage."""

    def __init__(self, storage: MemoryStorage, kind: EntityKind):
        self.storage = storage
        self.kind = kind

    @property
    def _rows(self) -> dict[str, Entity]:
        return self.storage.rows[self.kind]

    def _check_unique(self, entity: Entity) -> None:
        if entity.name is None:
            return
        for other in self._rows.values():
            if other.id != entity.id and other.name == entity.name:
                raise ConflictError(
                    f"{self.kind.label} name {entity.name!r} already exists",
                    ErrorContext(entity_kind=self.kind.value, field="name"),
                )

    def _first(self, query: AccessQuery) -> Entity:
        hits = query.select(self.storage.view(e) for e in self._rows.values())
        if not hits:
            raise NotFoundError(self.kind.label)
        return hits[0]

    async def insert(self, entity: Entity) -> Entity:
        async with self.storage.lock:
            if entity.id in self._rows:
                raise ConflictError(
                    f"{self.kind.label} {entity.id} already exists",
                    ErrorContext(entity_kind=self.kind.value, entity_id=entity.id),
                )
            self._check_unique(entity)
            self._rows[entity.id] = entity
            return entity

    async def get_one(self, query: AccessQuery) -> Entity:
        async with self.storage.lock:
            return self._first(query)

    async def list_where(self, query: AccessQuery) -> list[Entity]:
        async with self.storage.lock:
            return query.select(self.storage.view(e) for e in self._rows.values())

    async def update_where(
        self, query: AccessQuery, content: object, now: datetime | None = None,
    ) -> Entity:
        async with self.storage.lock:
            updated = update_entity(self._first(query), content, now)
            self._check_unique(updated)
            self._rows[updated.id] = updated
            return updated

    async def delete_where(self, query: AccessQuery) -> Entity:
        async with self.storage.lock:
            entity = self._first(query)
            del self._rows[entity.id]
            if self.kind in (EntityKind.PROGRAM, EntityKind.VEN):
                self.storage.drop_associations(self.kind, entity.id)
            return entity

    async def exists(self, entity_id: str) -> bool:
        async with self.storage.lock:
            return entity_id in self._rows
