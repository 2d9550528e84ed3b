"""Boundary Protocols: contracts between the core and the storage backends.

Invariants:
    - Core never imports from infrastructure; dependency arrows point inward only
    - Every selection is an AccessQuery compiled by core/access_filter.py
    - A selection that matches nothing raises NotFoundError (absent or out of scope)
    - Unique-name clashes raise ConflictError; no retry
    - A stored row whose ownership facts cannot be resolved raises DataIntegrityError

Design Decisions:
    - Protocol over ABC: structural subtyping, the memory and SQL backends share no base
    - Async in Protocol: implementations do IO (or take a lock); the pure core that
      builds queries never awaits anything
    - One EntityRepository per kind, obtained from a Storage; association and
      reference-count helpers live on Storage because they span kinds
"""

from datetime import datetime
from typing import Protocol

from vtn.core.access_filter import AccessQuery
from vtn.core.domain_types import EntityKind
from vtn.core.entities import Entity


class EntityRepository(Protocol):
    """Contract for one entity kind's rows."""
    kind: EntityKind

    async def insert(self, entity: Entity) -> Entity: ...
    async def get_one(self, query: AccessQuery) -> Entity: ...
    async def list_where(self, query: AccessQuery) -> list[Entity]: ...
    async def update_where(
        self, query: AccessQuery, content: object, now: datetime | None = None,
    ) -> Entity: ...
    async def delete_where(self, query: AccessQuery) -> Entity: ...
    async def exists(self, entity_id: str) -> bool: ...


class Storage(Protocol):
    """Contract for the whole data source."""
    def repository(self, kind: EntityKind) -> EntityRepository: ...
    async def count_referencing(
        self, kind: EntityKind, field: str, value: str,
    ) -> int: ...
    async def set_program_vens(
        self, program_id: str, ven_ids: frozenset[str],
    ) -> frozenset[str]: ...
    async def program_vens(self, program_id: str) -> frozenset[str]: ...
