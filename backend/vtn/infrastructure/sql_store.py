"""SQL Storage: SQLAlchemy async implementation of the storage protocols.

Invariants:
    - Id, name, reference and scope-gate conjuncts are pushed down as WHERE clauses
      where a column exists (VEN visibility as EXISTS over ven_programs); the full
      predicate is then re-evaluated on RecordViews, so push-down can only narrow
      the candidate set, never widen the result
    - Rows are ordered by (created, id) in SQL; a fully pushed-down query also takes
      its OFFSET/LIMIT in SQL
    - Target filters have no column: such queries read the ordered rows in batches
      of batch_size and stop once offset + limit matches are found
    - Unique-name and reference races surface as ConflictError (IntegrityError on flush)
    - A row whose document no longer validates, or whose Program is gone, raises
      DataIntegrityError

Design Decisions:
    - Each entity row stores the served JSON document; decoding runs it back through
      entity_validator, which is also the integrity check
    - One transaction per repository call (DatabaseSessionManager.session + begin)
    - update/delete load their candidate rows FOR UPDATE (a no-op on SQLite)
"""

import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy import delete, false, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vtn.core.access_filter import (
    AccessQuery, FieldIn, IdIn, MatchAll, NameIn, RecordView, ScopeGate, record_view,
)
from vtn.core.domain_types import EntityKind
from vtn.core.entities import ENTITY_CLASSES, Entity, update_entity
from vtn.core.entity_validator import (
    validate_event, validate_program, validate_report, validate_resource, validate_ven,
)
from vtn.core.errors import (
    ConflictError, DataIntegrityError, ErrorContext, NotFoundError,
    ParseError, ValidationError,
)
from vtn.core.scope import (
    BusinessScoped, NoAccess, Scope, Unrestricted,
    VenManager, VenOwnerScoped, VenScoped,
)
from vtn.infrastructure.database import DatabaseSessionManager
from vtn.models import (
    EventRow, ProgramRow, ReportRow, ResourceRow, VenProgramRow, VenRow,
)

logger = logging.getLogger(__name__)

MODELS = {
    EntityKind.PROGRAM: ProgramRow,
    EntityKind.EVENT: EventRow,
    EntityKind.REPORT: ReportRow,
    EntityKind.VEN: VenRow,
    EntityKind.RESOURCE: ResourceRow,
}

# Content fields copied into their own columns
_LOOKUP_COLUMNS: dict[EntityKind, tuple[str, ...]] = {
    EntityKind.PROGRAM: ("business_id",),
    EntityKind.EVENT: ("program_id",),
    EntityKind.REPORT: ("program_id", "event_id", "client_name"),
    EntityKind.VEN: (),
    EntityKind.RESOURCE: ("ven_id",),
}

_PROGRAM_TREE = (EntityKind.PROGRAM, EntityKind.EVENT, EntityKind.REPORT)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored value is UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def encode(entity: Entity) -> dict:
    """Column values for `entity`."""
    columns = {
        "id": entity.id,
        "created": entity.created,
        "modified": entity.modified,
        "name": entity.name,
        "document": entity.to_json(),
    }
    for column in _LOOKUP_COLUMNS[entity.kind]:
        columns[column] = getattr(entity.content, column)
    return columns


def decode(kind: EntityKind, row) -> Entity:
    """Entity for a stored row. Raises DataIntegrityError if the document is invalid."""
    try:
        if kind is EntityKind.RESOURCE:
            content = validate_resource(row.document, row.ven_id)
        else:
            content = {
                EntityKind.PROGRAM: validate_program,
                EntityKind.EVENT: validate_event,
                EntityKind.REPORT: validate_report,
                EntityKind.VEN: validate_ven,
            }[kind](row.document)
    except (ValidationError, ParseError) as e:
        logger.error(
            f"Undecodable {kind.label} row: {e.message}",
            extra={"entity_kind": kind.value, "entity_id": row.id},
        )
        raise DataIntegrityError(
            f"Stored {kind.label} {row.id} is undecodable",
            ErrorContext(entity_kind=kind.value, entity_id=row.id),
        )
    return ENTITY_CLASSES[kind](
        id=row.id,
        created=_aware(row.created),
        modified=_aware(row.modified),
        content=content,
    )


class SqlStorage:
    """All five kinds plus ven_programs over one DatabaseSessionManager."""

    def __init__(self, manager: DatabaseSessionManager, batch_size: int = 200):
        self.manager = manager
        self.batch_size = batch_size
        self._repositories = {
            kind: SqlRepository(self, kind) for kind in EntityKind
        }

    def repository(self, kind: EntityKind) -> "SqlRepository":
        return self._repositories[kind]

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.manager.session() as db:
            async with db.begin():
                yield db

    async def count_referencing(
        self, kind: EntityKind, field: str, value: str,
    ) -> int:
        model = MODELS[kind]
        async with self.transaction() as db:
            return await db.scalar(
                select(func.count()).select_from(model)
                .where(getattr(model, field) == value),
            )

    async def set_program_vens(
        self, program_id: str, ven_ids: frozenset[str],
    ) -> frozenset[str]:
        async with self.transaction() as db:
            await db.execute(
                delete(VenProgramRow).where(VenProgramRow.program_id == program_id),
            )
            db.add_all([
                VenProgramRow(program_id=program_id, ven_id=v) for v in sorted(ven_ids)
            ])
            try:
                await db.flush()
            except IntegrityError:
                raise ConflictError(
                    "VEN associations changed concurrently",
                    ErrorContext(entity_kind=EntityKind.PROGRAM.value, entity_id=program_id),
                )
        return frozenset(ven_ids)

    async def program_vens(self, program_id: str) -> frozenset[str]:
        async with self.transaction() as db:
            vens = await self.vens_by_program(db, {program_id})
        return vens.get(program_id, frozenset())

    # ─── Session-bound helpers ──────────────────────────────────

    async def vens_by_program(
        self, db: AsyncSession, program_ids: set[str],
    ) -> dict[str, frozenset[str]]:
        if not program_ids:
            return {}
        result = await db.execute(
            select(VenProgramRow.program_id, VenProgramRow.ven_id)
            .where(VenProgramRow.program_id.in_(program_ids)),
        )
        grouped: dict[str, set[str]] = defaultdict(set)
        for program_id, ven_id in result:
            grouped[program_id].add(ven_id)
        return {p: frozenset(v) for p, v in grouped.items()}

    async def views(
        self, db: AsyncSession, kind: EntityKind, entities: list[Entity],
    ) -> list[RecordView]:
        """Join in the ownership facts for a batch of same-kind entities."""
        if kind not in _PROGRAM_TREE:
            return [record_view(e) for e in entities]
        if kind is EntityKind.PROGRAM:
            program_ids = {e.id for e in entities}
            programs = {e.id: e for e in entities}
        else:
            program_ids = {e.content.program_id for e in entities}
            rows = (await db.scalars(
                select(ProgramRow).where(ProgramRow.id.in_(program_ids)),
            )).all() if program_ids else []
            programs = {r.id: decode(EntityKind.PROGRAM, r) for r in rows}
        vens = await self.vens_by_program(db, program_ids)
        views = []
        for e in entities:
            program_id = e.id if kind is EntityKind.PROGRAM else e.content.program_id
            views.append(record_view(
                e, programs.get(program_id), vens.get(program_id, frozenset()),
            ))
        return views


class SqlRepository:
    """EntityRepository for one kind of SqlStorage."""

    def __init__(self, storage: SqlStorage, kind: EntityKind):
        self.storage = storage
        self.kind = kind
        self.model = MODELS[kind]

    def _program_column(self):
        return self.model.id if self.kind is EntityKind.PROGRAM else self.model.program_id

    def _gate(self, statement, scope: Scope):
        if isinstance(scope, (Unrestricted, VenManager)):
            return statement, True
        if isinstance(scope, NoAccess):
            return statement.where(false()), True
        if isinstance(scope, BusinessScoped) and self.kind in _PROGRAM_TREE:
            if self.kind is not EntityKind.PROGRAM:
                statement = statement.join(
                    ProgramRow, ProgramRow.id == self.model.program_id,
                )
            return statement.where(ProgramRow.business_id.in_(scope.business_ids)), True
        if isinstance(scope, VenScoped) and self.kind in _PROGRAM_TREE:
            program_id = self._program_column()
            associated = select(VenProgramRow.ven_id).where(
                VenProgramRow.program_id == program_id,
            )
            return statement.where(or_(
                ~associated.exists(),
                associated.where(VenProgramRow.ven_id.in_(scope.ven_ids)).exists(),
            )), True
        if isinstance(scope, VenOwnerScoped) and self.kind not in _PROGRAM_TREE:
            column = self.model.id if self.kind is EntityKind.VEN else self.model.ven_id
            return statement.where(column.in_(scope.ven_ids)), True
        return statement, False

    def _push(self, statement, part):
        """`statement` narrowed by `part`, and whether SQL now expresses `part` exactly."""
        if isinstance(part, MatchAll):
            return statement, True
        if isinstance(part, IdIn):
            return statement.where(self.model.id.in_(part.ids)), True
        if isinstance(part, NameIn):
            return statement.where(self.model.name.in_(part.names)), True
        if isinstance(part, FieldIn) and part.field in _LOOKUP_COLUMNS[self.kind]:
            return statement.where(getattr(self.model, part.field).in_(part.values)), True
        if isinstance(part, ScopeGate):
            return self._gate(statement, part.scope)
        return statement, False

    def compile(self, query: AccessQuery):
        """(statement, pushed_down): candidate rows for `query`, a superset of its
        matches, and whether the whole predicate ran in SQL."""
        statement = select(self.model)
        pushed_down = True
        for part in query.conjuncts():
            statement, exact = self._push(statement, part)
            pushed_down = pushed_down and exact
        return statement.order_by(self.model.created, self.model.id), pushed_down

    def statement(self, query: AccessQuery):
        return self.compile(query)[0]

    async def _matching(
        self, db: AsyncSession, statement, query: AccessQuery,
    ) -> tuple[int, list[RecordView]]:
        rows = (await db.scalars(statement)).all()
        entities = [decode(self.kind, r) for r in rows]
        return len(rows), query.matching(await self.storage.views(db, self.kind, entities))

    async def _select(
        self, db: AsyncSession, query: AccessQuery, for_update: bool = False,
    ) -> list[Entity]:
        statement, pushed_down = self.compile(query)
        if for_update:
            statement = statement.with_for_update(of=self.model)
        if pushed_down:
            _, hits = await self._matching(
                db, statement.offset(query.offset).limit(query.limit), query,
            )
            return [v.entity for v in hits]

        # Target filters run in Python: walk the ordered rows until the window fills
        wanted = query.offset + query.limit
        hits: list[RecordView] = []
        start = 0
        while len(hits) < wanted:
            fetched, batch = await self._matching(
                db, statement.offset(start).limit(self.storage.batch_size), query,
            )
            hits.extend(batch)
            if fetched < self.storage.batch_size:
                break
            start += fetched
        return [v.entity for v in hits[query.offset:wanted]]

    async def _flush(self, db: AsyncSession, entity: Entity) -> None:
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError(
                f"{self.kind.label} {entity.name!r} conflicts with an existing row",
                ErrorContext(entity_kind=self.kind.value, entity_id=entity.id, field="name"),
            )

    async def insert(self, entity: Entity) -> Entity:
        async with self.storage.transaction() as db:
            db.add(self.model(**encode(entity)))
            await self._flush(db, entity)
        return entity

    async def get_one(self, query: AccessQuery) -> Entity:
        async with self.storage.transaction() as db:
            hits = await self._select(db, query)
        if not hits:
            raise NotFoundError(self.kind.label)
        return hits[0]

    async def list_where(self, query: AccessQuery) -> list[Entity]:
        async with self.storage.transaction() as db:
            return await self._select(db, query)

    async def update_where(
        self, query: AccessQuery, content: object, now: datetime | None = None,
    ) -> Entity:
        async with self.storage.transaction() as db:
            hits = await self._select(db, query, for_update=True)
            if not hits:
                raise NotFoundError(self.kind.label)
            updated = update_entity(hits[0], content, now)
            row = await db.get(self.model, updated.id)
            for column, value in encode(updated).items():
                setattr(row, column, value)
            await self._flush(db, updated)
        return updated

    async def delete_where(self, query: AccessQuery) -> Entity:
        async with self.storage.transaction() as db:
            hits = await self._select(db, query, for_update=True)
            if not hits:
                raise NotFoundError(self.kind.label)
            entity = hits[0]
            if self.kind is EntityKind.PROGRAM:
                await db.execute(
                    delete(VenProgramRow).where(VenProgramRow.program_id == entity.id),
                )
            elif self.kind is EntityKind.VEN:
                await db.execute(
                    delete(VenProgramRow).where(VenProgramRow.ven_id == entity.id),
                )
            await db.delete(await db.get(self.model, entity.id))
            await self._flush(db, entity)
        return entity

    async def exists(self, entity_id: str) -> bool:
        async with self.storage.transaction() as db:
            return await db.get(self.model, entity_id) is not None
