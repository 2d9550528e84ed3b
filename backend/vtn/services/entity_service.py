"""Entity Service: the request pipeline shared by all five entity kinds.

Invariants:
    - Order per call: resolve scope -> validate body -> check references -> storage
    - The role check fails before any row is touched (ForbiddenError)
    - get/update/delete select with single_record(), so out-of-scope and absent ids
      raise the same NotFoundError
    - A referenced row that is absent or out of scope is a ValidationError with one
      message for both cases
    - Nothing cascades: a delete blocked by dependent rows is a ConflictError

Design Decisions:
    - Template class with per-kind hooks (validate, check_references) instead of five
      copies of the pipeline
    - Follows impureim sandwich: pure scope/filter/validation, then storage IO
"""

import logging
from typing import ClassVar

from vtn.core.access_filter import (
    Pagination, compile_access, single_record, translate_target_query,
)
from vtn.core.domain_types import (
    EntityKind, Operation, check_identifier, check_name,
)
from vtn.core.entities import Entity, create_entity
from vtn.core.errors import (
    ConflictError, ErrorContext, ForbiddenError, NotFoundError, ValidationError,
)
from vtn.core.principal import Principal
from vtn.core.repository_protocols import Storage
from vtn.core.scope import Scope, require_access

logger = logging.getLogger(__name__)

# Rows that block deleting their parent: parent kind -> (child kind, reference field)
DEPENDENTS: dict[EntityKind, tuple[tuple[EntityKind, str], ...]] = {
    EntityKind.PROGRAM: (
        (EntityKind.EVENT, "program_id"), (EntityKind.REPORT, "program_id"),
    ),
    EntityKind.EVENT: ((EntityKind.REPORT, "event_id"),),
    EntityKind.VEN: ((EntityKind.RESOURCE, "ven_id"),),
}


class EntityService:
    """Scope-gated CRUD over one entity kind."""

    kind: ClassVar[EntityKind]
    # Query-parameter equality filters accepted by list_visible(): field -> "id" | "name"
    filter_fields: ClassVar[dict[str, str]] = {}

    def __init__(
        self, storage: Storage,
        page_limit_default: int = 50, page_limit_max: int = 50,
    ):
        self.storage = storage
        self.repo = storage.repository(self.kind)
        self.page_limit_default = page_limit_default
        self.page_limit_max = page_limit_max

    # ─── Hooks ──────────────────────────────────────────────────

    def validate(self, body: object, filters: dict[str, str]) -> object:
        raise NotImplementedError

    async def check_references(self, scope: Scope, content: object) -> object:
        """Verify referenced rows; may return adjusted content."""
        return content

    # ─── Helpers ────────────────────────────────────────────────

    def _scope(self, principal: Principal, operation: Operation) -> Scope:
        try:
            return require_access(principal, self.kind, operation)
        except ForbiddenError:
            logger.debug(
                f"{operation.value} on {self.kind.value} denied",
                extra={"entity_kind": self.kind.value, "scope": principal.describe()},
            )
            raise

    def _field_filters(self, filters: dict[str, str | None]) -> dict[str, frozenset[str]]:
        result = {}
        for name, value in filters.items():
            if name not in self.filter_fields:
                raise TypeError(f"{self.kind.value} has no filter {name!r}")
            if value is None:
                continue
            check = check_identifier if self.filter_fields[name] == "id" else check_name
            result[name] = frozenset({check(value, name)})
        return result

    async def _reference(
        self, kind: EntityKind, scope: Scope, entity_id: str, field: str,
    ) -> Entity:
        """Load a referenced row through `scope`; a miss is a ValidationError."""
        try:
            return await self.storage.repository(kind).get_one(
                single_record(scope, entity_id),
            )
        except NotFoundError:
            raise ValidationError(
                f"{field} {entity_id} does not reference an accessible {kind.label}",
                field,
                ErrorContext(entity_kind=self.kind.value),
            )

    async def _check_dependents(self, entity: Entity) -> None:
        for child_kind, field in DEPENDENTS.get(self.kind, ()):
            count = await self.storage.count_referencing(child_kind, field, entity.id)
            if count:
                raise ConflictError(
                    f"{self.kind.label} {entity.id} still has {count} "
                    f"dependent {child_kind.label} row(s)",
                    ErrorContext(entity_kind=self.kind.value, entity_id=entity.id),
                )

    def _log_mutation(self, action: str, entity: Entity, scope: Scope) -> None:
        logger.info(
            f"{self.kind.label} {action}",
            extra={
                "entity_kind": self.kind.value,
                "entity_id": entity.id,
                "scope": scope.describe(),
            },
        )

    # ─── Operations ─────────────────────────────────────────────

    async def list_visible(
        self, principal: Principal,
        target_type: str | None = None, target_values: list[str] | None = None,
        skip: int = 0, limit: int | None = None, **filters: str | None,
    ) -> list[Entity]:
        """Rows visible to `principal` that pass every supplied filter."""
        scope = self._scope(principal, Operation.READ)
        name_filter, target_filter = translate_target_query(
            self.kind, target_type, target_values,
        )
        pagination = Pagination.checked(
            skip,
            self.page_limit_default if limit is None else limit,
            self.page_limit_max,
        )
        query = compile_access(
            scope, name_filter, target_filter, pagination,
            field_filters=self._field_filters(filters),
        )
        return await self.repo.list_where(query)

    async def get(
        self, principal: Principal, entity_id: str, **filters: str | None,
    ) -> Entity:
        scope = self._scope(principal, Operation.READ)
        entity_id = check_identifier(entity_id, "id")
        return await self.repo.get_one(
            single_record(scope, entity_id, self._field_filters(filters)),
        )

    async def create(
        self, principal: Principal, body: object, **filters: str,
    ) -> Entity:
        scope = self._scope(principal, Operation.CREATE)
        # ── PURE: validate ──
        content = self.validate(body, filters)
        # ── IMPURE: references, insert ──
        content = await self.check_references(scope, content)
        entity = await self.repo.insert(create_entity(self.kind, content))
        self._log_mutation("created", entity, scope)
        return entity

    async def update(
        self, principal: Principal, entity_id: str, body: object, **filters: str,
    ) -> Entity:
        scope = self._scope(principal, Operation.UPDATE)
        entity_id = check_identifier(entity_id, "id")
        content = self.validate(body, filters)
        content = await self.check_references(scope, content)
        entity = await self.repo.update_where(
            single_record(scope, entity_id, self._field_filters(filters)), content,
        )
        self._log_mutation("updated", entity, scope)
        return entity

    async def delete(
        self, principal: Principal, entity_id: str, **filters: str,
    ) -> Entity:
        """Delete one row in scope; returns the deleted entity."""
        scope = self._scope(principal, Operation.DELETE)
        entity_id = check_identifier(entity_id, "id")
        query = single_record(scope, entity_id, self._field_filters(filters))
        await self._check_dependents(await self.repo.get_one(query))
        entity = await self.repo.delete_where(query)
        self._log_mutation("deleted", entity, scope)
        return entity
