"""Access-Filter Compiler: one predicate for list, get, update and delete.

Invariants:
    - predicate = name filter AND target filter AND scope gate (AND extra field filters)
    - No filter can widen the scope: the scope gate is always a conjunct
    - get/update/delete use single_record(): the list predicate plus an id filter, limit 1
    - A miss is "absent or out of scope"; callers surface both as the same NotFoundError
    - Predicates are declarative values; evaluation needs only a RecordView

Design Decisions:
    - Explicit AnyName | OneOf variant instead of a nullable collection
    - RecordView carries the ownership facts (business owner, VEN associations, owning VEN)
      that the storage collaborator joins in, so the gate never performs lookups
"""

from dataclasses import dataclass, field
from typing import Iterable, Union

from vtn.core.domain_types import NAME_LABEL_BY_KIND, EntityKind, check_name
from vtn.core.entities import Entity
from vtn.core.errors import DataIntegrityError, ErrorContext, ValidationError
from vtn.core.scope import (
    BusinessScoped, NoAccess, Scope, Unrestricted,
    VenManager, VenOwnerScoped, VenScoped,
)
from vtn.core.target_matching import matches, single_value_filter
from vtn.core.values_map import TargetSet


# ─── Filter variants ─────────────────────────────────────────────

@dataclass(frozen=True)
class AnyName:
    """No restriction on the name/id."""


@dataclass(frozen=True)
class OneOf:
    """Membership in a caller-supplied set."""
    values: frozenset[str]


NameFilter = Union[AnyName, OneOf]


@dataclass(frozen=True)
class Pagination:
    skip: int = 0
    limit: int = 50

    @classmethod
    def checked(cls, skip: int = 0, limit: int = 50, max_limit: int = 50) -> "Pagination":
        if skip < 0:
            raise ValidationError("skip must be >= 0", "skip")
        if not 1 <= limit <= max_limit:
            raise ValidationError(f"limit must be within 1..{max_limit}", "limit")
        return cls(skip=skip, limit=limit)


# ─── Record view ─────────────────────────────────────────────────

@dataclass(frozen=True)
class RecordView:
    """An entity plus the ownership facts its scope gate needs."""
    entity: Entity
    owner_business_id: str | None = None
    program_ven_ids: frozenset[str] = field(default_factory=frozenset)
    owner_ven_id: str | None = None


def record_view(
    entity: Entity, program: Entity | None = None,
    program_ven_ids: frozenset[str] = frozenset(),
) -> RecordView:
    """Assemble the ownership facts of `entity`.

    Events and Reports need their owning Program; a Program is its own owner.
    A missing owner means the stored row is dangling.
    """
    kind = entity.kind
    if kind is EntityKind.VEN:
        return RecordView(entity, owner_ven_id=entity.id)
    if kind is EntityKind.RESOURCE:
        return RecordView(entity, owner_ven_id=entity.content.ven_id)
    if kind is EntityKind.PROGRAM:
        program = entity
    if program is None:
        raise DataIntegrityError(
            f"{kind.label} {entity.id} references missing program "
            f"{entity.content.program_id}",
            ErrorContext(entity_kind=kind.value, entity_id=entity.id),
        )
    return RecordView(
        entity, program.content.business_id, frozenset(program_ven_ids),
    )


# ─── Predicates ──────────────────────────────────────────────────

@dataclass(frozen=True)
class MatchAll:
    def matches(self, view: RecordView) -> bool:
        return True


@dataclass(frozen=True)
class IdIn:
    ids: frozenset[str]

    def matches(self, view: RecordView) -> bool:
        return view.entity.id in self.ids


@dataclass(frozen=True)
class NameIn:
    names: frozenset[str]

    def matches(self, view: RecordView) -> bool:
        return view.entity.name in self.names


@dataclass(frozen=True)
class FieldIn:
    """Equality on a content field, e.g. Report.event_id in {...}."""
    field: str
    values: frozenset[str]

    def matches(self, view: RecordView) -> bool:
        return getattr(view.entity.content, self.field) in self.values


@dataclass(frozen=True)
class TargetsContain:
    targets: TargetSet

    def matches(self, view: RecordView) -> bool:
        return matches(view.entity.targets, self.targets)


@dataclass(frozen=True)
class ScopeGate:
    scope: Scope

    def matches(self, view: RecordView) -> bool:
        scope = self.scope
        if isinstance(scope, (Unrestricted, VenManager)):
            return True
        if isinstance(scope, BusinessScoped):
            return view.owner_business_id in scope.business_ids
        if isinstance(scope, VenScoped):
            return not view.program_ven_ids or bool(view.program_ven_ids & scope.ven_ids)
        if isinstance(scope, VenOwnerScoped):
            return view.owner_ven_id in scope.ven_ids
        if isinstance(scope, NoAccess):
            return False
        raise TypeError(f"unknown scope {scope!r}")


@dataclass(frozen=True)
class And:
    parts: tuple

    def matches(self, view: RecordView) -> bool:
        return all(p.matches(view) for p in self.parts)


Predicate = Union[MatchAll, IdIn, NameIn, FieldIn, TargetsContain, ScopeGate, And]


@dataclass(frozen=True)
class AccessQuery:
    """Compiled output handed to the storage collaborator."""
    predicate: Predicate
    order: tuple[str, ...] = ("created", "id")
    offset: int = 0
    limit: int = 50

    def sort_key(self, view: RecordView) -> tuple:
        return tuple(getattr(view.entity, attr) for attr in self.order)

    def conjuncts(self) -> tuple:
        if isinstance(self.predicate, And):
            return self.predicate.parts
        return (self.predicate,)

    def matching(self, views: Iterable[RecordView]) -> list[RecordView]:
        """Views satisfying the predicate, in order, without the window."""
        return sorted(
            (v for v in views if self.predicate.matches(v)), key=self.sort_key,
        )

    def select(self, views: Iterable[RecordView]) -> list[Entity]:
        """Apply predicate, order and window to candidate views."""
        hits = self.matching(views)
        return [v.entity for v in hits[self.offset:self.offset + self.limit]]


# ─── Compiler ────────────────────────────────────────────────────

def _membership(name_filter: NameFilter, predicate_cls: type) -> Predicate:
    if isinstance(name_filter, OneOf):
        return predicate_cls(frozenset(name_filter.values))
    return MatchAll()


def compile_access(
    scope: Scope,
    name_filter: NameFilter = AnyName(),
    target_filter: TargetSet | None = None,
    pagination: Pagination = Pagination(),
    id_filter: NameFilter = AnyName(),
    field_filters: dict[str, frozenset[str]] | None = None,
) -> AccessQuery:
    """AND together the filters and the scope gate."""
    parts = [
        _membership(id_filter, IdIn),
        _membership(name_filter, NameIn),
        TargetsContain(target_filter) if target_filter else MatchAll(),
        *(FieldIn(f, frozenset(v)) for f, v in (field_filters or {}).items()),
        ScopeGate(scope),
    ]
    parts = [p for p in parts if not isinstance(p, MatchAll)]
    return AccessQuery(
        predicate=And(tuple(parts)),
        offset=pagination.skip,
        limit=pagination.limit,
    )


def single_record(
    scope: Scope, entity_id: str,
    field_filters: dict[str, frozenset[str]] | None = None,
) -> AccessQuery:
    """Selection for get/update/delete: the list predicate restricted to one id."""
    return compile_access(
        scope, id_filter=OneOf(frozenset({entity_id})), pagination=Pagination(0, 1),
        field_filters=field_filters,
    )


def translate_target_query(
    kind: EntityKind, target_type: str | None, target_values: list[str] | None,
) -> tuple[NameFilter, TargetSet | None]:
    """targetType/targetValues query parameters -> (name filter, target filter).

    The kind's own name label (e.g. PROGRAM_NAME on programs) selects by name;
    any other label becomes one single-valued ValuesMap per value.
    """
    if (target_type is None) != (target_values is None):
        raise ValidationError(
            "targetType and targetValues must either both be set or both be absent",
            "targetType",
        )
    if target_type is None:
        return AnyName(), None
    check_name(target_type, "targetType")
    if NAME_LABEL_BY_KIND.get(kind) == target_type:
        return OneOf(frozenset(target_values)), None
    return AnyName(), single_value_filter(target_type, target_values)
