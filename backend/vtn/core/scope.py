"""Scope Resolver: derives the caller's authorization scope from a Principal.

Invariants:
    - Pure function of (Principal, EntityKind, Operation): no storage access, no side effects
    - Precedence: Unrestricted, then business, then VEN
    - VEN scope never grants Program/Event writes
    - NoAccess is returned, not raised; require_access() turns it into ForbiddenError

Resolution table:

    kind           read                              write
    program/event  Unrestricted|Business|VenScoped   Unrestricted|Business
    report         Unrestricted|Business|VenScoped   create/update: as read; delete: Unrestricted|Business
    ven            Unrestricted|VenManager|VenOwner  create: Unrestricted|VenManager; update/delete: as read
    resource       Unrestricted|VenManager|VenOwner  as read
"""

from dataclasses import dataclass
from typing import Union

from vtn.core.domain_types import EntityKind, Operation
from vtn.core.errors import ErrorContext, ForbiddenError, ValidationError
from vtn.core.principal import Principal


@dataclass(frozen=True)
class Unrestricted:
    """Admin or any-business user: every row of every kind."""

    def describe(self) -> str:
        return "unrestricted"


@dataclass(frozen=True)
class BusinessScoped:
    """Programs owned by one of business_ids, and transitively their Events/Reports."""
    business_ids: frozenset[str]

    def describe(self) -> str:
        return f"business:{','.join(sorted(self.business_ids))}"


@dataclass(frozen=True)
class VenScoped:
    """Programs with no VEN association, or one naming any of ven_ids."""
    ven_ids: frozenset[str]

    def describe(self) -> str:
        return f"ven:{','.join(sorted(self.ven_ids))}"


@dataclass(frozen=True)
class VenOwnerScoped:
    """Ven/Resource rows belonging to one of ven_ids."""
    ven_ids: frozenset[str]

    def describe(self) -> str:
        return f"ven_owner:{','.join(sorted(self.ven_ids))}"


@dataclass(frozen=True)
class VenManager:
    """All Ven/Resource rows."""

    def describe(self) -> str:
        return "ven_manager"


@dataclass(frozen=True)
class NoAccess:
    """The principal holds no role that reaches this kind/operation."""

    def describe(self) -> str:
        return "none"


Scope = Union[Unrestricted, BusinessScoped, VenScoped, VenOwnerScoped, VenManager, NoAccess]

_PROGRAM_TREE = (EntityKind.PROGRAM, EntityKind.EVENT, EntityKind.REPORT)


def _program_tree_scope(principal: Principal, allow_ven: bool) -> Scope:
    if principal.is_admin or principal.is_any_business_user:
        return Unrestricted()
    if principal.controlled_business_ids:
        return BusinessScoped(principal.controlled_business_ids)
    if allow_ven and principal.controlled_ven_ids:
        return VenScoped(principal.controlled_ven_ids)
    return NoAccess()


def _ven_tree_scope(principal: Principal, allow_owner: bool) -> Scope:
    if principal.is_admin or principal.is_any_business_user:
        return Unrestricted()
    if principal.is_ven_manager:
        return VenManager()
    if allow_owner and principal.controlled_ven_ids:
        return VenOwnerScoped(principal.controlled_ven_ids)
    return NoAccess()


def resolve_scope(principal: Principal, kind: EntityKind, operation: Operation) -> Scope:
    """Scope of `principal` for `operation` on rows of `kind`."""
    if kind in _PROGRAM_TREE:
        if operation is Operation.READ:
            return _program_tree_scope(principal, allow_ven=True)
        if kind is EntityKind.REPORT and operation is not Operation.DELETE:
            # VENs submit and revise reports for programs they can see
            return _program_tree_scope(principal, allow_ven=True)
        return _program_tree_scope(principal, allow_ven=False)

    if kind is EntityKind.VEN and operation is Operation.CREATE:
        return _ven_tree_scope(principal, allow_owner=False)
    return _ven_tree_scope(principal, allow_owner=True)


def require_access(
    principal: Principal, kind: EntityKind, operation: Operation,
) -> Scope:
    """resolve_scope, raising ForbiddenError instead of returning NoAccess."""
    scope = resolve_scope(principal, kind, operation)
    if isinstance(scope, NoAccess):
        raise ForbiddenError(
            f"Principal may not {operation.value} {kind.label} rows",
            ErrorContext(entity_kind=kind.value),
        )
    return scope


def owning_business(scope: Scope, requested: str | None) -> str | None:
    """businessId a Program may be written with under `scope`.

    Business-scoped writers may only assign one of their own businesses; with a
    single controlled business an omitted businessId defaults to it.
    """
    if not isinstance(scope, BusinessScoped):
        return requested
    if requested is None:
        if len(scope.business_ids) == 1:
            return next(iter(scope.business_ids))
        raise ValidationError(
            "businessId is required when several businesses are controlled",
            "businessId",
        )
    if requested not in scope.business_ids:
        raise ValidationError(
            f"businessId {requested} is not controlled by the caller", "businessId",
        )
    return requested
