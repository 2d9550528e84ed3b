"""Principal & Scope Resolver: role parsing and the per-kind resolution table.

Tests:
    - from_roles parses flags and id-bearing roles; unknown roles raise ValidationError
    - Admin and any-business principals are Unrestricted for every kind and operation
    - Business precedence over VEN; VEN scope never writes Programs or Events
    - VENs may create/update Reports but not delete them
    - VEN owners update/delete their own Ven but cannot create one
    - A user-manager-only principal has no access anywhere
    - owning_business defaults, accepts and rejects businessIds
"""

import pytest

from vtn.core.domain_types import EntityKind, Operation
from vtn.core.errors import ForbiddenError, ValidationError
from vtn.core.principal import Principal
from vtn.core.scope import (
    BusinessScoped, NoAccess, Unrestricted, VenManager, VenOwnerScoped,
    VenScoped, owning_business, require_access, resolve_scope,
)

ADMIN = Principal(is_admin=True)
ANY_BUSINESS = Principal(is_any_business_user=True)
BUSINESS = Principal(controlled_business_ids=frozenset({"b1"}))
VEN = Principal(controlled_ven_ids=frozenset({"v1"}))
VEN_MANAGER = Principal(is_ven_manager=True)
USER_MANAGER = Principal(is_user_manager=True)


# ─── Principal ───────────────────────────────────────────────────

def test_from_roles_parses_every_role():
    principal = Principal.from_roles(
        ["ADMIN", " business:b1", "BUSINESS:b2", "VEN:v1", "USER_MANAGER", "VEN_MANAGER", ""],
    )
    assert principal.is_admin and principal.is_user_manager and principal.is_ven_manager
    assert principal.controlled_business_ids == {"b1", "b2"}
    assert principal.controlled_ven_ids == {"v1"}


@pytest.mark.parametrize("role", ["ROOT", "BUSINESS", "VEN:", "ADMIN:x", "VEN:bad id"])
def test_from_roles_rejects_unknown(role):
    with pytest.raises(ValidationError):
        Principal.from_roles([role])


def test_describe_is_compact():
    assert Principal().describe() == "none"
    assert BUSINESS.describe() == "business:b1"


# ─── resolve_scope ───────────────────────────────────────────────

@pytest.mark.parametrize("principal", [ADMIN, ANY_BUSINESS])
@pytest.mark.parametrize("kind", list(EntityKind))
@pytest.mark.parametrize("operation", list(Operation))
def test_admin_and_any_business_unrestricted(principal, kind, operation):
    assert resolve_scope(principal, kind, operation) == Unrestricted()


def test_business_scope_over_program_tree():
    for kind in (EntityKind.PROGRAM, EntityKind.EVENT, EntityKind.REPORT):
        for operation in Operation:
            assert resolve_scope(BUSINESS, kind, operation) == BusinessScoped(
                frozenset({"b1"}),
            )


def test_business_takes_precedence_over_ven():
    both = Principal(
        controlled_business_ids=frozenset({"b1"}), controlled_ven_ids=frozenset({"v1"}),
    )
    assert isinstance(
        resolve_scope(both, EntityKind.PROGRAM, Operation.READ), BusinessScoped,
    )


def test_ven_reads_but_never_writes_programs_and_events():
    for kind in (EntityKind.PROGRAM, EntityKind.EVENT):
        assert resolve_scope(VEN, kind, Operation.READ) == VenScoped(frozenset({"v1"}))
        for operation in (Operation.CREATE, Operation.UPDATE, Operation.DELETE):
            assert resolve_scope(VEN, kind, operation) == NoAccess()


def test_ven_submits_reports_but_cannot_delete():
    assert isinstance(resolve_scope(VEN, EntityKind.REPORT, Operation.CREATE), VenScoped)
    assert isinstance(resolve_scope(VEN, EntityKind.REPORT, Operation.UPDATE), VenScoped)
    assert resolve_scope(VEN, EntityKind.REPORT, Operation.DELETE) == NoAccess()


def test_ven_tree():
    assert resolve_scope(VEN_MANAGER, EntityKind.VEN, Operation.CREATE) == VenManager()
    assert resolve_scope(VEN_MANAGER, EntityKind.RESOURCE, Operation.DELETE) == VenManager()
    assert resolve_scope(VEN, EntityKind.VEN, Operation.CREATE) == NoAccess()
    assert resolve_scope(VEN, EntityKind.VEN, Operation.UPDATE) == VenOwnerScoped(
        frozenset({"v1"}),
    )
    assert resolve_scope(VEN, EntityKind.RESOURCE, Operation.CREATE) == VenOwnerScoped(
        frozenset({"v1"}),
    )
    assert resolve_scope(BUSINESS, EntityKind.VEN, Operation.READ) == NoAccess()


@pytest.mark.parametrize("kind", list(EntityKind))
def test_user_manager_alone_has_no_access(kind):
    assert resolve_scope(USER_MANAGER, kind, Operation.READ) == NoAccess()
    with pytest.raises(ForbiddenError):
        require_access(USER_MANAGER, kind, Operation.READ)


def test_require_access_returns_scope():
    assert require_access(ADMIN, EntityKind.EVENT, Operation.DELETE) == Unrestricted()


# ─── owning_business ─────────────────────────────────────────────

def test_owning_business_rules():
    single = BusinessScoped(frozenset({"b1"}))
    several = BusinessScoped(frozenset({"b1", "b2"}))
    assert owning_business(single, None) == "b1"
    assert owning_business(several, "b2") == "b2"
    assert owning_business(Unrestricted(), None) is None
    assert owning_business(Unrestricted(), "anyone") == "anyone"
    with pytest.raises(ValidationError):
        owning_business(several, None)
    with pytest.raises(ValidationError):
        owning_business(single, "b2")
