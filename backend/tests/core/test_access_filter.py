"""Access-Filter Compiler: one predicate for list, get, update and delete.

Tests:
    - The scope gate is always a conjunct; filters cannot widen it
    - Business gate uses the owning Program's business
    - VEN gate admits unassociated Programs and Programs naming the VEN
    - Owner gate admits only the caller's Ven/Resource rows
    - select() orders by created then id and applies the window
    - Pagination bounds; targetType/targetValues pairing and name-label translation
    - record_view on a dangling Event raises DataIntegrityError
"""

from datetime import datetime, timedelta, timezone

import pytest

from vtn.core.access_filter import (
    AnyName, OneOf, Pagination, ScopeGate, compile_access, record_view,
    single_record, translate_target_query,
)
from vtn.core.domain_types import EntityKind
from vtn.core.entities import (
    EventContent, ProgramContent, ResourceContent, create_entity,
)
from vtn.core.errors import DataIntegrityError, ValidationError
from vtn.core.scope import (
    BusinessScoped, NoAccess, Unrestricted, VenOwnerScoped, VenScoped,
)
from vtn.core.values_map import ValuesMap

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _program(name, business_id=None, targets=None, at=T0):
    return create_entity(
        EntityKind.PROGRAM,
        ProgramContent(program_name=name, business_id=business_id, targets=targets),
        at,
    )


# ─── Scope gate ──────────────────────────────────────────────────

def test_scope_gate_always_present():
    query = compile_access(Unrestricted())
    assert query.conjuncts() == (ScopeGate(Unrestricted()),)


def test_name_filter_cannot_widen_business_scope():
    mine, theirs = _program("mine", "b1"), _program("theirs", "b2")
    query = compile_access(
        BusinessScoped(frozenset({"b1"})), OneOf(frozenset({"mine", "theirs"})),
    )
    views = [record_view(mine), record_view(theirs)]
    assert query.select(views) == [mine]


def test_event_inherits_program_owner():
    program = _program("p", "b1")
    event = create_entity(EntityKind.EVENT, EventContent(program_id=program.id), T0)
    view = record_view(event, program)
    assert view.owner_business_id == "b1"
    assert compile_access(BusinessScoped(frozenset({"b1"}))).predicate.matches(view)
    assert not compile_access(BusinessScoped(frozenset({"b2"}))).predicate.matches(view)


def test_ven_gate_uses_associations():
    program = _program("p")
    gate = compile_access(VenScoped(frozenset({"v1"}))).predicate
    assert gate.matches(record_view(program))
    assert gate.matches(record_view(program, program_ven_ids=frozenset({"v1", "v2"})))
    assert not gate.matches(record_view(program, program_ven_ids=frozenset({"v2"})))


def test_owner_gate_for_resources():
    resource = create_entity(
        EntityKind.RESOURCE, ResourceContent(resource_name="r", ven_id="v1"), T0,
    )
    assert compile_access(VenOwnerScoped(frozenset({"v1"}))).predicate.matches(
        record_view(resource),
    )
    assert not compile_access(VenOwnerScoped(frozenset({"v2"}))).predicate.matches(
        record_view(resource),
    )


def test_no_access_matches_nothing():
    assert not compile_access(NoAccess()).predicate.matches(record_view(_program("p")))


def test_dangling_event_is_integrity_fault():
    event = create_entity(EntityKind.EVENT, EventContent(program_id="gone"), T0)
    with pytest.raises(DataIntegrityError):
        record_view(event)


# ─── Filters, order, window ──────────────────────────────────────

def test_target_filter_is_anded():
    g1 = ValuesMap.of("GROUP", "g1")
    tagged, bare = _program("tagged", targets=(g1,)), _program("bare", targets=())
    query = compile_access(Unrestricted(), target_filter=(g1,))
    assert query.select([record_view(tagged), record_view(bare)]) == [tagged]


def test_select_orders_by_created_then_id_and_windows():
    programs = [
        _program(f"p{i}", at=T0 + timedelta(minutes=5 - i)) for i in range(5)
    ]
    query = compile_access(Unrestricted(), pagination=Pagination(skip=1, limit=2))
    picked = query.select(record_view(p) for p in programs)
    assert [p.name for p in picked] == ["p3", "p2"]


def test_single_record_selects_by_id():
    a, b = _program("a"), _program("b")
    query = single_record(Unrestricted(), b.id)
    assert query.limit == 1
    assert query.select([record_view(a), record_view(b)]) == [b]


def test_field_filters():
    program = _program("p")
    event = create_entity(EntityKind.EVENT, EventContent(program_id=program.id), T0)
    view = record_view(event, program)
    hit = compile_access(Unrestricted(), field_filters={"program_id": frozenset({program.id})})
    miss = compile_access(Unrestricted(), field_filters={"program_id": frozenset({"other"})})
    assert hit.predicate.matches(view)
    assert not miss.predicate.matches(view)


@pytest.mark.parametrize("skip,limit", [(-1, 10), (0, 0), (0, 51)])
def test_pagination_bounds(skip, limit):
    with pytest.raises(ValidationError):
        Pagination.checked(skip, limit, max_limit=50)


def test_pagination_defaults():
    assert Pagination.checked() == Pagination(0, 50)


# ─── Query-parameter translation ─────────────────────────────────

def test_target_type_and_values_must_pair():
    with pytest.raises(ValidationError):
        translate_target_query(EntityKind.EVENT, "GROUP", None)
    with pytest.raises(ValidationError):
        translate_target_query(EntityKind.EVENT, None, ["g1"])
    assert translate_target_query(EntityKind.EVENT, None, None) == (AnyName(), None)


def test_own_name_label_becomes_name_filter():
    name_filter, targets = translate_target_query(
        EntityKind.PROGRAM, "PROGRAM_NAME", ["summer", "winter"],
    )
    assert name_filter == OneOf(frozenset({"summer", "winter"}))
    assert targets is None


def test_other_labels_become_single_value_targets():
    name_filter, targets = translate_target_query(
        EntityKind.EVENT, "PROGRAM_NAME", ["summer"],
    )
    assert name_filter == AnyName()
    assert targets == (ValuesMap.of("PROGRAM_NAME", "summer"),)
