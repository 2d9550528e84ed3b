"""Entity Validator & Entity Model: body decoding and the create/update lifecycle.

Tests:
    - Required fields and 1..128 bounds raise ValidationError with the field name
    - Malformed durations inside intervalPeriod raise ParseError
    - Server-provisioned keys in the body are ignored
    - to_json() output validates back to the same content
    - create_entity: created == modified; update_entity keeps id/created, refreshes modified
"""

from datetime import datetime, timedelta, timezone

import pytest

from vtn.core.domain_types import EntityKind
from vtn.core.entities import create_entity, update_entity
from vtn.core.entity_validator import (
    validate_event, validate_program, validate_report, validate_resource,
    validate_ven,
)
from vtn.core.errors import ParseError, ValidationError
from vtn.core.values_map import ValuesMap

T0 = datetime(2024, 5, 1, tzinfo=timezone.utc)

EVENT_BODY = {
    "programID": "program-1",
    "eventName": "peak-shave",
    "priority": 0,
    "targets": [{"type": "GROUP", "values": ["group-1"]}],
    "intervalPeriod": {"start": "2024-05-01T16:00:00Z", "duration": "PT2H"},
    "intervals": [
        {"id": 0, "payloads": [{"type": "PRICE", "values": [0.17]}]},
        {
            "id": 1,
            "intervalPeriod": {"start": "2024-05-01T17:00:00Z", "duration": "PT1H"},
            "payloads": [{"type": "PRICE", "values": [0.31]}],
        },
    ],
}


# ─── Program ─────────────────────────────────────────────────────

def test_program_minimal_body_defaults():
    content = validate_program({"programName": "summer-dr"})
    assert content.program_name == "summer-dr"
    assert content.binding_events is False
    assert content.local_price is False
    assert content.targets is None
    assert content.business_id is None


def test_program_requires_name():
    with pytest.raises(ValidationError) as exc:
        validate_program({"programLongName": "no short name"})
    assert exc.value.field == "programName"


def test_program_name_length_bound():
    with pytest.raises(ValidationError):
        validate_program({"programName": "x" * 129})


def test_program_ignores_server_keys():
    content = validate_program({
        "id": "forged", "createdDateTime": "whenever", "objectType": "PROGRAM",
        "programName": "p",
    })
    assert content.program_name == "p"


def test_program_descriptions_need_url():
    content = validate_program({
        "programName": "p", "programDescriptions": [{"URL": "https://example.com"}],
    })
    assert content.program_descriptions == ("https://example.com",)
    with pytest.raises(ValidationError):
        validate_program({"programName": "p", "programDescriptions": [{"url": 1}]})


def test_program_bad_duration_is_parse_error():
    with pytest.raises(ParseError):
        validate_program({
            "programName": "p",
            "intervalPeriod": {"start": "2024-05-01T00:00:00Z", "duration": "1 hour"},
        })


def test_program_rejects_null_business_identifier():
    with pytest.raises(ValidationError):
        validate_program({"programName": "p", "businessId": "null"})


# ─── Event ───────────────────────────────────────────────────────

def test_event_decodes_intervals_and_targets():
    content = validate_event(EVENT_BODY)
    assert content.program_id == "program-1"
    assert content.targets == (ValuesMap.of("GROUP", "group-1"),)
    assert [i.id for i in content.intervals] == [0, 1]


def test_event_intervals_required_but_may_be_empty():
    assert validate_event({"programID": "p1", "intervals": []}).intervals == ()
    with pytest.raises(ValidationError) as exc:
        validate_event({"programID": "p1"})
    assert exc.value.field == "intervals"


@pytest.mark.parametrize("priority", [-1, 1.5, True, "high"])
def test_event_priority_must_be_non_negative_integer(priority):
    with pytest.raises(ValidationError):
        validate_event({"programID": "p1", "intervals": [], "priority": priority})


def test_event_interval_id_fits_int32():
    body = {"programID": "p1", "intervals": [{"id": 2 ** 31, "payloads": []}]}
    with pytest.raises(ValidationError):
        validate_event(body)


def test_event_interval_windows_inherit():
    event = create_entity(EntityKind.EVENT, validate_event(EVENT_BODY), T0)
    (first, first_window), (second, second_window) = event.interval_windows()
    assert first_window == event.content.interval_period
    assert second_window == second.interval_period


# ─── Report / VEN / Resource ─────────────────────────────────────

def test_report_requires_resources_and_client_name():
    with pytest.raises(ValidationError):
        validate_report({"programID": "p1", "eventID": "e1", "clientName": "ven-a"})
    with pytest.raises(ValidationError):
        validate_report({"programID": "p1", "eventID": "e1", "resources": []})


def test_report_resource_intervals():
    content = validate_report({
        "programID": "p1", "eventID": "e1", "clientName": "ven-a",
        "resources": [{
            "resourceName": "AGGREGATED_REPORT",
            "intervals": [{"id": 0, "payloads": [{"type": "USAGE", "values": [3]}]}],
        }],
    })
    assert content.resources[0].resource_name == "AGGREGATED_REPORT"


def test_ven_and_resource():
    ven = validate_ven({
        "venName": "ven-a", "attributes": [{"type": "LOCATION", "values": ["x"]}],
    })
    assert ven.attributes == (ValuesMap.of("LOCATION", "x"),)
    resource = validate_resource({"resourceName": "meter-1", "venID": "ignored"}, "ven-1")
    assert resource.ven_id == "ven-1"
    with pytest.raises(ValidationError):
        validate_resource({"resourceName": "meter-1"}, "null")


# ─── Lifecycle & round trip ──────────────────────────────────────

def test_create_sets_equal_timestamps_and_uuid():
    program = create_entity(EntityKind.PROGRAM, validate_program({"programName": "p"}), T0)
    assert program.created == program.modified == T0
    assert len(program.id) == 36


def test_update_keeps_identity_and_refreshes_modified():
    program = create_entity(EntityKind.PROGRAM, validate_program({"programName": "p"}), T0)
    later = T0 + timedelta(minutes=5)
    updated = update_entity(program, validate_program({"programName": "q"}), later)
    assert (updated.id, updated.created) == (program.id, program.created)
    assert updated.modified == later
    assert updated.name == "q"


def test_update_never_moves_modified_backwards():
    program = create_entity(EntityKind.PROGRAM, validate_program({"programName": "p"}), T0)
    updated = update_entity(program, program.content, T0 - timedelta(seconds=1))
    assert updated.modified == T0


@pytest.mark.parametrize("kind,validate,body", [
    (EntityKind.EVENT, validate_event, EVENT_BODY),
    (EntityKind.PROGRAM, validate_program, {
        "programName": "p", "bindingEvents": True, "businessId": "biz-1",
        "intervalPeriod": {"start": "2024-05-01T00:00:00Z", "duration": "P3M"},
        "targets": [{"type": "SERVICE_AREA", "values": ["north"]}],
    }),
])
def test_to_json_validates_back_to_same_content(kind, validate, body):
    entity = create_entity(kind, validate(body), T0)
    doc = entity.to_json()
    assert doc["objectType"] == kind.name
    assert validate(doc) == entity.content
