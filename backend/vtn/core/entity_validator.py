"""Entity Validator: decodes JSON request bodies into validated *Content values.

Invariants:
    - Pure: no IO, no storage lookups (reference existence is checked by services)
    - Missing required fields and out-of-bounds values raise ValidationError
    - Malformed duration/timestamp text raises ParseError
    - Server-provisioned keys (id, createdDateTime, modificationDateTime, objectType) are ignored
    - A failed validation has no partial effect: nothing is returned
"""

from vtn.core.domain_types import (
    EntityKind, check_identifier, check_name,
)
from vtn.core.entities import (
    EventContent, ProgramContent, ReportContent, ReportResource,
    ResourceContent, VenContent,
)
from vtn.core.errors import ValidationError
from vtn.core.temporal import interval_period_from_json, intervals_from_json
from vtn.core.values_map import target_set_from_json


def _require_object(raw: object, kind: EntityKind) -> dict:
    if not isinstance(raw, dict):
        raise ValidationError(f"{kind.label} body must be a JSON object")
    return raw


def _optional_str(raw: dict, key: str) -> str | None:
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{key} must be a string", key)
    return value


def _optional_name(raw: dict, key: str) -> str | None:
    value = raw.get(key)
    return None if value is None else check_name(value, key)


def _required_name(raw: dict, key: str) -> str:
    if raw.get(key) is None:
        raise ValidationError(f"{key} is required", key)
    return check_name(raw[key], key)


def _flag(raw: dict, key: str) -> bool:
    value = raw.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be a boolean", key)
    return value


def _object_list(raw: dict, key: str) -> tuple[dict, ...] | None:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ValidationError(f"{key} must be a list of objects", key)
    return tuple(value)


def _reference(raw: dict, key: str) -> str:
    if raw.get(key) is None:
        raise ValidationError(f"{key} is required", key)
    return check_identifier(raw[key], key)


def _program_descriptions(raw: dict) -> tuple[str, ...] | None:
    descriptions = _object_list(raw, "programDescriptions")
    if descriptions is None:
        return None
    urls = []
    for i, item in enumerate(descriptions):
        url = item.get("URL")
        if not isinstance(url, str):
            raise ValidationError(
                "programDescriptions entries require a URL string",
                f"programDescriptions[{i}].URL",
            )
        urls.append(url)
    return tuple(urls)


def _priority(raw: dict) -> int | None:
    value = raw.get("priority")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError("priority must be a non-negative integer", "priority")
    return value


# ─── Per-kind validators ─────────────────────────────────────────

def validate_program(raw: object) -> ProgramContent:
    body = _require_object(raw, EntityKind.PROGRAM)
    business_id = body.get("businessId")
    return ProgramContent(
        program_name=_required_name(body, "programName"),
        program_long_name=_optional_str(body, "programLongName"),
        retailer_name=_optional_str(body, "retailerName"),
        retailer_long_name=_optional_str(body, "retailerLongName"),
        program_type=_optional_str(body, "programType"),
        country=_optional_str(body, "country"),
        principal_subdivision=_optional_str(body, "principalSubdivision"),
        interval_period=interval_period_from_json(body.get("intervalPeriod")),
        program_descriptions=_program_descriptions(body),
        binding_events=_flag(body, "bindingEvents"),
        local_price=_flag(body, "localPrice"),
        payload_descriptors=_object_list(body, "payloadDescriptors"),
        targets=target_set_from_json(body.get("targets")),
        business_id=(
            None if business_id is None
            else check_identifier(business_id, "businessId")
        ),
    )


def validate_event(raw: object) -> EventContent:
    body = _require_object(raw, EntityKind.EVENT)
    return EventContent(
        program_id=_reference(body, "programID"),
        event_name=_optional_name(body, "eventName"),
        priority=_priority(body),
        targets=target_set_from_json(body.get("targets")),
        report_descriptors=_object_list(body, "reportDescriptors"),
        payload_descriptors=_object_list(body, "payloadDescriptors"),
        interval_period=interval_period_from_json(body.get("intervalPeriod")),
        intervals=intervals_from_json(body.get("intervals")),
    )


def _report_resource(raw: object, field: str) -> ReportResource:
    if not isinstance(raw, dict):
        raise ValidationError(f"{field} must be an object", field)
    return ReportResource(
        resource_name=_required_name(raw, "resourceName"),
        interval_period=interval_period_from_json(
            raw.get("intervalPeriod"), f"{field}.intervalPeriod",
        ),
        intervals=intervals_from_json(raw.get("intervals"), f"{field}.intervals"),
    )


def validate_report(raw: object) -> ReportContent:
    body = _require_object(raw, EntityKind.REPORT)
    resources = body.get("resources")
    if not isinstance(resources, list):
        raise ValidationError("resources is required and must be a list", "resources")
    return ReportContent(
        program_id=_reference(body, "programID"),
        event_id=_reference(body, "eventID"),
        client_name=_required_name(body, "clientName"),
        report_name=_optional_name(body, "reportName"),
        payload_descriptors=_object_list(body, "payloadDescriptors"),
        resources=tuple(
            _report_resource(r, f"resources[{i}]") for i, r in enumerate(resources)
        ),
    )


def validate_ven(raw: object) -> VenContent:
    body = _require_object(raw, EntityKind.VEN)
    return VenContent(
        ven_name=_required_name(body, "venName"),
        attributes=target_set_from_json(body.get("attributes"), "attributes"),
        targets=target_set_from_json(body.get("targets")),
    )


def validate_resource(raw: object, ven_id: str) -> ResourceContent:
    """The owning VEN comes from the request path, not the body."""
    body = _require_object(raw, EntityKind.RESOURCE)
    return ResourceContent(
        resource_name=_required_name(body, "resourceName"),
        ven_id=check_identifier(ven_id, "venID"),
        attributes=target_set_from_json(body.get("attributes"), "attributes"),
        targets=target_set_from_json(body.get("targets")),
    )
