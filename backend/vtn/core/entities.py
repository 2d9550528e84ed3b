"""Entity Model: Program, Event, Report, Ven, Resource and their create/update lifecycle.

Invariants:
    - id and created are immutable after insertion
    - created == modified at creation; modified is refreshed by every update, never by reads
    - Every other field, relationship fields included, is replaceable on update
    - Entities are immutable values; lifecycle functions return new instances
    - to_json() output re-validates through entity_validator unchanged

Design Decisions:
    - id/created/modified on the entity, everything caller-owned in a *Content value
      (update replaces the whole Content in one step)
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import ClassVar, Generic, TypeVar

from vtn.core.domain_types import EntityKind
from vtn.core.temporal import (
    Interval, IntervalPeriod, format_timestamp,
    interval_period_to_json, interval_to_json,
)
from vtn.core.values_map import TargetSet, target_set_to_json


# ─── Content values (caller-owned fields) ───────────────────────

@dataclass(frozen=True)
class ProgramContent:
    program_name: str
    program_long_name: str | None = None
    retailer_name: str | None = None
    retailer_long_name: str | None = None
    program_type: str | None = None
    country: str | None = None
    principal_subdivision: str | None = None
    interval_period: IntervalPeriod | None = None
    program_descriptions: tuple[str, ...] | None = None
    binding_events: bool = False
    local_price: bool = False
    payload_descriptors: tuple[dict, ...] | None = None
    targets: TargetSet | None = None
    business_id: str | None = None


@dataclass(frozen=True)
class EventContent:
    program_id: str
    intervals: tuple[Interval, ...] = ()
    event_name: str | None = None
    priority: int | None = None
    targets: TargetSet | None = None
    report_descriptors: tuple[dict, ...] | None = None
    payload_descriptors: tuple[dict, ...] | None = None
    interval_period: IntervalPeriod | None = None


@dataclass(frozen=True)
class ReportResource:
    """Report data for one resource. AGGREGATED_REPORT names an aggregate."""
    resource_name: str
    intervals: tuple[Interval, ...] = ()
    interval_period: IntervalPeriod | None = None


@dataclass(frozen=True)
class ReportContent:
    program_id: str
    event_id: str
    client_name: str
    resources: tuple[ReportResource, ...] = ()
    report_name: str | None = None
    payload_descriptors: tuple[dict, ...] | None = None


@dataclass(frozen=True)
class VenContent:
    ven_name: str
    attributes: TargetSet | None = None
    targets: TargetSet | None = None


@dataclass(frozen=True)
class ResourceContent:
    resource_name: str
    ven_id: str
    attributes: TargetSet | None = None
    targets: TargetSet | None = None


C = TypeVar("C")


# ─── Entities ────────────────────────────────────────────────────

@dataclass(frozen=True)
class Entity(Generic[C]):
    """Server-provisioned identity and timestamps around caller-owned content."""
    id: str
    created: datetime
    modified: datetime
    content: C

    kind: ClassVar[EntityKind]
    name_field: ClassVar[str]

    @property
    def name(self) -> str | None:
        return getattr(self.content, self.name_field)

    @property
    def targets(self) -> TargetSet | None:
        return getattr(self.content, "targets", None)

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "createdDateTime": format_timestamp(self.created),
            "modificationDateTime": format_timestamp(self.modified),
            "objectType": self.kind.name,
            **_content_to_json(self.content),
        }


@dataclass(frozen=True)
class Program(Entity[ProgramContent]):
    kind: ClassVar[EntityKind] = EntityKind.PROGRAM
    name_field: ClassVar[str] = "program_name"


@dataclass(frozen=True)
class Event(Entity[EventContent]):
    kind: ClassVar[EntityKind] = EntityKind.EVENT
    name_field: ClassVar[str] = "event_name"

    def interval_windows(self) -> list[tuple[Interval, IntervalPeriod | None]]:
        """Each interval with the window it effectively covers."""
        parent = self.content.interval_period
        return [(i, i.effective_period(parent)) for i in self.content.intervals]


@dataclass(frozen=True)
class Report(Entity[ReportContent]):
    kind: ClassVar[EntityKind] = EntityKind.REPORT
    name_field: ClassVar[str] = "report_name"


@dataclass(frozen=True)
class Ven(Entity[VenContent]):
    kind: ClassVar[EntityKind] = EntityKind.VEN
    name_field: ClassVar[str] = "ven_name"


@dataclass(frozen=True)
class Resource(Entity[ResourceContent]):
    kind: ClassVar[EntityKind] = EntityKind.RESOURCE
    name_field: ClassVar[str] = "resource_name"


ENTITY_CLASSES: dict[EntityKind, type[Entity]] = {
    cls.kind: cls for cls in (Program, Event, Report, Ven, Resource)
}


# ─── Lifecycle ───────────────────────────────────────────────────

def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def create_entity(
    kind: EntityKind, content, now: datetime | None = None,
    entity_id: str | None = None,
) -> Entity:
    """New entity with server-assigned id; created == modified."""
    now = now or utc_now()
    cls = ENTITY_CLASSES[kind]
    return cls(
        id=entity_id or str(uuid.uuid4()),
        created=now, modified=now, content=content,
    )


def update_entity(entity: Entity, content, now: datetime | None = None) -> Entity:
    """Replace all caller-owned fields and refresh modified; id/created kept."""
    now = now or utc_now()
    # modified never moves backwards, even with a coarse clock
    return replace(entity, content=content, modified=max(now, entity.modified))


# ─── JSON ────────────────────────────────────────────────────────

def _drop_none(fields: dict) -> dict:
    return {k: v for k, v in fields.items() if v is not None}


def _intervals_to_json(intervals: tuple[Interval, ...]) -> list[dict]:
    return [interval_to_json(i) for i in intervals]


def _list_or_none(items) -> list | None:
    return None if items is None else list(items)


def _content_to_json(content) -> dict:
    if isinstance(content, ProgramContent):
        return _drop_none({
            "programName": content.program_name,
            "programLongName": content.program_long_name,
            "retailerName": content.retailer_name,
            "retailerLongName": content.retailer_long_name,
            "programType": content.program_type,
            "country": content.country,
            "principalSubdivision": content.principal_subdivision,
            "intervalPeriod": interval_period_to_json(content.interval_period),
            "programDescriptions": (
                None if content.program_descriptions is None
                else [{"URL": url} for url in content.program_descriptions]
            ),
            "bindingEvents": content.binding_events,
            "localPrice": content.local_price,
            "payloadDescriptors": _list_or_none(content.payload_descriptors),
            "targets": target_set_to_json(content.targets),
            "businessId": content.business_id,
        })
    if isinstance(content, EventContent):
        return _drop_none({
            "programID": content.program_id,
            "eventName": content.event_name,
            "priority": content.priority,
            "targets": target_set_to_json(content.targets),
            "reportDescriptors": _list_or_none(content.report_descriptors),
            "payloadDescriptors": _list_or_none(content.payload_descriptors),
            "intervalPeriod": interval_period_to_json(content.interval_period),
            "intervals": _intervals_to_json(content.intervals),
        })
    if isinstance(content, ReportContent):
        return _drop_none({
            "programID": content.program_id,
            "eventID": content.event_id,
            "clientName": content.client_name,
            "reportName": content.report_name,
            "payloadDescriptors": _list_or_none(content.payload_descriptors),
            "resources": [
                _drop_none({
                    "resourceName": r.resource_name,
                    "intervalPeriod": interval_period_to_json(r.interval_period),
                    "intervals": _intervals_to_json(r.intervals),
                })
                for r in content.resources
            ],
        })
    if isinstance(content, VenContent):
        return _drop_none({
            "venName": content.ven_name,
            "attributes": target_set_to_json(content.attributes),
            "targets": target_set_to_json(content.targets),
        })
    if isinstance(content, ResourceContent):
        return _drop_none({
            "resourceName": content.resource_name,
            "venID": content.ven_id,
            "attributes": target_set_to_json(content.attributes),
            "targets": target_set_to_json(content.targets),
        })
    raise TypeError(f"unknown entity content: {type(content).__name__}")
