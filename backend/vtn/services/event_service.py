"""Event Service: Event CRUD; every Event hangs off a Program the writer can reach."""

from vtn.core.domain_types import EntityKind
from vtn.core.entities import EventContent
from vtn.core.entity_validator import validate_event
from vtn.core.scope import Scope
from vtn.services.entity_service import EntityService


class EventService(EntityService):
    kind = EntityKind.EVENT
    filter_fields = {"program_id": "id"}

    def validate(self, body: object, filters: dict[str, str]) -> EventContent:
        return validate_event(body)

    async def check_references(
        self, scope: Scope, content: EventContent,
    ) -> EventContent:
        # re-parenting on update goes through the same check
        await self._reference(
            EntityKind.PROGRAM, scope, content.program_id, "programID",
        )
        return content
