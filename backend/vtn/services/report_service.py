"""Report Service: Report CRUD.

Invariants:
    - programID and eventID must both be reachable under the writer's scope
    - The referenced Event must belong to the referenced Program
    - VENs may create and update reports on programs visible to them; only
      business users delete them
"""

from vtn.core.domain_types import EntityKind
from vtn.core.entities import ReportContent
from vtn.core.entity_validator import validate_report
from vtn.core.errors import ErrorContext, ValidationError
from vtn.core.scope import Scope
from vtn.services.entity_service import EntityService


class ReportService(EntityService):
    kind = EntityKind.REPORT
    filter_fields = {"program_id": "id", "event_id": "id", "client_name": "name"}

    def validate(self, body: object, filters: dict[str, str]) -> ReportContent:
        return validate_report(body)

    async def check_references(
        self, scope: Scope, content: ReportContent,
    ) -> ReportContent:
        await self._reference(
            EntityKind.PROGRAM, scope, content.program_id, "programID",
        )
        event = await self._reference(
            EntityKind.EVENT, scope, content.event_id, "eventID",
        )
        if event.content.program_id != content.program_id:
            raise ValidationError(
                f"eventID {content.event_id} does not belong to "
                f"programID {content.program_id}",
                "eventID",
                ErrorContext(entity_kind=self.kind.value),
            )
        return content
