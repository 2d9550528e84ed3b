"""Resource Service: CRUD on the Resources of one VEN.

Invariants:
    - Every call is addressed through the owning VEN (ven_id filter)
    - A Resource cannot be moved to another VEN: venID comes from the path
"""

from vtn.core.domain_types import EntityKind
from vtn.core.entities import ResourceContent
from vtn.core.entity_validator import validate_resource
from vtn.core.scope import Scope
from vtn.services.entity_service import EntityService


class ResourceService(EntityService):
    kind = EntityKind.RESOURCE
    filter_fields = {"ven_id": "id"}

    def validate(self, body: object, filters: dict[str, str]) -> ResourceContent:
        return validate_resource(body, filters["ven_id"])

    async def check_references(
        self, scope: Scope, content: ResourceContent,
    ) -> ResourceContent:
        await self._reference(EntityKind.VEN, scope, content.ven_id, "venID")
        return content
