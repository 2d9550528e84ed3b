"""VEN Service: VEN CRUD. Only admins and VEN managers register new VENs."""

from vtn.core.domain_types import EntityKind
from vtn.core.entities import VenContent
from vtn.core.entity_validator import validate_ven
from vtn.services.entity_service import EntityService


class VenService(EntityService):
    kind = EntityKind.VEN

    def validate(self, body: object, filters: dict[str, str]) -> VenContent:
        return validate_ven(body)
