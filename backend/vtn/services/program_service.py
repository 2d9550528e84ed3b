"""Program Service: Program CRUD plus the Program-VEN association.

Invariants:
    - A business-scoped writer can only assign one of its own businessIds
    - set_vens replaces the whole association set; every venID must exist
    - Only Program writers may read or change associations; VENs never see each other
"""

import logging
from dataclasses import replace

from vtn.core.domain_types import EntityKind, Operation, check_identifier
from vtn.core.access_filter import single_record
from vtn.core.entities import ProgramContent
from vtn.core.entity_validator import validate_program
from vtn.core.errors import ErrorContext, ValidationError
from vtn.core.principal import Principal
from vtn.core.scope import Scope, owning_business
from vtn.services.entity_service import EntityService

logger = logging.getLogger(__name__)


class ProgramService(EntityService):
    kind = EntityKind.PROGRAM

    def validate(self, body: object, filters: dict[str, str]) -> ProgramContent:
        return validate_program(body)

    async def check_references(
        self, scope: Scope, content: ProgramContent,
    ) -> ProgramContent:
        return replace(
            content, business_id=owning_business(scope, content.business_id),
        )

    async def set_vens(
        self, principal: Principal, program_id: str, ven_ids: list[str],
    ) -> frozenset[str]:
        """Replace the VEN association set of one Program."""
        scope = self._scope(principal, Operation.UPDATE)
        program_id = check_identifier(program_id, "id")
        if not isinstance(ven_ids, list):
            raise ValidationError("venIDs must be a list", "venIDs")
        wanted = frozenset(check_identifier(v, "venIDs") for v in ven_ids)
        await self.repo.get_one(single_record(scope, program_id))

        vens = self.storage.repository(EntityKind.VEN)
        for ven_id in sorted(wanted):
            if not await vens.exists(ven_id):
                raise ValidationError(
                    f"venID {ven_id} does not reference an existing VEN",
                    "venIDs",
                    ErrorContext(entity_kind=self.kind.value, entity_id=program_id),
                )
        associated = await self.storage.set_program_vens(program_id, wanted)
        logger.info(
            f"Program VEN associations replaced ({len(associated)} VEN(s))",
            extra={
                "entity_kind": self.kind.value,
                "entity_id": program_id,
                "scope": scope.describe(),
            },
        )
        return associated

    async def vens(self, principal: Principal, program_id: str) -> frozenset[str]:
        """Current VEN association set of one Program; visible to Program writers only."""
        scope = self._scope(principal, Operation.UPDATE)
        program_id = check_identifier(program_id, "id")
        await self.repo.get_one(single_record(scope, program_id))
        return await self.storage.program_vens(program_id)
