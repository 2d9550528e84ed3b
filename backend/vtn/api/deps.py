"""API Dependencies: caller identity and per-request services.

Invariants:
    - The Principal comes only from the X-VTN-Roles header set by the trusted gateway
    - Missing header -> UnauthenticatedError (401); unknown role -> ValidationError (400)
    - Services are built per request around the process-wide Storage
"""

from typing import Callable, TypeVar

from fastapi import Depends, Header

from vtn.config import get_settings
from vtn.core.errors import UnauthenticatedError
from vtn.core.principal import Principal
from vtn.core.repository_protocols import Storage
from vtn.infrastructure.storage import get_storage
from vtn.services.entity_service import EntityService
from vtn.services.event_service import EventService
from vtn.services.program_service import ProgramService
from vtn.services.report_service import ReportService
from vtn.services.resource_service import ResourceService
from vtn.services.ven_service import VenService

ROLES_HEADER = "X-VTN-Roles"

S = TypeVar("S", bound=EntityService)


def get_principal(
    roles: str | None = Header(None, alias=ROLES_HEADER),
) -> Principal:
    if roles is None:
        raise UnauthenticatedError(f"Missing {ROLES_HEADER} header")
    return Principal.from_roles(roles.split(","))


def _service(cls: type[S]) -> Callable[..., S]:
    def provide(storage: Storage = Depends(get_storage)) -> S:
        settings = get_settings()
        return cls(storage, settings.page_limit_default, settings.page_limit_max)
    return provide


get_program_service = _service(ProgramService)
get_event_service = _service(EventService)
get_report_service = _service(ReportService)
get_ven_service = _service(VenService)
get_resource_service = _service(ResourceService)
