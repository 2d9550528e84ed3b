"""Program Routes: CRUD on /programs and the VEN association of one Program.

Invariants:
    - Handlers only translate HTTP <-> service calls; scope decisions live in services
    - Out-of-scope and nonexistent ids produce the same 404 body
"""

from fastapi import APIRouter, Body, Depends, status

from vtn.api.deps import get_principal, get_program_service
from vtn.core.principal import Principal
from vtn.schemas.query import ListParams, ProgramVens, list_params
from vtn.services.program_service import ProgramService

router = APIRouter(prefix="/programs", tags=["programs"])


@router.get("")
async def list_programs(
    params: ListParams = Depends(list_params),
    principal: Principal = Depends(get_principal),
    service: ProgramService = Depends(get_program_service),
):
    programs = await service.list_visible(
        principal, params.target_type, params.target_values,
        params.skip, params.limit,
    )
    return [p.to_json() for p in programs]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_program(
    body: dict = Body(...),
    principal: Principal = Depends(get_principal),
    service: ProgramService = Depends(get_program_service),
):
    return (await service.create(principal, body)).to_json()


@router.get("/{program_id}")
async def get_program(
    program_id: str,
    principal: Principal = Depends(get_principal),
    service: ProgramService = Depends(get_program_service),
):
    return (await service.get(principal, program_id)).to_json()


@router.put("/{program_id}")
async def update_program(
    program_id: str,
    body: dict = Body(...),
    principal: Principal = Depends(get_principal),
    service: ProgramService = Depends(get_program_service),
):
    return (await service.update(principal, program_id, body)).to_json()


@router.delete("/{program_id}")
async def delete_program(
    program_id: str,
    principal: Principal = Depends(get_principal),
    service: ProgramService = Depends(get_program_service),
):
    """Delete one Program; fails with 409 while Events or Reports reference it."""
    return (await service.delete(principal, program_id)).to_json()


@router.get("/{program_id}/vens")
async def get_program_vens(
    program_id: str,
    principal: Principal = Depends(get_principal),
    service: ProgramService = Depends(get_program_service),
):
    ven_ids = await service.vens(principal, program_id)
    return {"programID": program_id, "venIDs": sorted(ven_ids)}


@router.put("/{program_id}/vens")
async def set_program_vens(
    program_id: str,
    body: ProgramVens,
    principal: Principal = Depends(get_principal),
    service: ProgramService = Depends(get_program_service),
):
    """Replace the set of VENs the Program is targeted at."""
    ven_ids = await service.set_vens(principal, program_id, body.ven_ids)
    return {"programID": program_id, "venIDs": sorted(ven_ids)}
