"""VEN Routes: CRUD on /vens."""

from fastapi import APIRouter, Body, Depends, status

from vtn.api.deps import get_principal, get_ven_service
from vtn.core.principal import Principal
from vtn.schemas.query import ListParams, list_params
from vtn.services.ven_service import VenService

router = APIRouter(prefix="/vens", tags=["vens"])


@router.get("")
async def list_vens(
    params: ListParams = Depends(list_params),
    principal: Principal = Depends(get_principal),
    service: VenService = Depends(get_ven_service),
):
    vens = await service.list_visible(
        principal, params.target_type, params.target_values,
        params.skip, params.limit,
    )
    return [v.to_json() for v in vens]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_ven(
    body: dict = Body(...),
    principal: Principal = Depends(get_principal),
    service: VenService = Depends(get_ven_service),
):
    return (await service.create(principal, body)).to_json()


@router.get("/{ven_id}")
async def get_ven(
    ven_id: str,
    principal: Principal = Depends(get_principal),
    service: VenService = Depends(get_ven_service),
):
    return (await service.get(principal, ven_id)).to_json()


@router.put("/{ven_id}")
async def update_ven(
    ven_id: str,
    body: dict = Body(...),
    principal: Principal = Depends(get_principal),
    service: VenService = Depends(get_ven_service),
):
    return (await service.update(principal, ven_id, body)).to_json()


@router.delete("/{ven_id}")
async def delete_ven(
    ven_id: str,
    principal: Principal = Depends(get_principal),
    service: VenService = Depends(get_ven_service),
):
    """Delete one VEN; fails with 409 while it still owns Resources."""
    return (await service.delete(principal, ven_id)).to_json()
