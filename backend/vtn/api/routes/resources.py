"""Resource Routes: CRUD on /vens/{venId}/resources.

Invariants:
    - Every handler passes the path venId as the ven_id filter, so a Resource is
      only reachable through its own VEN
"""

from fastapi import APIRouter, Body, Depends, status

from vtn.api.deps import get_principal, get_resource_service
from vtn.core.principal import Principal
from vtn.schemas.query import ListParams, list_params
from vtn.services.resource_service import ResourceService

router = APIRouter(prefix="/vens/{ven_id}/resources", tags=["resources"])


@router.get("")
async def list_resources(
    ven_id: str,
    params: ListParams = Depends(list_params),
    principal: Principal = Depends(get_principal),
    service: ResourceService = Depends(get_resource_service),
):
    resources = await service.list_visible(
        principal, params.target_type, params.target_values,
        params.skip, params.limit, ven_id=ven_id,
    )
    return [r.to_json() for r in resources]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_resource(
    ven_id: str,
    body: dict = Body(...),
    principal: Principal = Depends(get_principal),
    service: ResourceService = Depends(get_resource_service),
):
    return (await service.create(principal, body, ven_id=ven_id)).to_json()


@router.get("/{resource_id}")
async def get_resource(
    ven_id: str,
    resource_id: str,
    principal: Principal = Depends(get_principal),
    service: ResourceService = Depends(get_resource_service),
):
    return (await service.get(principal, resource_id, ven_id=ven_id)).to_json()


@router.put("/{resource_id}")
async def update_resource(
    ven_id: str,
    resource_id: str,
    body: dict = Body(...),
    principal: Principal = Depends(get_principal),
    service: ResourceService = Depends(get_resource_service),
):
    resource = await service.update(principal, resource_id, body, ven_id=ven_id)
    return resource.to_json()


@router.delete("/{resource_id}")
async def delete_resource(
    ven_id: str,
    resource_id: str,
    principal: Principal = Depends(get_principal),
    service: ResourceService = Depends(get_resource_service),
):
    return (await service.delete(principal, resource_id, ven_id=ven_id)).to_json()
