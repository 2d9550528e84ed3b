"""Event Routes: CRUD on /events, optionally filtered by programID."""

from fastapi import APIRouter, Body, Depends, Query, status

from vtn.api.deps import get_event_service, get_principal
from vtn.core.principal import Principal
from vtn.schemas.query import ListParams, list_params
from vtn.services.event_service import EventService

router = APIRouter(prefix="/events", tags=["events"])


@router.get("")
async def list_events(
    program_id: str | None = Query(None, alias="programID"),
    params: ListParams = Depends(list_params),
    principal: Principal = Depends(get_principal),
    service: EventService = Depends(get_event_service),
):
    events = await service.list_visible(
        principal, params.target_type, params.target_values,
        params.skip, params.limit, program_id=program_id,
    )
    return [e.to_json() for e in events]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(
    body: dict = Body(...),
    principal: Principal = Depends(get_principal),
    service: EventService = Depends(get_event_service),
):
    return (await service.create(principal, body)).to_json()


@router.get("/{event_id}")
async def get_event(
    event_id: str,
    principal: Principal = Depends(get_principal),
    service: EventService = Depends(get_event_service),
):
    return (await service.get(principal, event_id)).to_json()


@router.put("/{event_id}")
async def update_event(
    event_id: str,
    body: dict = Body(...),
    principal: Principal = Depends(get_principal),
    service: EventService = Depends(get_event_service),
):
    return (await service.update(principal, event_id, body)).to_json()


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    principal: Principal = Depends(get_principal),
    service: EventService = Depends(get_event_service),
):
    return (await service.delete(principal, event_id)).to_json()
