"""Report Routes: CRUD on /reports, filtered by programID, eventID or clientName."""

from fastapi import APIRouter, Body, Depends, Query, status

from vtn.api.deps import get_principal, get_report_service
from vtn.core.principal import Principal
from vtn.schemas.query import ListParams, list_params
from vtn.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("")
async def list_reports(
    program_id: str | None = Query(None, alias="programID"),
    event_id: str | None = Query(None, alias="eventID"),
    client_name: str | None = Query(None, alias="clientName"),
    params: ListParams = Depends(list_params),
    principal: Principal = Depends(get_principal),
    service: ReportService = Depends(get_report_service),
):
    reports = await service.list_visible(
        principal, params.target_type, params.target_values,
        params.skip, params.limit,
        program_id=program_id, event_id=event_id, client_name=client_name,
    )
    return [r.to_json() for r in reports]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_report(
    body: dict = Body(...),
    principal: Principal = Depends(get_principal),
    service: ReportService = Depends(get_report_service),
):
    return (await service.create(principal, body)).to_json()


@router.get("/{report_id}")
async def get_report(
    report_id: str,
    principal: Principal = Depends(get_principal),
    service: ReportService = Depends(get_report_service),
):
    return (await service.get(principal, report_id)).to_json()


@router.put("/{report_id}")
async def update_report(
    report_id: str,
    body: dict = Body(...),
    principal: Principal = Depends(get_principal),
    service: ReportService = Depends(get_report_service),
):
    return (await service.update(principal, report_id, body)).to_json()


@router.delete("/{report_id}")
async def delete_report(
    report_id: str,
    principal: Principal = Depends(get_principal),
    service: ReportService = Depends(get_report_service),
):
    return (await service.delete(principal, report_id)).to_json()
