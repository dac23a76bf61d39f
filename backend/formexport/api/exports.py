"""
Export API endpoints for downloading form submissions.

Direct exports return the file in the response. Exports with reservation
return a reservation immediately; poll it until ready, then download.
"""
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import Response

from formexport.api.deps import get_current_user, get_export_service
from formexport.schemas.export import ExportFieldsRequest, FormFieldsResponse, ReservationResponse
from formexport.services.export_service import ExportResult, ExportService

router = APIRouter()


def _download(result: ExportResult) -> Response:
    return Response(content=result.data, media_type=result.content_type, headers=result.headers)


@router.get("/forms/{form_id}/export")
def export_submissions(
    form_id: str,
    type: Optional[str] = Query(None, description="Export type (submissions)"),
    format: Optional[str] = Query(None, description="csv or json"),
    template: Optional[str] = Query(
        None, description="flattenedWithBlankOut, flattenedWithFilled or unflattened"
    ),
    version: Optional[int] = Query(None, description="Only submissions of this form version"),
    columns: Optional[str] = Query(None, description="Comma-separated field paths to include"),
    preference: Optional[str] = Query(None, description='JSON date range, e.g. {"minDate": ...}'),
    deleted: Optional[bool] = Query(None, description="Export soft-deleted submissions"),
    drafts: Optional[bool] = Query(None, description="Export draft submissions"),
    service: ExportService = Depends(get_export_service),
):
    """
    Export a form's submissions as CSV or JSON.

    Returns the file as an attachment named <form>_submissions.<format>.
    """
    result = service.export(
        form_id,
        {
            "type": type,
            "format": format,
            "template": template,
            "version": version,
            "columns": columns,
            "preference": preference,
            "deleted": deleted,
            "drafts": drafts,
        },
    )
    return _download(result)


@router.post("/forms/{form_id}/export/fields")
def export_submissions_with_fields(
    form_id: str,
    request: ExportFieldsRequest,
    service: ExportService = Depends(get_export_service),
):
    """Export a form's submissions with options (including columns) in the body."""
    result = service.export(form_id, request.model_dump())
    return _download(result)


@router.get("/forms/{form_id}/csvexport/fields", response_model=FormFieldsResponse)
def read_fields_for_csv_export(
    form_id: str,
    version: Optional[int] = Query(None, description="Form version (latest if omitted)"),
    service: ExportService = Depends(get_export_service),
):
    """Field paths a CSV export of this form version would contain."""
    resolved_version, fields = service.read_fields_for_csv_export(form_id, version)
    return FormFieldsResponse(form_id=form_id, version=resolved_version, fields=fields)


@router.post(
    "/forms/{form_id}/export/reservation",
    response_model=ReservationResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
def export_with_reservation(
    form_id: str,
    request: Optional[ExportFieldsRequest] = Body(None),
    service: ExportService = Depends(get_export_service),
    current_user: str = Depends(get_current_user),
):
    """
    Start a background export and return its reservation.

    Requests for the same form version share one reservation.
    """
    params = request.model_dump() if request else {}
    return service.export_with_reservation(form_id, current_user, params)


@router.get("/reservations", response_model=List[ReservationResponse])
def list_reservations(
    file_id: Optional[str] = Query(None, description="Filter by stored file"),
    ready: Optional[bool] = Query(None, description="Filter by readiness"),
    created_by: Optional[str] = Query(None, description="Filter by owner"),
    service: ExportService = Depends(get_export_service),
):
    """List reservations, oldest first."""
    return service.list_reservations(file_id=file_id, ready=ready, created_by=created_by)


@router.get("/reservations/{reservation_id}", response_model=ReservationResponse)
def read_reservation(
    reservation_id: str,
    service: ExportService = Depends(get_export_service),
):
    """Get a reservation."""
    return service.read_reservation(reservation_id)


@router.get("/reservations/{reservation_id}/file")
def download_reservation(
    reservation_id: str,
    service: ExportService = Depends(get_export_service),
):
    """Download the artifact of a ready reservation (409 while not ready)."""
    return _download(service.download_reservation(reservation_id))


@router.delete("/reservations/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
def release_reservation(
    reservation_id: str,
    service: ExportService = Depends(get_export_service),
):
    """Release a reservation with its stored file and export jobs."""
    service.release_reservation(reservation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
