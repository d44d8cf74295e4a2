"""HTTP controller layer for the booked-applicants report."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from bto.controllers.dependencies import get_report_service, require_role
from bto.domain.models import User, UserRole
from bto.services.report_service import ReportService
from bto.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


class ReportRowResponse(BaseModel):
    applicant_name: str
    applicant_nric: str
    age: int = Field(gt=0)
    marital_status: str
    flat_type: str
    project_id: int
    project_name: str
    neighborhood: str


class BookingReportResponse(BaseModel):
    title: str
    criteria: dict[str, str]
    rows: list[ReportRowResponse]


@router.get("/bookings", response_model=BookingReportResponse)
async def booking_report(
    marital_status: Optional[str] = Query(default=None),
    flat_type: Optional[str] = Query(default=None),
    project_name: Optional[str] = Query(default=None),
    project_id: Optional[str] = Query(default=None),
    neighborhood: Optional[str] = Query(default=None),
    min_age: Optional[str] = Query(default=None),
    max_age: Optional[str] = Query(default=None),
    fmt: str = Query(default="json", alias="format", pattern="^(json|csv)$"),
    _: User = Depends(require_role(UserRole.MANAGER)),
    service: ReportService = Depends(get_report_service),
):
    """Booked applicants, optionally filtered; `format=csv` returns the table as CSV."""
    criteria = {
        "maritalStatus": marital_status,
        "flatType": flat_type,
        "projectName": project_name,
        "projectId": project_id,
        "neighborhood": neighborhood,
        "minAge": min_age,
        "maxAge": max_age,
    }
    try:
        report = service.booking_report({key: value for key, value in criteria.items() if value})
        csv_text = report.to_frame().to_csv(index=False) if fmt == "csv" else None
    except Exception as exc:  # pragma: no cover
        logger.exception("Unexpected report failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build booking report",
        ) from exc

    if csv_text is not None:
        return PlainTextResponse(csv_text, media_type="text/csv")
    return BookingReportResponse(
        title=report.title,
        criteria=report.criteria,
        rows=[
            ReportRowResponse(
                applicant_name=row.applicant_name,
                applicant_nric=row.applicant_nric,
                age=row.age,
                marital_status=row.marital_status.value,
                flat_type=row.flat_type.display_name,
                project_id=row.project_id,
                project_name=row.project_name,
                neighborhood=row.neighborhood,
            )
            for row in report.rows
        ],
    )
