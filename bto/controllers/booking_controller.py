"""HTTP controller layer for officer-assisted bookings and receipts."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from bto.controllers.dependencies import get_booking_service, get_current_user, require_role
from bto.controllers.errors import unwrap
from bto.controllers.schemas import ApplicationResponse, BookingResponse, FlatTypeRequest
from bto.domain.models import FlatType, User, UserRole
from bto.services.booking_service import BookingWorkflowService


router = APIRouter(prefix="/bookings", tags=["bookings"])

require_officer = require_role(UserRole.OFFICER)


class CreateBookingRequest(FlatTypeRequest):
    application_id: int = Field(gt=0)


class ReceiptResponse(BaseModel):
    booking_id: int
    application_id: int
    applicant_name: str
    applicant_nric: str
    age: int
    marital_status: str
    flat_type: str
    project_id: int
    project_name: str
    neighborhood: str
    agent_name: str
    agent_nric: str
    booked_at: str
    text: str


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: CreateBookingRequest,
    user: User = Depends(require_officer),
    service: BookingWorkflowService = Depends(get_booking_service),
) -> BookingResponse:
    result = service.create_booking(payload.application_id, FlatType(payload.flat_type), user.nric)
    return BookingResponse.from_domain(unwrap(result))


@router.get("/pending/{applicant_nric}", response_model=ApplicationResponse)
async def application_for_booking(
    applicant_nric: str,
    _: User = Depends(require_officer),
    service: BookingWorkflowService = Depends(get_booking_service),
) -> ApplicationResponse:
    return ApplicationResponse.from_domain(
        unwrap(service.retrieve_application_for_booking(applicant_nric))
    )


@router.get("/me/receipt", response_model=ReceiptResponse)
async def my_receipt(
    user: User = Depends(get_current_user),
    service: BookingWorkflowService = Depends(get_booking_service),
) -> ReceiptResponse:
    receipt = unwrap(service.receipt_for_applicant(user.nric))
    return ReceiptResponse(**receipt.to_dict(), text=receipt.render())


@router.get("/{booking_id}/receipt", response_model=ReceiptResponse)
async def booking_receipt(
    booking_id: int,
    fmt: str = Query(default="json", alias="format", pattern="^(json|text)$"),
    _: User = Depends(require_role(UserRole.OFFICER, UserRole.MANAGER)),
    service: BookingWorkflowService = Depends(get_booking_service),
):
    receipt = unwrap(service.generate_receipt(booking_id))
    if fmt == "text":
        return PlainTextResponse(receipt.render())
    return ReceiptResponse(**receipt.to_dict(), text=receipt.render())
