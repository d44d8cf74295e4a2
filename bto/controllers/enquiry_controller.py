"""HTTP controller layer for project enquiries."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from bto.controllers.dependencies import get_current_user, get_enquiry_service, require_role
from bto.controllers.errors import unwrap
from bto.controllers.schemas import EnquiryResponse, MessageResponse
from bto.domain.models import User, UserRole
from bto.services.enquiry_service import EnquiryService


router = APIRouter(prefix="/enquiries", tags=["enquiries"])


class SubmitEnquiryRequest(BaseModel):
    project_id: int = Field(gt=0)
    content: str = Field(min_length=1)


class EnquiryTextRequest(BaseModel):
    text: str = Field(min_length=1)


@router.post("", response_model=EnquiryResponse, status_code=status.HTTP_201_CREATED)
async def submit_enquiry(
    payload: SubmitEnquiryRequest,
    user: User = Depends(get_current_user),
    service: EnquiryService = Depends(get_enquiry_service),
) -> EnquiryResponse:
    return EnquiryResponse.from_domain(
        unwrap(service.submit(user.nric, payload.project_id, payload.content))
    )


@router.get("/me", response_model=list[EnquiryResponse])
async def my_enquiries(
    user: User = Depends(get_current_user),
    service: EnquiryService = Depends(get_enquiry_service),
) -> list[EnquiryResponse]:
    return [EnquiryResponse.from_domain(item) for item in service.my_enquiries(user.nric)]


@router.get("", response_model=list[EnquiryResponse])
async def all_enquiries(
    user: User = Depends(require_role(UserRole.MANAGER)),
    service: EnquiryService = Depends(get_enquiry_service),
) -> list[EnquiryResponse]:
    return [EnquiryResponse.from_domain(item) for item in unwrap(service.all_enquiries(user.nric))]


@router.get("/project/{project_id}", response_model=list[EnquiryResponse])
async def project_enquiries(
    project_id: int,
    _: User = Depends(require_role(UserRole.OFFICER, UserRole.MANAGER)),
    service: EnquiryService = Depends(get_enquiry_service),
) -> list[EnquiryResponse]:
    return [EnquiryResponse.from_domain(item) for item in service.for_project(project_id)]


@router.put("/{enquiry_id}", response_model=EnquiryResponse)
async def edit_enquiry(
    enquiry_id: int,
    payload: EnquiryTextRequest,
    user: User = Depends(get_current_user),
    service: EnquiryService = Depends(get_enquiry_service),
) -> EnquiryResponse:
    return EnquiryResponse.from_domain(unwrap(service.edit(enquiry_id, user.nric, payload.text)))


@router.delete("/{enquiry_id}", response_model=MessageResponse)
async def delete_enquiry(
    enquiry_id: int,
    user: User = Depends(get_current_user),
    service: EnquiryService = Depends(get_enquiry_service),
) -> MessageResponse:
    result = service.delete(enquiry_id, user.nric)
    unwrap(result)
    return MessageResponse(message=result.message)


@router.post("/{enquiry_id}/replies", response_model=EnquiryResponse)
async def reply_to_enquiry(
    enquiry_id: int,
    payload: EnquiryTextRequest,
    user: User = Depends(require_role(UserRole.OFFICER, UserRole.MANAGER)),
    service: EnquiryService = Depends(get_enquiry_service),
) -> EnquiryResponse:
    return EnquiryResponse.from_domain(unwrap(service.reply(enquiry_id, user.nric, payload.text)))


@router.post("/{enquiry_id}/close", response_model=EnquiryResponse)
async def close_enquiry(
    enquiry_id: int,
    user: User = Depends(require_role(UserRole.OFFICER, UserRole.MANAGER)),
    service: EnquiryService = Depends(get_enquiry_service),
) -> EnquiryResponse:
    return EnquiryResponse.from_domain(unwrap(service.close(enquiry_id, user.nric)))
