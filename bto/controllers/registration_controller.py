"""HTTP controller layer for officer registrations."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from bto.controllers.dependencies import get_registration_service, require_role
from bto.controllers.errors import unwrap
from bto.controllers.schemas import RegistrationResponse
from bto.domain.models import User, UserRole
from bto.services.registration_service import RegistrationService


router = APIRouter(prefix="/registrations", tags=["registrations"])

require_officer = require_role(UserRole.OFFICER)
require_manager = require_role(UserRole.MANAGER)


class RegisterRequest(BaseModel):
    project_id: int = Field(gt=0)


@router.post("", response_model=RegistrationResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    user: User = Depends(require_officer),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationResponse:
    return RegistrationResponse.from_domain(unwrap(service.register(user.nric, payload.project_id)))


@router.get("/me", response_model=list[RegistrationResponse])
async def my_registrations(
    user: User = Depends(require_officer),
    service: RegistrationService = Depends(get_registration_service),
) -> list[RegistrationResponse]:
    return [
        RegistrationResponse.from_domain(item)
        for item in service.registrations_for_agent(user.nric)
    ]


@router.get("/project/{project_id}", response_model=list[RegistrationResponse])
async def pending_for_project(
    project_id: int,
    _: User = Depends(require_manager),
    service: RegistrationService = Depends(get_registration_service),
) -> list[RegistrationResponse]:
    return [
        RegistrationResponse.from_domain(item)
        for item in service.pending_for_project(project_id)
    ]


@router.post("/{registration_id}/approve", response_model=RegistrationResponse)
async def approve_registration(
    registration_id: int,
    user: User = Depends(require_manager),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationResponse:
    return RegistrationResponse.from_domain(unwrap(service.approve(registration_id, user.nric)))


@router.post("/{registration_id}/reject", response_model=RegistrationResponse)
async def reject_registration(
    registration_id: int,
    user: User = Depends(require_manager),
    service: RegistrationService = Depends(get_registration_service),
) -> RegistrationResponse:
    return RegistrationResponse.from_domain(unwrap(service.reject(registration_id, user.nric)))
