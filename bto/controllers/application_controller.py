"""HTTP controller layer for housing applications and withdrawals."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import Field

from bto.controllers.dependencies import get_application_service, get_current_user, require_role
from bto.controllers.errors import unwrap
from bto.controllers.schemas import ApplicationResponse, FlatTypeRequest
from bto.domain.models import FlatType, User, UserRole
from bto.services.application_service import ApplicationLifecycleService


router = APIRouter(prefix="/applications", tags=["applications"])

require_applicant = require_role(UserRole.APPLICANT, UserRole.OFFICER)
require_manager = require_role(UserRole.MANAGER)


class SubmitApplicationRequest(FlatTypeRequest):
    project_id: int = Field(gt=0)


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(
    payload: SubmitApplicationRequest,
    user: User = Depends(get_current_user),
    service: ApplicationLifecycleService = Depends(get_application_service),
) -> ApplicationResponse:
    result = service.submit(user.nric, payload.project_id, FlatType(payload.flat_type))
    return ApplicationResponse.from_domain(unwrap(result))


@router.get("/me", response_model=ApplicationResponse)
async def current_application(
    user: User = Depends(require_applicant),
    service: ApplicationLifecycleService = Depends(get_application_service),
) -> ApplicationResponse:
    return ApplicationResponse.from_domain(unwrap(service.current_application(user.nric)))


@router.get("/me/history", response_model=list[ApplicationResponse])
async def application_history(
    user: User = Depends(require_applicant),
    service: ApplicationLifecycleService = Depends(get_application_service),
) -> list[ApplicationResponse]:
    return [ApplicationResponse.from_domain(item) for item in service.application_history(user.nric)]


@router.get("/withdrawals", response_model=list[ApplicationResponse])
async def pending_withdrawals(
    user: User = Depends(require_manager),
    service: ApplicationLifecycleService = Depends(get_application_service),
) -> list[ApplicationResponse]:
    return [ApplicationResponse.from_domain(item) for item in service.pending_withdrawals(user.nric)]


@router.get("/project/{project_id}", response_model=list[ApplicationResponse])
async def applications_for_project(
    project_id: int,
    user: User = Depends(require_manager),
    service: ApplicationLifecycleService = Depends(get_application_service),
) -> list[ApplicationResponse]:
    applications = unwrap(service.applications_for_project(project_id, user.nric))
    return [ApplicationResponse.from_domain(item) for item in applications]


@router.post("/{application_id}/approve", response_model=ApplicationResponse)
async def approve_application(
    application_id: int,
    user: User = Depends(require_manager),
    service: ApplicationLifecycleService = Depends(get_application_service),
) -> ApplicationResponse:
    return ApplicationResponse.from_domain(unwrap(service.approve(application_id, user.nric)))


@router.post("/{application_id}/reject", response_model=ApplicationResponse)
async def reject_application(
    application_id: int,
    user: User = Depends(require_manager),
    service: ApplicationLifecycleService = Depends(get_application_service),
) -> ApplicationResponse:
    return ApplicationResponse.from_domain(unwrap(service.reject(application_id, user.nric)))


@router.post("/{application_id}/withdrawal", response_model=ApplicationResponse)
async def request_withdrawal(
    application_id: int,
    user: User = Depends(get_current_user),
    service: ApplicationLifecycleService = Depends(get_application_service),
) -> ApplicationResponse:
    return ApplicationResponse.from_domain(
        unwrap(service.request_withdrawal(application_id, user.nric))
    )


@router.post("/{application_id}/withdrawal/approve", response_model=ApplicationResponse)
async def approve_withdrawal(
    application_id: int,
    user: User = Depends(require_manager),
    service: ApplicationLifecycleService = Depends(get_application_service),
) -> ApplicationResponse:
    return ApplicationResponse.from_domain(
        unwrap(service.approve_withdrawal(application_id, user.nric))
    )


@router.post("/{application_id}/withdrawal/reject", response_model=ApplicationResponse)
async def reject_withdrawal(
    application_id: int,
    user: User = Depends(require_manager),
    service: ApplicationLifecycleService = Depends(get_application_service),
) -> ApplicationResponse:
    return ApplicationResponse.from_domain(
        unwrap(service.reject_withdrawal(application_id, user.nric))
    )
