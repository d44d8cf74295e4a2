"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from typing import Any, Callable

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from bto.domain.models import User, UserRole
from bto.services.application_service import ApplicationLifecycleService
from bto.services.auth_service import AuthService, InvalidSessionError
from bto.services.booking_service import BookingWorkflowService
from bto.services.enquiry_service import EnquiryService
from bto.services.project_service import ProjectService
from bto.services.registration_service import RegistrationService
from bto.services.report_service import ReportService


bearer_scheme = HTTPBearer(auto_error=False)


def _state_service(request: Request, name: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} is not initialized",
        )
    return service


def get_auth_service(request: Request) -> AuthService:
    return _state_service(request, "auth_service")


def get_project_service(request: Request) -> ProjectService:
    return _state_service(request, "project_service")


def get_application_service(request: Request) -> ApplicationLifecycleService:
    return _state_service(request, "application_service")


def get_booking_service(request: Request) -> BookingWorkflowService:
    return _state_service(request, "booking_service")


def get_registration_service(request: Request) -> RegistrationService:
    return _state_service(request, "registration_service")


def get_enquiry_service(request: Request) -> EnquiryService:
    return _state_service(request, "enquiry_service")


def get_report_service(request: Request) -> ReportService:
    return _state_service(request, "report_service")


async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header with Bearer token is required",
        )
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    try:
        return auth_service.resolve(token)
    except InvalidSessionError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


def require_role(*roles: UserRole) -> Callable[..., Any]:
    """Dependency factory that admits only callers holding one of `roles`."""

    async def _require(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"This action requires role {' or '.join(role.value for role in roles)}",
            )
        return user

    return _require
