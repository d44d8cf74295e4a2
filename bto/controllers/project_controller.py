"""HTTP controller layer for project listings and administration."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from bto.controllers.dependencies import get_current_user, get_project_service, require_role
from bto.controllers.errors import unwrap
from bto.controllers.schemas import MessageResponse, ProjectResponse
from bto.domain.constraints import ProjectDetails
from bto.domain.models import FlatType, User, UserRole
from bto.services.project_service import ProjectService


router = APIRouter(prefix="/projects", tags=["projects"])

require_manager = require_role(UserRole.MANAGER)


class ProjectDetailsRequest(BaseModel):
    """Input DTO validated before entering service layer."""

    name: str = Field(min_length=1)
    neighborhood: str = Field(min_length=1)
    two_room_units: int = Field(ge=0)
    three_room_units: int = Field(ge=0)
    opening_date: date
    closing_date: date
    max_agent_slots: int = Field(gt=0)

    def to_details(self) -> ProjectDetails:
        return ProjectDetails(
            name=self.name,
            neighborhood=self.neighborhood,
            total_units={
                FlatType.TWO_ROOM: self.two_room_units,
                FlatType.THREE_ROOM: self.three_room_units,
            },
            opening_date=self.opening_date,
            closing_date=self.closing_date,
            max_agent_slots=self.max_agent_slots,
        )


class VisibilityRequest(BaseModel):
    visible: bool


def _criteria(neighborhood: Optional[str], flat_type: Optional[str]) -> dict[str, str]:
    criteria: dict[str, str] = {}
    if neighborhood:
        criteria["neighborhood"] = neighborhood
    if flat_type:
        criteria["flatType"] = flat_type
    return criteria


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    neighborhood: Optional[str] = Query(default=None),
    flat_type: Optional[str] = Query(default=None),
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> list[ProjectResponse]:
    """Managers see every project; other roles see open, visible ones."""
    criteria = _criteria(neighborhood, flat_type)
    if user.role == UserRole.MANAGER:
        projects = service.all_projects(criteria)
    else:
        projects = unwrap(service.visible_projects(user.nric, criteria))
    return [ProjectResponse.from_domain(project) for project in projects]


@router.get("/managed", response_model=list[ProjectResponse])
async def list_managed_projects(
    user: User = Depends(require_manager),
    service: ProjectService = Depends(get_project_service),
) -> list[ProjectResponse]:
    return [ProjectResponse.from_domain(project) for project in service.projects_managed_by(user.nric)]


@router.get("/handling", response_model=Optional[ProjectResponse])
async def handling_project(
    user: User = Depends(require_role(UserRole.OFFICER)),
    service: ProjectService = Depends(get_project_service),
) -> Optional[ProjectResponse]:
    project = service.handling_project(user.nric)
    return ProjectResponse.from_domain(project) if project is not None else None


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    _: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    return ProjectResponse.from_domain(unwrap(service.get_project(project_id)))


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectDetailsRequest,
    user: User = Depends(require_manager),
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    return ProjectResponse.from_domain(unwrap(service.create_project(user.nric, payload.to_details())))


@router.put("/{project_id}", response_model=ProjectResponse)
async def edit_project(
    project_id: int,
    payload: ProjectDetailsRequest,
    user: User = Depends(require_manager),
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    return ProjectResponse.from_domain(
        unwrap(service.edit_project(project_id, user.nric, payload.to_details()))
    )


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: int,
    user: User = Depends(require_manager),
    service: ProjectService = Depends(get_project_service),
) -> MessageResponse:
    result = service.delete_project(project_id, user.nric)
    unwrap(result)
    return MessageResponse(message=result.message)


@router.post("/{project_id}/visibility", response_model=ProjectResponse)
async def set_visibility(
    project_id: int,
    payload: VisibilityRequest,
    user: User = Depends(require_manager),
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    return ProjectResponse.from_domain(
        unwrap(service.toggle_visibility(project_id, payload.visible, user.nric))
    )


@router.delete("/{project_id}/agents/{agent_nric}", response_model=ProjectResponse)
async def remove_agent(
    project_id: int,
    agent_nric: str,
    user: User = Depends(require_manager),
    service: ProjectService = Depends(get_project_service),
) -> ProjectResponse:
    return ProjectResponse.from_domain(
        unwrap(service.remove_agent(project_id, agent_nric, user.nric))
    )
