"""Project administration and project listings."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Callable, Mapping, Optional

from bto.domain.constraints import ProjectDetails, validate_project_details
from bto.domain.eligibility import periods_overlap
from bto.domain.filters import filter_projects
from bto.domain.models import ApplicationStatus, Project, UserRole
from bto.domain.results import (
    OperationResult,
    conflict,
    not_found,
    permission_denied,
    validation_failed,
)
from bto.repository.base import Repository
from bto.utils.config import Settings, get_settings
from bto.utils.logger import get_logger


logger = get_logger(__name__)


class ProjectService:
    """Manager-side project CRUD plus the listings applicants and officers see."""

    def __init__(
        self,
        repository: Repository,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repository = repository
        self._settings = settings or get_settings()
        self._clock = clock or datetime.now

    def _owned_project(
        self, project_id: int, manager_nric: str
    ) -> tuple[Optional[Project], Optional[OperationResult]]:
        project = self._repository.get_project(project_id)
        if project is None:
            return None, not_found("project_not_found", f"Project {project_id} does not exist")
        if project.manager_nric != manager_nric.upper():
            return None, permission_denied(
                "not_project_manager", f"{manager_nric} does not manage project {project_id}"
            )
        return project, None

    def _manager_conflict(
        self, manager_nric: str, details: ProjectDetails, exclude_id: Optional[int] = None
    ) -> Optional[Project]:
        for project in self._repository.list_projects():
            if project.project_id == exclude_id or project.manager_nric != manager_nric:
                continue
            if periods_overlap(
                project.opening_date,
                project.closing_date,
                details.opening_date,
                details.closing_date,
            ):
                return project
        return None

    def _validate(self, details: ProjectDetails) -> Optional[OperationResult]:
        try:
            validate_project_details(details, self._settings.max_agent_slots_limit)
        except ValueError as exc:
            return validation_failed("invalid_project_details", str(exc))
        return None

    def create_project(self, manager_nric: str, details: ProjectDetails) -> OperationResult[Project]:
        nric = manager_nric.upper()
        manager = self._repository.get_user(nric)
        if manager is None or manager.role != UserRole.MANAGER:
            return permission_denied("not_manager", f"{nric} is not a manager")
        failure = self._validate(details)
        if failure is not None:
            return failure

        with self._repository.unit_of_work():
            clash = self._manager_conflict(nric, details)
            if clash is not None:
                return conflict(
                    "manager_period_overlap",
                    f"{nric} already manages project {clash.project_id} in an overlapping period",
                )
            if sum(details.total_units.values()) == 0:
                logger.warning("Creating project with zero total units | name=%s", details.name)
            stored = self._repository.put_project(
                Project(
                    project_id=None,
                    name=details.name.strip(),
                    neighborhood=details.neighborhood.strip(),
                    total_units=dict(details.total_units),
                    available_units=dict(details.total_units),
                    opening_date=details.opening_date,
                    closing_date=details.closing_date,
                    manager_nric=nric,
                    max_agent_slots=details.max_agent_slots,
                )
            )
        logger.info("Project created | project_id=%s | manager=%s", stored.project_id, nric)
        return OperationResult.success(stored, "Project created")

    def edit_project(
        self, project_id: int, manager_nric: str, details: ProjectDetails
    ) -> OperationResult[Project]:
        failure = self._validate(details)
        if failure is not None:
            return failure

        with self._repository.unit_of_work():
            project, failure = self._owned_project(project_id, manager_nric)
            if failure is not None:
                return failure
            clash = self._manager_conflict(project.manager_nric, details, exclude_id=project_id)
            if clash is not None:
                return conflict(
                    "manager_period_overlap",
                    f"Project {clash.project_id} overlaps the new application period",
                )
            if details.max_agent_slots < len(project.assigned_agents):
                return validation_failed(
                    "slots_below_assigned",
                    f"{len(project.assigned_agents)} officers are already assigned; "
                    f"slots cannot drop to {details.max_agent_slots}",
                )

            total_units = project.total_units
            available_units = project.available_units
            if dict(details.total_units) != dict(project.total_units):
                if self._repository.list_applications_by_project(project_id):
                    logger.warning(
                        "Unit counts are frozen once applications exist; ignoring change | project_id=%s",
                        project_id,
                    )
                else:
                    total_units = dict(details.total_units)
                    available_units = dict(details.total_units)

            stored = self._repository.put_project(
                replace(
                    project,
                    name=details.name.strip(),
                    neighborhood=details.neighborhood.strip(),
                    total_units=total_units,
                    available_units=available_units,
                    opening_date=details.opening_date,
                    closing_date=details.closing_date,
                    max_agent_slots=details.max_agent_slots,
                )
            )
        logger.info("Project edited | project_id=%s", project_id)
        return OperationResult.success(stored, "Project updated")

    def delete_project(self, project_id: int, manager_nric: str) -> OperationResult[None]:
        with self._repository.unit_of_work():
            _, failure = self._owned_project(project_id, manager_nric)
            if failure is not None:
                return failure
            if any(
                application.status == ApplicationStatus.BOOKED
                for application in self._repository.list_applications_by_project(project_id)
            ):
                return conflict(
                    "has_booked_applications",
                    f"Project {project_id} has booked flats and cannot be deleted",
                )
            self._repository.delete_project_cascade(project_id)
        logger.info("Project deleted | project_id=%s", project_id)
        return OperationResult.success(None, "Project deleted")

    def toggle_visibility(
        self, project_id: int, visible: bool, manager_nric: str
    ) -> OperationResult[Project]:
        with self._repository.unit_of_work():
            project, failure = self._owned_project(project_id, manager_nric)
            if failure is not None:
                return failure
            stored = self._repository.put_project(replace(project, visible=visible))
        logger.info("Project visibility set | project_id=%s | visible=%s", project_id, visible)
        return OperationResult.success(stored)

    def remove_agent(
        self, project_id: int, agent_nric: str, manager_nric: str
    ) -> OperationResult[Project]:
        agent = agent_nric.upper()
        with self._repository.unit_of_work():
            project, failure = self._owned_project(project_id, manager_nric)
            if failure is not None:
                return failure
            if agent not in project.assigned_agents:
                return not_found(
                    "agent_not_assigned", f"{agent} is not assigned to project {project_id}"
                )
            stored = self._repository.put_project(
                replace(
                    project,
                    assigned_agents=tuple(nric for nric in project.assigned_agents if nric != agent),
                )
            )
        logger.info("Officer removed | project_id=%s | agent=%s", project_id, agent)
        return OperationResult.success(stored)

    def visible_projects(
        self, viewer_nric: str, criteria: Optional[Mapping[str, str]] = None
    ) -> OperationResult[list[Project]]:
        viewer = self._repository.get_user(viewer_nric.upper())
        if viewer is None:
            return not_found("user_not_found", f"User {viewer_nric} does not exist")
        if viewer.role == UserRole.MANAGER:
            return permission_denied(
                "not_applicant", "Managers browse projects through the manager listing"
            )
        today = self._clock().date()
        listed = sorted(
            (
                project
                for project in self._repository.list_projects()
                if project.visible and project.is_open_on(today)
            ),
            key=lambda project: project.name,
        )
        return OperationResult.success(list(filter_projects(listed, criteria)))

    def all_projects(self, criteria: Optional[Mapping[str, str]] = None) -> list[Project]:
        listed = sorted(self._repository.list_projects(), key=lambda project: project.name)
        return list(filter_projects(listed, criteria))

    def projects_managed_by(self, manager_nric: str) -> list[Project]:
        nric = manager_nric.upper()
        return [project for project in self.all_projects() if project.manager_nric == nric]

    def get_project(self, project_id: int) -> OperationResult[Project]:
        project = self._repository.get_project(project_id)
        if project is None:
            return not_found("project_not_found", f"Project {project_id} does not exist")
        return OperationResult.success(project)

    def handling_project(self, agent_nric: str) -> Optional[Project]:
        nric = agent_nric.upper()
        for project in self._repository.list_projects():
            if nric in project.assigned_agents:
                return project
        return None
