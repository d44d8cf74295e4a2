"""Officer registrations to handle a project, and their manager decisions."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from bto.domain.eligibility import agent_eligible_for_project
from bto.domain.models import AgentRegistration, RegistrationStatus, UserRole
from bto.domain.results import (
    OperationResult,
    capacity_exceeded,
    conflict,
    invalid_state,
    not_found,
    permission_denied,
)
from bto.repository.base import Repository
from bto.utils.logger import get_logger


logger = get_logger(__name__)


class RegistrationService:
    def __init__(
        self,
        repository: Repository,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repository = repository
        self._clock = clock or datetime.now

    def register(self, agent_nric: str, project_id: int) -> OperationResult[AgentRegistration]:
        nric = agent_nric.upper()
        with self._repository.unit_of_work():
            agent = self._repository.get_user(nric)
            if agent is None:
                return not_found("user_not_found", f"User {nric} does not exist")
            if agent.role != UserRole.OFFICER:
                return permission_denied("not_officer", f"{nric} is not an officer")
            if any(
                registration.project_id == project_id
                for registration in self._repository.list_registrations_by_agent(nric)
            ):
                return conflict(
                    "already_registered",
                    f"{nric} already has a registration for project {project_id}",
                )
            verdict = agent_eligible_for_project(nric, project_id, self._repository)
            if not verdict.eligible:
                return OperationResult.failure(verdict.kind, verdict.reason, verdict.message)
            stored = self._repository.put_registration(
                AgentRegistration(
                    registration_id=None,
                    agent_nric=nric,
                    project_id=project_id,
                    requested_at=self._clock(),
                )
            )
        logger.info(
            "Registration requested | registration_id=%s | agent=%s | project_id=%s",
            stored.registration_id,
            nric,
            project_id,
        )
        return OperationResult.success(stored, "Registration submitted")

    def _load_for_decision(
        self, registration_id: int, manager_nric: str
    ) -> tuple[Optional[AgentRegistration], Optional[OperationResult]]:
        registration = self._repository.get_registration(registration_id)
        if registration is None:
            return None, not_found(
                "registration_not_found", f"Registration {registration_id} does not exist"
            )
        project = self._repository.get_project(registration.project_id)
        if project is None:
            return None, not_found(
                "project_not_found", f"Project {registration.project_id} does not exist"
            )
        if project.manager_nric != manager_nric.upper():
            return None, permission_denied(
                "not_project_manager",
                f"{manager_nric} does not manage project {project.project_id}",
            )
        if registration.status != RegistrationStatus.PENDING:
            return None, invalid_state(
                "not_pending",
                f"Registration {registration_id} is already {registration.status.value}",
            )
        return registration, None

    def approve(self, registration_id: int, manager_nric: str) -> OperationResult[AgentRegistration]:
        with self._repository.unit_of_work():
            registration, failure = self._load_for_decision(registration_id, manager_nric)
            if failure is not None:
                return failure
            verdict = agent_eligible_for_project(
                registration.agent_nric, registration.project_id, self._repository
            )
            if not verdict.eligible:
                return OperationResult.failure(verdict.kind, verdict.reason, verdict.message)

            project = self._repository.get_project(registration.project_id)
            now = self._clock()
            if registration.agent_nric in project.assigned_agents:
                self._repository.put_registration(
                    replace(registration, status=RegistrationStatus.REJECTED, decided_at=now)
                )
                logger.info(
                    "Registration auto-rejected; already assigned | registration_id=%s | project_id=%s",
                    registration_id,
                    project.project_id,
                )
                return conflict(
                    "already_assigned",
                    f"{registration.agent_nric} is already assigned to project {project.project_id}",
                )
            if project.remaining_agent_slots <= 0:
                self._repository.put_registration(
                    replace(registration, status=RegistrationStatus.REJECTED, decided_at=now)
                )
                logger.info(
                    "Registration auto-rejected; no slot | registration_id=%s | project_id=%s",
                    registration_id,
                    project.project_id,
                )
                return capacity_exceeded(
                    "no_agent_slots",
                    f"Project {project.project_id} has no officer slot for {registration.agent_nric}; "
                    "registration rejected",
                )
            self._repository.put_project(
                replace(project, assigned_agents=project.assigned_agents + (registration.agent_nric,))
            )
            stored = self._repository.put_registration(
                replace(registration, status=RegistrationStatus.APPROVED, decided_at=now)
            )
        logger.info("Registration approved | registration_id=%s", registration_id)
        return OperationResult.success(stored, "Registration approved")

    def reject(self, registration_id: int, manager_nric: str) -> OperationResult[AgentRegistration]:
        with self._repository.unit_of_work():
            registration, failure = self._load_for_decision(registration_id, manager_nric)
            if failure is not None:
                return failure
            stored = self._repository.put_registration(
                replace(registration, status=RegistrationStatus.REJECTED, decided_at=self._clock())
            )
        logger.info("Registration rejected | registration_id=%s", registration_id)
        return OperationResult.success(stored, "Registration rejected")

    def registrations_for_agent(self, agent_nric: str) -> list[AgentRegistration]:
        return sorted(
            self._repository.list_registrations_by_agent(agent_nric),
            key=lambda registration: (registration.requested_at or datetime.min, registration.registration_id),
            reverse=True,
        )

    def pending_for_project(self, project_id: int) -> list[AgentRegistration]:
        return sorted(
            (
                registration
                for registration in self._repository.list_registrations_by_project(project_id)
                if registration.status == RegistrationStatus.PENDING
            ),
            key=lambda registration: (registration.requested_at or datetime.min, registration.registration_id),
        )
