"""Housing-application state machine: submit, approve, reject and withdrawal."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from bto.domain.eligibility import applicant_eligible
from bto.domain.models import (
    TERMINAL_APPLICATION_STATUSES,
    ApplicationStatus,
    FlatType,
    HousingApplication,
    Project,
    UserRole,
)
from bto.domain.results import (
    OperationResult,
    capacity_exceeded,
    conflict,
    invalid_state,
    not_found,
    permission_denied,
    validation_failed,
)
from bto.repository.base import Repository
from bto.services.inventory_ledger import InventoryLedger
from bto.utils.logger import get_logger


logger = get_logger(__name__)

Clock = Callable[[], datetime]


class ApplicationLifecycleService:
    """Drives PENDING -> SUCCESSFUL/UNSUCCESSFUL and the withdrawal flow.

    SUCCESSFUL -> BOOKED belongs to the booking workflow. Every operation
    returns an `OperationResult`; a failed operation leaves the repository
    untouched except for the documented auto-reject on approval without
    stock.
    """

    def __init__(
        self,
        repository: Repository,
        ledger: Optional[InventoryLedger] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._repository = repository
        self._ledger = ledger or InventoryLedger(repository)
        self._clock: Clock = clock or datetime.now

    def _load_owned(
        self, application_id: int, authority_nric: str
    ) -> tuple[Optional[HousingApplication], Optional[Project], Optional[OperationResult]]:
        application = self._repository.get_application(application_id)
        if application is None:
            return None, None, not_found(
                "application_not_found", f"Application {application_id} does not exist"
            )
        project = self._repository.get_project(application.project_id)
        if project is None:
            return None, None, not_found(
                "project_not_found", f"Project {application.project_id} does not exist"
            )
        if project.manager_nric != authority_nric.upper():
            return None, None, permission_denied(
                "not_project_manager",
                f"{authority_nric} does not manage project {project.project_id}",
            )
        return application, project, None

    def submit(
        self, applicant_nric: str, project_id: int, flat_type: FlatType
    ) -> OperationResult[HousingApplication]:
        nric = applicant_nric.upper()
        with self._repository.unit_of_work():
            applicant = self._repository.get_user(nric)
            if applicant is None:
                return not_found("user_not_found", f"User {nric} does not exist")
            project = self._repository.get_project(project_id)
            if project is None:
                return not_found("project_not_found", f"Project {project_id} does not exist")

            if applicant.role == UserRole.MANAGER:
                return permission_denied(
                    "manager_cannot_apply", "Managers cannot apply for housing projects"
                )
            if applicant.role == UserRole.OFFICER:
                if nric in project.assigned_agents:
                    return conflict(
                        "handles_project",
                        f"Officer {nric} handles project {project_id} and cannot apply for it",
                    )
                if any(
                    registration.project_id == project_id
                    for registration in self._repository.list_registrations_by_agent(nric)
                ):
                    return conflict(
                        "registered_for_project",
                        f"Officer {nric} has registered to handle project {project_id}",
                    )

            active = next(
                (
                    application
                    for application in self._repository.list_applications_by_applicant(nric)
                    if application.is_active
                ),
                None,
            )
            if active is not None:
                return conflict(
                    "active_application_exists",
                    f"{nric} already has active application {active.application_id}",
                )

            now = self._clock()
            if not project.visible:
                return validation_failed(
                    "project_hidden", f"Project {project_id} is not open for applications"
                )
            if not project.is_open_on(now.date()):
                return validation_failed(
                    "window_closed",
                    f"Project {project_id} accepts applications from "
                    f"{project.opening_date} to {project.closing_date}",
                )
            if not project.offers(flat_type):
                return validation_failed(
                    "flat_type_not_offered",
                    f"Project {project_id} does not offer {flat_type.display_name} flats",
                )
            if not applicant_eligible(applicant.age, applicant.marital_status, flat_type):
                return validation_failed(
                    "ineligible",
                    f"{nric} is not eligible for {flat_type.display_name} flats",
                )

            stored = self._repository.put_application(
                HousingApplication(
                    application_id=None,
                    applicant_nric=nric,
                    project_id=project_id,
                    applied_flat_type=flat_type,
                    submitted_at=now,
                )
            )
        logger.info(
            "Application submitted | application_id=%s | applicant=%s | project_id=%s | flat_type=%s",
            stored.application_id,
            nric,
            project_id,
            flat_type.value,
        )
        return OperationResult.success(stored, "Application submitted")

    def approve(self, application_id: int, authority_nric: str) -> OperationResult[HousingApplication]:
        with self._repository.unit_of_work():
            application, project, failure = self._load_owned(application_id, authority_nric)
            if failure is not None:
                return failure
            if application.status != ApplicationStatus.PENDING:
                return invalid_state(
                    "not_pending",
                    f"Application {application_id} is {application.status.value}, not PENDING",
                )
            if self._ledger.available(project.project_id, application.applied_flat_type) <= 0:
                self._repository.put_application(
                    replace(
                        application, status=ApplicationStatus.UNSUCCESSFUL, withdrawal_requested=False
                    )
                )
                logger.info(
                    "Approval without stock; marked unsuccessful | application_id=%s | flat_type=%s",
                    application_id,
                    application.applied_flat_type.value,
                )
                return capacity_exceeded(
                    "no_units_available",
                    f"No {application.applied_flat_type.display_name} units left in "
                    f"project {project.project_id}; application marked UNSUCCESSFUL",
                )
            stored = self._repository.put_application(
                replace(application, status=ApplicationStatus.SUCCESSFUL)
            )
        logger.info("Application approved | application_id=%s", application_id)
        return OperationResult.success(stored, "Application approved")

    def reject(self, application_id: int, authority_nric: str) -> OperationResult[HousingApplication]:
        with self._repository.unit_of_work():
            application, _, failure = self._load_owned(application_id, authority_nric)
            if failure is not None:
                return failure
            if application.status != ApplicationStatus.PENDING:
                return invalid_state(
                    "not_pending",
                    f"Application {application_id} is {application.status.value}, not PENDING",
                )
            stored = self._repository.put_application(
                replace(application, status=ApplicationStatus.UNSUCCESSFUL, withdrawal_requested=False)
            )
        logger.info("Application rejected | application_id=%s", application_id)
        return OperationResult.success(stored, "Application rejected")

    def request_withdrawal(
        self, application_id: int, applicant_nric: str
    ) -> OperationResult[HousingApplication]:
        with self._repository.unit_of_work():
            application = self._repository.get_application(application_id)
            if application is None:
                return not_found(
                    "application_not_found", f"Application {application_id} does not exist"
                )
            if application.applicant_nric != applicant_nric.upper():
                return permission_denied(
                    "not_applicant", f"Application {application_id} belongs to another applicant"
                )
            if application.status in TERMINAL_APPLICATION_STATUSES:
                return invalid_state(
                    "terminal_status",
                    f"Application {application_id} is already {application.status.value}",
                )
            if application.withdrawal_requested:
                return conflict(
                    "withdrawal_already_requested",
                    f"Withdrawal already requested for application {application_id}",
                )
            stored = self._repository.put_application(
                replace(application, withdrawal_requested=True)
            )
        logger.info("Withdrawal requested | application_id=%s", application_id)
        return OperationResult.success(stored, "Withdrawal requested")

    def approve_withdrawal(
        self, application_id: int, authority_nric: str
    ) -> OperationResult[HousingApplication]:
        with self._repository.unit_of_work():
            application, project, failure = self._load_owned(application_id, authority_nric)
            if failure is not None:
                return failure
            if application.status in TERMINAL_APPLICATION_STATUSES:
                return invalid_state(
                    "terminal_status",
                    f"Application {application_id} is already {application.status.value}",
                )
            if not application.withdrawal_requested:
                return invalid_state(
                    "no_withdrawal_requested",
                    f"No withdrawal pending for application {application_id}",
                )
            if application.status == ApplicationStatus.BOOKED:
                flat_type = application.booked_flat_type or application.applied_flat_type
                self._ledger.increment(project.project_id, flat_type)
                if application.booking_id is not None:
                    self._repository.delete_booking(application.booking_id)
                logger.info(
                    "Booked unit returned | application_id=%s | booking_id=%s | flat_type=%s",
                    application_id,
                    application.booking_id,
                    flat_type.value,
                )
            stored = self._repository.put_application(
                replace(
                    application,
                    status=ApplicationStatus.WITHDRAWN,
                    withdrawal_requested=False,
                    booked_flat_type=None,
                    booking_id=None,
                )
            )
        logger.info("Withdrawal approved | application_id=%s", application_id)
        return OperationResult.success(stored, "Withdrawal approved")

    def reject_withdrawal(
        self, application_id: int, authority_nric: str
    ) -> OperationResult[HousingApplication]:
        with self._repository.unit_of_work():
            application, _, failure = self._load_owned(application_id, authority_nric)
            if failure is not None:
                return failure
            if application.status in TERMINAL_APPLICATION_STATUSES:
                return invalid_state(
                    "terminal_status",
                    f"Application {application_id} is already {application.status.value}",
                )
            if not application.withdrawal_requested:
                return invalid_state(
                    "no_withdrawal_requested",
                    f"No withdrawal pending for application {application_id}",
                )
            stored = self._repository.put_application(
                replace(application, withdrawal_requested=False)
            )
        logger.info("Withdrawal rejected | application_id=%s", application_id)
        return OperationResult.success(stored, "Withdrawal rejected")

    def current_application(self, applicant_nric: str) -> OperationResult[HousingApplication]:
        for application in self._repository.list_applications_by_applicant(applicant_nric):
            if application.is_active:
                return OperationResult.success(application)
        return not_found("no_active_application", f"{applicant_nric} has no active application")

    def application_history(self, applicant_nric: str) -> list[HousingApplication]:
        return list(self._repository.list_applications_by_applicant(applicant_nric))

    def applications_for_project(
        self, project_id: int, authority_nric: str
    ) -> OperationResult[list[HousingApplication]]:
        project = self._repository.get_project(project_id)
        if project is None:
            return not_found("project_not_found", f"Project {project_id} does not exist")
        if project.manager_nric != authority_nric.upper():
            return permission_denied(
                "not_project_manager", f"{authority_nric} does not manage project {project_id}"
            )
        return OperationResult.success(list(self._repository.list_applications_by_project(project_id)))

    def pending_withdrawals(self, authority_nric: str) -> list[HousingApplication]:
        managed = {
            project.project_id
            for project in self._repository.list_projects()
            if project.manager_nric == authority_nric.upper()
        }
        return [
            application
            for application in self._repository.list_applications()
            if application.project_id in managed
            and application.withdrawal_requested
            and application.status not in TERMINAL_APPLICATION_STATUSES
        ]
