"""Officer-assisted flat booking and booking receipts."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Optional

from bto.domain.eligibility import applicant_eligible
from bto.domain.models import (
    ApplicationStatus,
    FlatBooking,
    FlatType,
    HousingApplication,
    MaritalStatus,
    UserRole,
)
from bto.domain.results import (
    OperationResult,
    capacity_exceeded,
    invalid_state,
    not_found,
    permission_denied,
    validation_failed,
)
from bto.repository.base import Repository
from bto.services.inventory_ledger import InventoryLedger
from bto.utils.logger import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class BookingReceipt:
    """Joined view of a booking for the applicant's records."""

    booking_id: int
    application_id: int
    applicant_name: str
    applicant_nric: str
    age: int
    marital_status: MaritalStatus
    flat_type: FlatType
    project_id: int
    project_name: str
    neighborhood: str
    agent_name: str
    agent_nric: str
    booked_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "booking_id": self.booking_id,
            "application_id": self.application_id,
            "applicant_name": self.applicant_name,
            "applicant_nric": self.applicant_nric,
            "age": self.age,
            "marital_status": self.marital_status.value,
            "flat_type": self.flat_type.value,
            "project_id": self.project_id,
            "project_name": self.project_name,
            "neighborhood": self.neighborhood,
            "agent_name": self.agent_name,
            "agent_nric": self.agent_nric,
            "booked_at": self.booked_at.isoformat(),
        }

    def render(self) -> str:
        lines = [
            "BOOKING RECEIPT",
            f"Booking ID     : {self.booking_id}",
            f"Application ID : {self.application_id}",
            f"Applicant      : {self.applicant_name} ({self.applicant_nric})",
            f"Age            : {self.age}",
            f"Marital status : {self.marital_status.value.title()}",
            f"Flat type      : {self.flat_type.display_name}",
            f"Project        : {self.project_name} ({self.neighborhood})",
            f"Booked by      : {self.agent_name} ({self.agent_nric})",
            f"Booked at      : {self.booked_at:%Y-%m-%d %H:%M}",
        ]
        return "\n".join(lines)


class BookingWorkflowService:
    """Turns SUCCESSFUL applications into bookings through the inventory ledger."""

    def __init__(
        self,
        repository: Repository,
        ledger: Optional[InventoryLedger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repository = repository
        self._ledger = ledger or InventoryLedger(repository)
        self._clock = clock or datetime.now

    def create_booking(
        self, application_id: int, chosen_flat_type: FlatType, agent_nric: str
    ) -> OperationResult[FlatBooking]:
        agent = agent_nric.upper()
        with self._repository.unit_of_work():
            application = self._repository.get_application(application_id)
            if application is None:
                return not_found(
                    "application_not_found", f"Application {application_id} does not exist"
                )
            if application.status != ApplicationStatus.SUCCESSFUL:
                return invalid_state(
                    "not_successful",
                    f"Application {application_id} is {application.status.value}, not SUCCESSFUL",
                )
            project = self._repository.get_project(application.project_id)
            if project is None:
                return not_found(
                    "project_not_found", f"Project {application.project_id} does not exist"
                )
            agent_user = self._repository.get_user(agent)
            if agent_user is None or agent_user.role != UserRole.OFFICER or agent not in project.assigned_agents:
                return permission_denied(
                    "not_assigned_agent",
                    f"{agent} is not an officer assigned to project {project.project_id}",
                )
            if not project.offers(chosen_flat_type):
                return validation_failed(
                    "flat_type_not_offered",
                    f"Project {project.project_id} does not offer {chosen_flat_type.display_name} flats",
                )
            applicant = self._repository.get_user(application.applicant_nric)
            if applicant is None:
                return not_found(
                    "user_not_found", f"Applicant {application.applicant_nric} does not exist"
                )
            if not applicant_eligible(applicant.age, applicant.marital_status, chosen_flat_type):
                return validation_failed(
                    "ineligible",
                    f"{applicant.nric} is not eligible for {chosen_flat_type.display_name} flats",
                )

            if not self._ledger.decrement(project.project_id, chosen_flat_type):
                return capacity_exceeded(
                    "no_units_available",
                    f"No {chosen_flat_type.display_name} units left in project {project.project_id}",
                )

            booking = self._repository.put_booking(
                FlatBooking(
                    booking_id=None,
                    application_id=application_id,
                    applicant_nric=application.applicant_nric,
                    project_id=project.project_id,
                    flat_type=chosen_flat_type,
                    agent_nric=agent,
                    booked_at=self._clock(),
                )
            )
            self._repository.put_application(
                replace(
                    application,
                    status=ApplicationStatus.BOOKED,
                    booked_flat_type=chosen_flat_type,
                    booking_id=booking.booking_id,
                )
            )
        logger.info(
            "Flat booked | booking_id=%s | application_id=%s | flat_type=%s | agent=%s",
            booking.booking_id,
            application_id,
            chosen_flat_type.value,
            agent,
        )
        return OperationResult.success(booking, "Flat booked")

    def retrieve_application_for_booking(
        self, applicant_nric: str
    ) -> OperationResult[HousingApplication]:
        for application in self._repository.list_applications_by_applicant(applicant_nric):
            if application.status == ApplicationStatus.SUCCESSFUL:
                return OperationResult.success(application)
        return not_found(
            "no_successful_application",
            f"{applicant_nric.upper()} has no SUCCESSFUL application awaiting booking",
        )

    def generate_receipt(self, booking_id: int) -> OperationResult[BookingReceipt]:
        booking = self._repository.get_booking(booking_id)
        if booking is None:
            return not_found("booking_not_found", f"Booking {booking_id} does not exist")
        application = self._repository.get_application(booking.application_id)
        project = self._repository.get_project(booking.project_id)
        applicant = self._repository.get_user(booking.applicant_nric)
        agent = self._repository.get_user(booking.agent_nric)
        if application is None or project is None or applicant is None or agent is None:
            logger.warning("Receipt references missing records | booking_id=%s", booking_id)
            return not_found(
                "receipt_incomplete", f"Booking {booking_id} references records that no longer exist"
            )
        return OperationResult.success(
            BookingReceipt(
                booking_id=booking_id,
                application_id=application.application_id,
                applicant_name=applicant.name,
                applicant_nric=applicant.nric,
                age=applicant.age,
                marital_status=applicant.marital_status,
                flat_type=booking.flat_type,
                project_id=project.project_id,
                project_name=project.name,
                neighborhood=project.neighborhood,
                agent_name=agent.name,
                agent_nric=agent.nric,
                booked_at=booking.booked_at,
            )
        )

    def receipt_for_applicant(self, applicant_nric: str) -> OperationResult[BookingReceipt]:
        for application in self._repository.list_applications_by_applicant(applicant_nric):
            if application.status == ApplicationStatus.BOOKED and application.booking_id is not None:
                return self.generate_receipt(application.booking_id)
        return not_found("no_booking", f"{applicant_nric.upper()} has no booked flat")
