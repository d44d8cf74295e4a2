"""Repository contract consumed by the rule engine and services."""

from __future__ import annotations

from typing import ContextManager, Optional, Protocol, Sequence

from bto.domain.models import (
    AgentRegistration,
    Enquiry,
    FlatBooking,
    HousingApplication,
    Project,
    User,
)


class RepositoryError(RuntimeError):
    """Raised when the underlying store fails; never used for domain rules."""


class Repository(Protocol):
    """Key-value style access to every entity.

    `put_*` upserts: an entity without an id is inserted and returned with
    the id the store assigned. Writes made inside `unit_of_work()` are
    committed together or not at all.
    """

    def unit_of_work(self) -> ContextManager[None]: ...

    def get_user(self, nric: str) -> Optional[User]: ...

    def put_user(self, user: User) -> User: ...

    def list_users(self) -> Sequence[User]: ...

    def get_project(self, project_id: int) -> Optional[Project]: ...

    def put_project(self, project: Project) -> Project: ...

    def list_projects(self) -> Sequence[Project]: ...

    def delete_project_cascade(self, project_id: int) -> None: ...

    def get_application(self, application_id: int) -> Optional[HousingApplication]: ...

    def put_application(self, application: HousingApplication) -> HousingApplication: ...

    def list_applications(self) -> Sequence[HousingApplication]: ...

    def list_applications_by_applicant(self, applicant_nric: str) -> Sequence[HousingApplication]: ...

    def list_applications_by_project(self, project_id: int) -> Sequence[HousingApplication]: ...

    def get_booking(self, booking_id: int) -> Optional[FlatBooking]: ...

    def put_booking(self, booking: FlatBooking) -> FlatBooking: ...

    def delete_booking(self, booking_id: int) -> None: ...

    def list_bookings(self) -> Sequence[FlatBooking]: ...

    def get_registration(self, registration_id: int) -> Optional[AgentRegistration]: ...

    def put_registration(self, registration: AgentRegistration) -> AgentRegistration: ...

    def list_registrations_by_agent(self, agent_nric: str) -> Sequence[AgentRegistration]: ...

    def list_registrations_by_project(self, project_id: int) -> Sequence[AgentRegistration]: ...

    def get_enquiry(self, enquiry_id: int) -> Optional[Enquiry]: ...

    def put_enquiry(self, enquiry: Enquiry) -> Enquiry: ...

    def delete_enquiry(self, enquiry_id: int) -> None: ...

    def list_enquiries(self) -> Sequence[Enquiry]: ...
