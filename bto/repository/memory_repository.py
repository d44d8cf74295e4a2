"""Dictionary-backed repository used by tests and what-if tooling."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import replace
from threading import RLock
from typing import Any, Iterator, Optional

from bto.domain.models import (
    AgentRegistration,
    Enquiry,
    FlatBooking,
    HousingApplication,
    Project,
    User,
)


class InMemoryRepository:
    """Holds frozen entities in dicts; a unit of work snapshots and restores them.

    Entities are immutable, so a shallow copy of each table is a complete
    snapshot.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._depth = 0
        self._users: dict[str, User] = {}
        self._projects: dict[int, Project] = {}
        self._applications: dict[int, HousingApplication] = {}
        self._bookings: dict[int, FlatBooking] = {}
        self._registrations: dict[int, AgentRegistration] = {}
        self._enquiries: dict[int, Enquiry] = {}
        self._sequences: dict[str, int] = {
            "project": 0,
            "application": 0,
            "booking": 0,
            "registration": 0,
            "enquiry": 0,
        }

    def _snapshot(self) -> dict[str, Any]:
        return {
            "users": dict(self._users),
            "projects": dict(self._projects),
            "applications": dict(self._applications),
            "bookings": dict(self._bookings),
            "registrations": dict(self._registrations),
            "enquiries": dict(self._enquiries),
            "sequences": dict(self._sequences),
        }

    def _restore(self, snapshot: dict[str, Any]) -> None:
        self._users = snapshot["users"]
        self._projects = snapshot["projects"]
        self._applications = snapshot["applications"]
        self._bookings = snapshot["bookings"]
        self._registrations = snapshot["registrations"]
        self._enquiries = snapshot["enquiries"]
        self._sequences = snapshot["sequences"]

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        with self._lock:
            outermost = self._depth == 0
            snapshot = self._snapshot() if outermost else None
            self._depth += 1
            try:
                yield
            except BaseException:
                if snapshot is not None:
                    self._restore(snapshot)
                raise
            finally:
                self._depth -= 1

    def _next_id(self, name: str, candidate: Optional[int]) -> int:
        if candidate is not None:
            self._sequences[name] = max(self._sequences[name], candidate)
            return candidate
        self._sequences[name] += 1
        return self._sequences[name]

    # --- users ---

    def get_user(self, nric: str) -> Optional[User]:
        return self._users.get(nric.upper())

    def put_user(self, user: User) -> User:
        with self._lock:
            stored = replace(user, nric=user.nric.upper())
            self._users[stored.nric] = stored
            return stored

    def list_users(self) -> list[User]:
        return sorted(self._users.values(), key=lambda user: user.nric)

    # --- projects ---

    def get_project(self, project_id: int) -> Optional[Project]:
        return self._projects.get(project_id)

    def put_project(self, project: Project) -> Project:
        with self._lock:
            stored = replace(
                project,
                project_id=self._next_id("project", project.project_id),
                total_units=dict(project.total_units),
                available_units=dict(project.available_units),
                assigned_agents=tuple(project.assigned_agents),
            )
            self._projects[stored.project_id] = stored
            return stored

    def list_projects(self) -> list[Project]:
        return [self._projects[key] for key in sorted(self._projects)]

    def delete_project_cascade(self, project_id: int) -> None:
        with self._lock:
            self._projects.pop(project_id, None)
            self._applications = {
                key: value for key, value in self._applications.items()
                if value.project_id != project_id
            }
            self._bookings = {
                key: value for key, value in self._bookings.items()
                if value.project_id != project_id
            }
            self._registrations = {
                key: value for key, value in self._registrations.items()
                if value.project_id != project_id
            }
            self._enquiries = {
                key: value for key, value in self._enquiries.items()
                if value.project_id != project_id
            }

    # --- applications ---

    def get_application(self, application_id: int) -> Optional[HousingApplication]:
        return self._applications.get(application_id)

    def put_application(self, application: HousingApplication) -> HousingApplication:
        with self._lock:
            stored = replace(
                application,
                application_id=self._next_id("application", application.application_id),
            )
            self._applications[stored.application_id] = stored
            return stored

    def list_applications(self) -> list[HousingApplication]:
        return [self._applications[key] for key in sorted(self._applications)]

    def list_applications_by_applicant(self, applicant_nric: str) -> list[HousingApplication]:
        nric = applicant_nric.upper()
        return [item for item in self.list_applications() if item.applicant_nric == nric]

    def list_applications_by_project(self, project_id: int) -> list[HousingApplication]:
        return [item for item in self.list_applications() if item.project_id == project_id]

    # --- bookings ---

    def get_booking(self, booking_id: int) -> Optional[FlatBooking]:
        return self._bookings.get(booking_id)

    def put_booking(self, booking: FlatBooking) -> FlatBooking:
        with self._lock:
            stored = replace(booking, booking_id=self._next_id("booking", booking.booking_id))
            self._bookings[stored.booking_id] = stored
            return stored

    def delete_booking(self, booking_id: int) -> None:
        with self._lock:
            self._bookings.pop(booking_id, None)

    def list_bookings(self) -> list[FlatBooking]:
        return [self._bookings[key] for key in sorted(self._bookings)]

    # --- registrations ---

    def get_registration(self, registration_id: int) -> Optional[AgentRegistration]:
        return self._registrations.get(registration_id)

    def put_registration(self, registration: AgentRegistration) -> AgentRegistration:
        with self._lock:
            stored = replace(
                registration,
                registration_id=self._next_id("registration", registration.registration_id),
            )
            self._registrations[stored.registration_id] = stored
            return stored

    def list_registrations_by_agent(self, agent_nric: str) -> list[AgentRegistration]:
        nric = agent_nric.upper()
        return [
            self._registrations[key]
            for key in sorted(self._registrations)
            if self._registrations[key].agent_nric == nric
        ]

    def list_registrations_by_project(self, project_id: int) -> list[AgentRegistration]:
        return [
            self._registrations[key]
            for key in sorted(self._registrations)
            if self._registrations[key].project_id == project_id
        ]

    # --- enquiries ---

    def get_enquiry(self, enquiry_id: int) -> Optional[Enquiry]:
        return self._enquiries.get(enquiry_id)

    def put_enquiry(self, enquiry: Enquiry) -> Enquiry:
        with self._lock:
            stored = replace(
                enquiry,
                enquiry_id=self._next_id("enquiry", enquiry.enquiry_id),
                replies=tuple(enquiry.replies),
            )
            self._enquiries[stored.enquiry_id] = stored
            return stored

    def delete_enquiry(self, enquiry_id: int) -> None:
        with self._lock:
            self._enquiries.pop(enquiry_id, None)

    def list_enquiries(self) -> list[Enquiry]:
        return [self._enquiries[key] for key in sorted(self._enquiries)]
