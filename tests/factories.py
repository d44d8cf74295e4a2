"""Builders shared by the test modules."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from bto.domain.models import FlatType, MaritalStatus, Project, User, UserRole
from bto.repository.memory_repository import InMemoryRepository
from bto.services.application_service import ApplicationLifecycleService
from bto.services.booking_service import BookingWorkflowService
from bto.services.enquiry_service import EnquiryService
from bto.services.inventory_ledger import InventoryLedger
from bto.services.project_service import ProjectService
from bto.services.registration_service import RegistrationService
from bto.services.report_service import ReportService
from bto.utils.security import hash_password


FIXED_NOW = datetime(2026, 5, 1, 9, 30)

APPLICANT_SINGLE = "S1234567A"   # 35, single
APPLICANT_MARRIED = "T7654321B"  # 40, married
APPLICANT_YOUNG = "S3456789E"    # 34, single
APPLICANT_COUPLE = "S9876543C"   # 21, married
OFFICER = "T2109876H"
OFFICER_2 = "S6543210I"
MANAGER = "T8765432F"
MANAGER_2 = "S5678901G"


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_user(
    nric: str,
    name: str,
    age: int,
    marital_status: MaritalStatus,
    role: UserRole,
    password: str = "password",
) -> User:
    return User(
        nric=nric,
        name=name,
        age=age,
        marital_status=marital_status,
        role=role,
        password_hash=hash_password(password, iterations=1_000),
    )


PEOPLE = [
    (APPLICANT_SINGLE, "John Tan", 35, MaritalStatus.SINGLE, UserRole.APPLICANT),
    (APPLICANT_MARRIED, "Sarah Lim", 40, MaritalStatus.MARRIED, UserRole.APPLICANT),
    (APPLICANT_YOUNG, "Rachel Goh", 34, MaritalStatus.SINGLE, UserRole.APPLICANT),
    (APPLICANT_COUPLE, "Grace Ng", 21, MaritalStatus.MARRIED, UserRole.APPLICANT),
    (OFFICER, "Daniel Ong", 36, MaritalStatus.SINGLE, UserRole.OFFICER),
    (OFFICER_2, "Emily Teo", 28, MaritalStatus.MARRIED, UserRole.OFFICER),
    (MANAGER, "Michael Seah", 36, MaritalStatus.SINGLE, UserRole.MANAGER),
    (MANAGER_2, "Jessica Yeo", 26, MaritalStatus.MARRIED, UserRole.MANAGER),
]


def seed_people(repository) -> None:
    for nric, name, age, marital_status, role in PEOPLE:
        repository.put_user(make_user(nric, name, age, marital_status, role))


def make_project(
    repository,
    *,
    name: str = "Acacia Breeze",
    neighborhood: str = "Yishun",
    two_room: int = 1,
    three_room: int = 0,
    opening: date = date(2026, 1, 1),
    closing: date = date(2026, 12, 31),
    manager: str = MANAGER,
    slots: int = 3,
    agents: tuple[str, ...] = (),
    visible: bool = True,
) -> Project:
    totals = {FlatType.TWO_ROOM: two_room, FlatType.THREE_ROOM: three_room}
    return repository.put_project(
        Project(
            project_id=None,
            name=name,
            neighborhood=neighborhood,
            total_units=totals,
            available_units=dict(totals),
            opening_date=opening,
            closing_date=closing,
            manager_nric=manager,
            max_agent_slots=slots,
            assigned_agents=agents,
            visible=visible,
        )
    )


@dataclass
class Services:
    repository: object
    ledger: InventoryLedger
    applications: ApplicationLifecycleService
    bookings: BookingWorkflowService
    projects: ProjectService
    registrations: RegistrationService
    enquiries: EnquiryService
    reports: ReportService


def build_services(repository) -> Services:
    ledger = InventoryLedger(repository)
    return Services(
        repository=repository,
        ledger=ledger,
        applications=ApplicationLifecycleService(repository, ledger=ledger, clock=fixed_clock),
        bookings=BookingWorkflowService(repository, ledger=ledger, clock=fixed_clock),
        projects=ProjectService(repository, clock=fixed_clock),
        registrations=RegistrationService(repository, clock=fixed_clock),
        enquiries=EnquiryService(repository, clock=fixed_clock),
        reports=ReportService(repository),
    )


def new_repository() -> InMemoryRepository:
    repository = InMemoryRepository()
    seed_people(repository)
    return repository
