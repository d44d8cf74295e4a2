"""Domain models for housing applications, inventory and bookings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class FlatType(str, Enum):
    TWO_ROOM = "TWO_ROOM"
    THREE_ROOM = "THREE_ROOM"

    @property
    def display_name(self) -> str:
        return _FLAT_TYPE_DISPLAY[self]

    @classmethod
    def parse(cls, text: Optional[str]) -> Optional["FlatType"]:
        """Resolve enum names, display names and loose forms like '2 room'."""
        if text is None:
            return None
        normalized = text.strip().lower()
        if not normalized:
            return None
        for flat_type in cls:
            if normalized in (flat_type.value.lower(), flat_type.display_name.lower()):
                return flat_type
        return _FLAT_TYPE_ALIASES.get(normalized)


_FLAT_TYPE_DISPLAY = {
    FlatType.TWO_ROOM: "2-Room",
    FlatType.THREE_ROOM: "3-Room",
}

_FLAT_TYPE_ALIASES = {
    "2room": FlatType.TWO_ROOM,
    "2 room": FlatType.TWO_ROOM,
    "3room": FlatType.THREE_ROOM,
    "3 room": FlatType.THREE_ROOM,
}


class MaritalStatus(str, Enum):
    SINGLE = "SINGLE"
    MARRIED = "MARRIED"


class UserRole(str, Enum):
    APPLICANT = "APPLICANT"
    OFFICER = "OFFICER"
    MANAGER = "MANAGER"


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESSFUL = "SUCCESSFUL"
    UNSUCCESSFUL = "UNSUCCESSFUL"
    BOOKED = "BOOKED"
    WITHDRAWN = "WITHDRAWN"


ACTIVE_APPLICATION_STATUSES = frozenset(
    {ApplicationStatus.PENDING, ApplicationStatus.SUCCESSFUL, ApplicationStatus.BOOKED}
)
TERMINAL_APPLICATION_STATUSES = frozenset(
    {ApplicationStatus.UNSUCCESSFUL, ApplicationStatus.WITHDRAWN}
)


class RegistrationStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class EnquiryStatus(str, Enum):
    OPEN = "OPEN"
    ANSWERED = "ANSWERED"
    CLOSED = "CLOSED"


@dataclass(frozen=True)
class User:
    nric: str
    name: str
    age: int
    marital_status: MaritalStatus
    role: UserRole
    password_hash: str = ""

    @property
    def label(self) -> str:
        return f"{self.name} ({self.role.value})"


@dataclass(frozen=True)
class Project:
    project_id: Optional[int]
    name: str
    neighborhood: str
    total_units: dict[FlatType, int]
    available_units: dict[FlatType, int]
    opening_date: date
    closing_date: date
    manager_nric: str
    max_agent_slots: int
    assigned_agents: tuple[str, ...] = ()
    visible: bool = False

    def total(self, flat_type: FlatType) -> int:
        return self.total_units.get(flat_type, 0)

    def available(self, flat_type: FlatType) -> int:
        return self.available_units.get(flat_type, 0)

    def offers(self, flat_type: FlatType) -> bool:
        return self.total(flat_type) > 0

    @property
    def remaining_agent_slots(self) -> int:
        return self.max_agent_slots - len(self.assigned_agents)

    def is_open_on(self, day: date) -> bool:
        return self.opening_date <= day <= self.closing_date


@dataclass(frozen=True)
class HousingApplication:
    application_id: Optional[int]
    applicant_nric: str
    project_id: int
    applied_flat_type: FlatType
    status: ApplicationStatus = ApplicationStatus.PENDING
    booked_flat_type: Optional[FlatType] = None
    booking_id: Optional[int] = None
    withdrawal_requested: bool = False
    submitted_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_APPLICATION_STATUSES


@dataclass(frozen=True)
class FlatBooking:
    booking_id: Optional[int]
    application_id: int
    applicant_nric: str
    project_id: int
    flat_type: FlatType
    agent_nric: str
    booked_at: datetime


@dataclass(frozen=True)
class AgentRegistration:
    registration_id: Optional[int]
    agent_nric: str
    project_id: int
    status: RegistrationStatus = RegistrationStatus.PENDING
    requested_at: Optional[datetime] = None
    decided_at: Optional[datetime] = None


@dataclass(frozen=True)
class EnquiryReply:
    author_nric: str
    author_label: str
    text: str
    created_at: datetime


@dataclass(frozen=True)
class Enquiry:
    enquiry_id: Optional[int]
    submitter_nric: str
    project_id: int
    content: str
    status: EnquiryStatus = EnquiryStatus.OPEN
    replies: tuple[EnquiryReply, ...] = field(default_factory=tuple)
    submitted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class BookingReportRow:
    applicant_name: str
    applicant_nric: str
    age: int
    marital_status: MaritalStatus
    flat_type: FlatType
    project_id: int
    project_name: str
    neighborhood: str
