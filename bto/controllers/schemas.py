"""Response DTOs shared by the routers."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from bto.domain.models import (
    AgentRegistration,
    Enquiry,
    FlatBooking,
    FlatType,
    HousingApplication,
    Project,
    User,
)


def parse_flat_type(value: str) -> FlatType:
    flat_type = FlatType.parse(value)
    if flat_type is None:
        raise ValueError("flat_type must be one of 2-Room or 3-Room")
    return flat_type


class FlatTypeRequest(BaseModel):
    """Mixin-style base for payloads carrying a flat type."""

    flat_type: str = Field(min_length=1)

    @field_validator("flat_type")
    @classmethod
    def validate_flat_type(cls, value: str) -> str:
        return parse_flat_type(value).value


class UserResponse(BaseModel):
    nric: str
    name: str
    age: int = Field(gt=0)
    marital_status: str
    role: str

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            nric=user.nric,
            name=user.name,
            age=user.age,
            marital_status=user.marital_status.value,
            role=user.role.value,
        )


class ProjectResponse(BaseModel):
    project_id: int = Field(gt=0)
    name: str
    neighborhood: str
    total_units: dict[str, int]
    available_units: dict[str, int]
    opening_date: date
    closing_date: date
    manager_nric: str
    max_agent_slots: int = Field(gt=0)
    assigned_agents: list[str]
    visible: bool

    @classmethod
    def from_domain(cls, project: Project) -> "ProjectResponse":
        return cls(
            project_id=project.project_id,
            name=project.name,
            neighborhood=project.neighborhood,
            total_units={key.value: value for key, value in project.total_units.items()},
            available_units={key.value: value for key, value in project.available_units.items()},
            opening_date=project.opening_date,
            closing_date=project.closing_date,
            manager_nric=project.manager_nric,
            max_agent_slots=project.max_agent_slots,
            assigned_agents=list(project.assigned_agents),
            visible=project.visible,
        )


class ApplicationResponse(BaseModel):
    application_id: int = Field(gt=0)
    applicant_nric: str
    project_id: int
    applied_flat_type: str
    status: str
    booked_flat_type: Optional[str] = None
    booking_id: Optional[int] = None
    withdrawal_requested: bool
    submitted_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, application: HousingApplication) -> "ApplicationResponse":
        return cls(
            application_id=application.application_id,
            applicant_nric=application.applicant_nric,
            project_id=application.project_id,
            applied_flat_type=application.applied_flat_type.value,
            status=application.status.value,
            booked_flat_type=(
                application.booked_flat_type.value if application.booked_flat_type else None
            ),
            booking_id=application.booking_id,
            withdrawal_requested=application.withdrawal_requested,
            submitted_at=application.submitted_at,
        )


class BookingResponse(BaseModel):
    booking_id: int = Field(gt=0)
    application_id: int
    applicant_nric: str
    project_id: int
    flat_type: str
    agent_nric: str
    booked_at: datetime

    @classmethod
    def from_domain(cls, booking: FlatBooking) -> "BookingResponse":
        return cls(
            booking_id=booking.booking_id,
            application_id=booking.application_id,
            applicant_nric=booking.applicant_nric,
            project_id=booking.project_id,
            flat_type=booking.flat_type.value,
            agent_nric=booking.agent_nric,
            booked_at=booking.booked_at,
        )


class RegistrationResponse(BaseModel):
    registration_id: int = Field(gt=0)
    agent_nric: str
    project_id: int
    status: str
    requested_at: Optional[datetime] = None
    decided_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, registration: AgentRegistration) -> "RegistrationResponse":
        return cls(
            registration_id=registration.registration_id,
            agent_nric=registration.agent_nric,
            project_id=registration.project_id,
            status=registration.status.value,
            requested_at=registration.requested_at,
            decided_at=registration.decided_at,
        )


class ReplyResponse(BaseModel):
    author_nric: str
    author_label: str
    text: str
    created_at: datetime


class EnquiryResponse(BaseModel):
    enquiry_id: int = Field(gt=0)
    submitter_nric: str
    project_id: int
    content: str
    status: str
    replies: list[ReplyResponse]
    submitted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, enquiry: Enquiry) -> "EnquiryResponse":
        return cls(
            enquiry_id=enquiry.enquiry_id,
            submitter_nric=enquiry.submitter_nric,
            project_id=enquiry.project_id,
            content=enquiry.content,
            status=enquiry.status.value,
            replies=[
                ReplyResponse(
                    author_nric=reply.author_nric,
                    author_label=reply.author_label,
                    text=reply.text,
                    created_at=reply.created_at,
                )
                for reply in enquiry.replies
            ],
            submitted_at=enquiry.submitted_at,
            updated_at=enquiry.updated_at,
        )


class MessageResponse(BaseModel):
    message: str
