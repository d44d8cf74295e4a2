"""Eligibility predicates gating applications and officer registrations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol, Sequence

from bto.domain.models import (
    AgentRegistration,
    FlatType,
    HousingApplication,
    MaritalStatus,
    Project,
    RegistrationStatus,
)
from bto.domain.results import ErrorKind


SINGLE_MIN_AGE = 35
MARRIED_MIN_AGE = 21

_SINGLE_FLAT_TYPES = frozenset({FlatType.TWO_ROOM})
_MARRIED_FLAT_TYPES = frozenset({FlatType.TWO_ROOM, FlatType.THREE_ROOM})


class EligibilityView(Protocol):
    """Read-only slice of the repository the agent rules need."""

    def get_project(self, project_id: int) -> Optional[Project]: ...

    def list_applications_by_applicant(self, applicant_nric: str) -> Sequence[HousingApplication]: ...

    def list_registrations_by_agent(self, agent_nric: str) -> Sequence[AgentRegistration]: ...


@dataclass(frozen=True)
class EligibilityVerdict:
    eligible: bool
    kind: Optional[ErrorKind] = None
    reason: str = ""
    message: str = ""


ELIGIBLE = EligibilityVerdict(eligible=True)


def applicant_eligible(age: int, marital_status: MaritalStatus, flat_type: FlatType) -> bool:
    if marital_status == MaritalStatus.SINGLE:
        return age >= SINGLE_MIN_AGE and flat_type in _SINGLE_FLAT_TYPES
    if marital_status == MaritalStatus.MARRIED:
        return age >= MARRIED_MIN_AGE and flat_type in _MARRIED_FLAT_TYPES
    return False


def periods_overlap(a_open: date, a_close: date, b_open: date, b_close: date) -> bool:
    """Inclusive overlap: touching on a single day counts."""
    return not (a_open > b_close) and not (a_close < b_open)


def projects_overlap(first: Project, second: Project) -> bool:
    return periods_overlap(
        first.opening_date,
        first.closing_date,
        second.opening_date,
        second.closing_date,
    )


def _has_overlapping_registration(
    registrations: Sequence[AgentRegistration],
    status: RegistrationStatus,
    target: Project,
    view: EligibilityView,
) -> Optional[Project]:
    for registration in registrations:
        if registration.status != status or registration.project_id == target.project_id:
            continue
        other = view.get_project(registration.project_id)
        if other is not None and projects_overlap(other, target):
            return other
    return None


def agent_eligible_for_project(
    agent_nric: str,
    project_id: int,
    view: EligibilityView,
) -> EligibilityVerdict:
    """Check the three officer-registration rules; reports, never raises."""
    target = view.get_project(project_id)
    if target is None:
        return EligibilityVerdict(
            eligible=False,
            kind=ErrorKind.NOT_FOUND,
            reason="project_not_found",
            message=f"Project {project_id} does not exist",
        )

    if any(
        application.project_id == project_id
        for application in view.list_applications_by_applicant(agent_nric)
    ):
        return EligibilityVerdict(
            eligible=False,
            kind=ErrorKind.VALIDATION_FAILED,
            reason="applied_for_project",
            message=(
                f"Officer {agent_nric} has submitted an application for project "
                f"{project_id} and cannot handle it"
            ),
        )

    registrations = view.list_registrations_by_agent(agent_nric)
    handled = _has_overlapping_registration(
        registrations, RegistrationStatus.APPROVED, target, view
    )
    if handled is not None:
        return EligibilityVerdict(
            eligible=False,
            kind=ErrorKind.VALIDATION_FAILED,
            reason="approved_overlap",
            message=(
                f"Officer {agent_nric} already handles project {handled.project_id} "
                "with an overlapping application period"
            ),
        )

    pending = _has_overlapping_registration(
        registrations, RegistrationStatus.PENDING, target, view
    )
    if pending is not None:
        return EligibilityVerdict(
            eligible=False,
            kind=ErrorKind.VALIDATION_FAILED,
            reason="pending_overlap",
            message=(
                f"Officer {agent_nric} has a pending registration for project "
                f"{pending.project_id} with an overlapping application period"
            ),
        )

    return ELIGIBLE
