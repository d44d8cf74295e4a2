"""Tests for applicant and officer eligibility predicates."""

from __future__ import annotations

from datetime import date

import pytest

from bto.domain.eligibility import (
    agent_eligible_for_project,
    applicant_eligible,
    periods_overlap,
)
from bto.domain.models import (
    AgentRegistration,
    FlatType,
    HousingApplication,
    MaritalStatus,
    RegistrationStatus,
)
from bto.domain.results import ErrorKind
from factories import MANAGER_2, OFFICER, make_project


@pytest.mark.parametrize(
    ("age", "marital_status", "flat_type", "expected"),
    [
        (34, MaritalStatus.SINGLE, FlatType.TWO_ROOM, False),
        (35, MaritalStatus.SINGLE, FlatType.TWO_ROOM, True),
        (35, MaritalStatus.SINGLE, FlatType.THREE_ROOM, False),
        (21, MaritalStatus.MARRIED, FlatType.THREE_ROOM, True),
        (21, MaritalStatus.MARRIED, FlatType.TWO_ROOM, True),
        (20, MaritalStatus.MARRIED, FlatType.TWO_ROOM, False),
    ],
)
def test_applicant_eligibility_table(age, marital_status, flat_type, expected) -> None:
    assert applicant_eligible(age, marital_status, flat_type) is expected


def test_periods_touching_on_one_day_overlap() -> None:
    assert periods_overlap(date(2024, 1, 1), date(2024, 3, 1), date(2024, 3, 1), date(2024, 4, 1))


def test_disjoint_periods_do_not_overlap() -> None:
    assert not periods_overlap(
        date(2024, 1, 1), date(2024, 2, 29), date(2024, 3, 1), date(2024, 4, 1)
    )


def _two_windows(repository):
    project_x = make_project(
        repository, name="X", opening=date(2024, 1, 1), closing=date(2024, 3, 1)
    )
    project_y = make_project(
        repository,
        name="Y",
        opening=date(2024, 2, 1),
        closing=date(2024, 4, 1),
        manager=MANAGER_2,
    )
    return project_x, project_y


def test_approved_overlapping_registration_blocks_agent(repository) -> None:
    project_x, project_y = _two_windows(repository)
    repository.put_registration(
        AgentRegistration(
            registration_id=None,
            agent_nric=OFFICER,
            project_id=project_x.project_id,
            status=RegistrationStatus.APPROVED,
        )
    )

    verdict = agent_eligible_for_project(OFFICER, project_y.project_id, repository)

    assert verdict.eligible is False
    assert verdict.kind == ErrorKind.VALIDATION_FAILED
    assert verdict.reason == "approved_overlap"


def test_pending_overlapping_registration_blocks_agent(repository) -> None:
    project_x, project_y = _two_windows(repository)
    repository.put_registration(
        AgentRegistration(registration_id=None, agent_nric=OFFICER, project_id=project_x.project_id)
    )

    verdict = agent_eligible_for_project(OFFICER, project_y.project_id, repository)

    assert verdict.reason == "pending_overlap"


def test_rejected_registration_does_not_block(repository) -> None:
    project_x, project_y = _two_windows(repository)
    repository.put_registration(
        AgentRegistration(
            registration_id=None,
            agent_nric=OFFICER,
            project_id=project_x.project_id,
            status=RegistrationStatus.REJECTED,
        )
    )

    assert agent_eligible_for_project(OFFICER, project_y.project_id, repository).eligible


def test_agent_with_application_for_project_is_ineligible(repository) -> None:
    project = make_project(repository)
    repository.put_application(
        HousingApplication(
            application_id=None,
            applicant_nric=OFFICER,
            project_id=project.project_id,
            applied_flat_type=FlatType.TWO_ROOM,
        )
    )

    verdict = agent_eligible_for_project(OFFICER, project.project_id, repository)

    assert verdict.eligible is False
    assert verdict.reason == "applied_for_project"


def test_missing_project_reports_not_found(repository) -> None:
    verdict = agent_eligible_for_project(OFFICER, 999, repository)

    assert verdict.eligible is False
    assert verdict.kind == ErrorKind.NOT_FOUND
