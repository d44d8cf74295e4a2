from __future__ import annotations

from datetime import date

from bto.domain.models import AgentRegistration, FlatType, RegistrationStatus
from bto.domain.results import ErrorKind
from factories import (
    APPLICANT_SINGLE,
    MANAGER,
    MANAGER_2,
    OFFICER,
    OFFICER_2,
    make_project,
)


def test_register_creates_pending_registration(services, repository) -> None:
    project = make_project(repository)

    result = services.registrations.register(OFFICER, project.project_id)

    assert result.ok
    assert result.value.status == RegistrationStatus.PENDING
    assert services.registrations.pending_for_project(project.project_id) == [result.value]


def test_only_officers_register(services, repository) -> None:
    project = make_project(repository)

    assert services.registrations.register(APPLICANT_SINGLE, project.project_id).code == "not_officer"
    assert services.registrations.register(OFFICER, 404).kind == ErrorKind.NOT_FOUND


def test_duplicate_registration_conflicts(services, repository) -> None:
    project = make_project(repository)
    services.registrations.register(OFFICER, project.project_id)

    result = services.registrations.register(OFFICER, project.project_id)

    assert result.kind == ErrorKind.CONFLICT


def test_officer_who_applied_cannot_register(services, repository) -> None:
    project = make_project(repository)
    services.applications.submit(OFFICER, project.project_id, FlatType.TWO_ROOM)

    result = services.registrations.register(OFFICER, project.project_id)

    assert result.code == "applied_for_project"


def test_approval_assigns_officer_to_project(services, repository) -> None:
    project = make_project(repository)
    registration = services.registrations.register(OFFICER, project.project_id).value

    result = services.registrations.approve(registration.registration_id, MANAGER)

    assert result.value.status == RegistrationStatus.APPROVED
    assert repository.get_project(project.project_id).assigned_agents == (OFFICER,)
    assert services.projects.handling_project(OFFICER).project_id == project.project_id


def test_first_approval_wins_the_last_slot(services, repository) -> None:
    project = make_project(repository, slots=1)
    first = services.registrations.register(OFFICER, project.project_id).value
    second = services.registrations.register(OFFICER_2, project.project_id).value

    services.registrations.approve(first.registration_id, MANAGER)
    outcome = services.registrations.approve(second.registration_id, MANAGER)

    assert outcome.kind == ErrorKind.CAPACITY_EXCEEDED
    assert repository.get_registration(second.registration_id).status == RegistrationStatus.REJECTED
    assert repository.get_project(project.project_id).assigned_agents == (OFFICER,)


def test_approving_an_already_assigned_officer_conflicts(services, repository) -> None:
    project = make_project(repository, agents=(OFFICER,))
    stale = repository.put_registration(
        AgentRegistration(registration_id=None, agent_nric=OFFICER, project_id=project.project_id)
    )

    outcome = services.registrations.approve(stale.registration_id, MANAGER)

    assert outcome.kind == ErrorKind.CONFLICT
    assert outcome.code == "already_assigned"
    assert repository.get_registration(stale.registration_id).status == RegistrationStatus.REJECTED
    assert repository.get_project(project.project_id).assigned_agents == (OFFICER,)


def test_approved_officer_cannot_register_for_overlapping_project(services, repository) -> None:
    handled = make_project(repository)
    overlapping = make_project(
        repository, name="Boon Lay Glade", manager=MANAGER_2, opening=date(2026, 12, 31), closing=date(2027, 3, 1)
    )
    later = make_project(
        repository, name="Clementi Crest", manager=MANAGER_2, opening=date(2027, 6, 1), closing=date(2027, 9, 1)
    )
    registration = services.registrations.register(OFFICER, handled.project_id).value
    services.registrations.approve(registration.registration_id, MANAGER)

    blocked = services.registrations.register(OFFICER, overlapping.project_id)
    allowed = services.registrations.register(OFFICER, later.project_id)

    assert blocked.code == "approved_overlap"
    assert allowed.ok


def test_pending_registration_blocks_overlapping_one(services, repository) -> None:
    first = make_project(repository)
    second = make_project(repository, name="Boon Lay Glade", manager=MANAGER_2)
    services.registrations.register(OFFICER, first.project_id)

    assert services.registrations.register(OFFICER, second.project_id).code == "pending_overlap"


def test_decisions_belong_to_the_project_manager(services, repository) -> None:
    project = make_project(repository)
    registration = services.registrations.register(OFFICER, project.project_id).value

    denied = services.registrations.approve(registration.registration_id, MANAGER_2)
    rejected = services.registrations.reject(registration.registration_id, MANAGER)
    again = services.registrations.approve(registration.registration_id, MANAGER)

    assert denied.kind == ErrorKind.PERMISSION_DENIED
    assert rejected.value.status == RegistrationStatus.REJECTED
    assert again.kind == ErrorKind.INVALID_STATE
    assert services.registrations.pending_for_project(project.project_id) == []


def test_registrations_for_agent_newest_first(services, repository) -> None:
    first = make_project(repository)
    second = make_project(
        repository, name="Boon Lay Glade", manager=MANAGER_2, opening=date(2027, 1, 1), closing=date(2027, 2, 1)
    )
    services.registrations.register(OFFICER, first.project_id)
    services.registrations.register(OFFICER, second.project_id)

    listed = services.registrations.registrations_for_agent(OFFICER)

    assert [registration.project_id for registration in listed] == [second.project_id, first.project_id]
