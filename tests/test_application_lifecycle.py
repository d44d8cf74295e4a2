"""Tests for the housing-application state machine."""

from __future__ import annotations

from dataclasses import replace
from datetime import date

from bto.domain.models import AgentRegistration, ApplicationStatus, FlatType
from bto.domain.results import ErrorKind
from factories import (
    APPLICANT_MARRIED,
    APPLICANT_SINGLE,
    APPLICANT_YOUNG,
    MANAGER,
    MANAGER_2,
    OFFICER,
    make_project,
)


def test_submit_creates_pending_application(services, repository) -> None:
    project = make_project(repository)

    result = services.applications.submit(APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM)

    assert result.ok
    assert result.value.status == ApplicationStatus.PENDING
    assert result.value.application_id is not None
    assert repository.get_application(result.value.application_id) == result.value


def test_scenario_exhausted_stock_marks_second_approval_unsuccessful(services, repository) -> None:
    project = make_project(repository, two_room=1, agents=(OFFICER,))
    first = services.applications.submit(APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM).value

    approved = services.applications.approve(first.application_id, MANAGER)
    assert approved.value.status == ApplicationStatus.SUCCESSFUL
    assert repository.get_project(project.project_id).available(FlatType.TWO_ROOM) == 1

    booked = services.bookings.create_booking(first.application_id, FlatType.TWO_ROOM, OFFICER)
    assert booked.ok
    assert repository.get_project(project.project_id).available(FlatType.TWO_ROOM) == 0

    second = services.applications.submit(APPLICANT_MARRIED, project.project_id, FlatType.TWO_ROOM)
    assert second.ok

    outcome = services.applications.approve(second.value.application_id, MANAGER)

    assert outcome.kind == ErrorKind.CAPACITY_EXCEEDED
    assert repository.get_application(second.value.application_id).status == ApplicationStatus.UNSUCCESSFUL


def test_second_active_application_is_rejected(services, repository) -> None:
    first_project = make_project(repository)
    second_project = make_project(repository, name="Boon Lay Glade", manager=MANAGER_2)
    services.applications.submit(APPLICANT_SINGLE, first_project.project_id, FlatType.TWO_ROOM)

    result = services.applications.submit(APPLICANT_SINGLE, second_project.project_id, FlatType.TWO_ROOM)

    assert result.kind == ErrorKind.CONFLICT
    assert result.code == "active_application_exists"
    assert len(repository.list_applications_by_applicant(APPLICANT_SINGLE)) == 1


def test_can_reapply_after_unsuccessful(services, repository) -> None:
    project = make_project(repository)
    first = services.applications.submit(APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM).value
    services.applications.reject(first.application_id, MANAGER)

    again = services.applications.submit(APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM)

    assert again.ok


def test_submit_rejects_hidden_project(services, repository) -> None:
    project = make_project(repository, visible=False)

    result = services.applications.submit(APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM)

    assert result.kind == ErrorKind.VALIDATION_FAILED
    assert result.code == "project_hidden"


def test_submit_outside_window_fails(services, repository) -> None:
    project = make_project(repository, opening=date(2026, 6, 1), closing=date(2026, 7, 1))

    result = services.applications.submit(APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM)

    assert result.code == "window_closed"
    assert repository.list_applications() == []


def test_submit_on_closing_day_is_inside_window(services, repository) -> None:
    project = make_project(repository, opening=date(2026, 4, 1), closing=date(2026, 5, 1))

    assert services.applications.submit(APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM).ok


def test_submit_for_type_not_offered_fails(services, repository) -> None:
    project = make_project(repository, two_room=3, three_room=0)

    result = services.applications.submit(APPLICANT_MARRIED, project.project_id, FlatType.THREE_ROOM)

    assert result.code == "flat_type_not_offered"


def test_ineligible_applicant_cannot_submit(services, repository) -> None:
    project = make_project(repository, two_room=3, three_room=3)

    too_young = services.applications.submit(APPLICANT_YOUNG, project.project_id, FlatType.TWO_ROOM)
    single_three_room = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.THREE_ROOM
    )

    assert too_young.code == "ineligible"
    assert single_three_room.code == "ineligible"


def test_manager_cannot_apply(services, repository) -> None:
    project = make_project(repository)

    result = services.applications.submit(MANAGER_2, project.project_id, FlatType.TWO_ROOM)

    assert result.kind == ErrorKind.PERMISSION_DENIED


def test_officer_cannot_apply_for_handled_or_registered_project(services, repository) -> None:
    handled = make_project(repository, agents=(OFFICER,))
    registered = make_project(repository, name="Boon Lay Glade", manager=MANAGER_2)
    repository.put_registration(
        AgentRegistration(registration_id=None, agent_nric=OFFICER, project_id=registered.project_id)
    )

    assert services.applications.submit(OFFICER, handled.project_id, FlatType.TWO_ROOM).code == "handles_project"
    assert (
        services.applications.submit(OFFICER, registered.project_id, FlatType.TWO_ROOM).code
        == "registered_for_project"
    )


def test_only_the_managing_authority_can_approve(services, repository) -> None:
    project = make_project(repository)
    application = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM
    ).value

    result = services.applications.approve(application.application_id, MANAGER_2)

    assert result.kind == ErrorKind.PERMISSION_DENIED
    assert repository.get_application(application.application_id).status == ApplicationStatus.PENDING


def test_approve_requires_pending(services, repository) -> None:
    project = make_project(repository)
    application = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM
    ).value
    services.applications.reject(application.application_id, MANAGER)

    result = services.applications.approve(application.application_id, MANAGER)

    assert result.kind == ErrorKind.INVALID_STATE


def test_approve_unknown_application_is_not_found(services) -> None:
    assert services.applications.approve(42, MANAGER).kind == ErrorKind.NOT_FOUND


def test_withdrawal_request_rules(services, repository) -> None:
    project = make_project(repository)
    application = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM
    ).value

    wrong_owner = services.applications.request_withdrawal(application.application_id, APPLICANT_MARRIED)
    first = services.applications.request_withdrawal(application.application_id, APPLICANT_SINGLE)
    duplicate = services.applications.request_withdrawal(application.application_id, APPLICANT_SINGLE)

    assert wrong_owner.kind == ErrorKind.PERMISSION_DENIED
    assert first.ok and first.value.withdrawal_requested
    assert duplicate.kind == ErrorKind.CONFLICT


def test_withdrawal_cannot_be_requested_on_terminal_application(services, repository) -> None:
    project = make_project(repository)
    application = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM
    ).value
    services.applications.reject(application.application_id, MANAGER)

    result = services.applications.request_withdrawal(application.application_id, APPLICANT_SINGLE)

    assert result.kind == ErrorKind.INVALID_STATE


def test_rejection_clears_a_pending_withdrawal_request(services, repository) -> None:
    project = make_project(repository)
    application = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM
    ).value
    services.applications.request_withdrawal(application.application_id, APPLICANT_SINGLE)

    services.applications.reject(application.application_id, MANAGER)
    late = services.applications.approve_withdrawal(application.application_id, MANAGER)

    stored = repository.get_application(application.application_id)
    assert stored.status == ApplicationStatus.UNSUCCESSFUL
    assert stored.withdrawal_requested is False
    assert late.kind == ErrorKind.INVALID_STATE
    assert services.applications.pending_withdrawals(MANAGER) == []


def test_sold_out_approval_clears_a_pending_withdrawal_request(services, repository) -> None:
    project = make_project(repository, two_room=1, agents=(OFFICER,))
    first = services.applications.submit(APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM).value
    services.applications.approve(first.application_id, MANAGER)
    services.bookings.create_booking(first.application_id, FlatType.TWO_ROOM, OFFICER)
    second = services.applications.submit(APPLICANT_MARRIED, project.project_id, FlatType.TWO_ROOM).value
    services.applications.request_withdrawal(second.application_id, APPLICANT_MARRIED)

    outcome = services.applications.approve(second.application_id, MANAGER)

    stored = repository.get_application(second.application_id)
    assert outcome.kind == ErrorKind.CAPACITY_EXCEEDED
    assert stored.status == ApplicationStatus.UNSUCCESSFUL
    assert stored.withdrawal_requested is False
    assert services.applications.pending_withdrawals(MANAGER) == []


def test_withdrawal_decisions_refuse_terminal_applications(services, repository) -> None:
    project = make_project(repository)
    application = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM
    ).value
    repository.put_application(
        replace(application, status=ApplicationStatus.UNSUCCESSFUL, withdrawal_requested=True)
    )

    approved = services.applications.approve_withdrawal(application.application_id, MANAGER)
    rejected = services.applications.reject_withdrawal(application.application_id, MANAGER)

    assert approved.kind == ErrorKind.INVALID_STATE
    assert approved.code == "terminal_status"
    assert rejected.code == "terminal_status"
    assert repository.get_application(application.application_id).status == ApplicationStatus.UNSUCCESSFUL
    assert services.applications.pending_withdrawals(MANAGER) == []


def test_approve_withdrawal_of_pending_application_leaves_inventory(services, repository) -> None:
    project = make_project(repository, two_room=2)
    application = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM
    ).value
    services.applications.request_withdrawal(application.application_id, APPLICANT_SINGLE)

    result = services.applications.approve_withdrawal(application.application_id, MANAGER)

    assert result.value.status == ApplicationStatus.WITHDRAWN
    assert result.value.withdrawal_requested is False
    assert repository.get_project(project.project_id).available(FlatType.TWO_ROOM) == 2


def test_approve_withdrawal_requires_flag(services, repository) -> None:
    project = make_project(repository)
    application = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM
    ).value

    result = services.applications.approve_withdrawal(application.application_id, MANAGER)

    assert result.kind == ErrorKind.INVALID_STATE


def test_reject_withdrawal_only_clears_flag(services, repository) -> None:
    project = make_project(repository)
    application = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM
    ).value
    services.applications.approve(application.application_id, MANAGER)
    services.applications.request_withdrawal(application.application_id, APPLICANT_SINGLE)

    result = services.applications.reject_withdrawal(application.application_id, MANAGER)

    assert result.value.status == ApplicationStatus.SUCCESSFUL
    assert result.value.withdrawal_requested is False


def test_pending_withdrawals_are_scoped_to_the_manager(services, repository) -> None:
    mine = make_project(repository)
    theirs = make_project(repository, name="Boon Lay Glade", manager=MANAGER_2)
    first = services.applications.submit(APPLICANT_SINGLE, mine.project_id, FlatType.TWO_ROOM).value
    second = services.applications.submit(APPLICANT_MARRIED, theirs.project_id, FlatType.TWO_ROOM).value
    services.applications.request_withdrawal(first.application_id, APPLICANT_SINGLE)
    services.applications.request_withdrawal(second.application_id, APPLICANT_MARRIED)

    pending = services.applications.pending_withdrawals(MANAGER)

    assert [item.application_id for item in pending] == [first.application_id]


def test_current_application_and_project_listing(services, repository) -> None:
    project = make_project(repository)
    application = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM
    ).value

    assert services.applications.current_application(APPLICANT_SINGLE).value == application
    assert services.applications.current_application(APPLICANT_MARRIED).kind == ErrorKind.NOT_FOUND
    assert services.applications.applications_for_project(project.project_id, MANAGER).value == [application]
    assert (
        services.applications.applications_for_project(project.project_id, MANAGER_2).kind
        == ErrorKind.PERMISSION_DENIED
    )
