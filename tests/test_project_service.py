from __future__ import annotations

from datetime import date

from bto.domain.constraints import ProjectDetails
from bto.domain.models import Enquiry, FlatType
from bto.domain.results import ErrorKind
from factories import (
    APPLICANT_SINGLE,
    MANAGER,
    MANAGER_2,
    OFFICER,
    OFFICER_2,
    make_project,
)


def details(**overrides) -> ProjectDetails:
    defaults = {
        "name": "Dover Heights",
        "neighborhood": "Queenstown",
        "total_units": {FlatType.TWO_ROOM: 4, FlatType.THREE_ROOM: 6},
        "opening_date": date(2027, 1, 1),
        "closing_date": date(2027, 3, 31),
        "max_agent_slots": 2,
    }
    defaults.update(overrides)
    return ProjectDetails(**defaults)


def test_create_project_starts_hidden_with_full_stock(services) -> None:
    result = services.projects.create_project(MANAGER, details())

    project = result.value
    assert result.ok
    assert project.visible is False
    assert project.available_units == project.total_units
    assert project.manager_nric == MANAGER


def test_only_managers_create_projects(services) -> None:
    assert services.projects.create_project(OFFICER, details()).kind == ErrorKind.PERMISSION_DENIED


def test_invalid_details_fail_validation(services) -> None:
    result = services.projects.create_project(MANAGER, details(max_agent_slots=11))

    assert result.kind == ErrorKind.VALIDATION_FAILED
    assert services.projects.all_projects() == []


def test_manager_cannot_run_overlapping_projects(services) -> None:
    services.projects.create_project(MANAGER, details())

    clash = services.projects.create_project(
        MANAGER, details(name="Other", opening_date=date(2027, 3, 31), closing_date=date(2027, 5, 1))
    )
    other_manager = services.projects.create_project(MANAGER_2, details(name="Other"))

    assert clash.kind == ErrorKind.CONFLICT
    assert other_manager.ok


def test_edit_may_keep_its_own_window(services) -> None:
    project = services.projects.create_project(MANAGER, details()).value

    result = services.projects.edit_project(
        project.project_id, MANAGER, details(name="Dover Heights II")
    )

    assert result.value.name == "Dover Heights II"


def test_unit_counts_freeze_once_applications_exist(services, repository) -> None:
    project = make_project(repository, two_room=3)
    services.applications.submit(APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM)

    result = services.projects.edit_project(
        project.project_id,
        MANAGER,
        details(
            name=project.name,
            total_units={FlatType.TWO_ROOM: 10, FlatType.THREE_ROOM: 0},
            opening_date=project.opening_date,
            closing_date=project.closing_date,
        ),
    )

    assert result.ok
    assert result.value.total(FlatType.TWO_ROOM) == 3


def test_unit_counts_reset_when_no_applications(services, repository) -> None:
    project = make_project(repository, two_room=3)

    result = services.projects.edit_project(
        project.project_id,
        MANAGER,
        details(
            total_units={FlatType.TWO_ROOM: 5, FlatType.THREE_ROOM: 1},
            opening_date=project.opening_date,
            closing_date=project.closing_date,
        ),
    )

    assert result.value.total(FlatType.TWO_ROOM) == 5
    assert result.value.available(FlatType.THREE_ROOM) == 1


def test_slots_cannot_drop_below_assigned_officers(services, repository) -> None:
    project = make_project(repository, slots=3, agents=(OFFICER, OFFICER_2))

    result = services.projects.edit_project(
        project.project_id,
        MANAGER,
        details(max_agent_slots=1, opening_date=project.opening_date, closing_date=project.closing_date),
    )

    assert result.code == "slots_below_assigned"


def test_delete_blocked_by_booked_application(services, repository) -> None:
    project = make_project(repository, agents=(OFFICER,))
    application = services.applications.submit(
        APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM
    ).value
    services.applications.approve(application.application_id, MANAGER)
    services.bookings.create_booking(application.application_id, FlatType.TWO_ROOM, OFFICER)

    result = services.projects.delete_project(project.project_id, MANAGER)

    assert result.kind == ErrorKind.CONFLICT
    assert repository.get_project(project.project_id) is not None


def test_delete_cascades_to_dependants(services, repository) -> None:
    project = make_project(repository)
    services.applications.submit(APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM)
    repository.put_enquiry(
        Enquiry(enquiry_id=None, submitter_nric=APPLICANT_SINGLE, project_id=project.project_id, content="?")
    )

    result = services.projects.delete_project(project.project_id, MANAGER)

    assert result.ok
    assert repository.get_project(project.project_id) is None
    assert repository.list_applications() == []
    assert repository.list_enquiries() == []


def test_delete_requires_ownership(services, repository) -> None:
    project = make_project(repository)

    assert services.projects.delete_project(project.project_id, MANAGER_2).kind == ErrorKind.PERMISSION_DENIED


def test_visible_projects_hide_closed_and_hidden_ones(services, repository) -> None:
    make_project(repository, name="Zephyr Court")
    make_project(repository, name="Hidden Vale", visible=False)
    make_project(repository, name="Future Park", opening=date(2027, 1, 1), closing=date(2027, 2, 1))
    make_project(repository, name="Acacia Breeze", neighborhood="Bishan")

    listed = services.projects.visible_projects(APPLICANT_SINGLE).value
    filtered = services.projects.visible_projects(APPLICANT_SINGLE, {"location": "bishan"}).value

    assert [project.name for project in listed] == ["Acacia Breeze", "Zephyr Court"]
    assert [project.name for project in filtered] == ["Acacia Breeze"]
    assert services.projects.visible_projects(MANAGER).kind == ErrorKind.PERMISSION_DENIED


def test_toggle_visibility_and_remove_agent(services, repository) -> None:
    project = make_project(repository, visible=False, agents=(OFFICER,))

    shown = services.projects.toggle_visibility(project.project_id, True, MANAGER)
    removed = services.projects.remove_agent(project.project_id, OFFICER, MANAGER)
    missing = services.projects.remove_agent(project.project_id, OFFICER, MANAGER)

    assert shown.value.visible is True
    assert removed.value.assigned_agents == ()
    assert missing.kind == ErrorKind.NOT_FOUND


def test_handling_project_and_managed_listing(services, repository) -> None:
    handled = make_project(repository, agents=(OFFICER,))
    make_project(repository, name="Boon Lay Glade", manager=MANAGER_2)

    assert services.projects.handling_project(OFFICER) == handled
    assert services.projects.handling_project(OFFICER_2) is None
    assert [project.name for project in services.projects.projects_managed_by(MANAGER_2)] == ["Boon Lay Glade"]
    assert services.projects.get_project(999).kind == ErrorKind.NOT_FOUND
