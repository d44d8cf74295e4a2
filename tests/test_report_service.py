from __future__ import annotations

import pandas as pd

from bto.domain.models import FlatType
from bto.services.report_service import REPORT_COLUMNS
from factories import (
    APPLICANT_MARRIED,
    APPLICANT_SINGLE,
    MANAGER,
    MANAGER_2,
    OFFICER,
    OFFICER_2,
    make_project,
)


def _book(services, applicant, project, flat_type, manager, officer) -> None:
    application = services.applications.submit(applicant, project.project_id, flat_type).value
    services.applications.approve(application.application_id, manager)
    services.bookings.create_booking(application.application_id, flat_type, officer)


def _two_bookings(services, repository) -> None:
    boon_lay = make_project(
        repository,
        name="Boon Lay Glade",
        neighborhood="Boon Lay",
        two_room=0,
        three_room=2,
        manager=MANAGER_2,
        agents=(OFFICER_2,),
    )
    acacia = make_project(repository, agents=(OFFICER,))
    _book(services, APPLICANT_MARRIED, boon_lay, FlatType.THREE_ROOM, MANAGER_2, OFFICER_2)
    _book(services, APPLICANT_SINGLE, acacia, FlatType.TWO_ROOM, MANAGER, OFFICER)


def test_report_lists_booked_applicants_sorted_by_project(services, repository) -> None:
    _two_bookings(services, repository)

    report = services.reports.booking_report()

    assert report.title == "Booked Applicants Report"
    assert [row.project_name for row in report.rows] == ["Acacia Breeze", "Boon Lay Glade"]
    assert [row.applicant_name for row in report.rows] == ["John Tan", "Sarah Lim"]


def test_report_ignores_applications_that_are_not_booked(services, repository) -> None:
    project = make_project(repository, agents=(OFFICER,))
    application = services.applications.submit(APPLICANT_SINGLE, project.project_id, FlatType.TWO_ROOM).value
    services.applications.approve(application.application_id, MANAGER)

    assert services.reports.booking_report().rows == []


def test_filtered_report_title_and_rows(services, repository) -> None:
    _two_bookings(services, repository)

    report = services.reports.booking_report({"maritalStatus": "MARRIED", "flatType": ""})

    assert report.title == "Booked Applicants Report (Filtered)"
    assert report.criteria == {"maritalStatus": "MARRIED"}
    assert [row.applicant_name for row in report.rows] == ["Sarah Lim"]


def test_report_frame_and_csv_export(services, repository, tmp_path) -> None:
    _two_bookings(services, repository)
    report = services.reports.booking_report()

    frame = report.to_frame()
    target = report.export_csv(tmp_path / "exports" / "bookings.csv")
    reloaded = pd.read_csv(target)

    assert list(frame.columns) == REPORT_COLUMNS
    assert frame["flat_type"].tolist() == ["2-Room", "3-Room"]
    assert list(reloaded.columns) == REPORT_COLUMNS
    assert reloaded["applicant_nric"].tolist() == [APPLICANT_SINGLE, APPLICANT_MARRIED]


def test_empty_report_still_has_columns(services) -> None:
    frame = services.reports.booking_report().to_frame()

    assert frame.empty
    assert list(frame.columns) == REPORT_COLUMNS
