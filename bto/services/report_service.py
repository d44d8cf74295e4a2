"""Booking report: BOOKED applications joined with applicant and project."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

import pandas as pd

from bto.domain.filters import filter_report_rows
from bto.domain.models import ApplicationStatus, BookingReportRow
from bto.repository.base import Repository
from bto.utils.logger import get_logger


logger = get_logger(__name__)

REPORT_COLUMNS = [
    "applicant_name",
    "applicant_nric",
    "age",
    "marital_status",
    "flat_type",
    "project_id",
    "project_name",
    "neighborhood",
]


@dataclass(frozen=True)
class BookingReport:
    title: str
    rows: list[BookingReportRow]
    criteria: dict[str, str] = field(default_factory=dict)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "applicant_name": row.applicant_name,
                    "applicant_nric": row.applicant_nric,
                    "age": row.age,
                    "marital_status": row.marital_status.value,
                    "flat_type": row.flat_type.display_name,
                    "project_id": row.project_id,
                    "project_name": row.project_name,
                    "neighborhood": row.neighborhood,
                }
                for row in self.rows
            ],
            columns=REPORT_COLUMNS,
        )

    def export_csv(self, path: Path) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame().to_csv(target, index=False)
        logger.info("Booking report exported | rows=%s | path=%s", len(self.rows), target)
        return target


class ReportService:
    def __init__(self, repository: Repository) -> None:
        self._repository = repository

    def _booked_rows(self) -> list[BookingReportRow]:
        rows: list[BookingReportRow] = []
        for application in self._repository.list_applications():
            if application.status != ApplicationStatus.BOOKED:
                continue
            applicant = self._repository.get_user(application.applicant_nric)
            project = self._repository.get_project(application.project_id)
            if applicant is None or project is None or application.booked_flat_type is None:
                logger.warning(
                    "Skipping booked application with missing links | application_id=%s",
                    application.application_id,
                )
                continue
            rows.append(
                BookingReportRow(
                    applicant_name=applicant.name,
                    applicant_nric=applicant.nric,
                    age=applicant.age,
                    marital_status=applicant.marital_status,
                    flat_type=application.booked_flat_type,
                    project_id=project.project_id,
                    project_name=project.name,
                    neighborhood=project.neighborhood,
                )
            )
        return rows

    def booking_report(self, criteria: Optional[Mapping[str, str]] = None) -> BookingReport:
        active = {key: value for key, value in (criteria or {}).items() if value and str(value).strip()}
        rows = sorted(
            filter_report_rows(self._booked_rows(), active),
            key=lambda row: (row.project_name.lower(), row.applicant_name.lower()),
        )
        title = "Booked Applicants Report" + (" (Filtered)" if active else "")
        logger.info("Booking report generated | rows=%s | filtered=%s", len(rows), bool(active))
        return BookingReport(title=title, rows=rows, criteria=dict(active))
