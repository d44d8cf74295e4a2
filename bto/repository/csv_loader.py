"""CSV seed parsing for users and projects."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd

from bto.domain.constraints import ProjectDetails, validate_project_details
from bto.domain.models import FlatType, MaritalStatus, Project, User, UserRole
from bto.utils.logger import get_logger
from bto.utils.security import hash_password, is_valid_nric, normalize_nric


logger = get_logger(__name__)

USER_COLUMNS = ["NRIC", "Password", "Name", "Age", "MaritalStatus", "Role"]
PROJECT_COLUMNS = [
    "ProjectName",
    "Neighborhood",
    "TwoRoomUnits",
    "ThreeRoomUnits",
    "OpeningDate",
    "ClosingDate",
    "ManagerNRIC",
    "MaxOfficerSlots",
    "Visible",
]


def _read_frame(path: Path, required_columns: list[str]) -> pd.DataFrame:
    if not path.exists():
        logger.info("Seed file not found; skipping | path=%s", path)
        return pd.DataFrame(columns=required_columns)
    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    frame.columns = [str(column).strip() for column in frame.columns]
    missing = [column for column in required_columns if column not in frame.columns]
    if missing:
        raise ValueError(f"{path.name} is missing columns: {', '.join(missing)}")
    return frame.apply(lambda column: column.str.strip())


def _to_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _to_date(value: str) -> Optional[date]:
    parsed = pd.to_datetime(value, format="%Y-%m-%d", errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def load_users(
    path: Path, default_password: str, *, iterations: Optional[int] = None
) -> list[User]:
    """Parse users.csv, skipping rows with an invalid NRIC, age, status or role."""
    frame = _read_frame(path, USER_COLUMNS)
    users: list[User] = []
    for row in frame.to_dict(orient="records"):
        nric = normalize_nric(row["NRIC"])
        age = _to_int(row["Age"])
        if not is_valid_nric(nric):
            logger.warning("Skipping user row with invalid NRIC | nric=%s", row["NRIC"])
            continue
        if age is None or age <= 0:
            logger.warning("Skipping user row with invalid age | nric=%s | age=%s", nric, row["Age"])
            continue
        try:
            marital_status = MaritalStatus(row["MaritalStatus"].upper())
            role = UserRole(row["Role"].upper())
        except ValueError:
            logger.warning("Skipping user row with invalid status/role | nric=%s", nric)
            continue
        users.append(
            User(
                nric=nric,
                name=row["Name"],
                age=age,
                marital_status=marital_status,
                role=role,
                password_hash=hash_password(
                    row["Password"] or default_password, iterations=iterations
                ),
            )
        )
    return users


def load_projects(path: Path, *, max_agent_slots_limit: int) -> list[Project]:
    """Parse projects.csv; available units start equal to the totals.

    Rows failing validate_project_details are logged and skipped.
    """
    frame = _read_frame(path, PROJECT_COLUMNS)
    projects: list[Project] = []
    for row in frame.to_dict(orient="records"):
        two_room = _to_int(row["TwoRoomUnits"])
        three_room = _to_int(row["ThreeRoomUnits"])
        slots = _to_int(row["MaxOfficerSlots"])
        opening = _to_date(row["OpeningDate"])
        closing = _to_date(row["ClosingDate"])
        if (
            not row["ProjectName"]
            or two_room is None
            or three_room is None
            or slots is None
            or opening is None
            or closing is None
            or not is_valid_nric(row["ManagerNRIC"])
        ):
            logger.warning("Skipping malformed project row | name=%s", row["ProjectName"])
            continue
        totals = {FlatType.TWO_ROOM: two_room, FlatType.THREE_ROOM: three_room}
        details = ProjectDetails(
            name=row["ProjectName"],
            neighborhood=row["Neighborhood"],
            total_units=totals,
            opening_date=opening,
            closing_date=closing,
            max_agent_slots=slots,
        )
        try:
            validate_project_details(details, max_agent_slots_limit)
        except ValueError as exc:
            logger.warning("Skipping invalid project row | name=%s | reason=%s", row["ProjectName"], exc)
            continue
        projects.append(
            Project(
                project_id=None,
                name=row["ProjectName"],
                neighborhood=row["Neighborhood"],
                total_units=totals,
                available_units=dict(totals),
                opening_date=opening,
                closing_date=closing,
                manager_nric=normalize_nric(row["ManagerNRIC"]),
                max_agent_slots=slots,
                visible=row["Visible"].lower() in {"1", "true", "yes"},
            )
        )
    return projects
