"""Attribute filters over project listings and booking-report rows.

Filtering only narrows: the input order is preserved and nothing is sorted.
Criteria keys are compared case-insensitively after trimming, blank values
are skipped, and unknown keys or unparseable values are logged and ignored.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional, Sequence, TypeVar

from bto.domain.models import BookingReportRow, FlatType, MaritalStatus, Project
from bto.utils.logger import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


def _normalize_criteria(criteria: Optional[Mapping[str, str]]) -> dict[str, str]:
    active: dict[str, str] = {}
    for key, value in (criteria or {}).items():
        if key is None or value is None:
            continue
        trimmed = str(value).strip()
        if not trimmed:
            continue
        active[str(key).strip().lower()] = trimmed
    return active


def _parse_int(key: str, value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring unparseable filter value | key=%s | value=%s", key, value)
        return None


def _parse_flat_type(key: str, value: str) -> Optional[FlatType]:
    flat_type = FlatType.parse(value)
    if flat_type is None:
        logger.warning("Ignoring unknown flat type filter | key=%s | value=%s", key, value)
    return flat_type


def _collect_predicates(
    build: Callable[[str, str], Optional[Callable[[T], bool]]],
    criteria: Mapping[str, str],
) -> list[Callable[[T], bool]]:
    predicates: list[Callable[[T], bool]] = []
    for key, value in _normalize_criteria(criteria).items():
        predicate = build(key, value)
        if predicate is not None:
            predicates.append(predicate)
    return predicates


def _project_predicate(key: str, value: str) -> Optional[Callable[[Project], bool]]:
    if key in ("neighborhood", "location"):
        wanted = value.lower()
        return lambda project: project.neighborhood.strip().lower() == wanted
    if key == "flattype":
        flat_type = _parse_flat_type(key, value)
        if flat_type is None:
            return None
        return lambda project: project.offers(flat_type)
    logger.warning("Ignoring unknown project filter key | key=%s", key)
    return None


def filter_projects(
    projects: Sequence[Project],
    criteria: Optional[Mapping[str, str]],
) -> Sequence[Project]:
    """Return the projects matching every recognised criterion."""
    if not criteria:
        return projects

    predicates = _collect_predicates(_project_predicate, criteria)
    if not predicates:
        return list(projects)
    return [project for project in projects if all(check(project) for check in predicates)]


def _report_predicate(key: str, value: str) -> Optional[Callable[[BookingReportRow], bool]]:
    if key == "maritalstatus":
        try:
            status = MaritalStatus(value.upper())
        except ValueError:
            logger.warning("Ignoring invalid marital status filter | value=%s", value)
            return None
        return lambda row: row.marital_status == status
    if key == "flattype":
        flat_type = _parse_flat_type(key, value)
        if flat_type is None:
            return None
        return lambda row: row.flat_type == flat_type
    if key == "projectname":
        wanted = value.lower()
        return lambda row: row.project_name.lower() == wanted
    if key in ("neighborhood", "location"):
        wanted = value.lower()
        return lambda row: row.neighborhood.lower() == wanted
    if key == "projectid":
        project_id = _parse_int(key, value)
        if project_id is None:
            return None
        return lambda row: row.project_id == project_id
    if key == "minage":
        min_age = _parse_int(key, value)
        if min_age is None:
            return None
        return lambda row: row.age >= min_age
    if key == "maxage":
        max_age = _parse_int(key, value)
        if max_age is None:
            return None
        return lambda row: row.age <= max_age
    logger.warning("Ignoring unknown report filter key | key=%s", key)
    return None


def filter_report_rows(
    rows: Sequence[BookingReportRow],
    criteria: Optional[Mapping[str, str]],
) -> list[BookingReportRow]:
    if not criteria:
        return list(rows)
    predicates = _collect_predicates(_report_predicate, criteria)
    return [row for row in rows if all(check(row) for check in predicates)]
