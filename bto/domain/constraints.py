"""Domain-level validation rules for manager-supplied project details."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from bto.domain.models import FlatType


@dataclass(frozen=True)
class ProjectDetails:
    name: str
    neighborhood: str
    total_units: dict[FlatType, int]
    opening_date: date
    closing_date: date
    max_agent_slots: int


def validate_project_details(details: ProjectDetails, max_agent_slots_limit: int) -> None:
    if not details.name or not details.name.strip():
        raise ValueError("project name must not be empty")
    if not details.neighborhood or not details.neighborhood.strip():
        raise ValueError("neighborhood must not be empty")
    if details.opening_date > details.closing_date:
        raise ValueError("closing date must be on or after opening date")
    if not 1 <= details.max_agent_slots <= max_agent_slots_limit:
        raise ValueError(f"officer slots must be between 1 and {max_agent_slots_limit}")
    if any(count < 0 for count in details.total_units.values()):
        raise ValueError("unit counts must not be negative")
