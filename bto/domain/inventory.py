"""Pure unit-count transitions on a Project value."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from bto.domain.models import FlatType, Project


def take_unit(project: Project, flat_type: FlatType) -> Optional[Project]:
    """Return the project with one fewer available unit, or None when sold out."""
    current = project.available(flat_type)
    if current <= 0:
        return None
    return replace(
        project,
        available_units={**project.available_units, flat_type: current - 1},
    )


def return_unit(project: Project, flat_type: FlatType) -> tuple[Project, bool]:
    """Return the project with one more available unit, clamped at the total.

    The flag is False when the count was already at the total.
    """
    current = project.available(flat_type)
    total = project.total(flat_type)
    if current < total:
        updated = current + 1
        within_bounds = True
    else:
        updated = total
        within_bounds = False
    return (
        replace(project, available_units={**project.available_units, flat_type: updated}),
        within_bounds,
    )
