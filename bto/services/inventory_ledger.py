"""Unit-inventory ledger: the single admission-control point for bookings."""

from __future__ import annotations

from collections import defaultdict
from threading import Lock
from typing import Optional

from bto.domain.inventory import return_unit, take_unit
from bto.domain.models import FlatType, Project
from bto.repository.base import Repository
from bto.utils.logger import get_logger


logger = get_logger(__name__)


class InventoryLedger:
    """Bounded increment/decrement of a project's available units.

    Each (project, flat type) counter has its own lock; the write itself runs
    in the repository's unit of work so that it joins any enclosing
    transaction started by the caller.
    """

    def __init__(self, repository: Repository) -> None:
        self._repository = repository
        self._locks: defaultdict[tuple[int, FlatType], Lock] = defaultdict(Lock)
        self._registry_lock = Lock()

    def _lock_for(self, project_id: int, flat_type: FlatType) -> Lock:
        with self._registry_lock:
            return self._locks[(project_id, flat_type)]

    def available(self, project_id: int, flat_type: FlatType) -> int:
        project = self._repository.get_project(project_id)
        return project.available(flat_type) if project is not None else 0

    def decrement(self, project_id: int, flat_type: FlatType) -> bool:
        """Reserve one unit; False (and no mutation) when none is left."""
        with self._repository.unit_of_work(), self._lock_for(project_id, flat_type):
            project: Optional[Project] = self._repository.get_project(project_id)
            if project is None:
                logger.warning(
                    "Decrement on unknown project | project_id=%s | flat_type=%s",
                    project_id,
                    flat_type.value,
                )
                return False
            updated = take_unit(project, flat_type)
            if updated is None:
                logger.info(
                    "No units left | project_id=%s | flat_type=%s",
                    project_id,
                    flat_type.value,
                )
                return False
            self._repository.put_project(updated)
            logger.debug(
                "Unit reserved | project_id=%s | flat_type=%s | available=%s",
                project_id,
                flat_type.value,
                updated.available(flat_type),
            )
            return True

    def increment(self, project_id: int, flat_type: FlatType) -> None:
        with self._repository.unit_of_work(), self._lock_for(project_id, flat_type):
            project = self._repository.get_project(project_id)
            if project is None:
                logger.warning(
                    "Increment on unknown project | project_id=%s | flat_type=%s",
                    project_id,
                    flat_type.value,
                )
                return
            updated, within_total = return_unit(project, flat_type)
            if not within_total:
                logger.warning(
                    "Returned unit would exceed total; clamped | project_id=%s | flat_type=%s | total=%s",
                    project_id,
                    flat_type.value,
                    project.total(flat_type),
                )
            self._repository.put_project(updated)
