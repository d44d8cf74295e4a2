"""Enquiries about a project and the replies officers and managers post."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from bto.domain.models import Enquiry, EnquiryReply, EnquiryStatus, Project, User, UserRole
from bto.domain.results import (
    OperationResult,
    invalid_state,
    not_found,
    permission_denied,
    validation_failed,
)
from bto.repository.base import Repository
from bto.utils.logger import get_logger


logger = get_logger(__name__)


def _newest_first(enquiries: list[Enquiry]) -> list[Enquiry]:
    return sorted(
        enquiries,
        key=lambda enquiry: (enquiry.submitted_at or datetime.min, enquiry.enquiry_id),
        reverse=True,
    )


def _handles(user: User, project: Project) -> bool:
    if user.role == UserRole.OFFICER:
        return user.nric in project.assigned_agents
    if user.role == UserRole.MANAGER:
        return user.nric == project.manager_nric
    return False


class EnquiryService:
    """Plain CRUD over enquiries plus an append-only reply log."""

    def __init__(
        self,
        repository: Repository,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repository = repository
        self._clock = clock or datetime.now

    def submit(self, submitter_nric: str, project_id: int, content: str) -> OperationResult[Enquiry]:
        nric = submitter_nric.upper()
        if not content or not content.strip():
            return validation_failed("empty_content", "Enquiry content must not be empty")
        if self._repository.get_user(nric) is None:
            return not_found("user_not_found", f"User {nric} does not exist")
        if self._repository.get_project(project_id) is None:
            return not_found("project_not_found", f"Project {project_id} does not exist")
        now = self._clock()
        stored = self._repository.put_enquiry(
            Enquiry(
                enquiry_id=None,
                submitter_nric=nric,
                project_id=project_id,
                content=content.strip(),
                submitted_at=now,
                updated_at=now,
            )
        )
        logger.info("Enquiry submitted | enquiry_id=%s | project_id=%s", stored.enquiry_id, project_id)
        return OperationResult.success(stored, "Enquiry submitted")

    def my_enquiries(self, submitter_nric: str) -> list[Enquiry]:
        nric = submitter_nric.upper()
        return _newest_first(
            [enquiry for enquiry in self._repository.list_enquiries() if enquiry.submitter_nric == nric]
        )

    def _own_enquiry(
        self, enquiry_id: int, submitter_nric: str
    ) -> tuple[Optional[Enquiry], Optional[OperationResult]]:
        enquiry = self._repository.get_enquiry(enquiry_id)
        if enquiry is None:
            return None, not_found("enquiry_not_found", f"Enquiry {enquiry_id} does not exist")
        if enquiry.submitter_nric != submitter_nric.upper():
            return None, permission_denied(
                "not_submitter", f"Enquiry {enquiry_id} was submitted by someone else"
            )
        return enquiry, None

    def edit(self, enquiry_id: int, submitter_nric: str, content: str) -> OperationResult[Enquiry]:
        if not content or not content.strip():
            return validation_failed("empty_content", "Enquiry content must not be empty")
        with self._repository.unit_of_work():
            enquiry, failure = self._own_enquiry(enquiry_id, submitter_nric)
            if failure is not None:
                return failure
            if enquiry.status == EnquiryStatus.CLOSED:
                return invalid_state("enquiry_closed", f"Enquiry {enquiry_id} is closed")
            stored = self._repository.put_enquiry(
                replace(enquiry, content=content.strip(), updated_at=self._clock())
            )
        return OperationResult.success(stored, "Enquiry updated")

    def delete(self, enquiry_id: int, submitter_nric: str) -> OperationResult[None]:
        with self._repository.unit_of_work():
            _, failure = self._own_enquiry(enquiry_id, submitter_nric)
            if failure is not None:
                return failure
            self._repository.delete_enquiry(enquiry_id)
        logger.info("Enquiry deleted | enquiry_id=%s", enquiry_id)
        return OperationResult.success(None, "Enquiry deleted")

    def for_project(self, project_id: int) -> list[Enquiry]:
        return _newest_first(
            [enquiry for enquiry in self._repository.list_enquiries() if enquiry.project_id == project_id]
        )

    def all_enquiries(self, viewer_nric: str) -> OperationResult[list[Enquiry]]:
        viewer = self._repository.get_user(viewer_nric.upper())
        if viewer is None or viewer.role != UserRole.MANAGER:
            return permission_denied("not_manager", "Only managers can view all enquiries")
        return OperationResult.success(_newest_first(list(self._repository.list_enquiries())))

    def _load_for_handler(
        self, enquiry_id: int, handler_nric: str
    ) -> tuple[Optional[Enquiry], Optional[User], Optional[OperationResult]]:
        enquiry = self._repository.get_enquiry(enquiry_id)
        handler = self._repository.get_user(handler_nric.upper())
        if enquiry is None or handler is None:
            return None, None, not_found(
                "enquiry_not_found", f"Enquiry {enquiry_id} or user {handler_nric} does not exist"
            )
        project = self._repository.get_project(enquiry.project_id)
        if project is None:
            return None, None, not_found(
                "project_not_found", f"Project {enquiry.project_id} does not exist"
            )
        if not _handles(handler, project):
            return None, None, permission_denied(
                "not_project_handler",
                f"{handler.nric} does not handle project {project.project_id}",
            )
        return enquiry, handler, None

    def reply(self, enquiry_id: int, handler_nric: str, text: str) -> OperationResult[Enquiry]:
        if not text or not text.strip():
            return validation_failed("empty_reply", "Reply text must not be empty")
        with self._repository.unit_of_work():
            enquiry, handler, failure = self._load_for_handler(enquiry_id, handler_nric)
            if failure is not None:
                return failure
            if enquiry.status == EnquiryStatus.CLOSED:
                return invalid_state("enquiry_closed", f"Enquiry {enquiry_id} is closed")
            now = self._clock()
            reply = EnquiryReply(
                author_nric=handler.nric,
                author_label=handler.label,
                text=text.strip(),
                created_at=now,
            )
            stored = self._repository.put_enquiry(
                replace(
                    enquiry,
                    replies=enquiry.replies + (reply,),
                    status=EnquiryStatus.ANSWERED,
                    updated_at=now,
                )
            )
        logger.info("Enquiry answered | enquiry_id=%s | by=%s", enquiry_id, handler.nric)
        return OperationResult.success(stored, "Reply posted")

    def close(self, enquiry_id: int, handler_nric: str) -> OperationResult[Enquiry]:
        with self._repository.unit_of_work():
            enquiry, _, failure = self._load_for_handler(enquiry_id, handler_nric)
            if failure is not None:
                return failure
            if enquiry.status == EnquiryStatus.CLOSED:
                return invalid_state("already_closed", f"Enquiry {enquiry_id} is already closed")
            stored = self._repository.put_enquiry(
                replace(enquiry, status=EnquiryStatus.CLOSED, updated_at=self._clock())
            )
        logger.info("Enquiry closed | enquiry_id=%s", enquiry_id)
        return OperationResult.success(stored, "Enquiry closed")
