"""Translation of rule-engine outcomes into HTTP errors."""

from __future__ import annotations

from typing import TypeVar

from fastapi import HTTPException, status

from bto.domain.results import ErrorKind, OperationResult


T = TypeVar("T")

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
}


def unwrap(result: OperationResult[T]) -> T:
    """Return the success value or raise the HTTPException matching the failure kind."""
    if result.ok:
        return result.value
    raise HTTPException(
        status_code=STATUS_BY_KIND.get(result.kind, status.HTTP_400_BAD_REQUEST),
        detail={
            "kind": result.kind.value if result.kind else None,
            "code": result.code,
            "message": result.message,
        },
    )
