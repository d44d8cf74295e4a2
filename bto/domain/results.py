"""Outcome values returned by every rule-engine operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar


T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INVALID_STATE = "INVALID_STATE"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    CONFLICT = "CONFLICT"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Success carries `value`; failure carries `kind`, a reason `code` and a message."""

    ok: bool
    value: Optional[T] = None
    kind: Optional[ErrorKind] = None
    code: str = ""
    message: str = ""

    @classmethod
    def success(cls, value: Any = None, message: str = "") -> "OperationResult[Any]":
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(cls, kind: ErrorKind, code: str, message: str) -> "OperationResult[Any]":
        return cls(ok=False, kind=kind, code=code, message=message)

    def __bool__(self) -> bool:
        return self.ok

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "kind": self.kind.value if self.kind else None,
            "code": self.code,
            "message": self.message,
        }


def not_found(code: str, message: str) -> OperationResult[Any]:
    return OperationResult.failure(ErrorKind.NOT_FOUND, code, message)


def permission_denied(code: str, message: str) -> OperationResult[Any]:
    return OperationResult.failure(ErrorKind.PERMISSION_DENIED, code, message)


def invalid_state(code: str, message: str) -> OperationResult[Any]:
    return OperationResult.failure(ErrorKind.INVALID_STATE, code, message)


def capacity_exceeded(code: str, message: str) -> OperationResult[Any]:
    return OperationResult.failure(ErrorKind.CAPACITY_EXCEEDED, code, message)


def validation_failed(code: str, message: str) -> OperationResult[Any]:
    return OperationResult.failure(ErrorKind.VALIDATION_FAILED, code, message)


def conflict(code: str, message: str) -> OperationResult[Any]:
    return OperationResult.failure(ErrorKind.CONFLICT, code, message)
