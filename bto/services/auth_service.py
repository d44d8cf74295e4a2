"""NRIC/password login and in-process bearer sessions."""

from __future__ import annotations

import secrets
from dataclasses import replace
from threading import RLock
from typing import Optional

from bto.domain.models import User
from bto.repository.base import Repository
from bto.utils.config import Settings, get_settings
from bto.utils.logger import get_logger
from bto.utils.security import hash_password, is_valid_nric, normalize_nric, verify_password


logger = get_logger(__name__)


class AuthenticationError(Exception):
    """Base authentication failure."""


class InvalidNricError(AuthenticationError):
    """Raised when the NRIC does not follow the S/T + 7 digits + letter format."""


class InvalidCredentialsError(AuthenticationError):
    """Raised when the NRIC is unknown or the password does not match."""


class InvalidSessionError(AuthenticationError):
    """Raised when a bearer token is missing, expired or unknown."""


class PasswordPolicyError(AuthenticationError):
    """Raised when a new password is rejected."""


class AuthService:
    """Validates login credentials and bearer tokens."""

    def __init__(self, repository: Repository, settings: Optional[Settings] = None) -> None:
        self._repository = repository
        self._settings = settings or get_settings()
        self._sessions: dict[str, str] = {}
        self._lock = RLock()

    def _authenticate(self, nric: str, password: str) -> User:
        normalized = normalize_nric(nric)
        if not is_valid_nric(normalized):
            raise InvalidNricError(f"Invalid NRIC format: {nric!r}")
        user = self._repository.get_user(normalized)
        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError("Invalid NRIC or password")
        return user

    def login(self, nric: str, password: str) -> str:
        user = self._authenticate(nric, password)
        token = secrets.token_urlsafe(self._settings.session_token_bytes)
        with self._lock:
            self._sessions[token] = user.nric
        logger.info("Login succeeded | nric=%s | role=%s", user.nric, user.role.value)
        return token

    def resolve(self, bearer_token: str) -> User:
        with self._lock:
            nric = self._sessions.get(bearer_token)
        if nric is None:
            raise InvalidSessionError("No active session for this token. Login first.")
        user = self._repository.get_user(nric)
        if user is None:
            self.logout(bearer_token)
            raise InvalidSessionError("Session user no longer exists")
        return user

    def logout(self, bearer_token: str) -> None:
        with self._lock:
            self._sessions.pop(bearer_token, None)

    def change_password(self, nric: str, old_password: str, new_password: str) -> None:
        user = self._authenticate(nric, old_password)
        if not new_password or not new_password.strip():
            raise PasswordPolicyError("New password must not be empty")
        if new_password == old_password:
            raise PasswordPolicyError("New password must differ from the current one")
        self._repository.put_user(
            replace(
                user,
                password_hash=hash_password(
                    new_password, iterations=self._settings.password_hash_iterations
                ),
            )
        )
        # Existing sessions for this user are dropped; the caller must log in again.
        with self._lock:
            for token in [token for token, owner in self._sessions.items() if owner == user.nric]:
                del self._sessions[token]
        logger.info("Password changed | nric=%s", user.nric)
