"""Password hashing and NRIC format helpers."""

from __future__ import annotations

import hashlib
import re
import secrets
from typing import Optional

from bto.utils.config import get_settings


_HASH_ALGORITHM = "sha256"


def normalize_nric(nric: Optional[str]) -> str:
    return (nric or "").strip().upper()


def is_valid_nric(nric: Optional[str]) -> bool:
    normalized = normalize_nric(nric)
    if not normalized:
        return False
    return re.fullmatch(get_settings().nric_regex, normalized) is not None


def hash_password(password: str, *, iterations: Optional[int] = None) -> str:
    rounds = iterations or get_settings().password_hash_iterations
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        _HASH_ALGORITHM, password.encode("utf-8"), bytes.fromhex(salt), rounds
    )
    return f"{rounds}${salt}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    try:
        rounds_text, salt, expected = encoded.split("$")
        rounds = int(rounds_text)
        salt_bytes = bytes.fromhex(salt)
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac(
        _HASH_ALGORITHM, password.encode("utf-8"), salt_bytes, rounds
    )
    return secrets.compare_digest(digest.hex(), expected)
