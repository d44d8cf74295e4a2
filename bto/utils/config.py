"""Environment-driven runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    database_path: Path
    seed_data_dir: Path
    seed_on_startup: bool
    max_agent_slots_limit: int
    default_password: str
    password_hash_iterations: int
    session_token_bytes: int
    nric_regex: str
    log_file: Optional[Path] = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests derive copies with `replace`."""
    project_root = Path(__file__).resolve().parents[2]
    return Settings(
        app_name=os.getenv("BTO_APP_NAME", "BTO Housing Portal"),
        app_version=os.getenv("BTO_APP_VERSION", "1.0.0"),
        log_level=os.getenv("BTO_LOG_LEVEL", "INFO"),
        database_path=Path(
            os.getenv("BTO_DATABASE_PATH", str(project_root / "data" / "bto.db"))
        ),
        seed_data_dir=Path(
            os.getenv("BTO_SEED_DATA_DIR", str(project_root / "data"))
        ),
        seed_on_startup=_env_bool("BTO_SEED_ON_STARTUP", True),
        max_agent_slots_limit=_env_int("BTO_MAX_AGENT_SLOTS", 10),
        default_password=os.getenv("BTO_DEFAULT_PASSWORD", "password"),
        password_hash_iterations=_env_int("BTO_PASSWORD_HASH_ITERATIONS", 120_000),
        session_token_bytes=_env_int("BTO_SESSION_TOKEN_BYTES", 32),
        nric_regex=r"^[ST]\d{7}[A-Z]$",
        log_file=Path(os.environ["BTO_LOG_FILE"]) if os.getenv("BTO_LOG_FILE") else None,
    )
