"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from bto.utils.config import get_settings


_LOGGER_INITIALIZED = False

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging once.

    Rule-engine decisions, repository transactions and HTTP failures share one
    handler set. When `BTO_LOG_FILE` is set the same records are also appended
    to that file, which keeps an audit trail of approvals and bookings.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))

    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, handlers=handlers)
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    return logging.getLogger(name)
