from __future__ import annotations

"""
Logging Configuration Models.

Defines the settings used to bootstrap the logging subsystem and the mapping
between textual level names (including the ones accepted through the
``NEXP_LOG`` environment variable) and native logging constants.
"""

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional

LOG_LEVEL_ENV_VAR = "NEXP_LOG"

# 'trace' has no native counterpart and collapses onto DEBUG
_LEVEL_MAP: Dict[str, int] = {
    "TRACE": logging.DEBUG,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Immutable settings used to bootstrap the logging subsystem.

    Attributes:
        level: Minimum severity level to capture.
        console: Flag to enable stderr stream output.
        log_file: Optional path for a rotating log file.
        max_bytes: Maximum size per log segment before rotation.
        backup_count: Number of historical log segments to preserve.
        console_fmt: Format for terminal output.
        file_fmt: Format for file entries.
        datefmt: Timestamp format.
    """
    level: str = "INFO"
    console: bool = True
    log_file: Optional[str] = None

    max_bytes: int = 2 * 1024 * 1024
    backup_count: int = 3

    console_fmt: str = "[%(asctime)s %(levelname)s %(name)s] %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%dT%H:%M:%S"


def level_from_env(default: str = "INFO") -> str:
    """Read the log level requested through ``NEXP_LOG``, or ``default``."""
    raw = os.environ.get(LOG_LEVEL_ENV_VAR, "").strip()
    if not raw:
        return default
    return raw.upper() if raw.upper() in _LEVEL_MAP else default
