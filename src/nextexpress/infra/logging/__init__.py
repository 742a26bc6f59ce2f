from __future__ import annotations

from .config import LOG_LEVEL_ENV_VAR, LoggingConfig, level_from_env
from .core import (
    _CONFIGURED_FLAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    configure_logging,
    get_logger,
    shutdown_logging,
)
from .handlers import _HANDLER_TAG_ATTR

__all__ = [
    "LOG_LEVEL_ENV_VAR",
    "LoggingConfig",
    "configure_logging",
    "get_logger",
    "level_from_env",
    "shutdown_logging",
]
