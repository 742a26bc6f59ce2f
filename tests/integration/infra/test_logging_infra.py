from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, log file rotation and the NEXP_LOG level override.
"""

import logging
import time
from logging.handlers import QueueListener, RotatingFileHandler
from pathlib import Path

import pytest

from nextexpress.infra.logging import (
    LOG_LEVEL_ENV_VAR,
    LoggingConfig,
    _CONFIGURED_FLAG_ATTR,
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    configure_logging,
    level_from_env,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Clean up root logger handlers before and after each test."""
    root = logging.getLogger()

    def _reset() -> None:
        listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
        if listener and isinstance(listener, QueueListener) and listener._thread is not None:
            listener.stop()
        setattr(root, _QUEUE_LISTENER_ATTR, None)
        for h in list(root.handlers):
            if getattr(h, _HANDLER_TAG_ATTR, False):
                root.removeHandler(h)
                h.close()
        if hasattr(root, _CONFIGURED_FLAG_ATTR):
            delattr(root, _CONFIGURED_FLAG_ATTR)

    _reset()
    yield
    _reset()


def test_logging_idempotency() -> None:
    """Multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    root = logging.getLogger()
    initial_handler_count = len(root.handlers)

    configure_logging(cfg)
    assert len(root.handlers) == initial_handler_count, "Handlers were duplicated."


def test_force_reconfiguration_replaces_handlers() -> None:
    configure_logging(LoggingConfig(level="INFO"))
    root = logging.getLogger()
    count = len(root.handlers)

    configure_logging(LoggingConfig(level="DEBUG"), force=True)

    assert len(root.handlers) == count
    assert root.level == logging.DEBUG


def test_force_reconfiguration_closes_previous_file_handler(tmp_path: Path) -> None:
    """The replaced listener's rotating file handler releases its stream."""
    configure_logging(LoggingConfig(level="INFO", console=False, log_file=str(tmp_path / "first.log")))
    root = logging.getLogger()
    old_listener = getattr(root, _QUEUE_LISTENER_ATTR)
    old_handler = next(h for h in old_listener.handlers if isinstance(h, RotatingFileHandler))
    assert old_handler.stream is not None

    configure_logging(LoggingConfig(level="INFO", console=False, log_file=str(tmp_path / "second.log")), force=True)

    assert old_handler.stream is None
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not old_listener


def test_log_rotation(tmp_path: Path) -> None:
    """File rotation happens when the size limit is exceeded."""
    log_file = tmp_path / "test_rotate.log"
    cfg = LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=100,
        backup_count=1,
    )

    configure_logging(cfg)
    logger = logging.getLogger("test_rotate")

    for _ in range(10):
        logger.debug("This is a long log message to trigger rotation." * 5)

    # Give time for the QueueListener to process
    time.sleep(0.5)

    backup_file = tmp_path / "test_rotate.log.1"
    assert log_file.exists()
    assert backup_file.exists(), "Rotation backup file was not created."


def test_queue_listener_architecture() -> None:
    """The root logger uses a QueueHandler-based architecture."""
    configure_logging(LoggingConfig(level="INFO", console=True))

    root = logging.getLogger()
    ours = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]

    assert len(ours) == 1
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not None


def test_shutdown_detaches_handlers() -> None:
    configure_logging(LoggingConfig(level="INFO"))
    shutdown_logging()

    root = logging.getLogger()
    assert not [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]
    assert getattr(root, _CONFIGURED_FLAG_ATTR) is False


@pytest.mark.parametrize(
    "raw, expected",
    [("trace", "TRACE"), ("debug", "DEBUG"), ("warn", "WARN"), ("error", "ERROR"), ("bogus", "INFO"), ("", "INFO")],
)
def test_level_from_env(monkeypatch: pytest.MonkeyPatch, raw: str, expected: str) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, raw)

    assert level_from_env("INFO") == expected


def test_trace_level_maps_to_debug(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "trace")

    configure_logging(LoggingConfig(level=level_from_env()))

    assert logging.getLogger().level == logging.DEBUG
