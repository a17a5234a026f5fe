from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the QueueListener architecture, idempotency of configuration,
log file rotation and the mapping from explorer settings.
"""

import logging
import time
from logging.handlers import QueueListener, RotatingFileHandler
from pathlib import Path
from typing import Iterator

import pytest

from gotestexplorer.core.explorer.explorer import GoTestExplorer
from gotestexplorer.core.explorer.registry import ItemRegistry
from gotestexplorer.infra.fs import MemoryFileSystem
from gotestexplorer.infra.logging import (
    _CONFIGURED_FLAG_ATTR,
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    get_default_log_path,
    logging_config_from_settings,
)


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Clean up root logger handlers before and after each test."""
    def _reset() -> None:
        root = logging.getLogger()
        listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
        if listener and isinstance(listener, QueueListener):
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
    """TC-01: Verify that multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    root = logging.getLogger()
    initial_handler_count = len(root.handlers)

    configure_logging(cfg)
    assert len(root.handlers) == initial_handler_count, "Handlers were duplicated."


def test_force_reconfigure_replaces_only_our_handlers() -> None:
    """TC-02: Foreign handlers survive a forced re-configuration."""
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)
    try:
        configure_logging(LoggingConfig(level="INFO"))
        configure_logging(LoggingConfig(level="DEBUG"), force=True)

        ours = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]
        assert len(ours) == 1
        assert foreign in root.handlers
        assert root.level == logging.DEBUG
    finally:
        root.removeHandler(foreign)


def test_log_rotation(tmp_path: Path) -> None:
    """TC-03: Verify file rotation when size limit is exceeded."""
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
        logger.debug("Reconciled a file with a rather long message to rotate." * 5)

    # Let the QueueListener drain
    time.sleep(0.5)

    assert log_file.exists()
    assert (tmp_path / "test_rotate.log.1").exists(), "Rotation backup file was not created."


def test_queue_listener_architecture() -> None:
    """TC-04: Verify that the root logger uses a QueueHandler-based architecture."""
    configure_logging(LoggingConfig(level="INFO", console=True))

    root = logging.getLogger()
    queue_handlers = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]

    assert len(queue_handlers) > 0
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not None


def test_logging_config_from_settings() -> None:
    """TC-05: Explorer settings map onto the logging configuration."""
    cfg = logging_config_from_settings({"log_level": "DEBUG", "log_file": "/tmp/x.log"})
    assert cfg.level == "DEBUG"
    assert cfg.log_file == "/tmp/x.log"

    default = logging_config_from_settings({"log_level": "", "log_file": ""})
    assert default.level == "INFO"
    assert default.log_file is None


def test_default_log_path_lives_in_user_data_dir() -> None:
    path = get_default_log_path().replace("\\", "/")
    assert path.endswith("/logs/gotestexplorer.log")


def test_explorer_from_config_applies_log_settings(tmp_path: Path) -> None:
    """TC-06: log_level and log_file from the explorer config take effect."""
    log_file = tmp_path / "explorer.log"
    GoTestExplorer.from_config(
        {"workspace_folders": [], "log_level": "debug", "log_file": str(log_file)},
        ItemRegistry(),
        MemoryFileSystem(),
    )

    root = logging.getLogger()
    assert getattr(root, _CONFIGURED_FLAG_ATTR, False) is True
    assert root.level == logging.DEBUG

    listener = getattr(root, _QUEUE_LISTENER_ATTR)
    assert any(isinstance(h, RotatingFileHandler) for h in listener.handlers)

    logging.getLogger("gotestexplorer.test").debug("reconciled")
    time.sleep(0.5)
    assert "reconciled" in log_file.read_text(encoding="utf-8")
