from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import pytest

from popover_client.logging_utils import (
    LOG_FILENAME,
    LOGGER_NAME,
    build_rotating_file_handler,
    configure_logging,
    resolve_log_level,
    resolve_logs_dir,
)


@pytest.fixture
def popover_logger():
    logger = logging.getLogger(LOGGER_NAME)
    before = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in before:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


def test_resolve_logs_dir_prefers_env_override(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("POPOVER_LOG_DIR", str(tmp_path))
    target = resolve_logs_dir("Popovers")
    assert target == tmp_path / "Popovers"
    assert target.is_dir()


def test_rotating_handler_retention(tmp_path) -> None:
    handler = build_rotating_file_handler(tmp_path / "nested", "client.log", retention=3, max_bytes=1024)
    try:
        assert isinstance(handler, RotatingFileHandler)
        assert handler.backupCount == 2
        assert handler.maxBytes == 1024
        assert (tmp_path / "nested").is_dir()
    finally:
        handler.close()

    single = build_rotating_file_handler(tmp_path, "client.log", retention=0)
    try:
        assert single.backupCount == 0
    finally:
        single.close()


def test_resolve_log_level() -> None:
    assert resolve_log_level(True) == logging.DEBUG
    assert resolve_log_level(False) == logging.INFO


def test_configure_logging_is_idempotent_per_path(tmp_path, popover_logger) -> None:
    configure_logging(debug_enabled=True, log_dir=tmp_path)
    configure_logging(debug_enabled=True, log_dir=tmp_path)

    file_handlers = [
        handler
        for handler in popover_logger.handlers
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == str((tmp_path / LOG_FILENAME).resolve())
    ]
    assert len(file_handlers) == 1
    assert popover_logger.level == logging.DEBUG

    logging.getLogger(f"{LOGGER_NAME}.controller").debug("state change %s", "open")
    file_handlers[0].flush()
    assert "state change open" in (tmp_path / LOG_FILENAME).read_text(encoding="utf-8")
