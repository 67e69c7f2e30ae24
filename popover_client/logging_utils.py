from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "ModernPopover.Client"
LOG_DIR_ENV_VAR = "POPOVER_LOG_DIR"
LOG_FILENAME = "popover-client.log"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_logs_dir(log_dir_name: str = "ModernPopover") -> Path:
    """
    Resolve the directory to store popover logs.

    Strategy:
    - Use POPOVER_LOG_DIR if set.
    - Fall back to XDG state/cache locations, then `cwd/logs/<log_dir_name>`.
    - Final fallback: tempdir/<log_dir_name>.
    """
    candidates = []

    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())

    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    cache_home = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    candidates.append(state_home / "logs")
    candidates.append(cache_home / "logs")
    candidates.append(Path.cwd() / "logs")

    for base in candidates:
        try:
            target = base / log_dir_name
            target.mkdir(parents=True, exist_ok=True)
            return target
        except OSError:
            continue

    temp_fallback = Path(tempfile.gettempdir()) / log_dir_name
    temp_fallback.mkdir(parents=True, exist_ok=True)
    return temp_fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """Construct a rotating file handler with sane defaults."""
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    """Return DEBUG when popover debug logging is enabled, INFO otherwise."""
    return logging.DEBUG if debug_enabled else logging.INFO


def configure_logging(
    *,
    debug_enabled: bool = False,
    log_dir: Optional[Path] = None,
    retention: int = 5,
) -> logging.Logger:
    """Attach a rotating file handler to the popover logger (idempotent per path)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug_enabled))
    target_dir = log_dir if log_dir is not None else resolve_logs_dir()
    target_path = str((target_dir / LOG_FILENAME).resolve())
    for existing in logger.handlers:
        if isinstance(existing, RotatingFileHandler) and existing.baseFilename == target_path:
            return logger
    handler = build_rotating_file_handler(
        target_dir,
        LOG_FILENAME,
        retention=retention,
        formatter=logging.Formatter(_LOG_FORMAT),
    )
    logger.addHandler(handler)
    return logger
