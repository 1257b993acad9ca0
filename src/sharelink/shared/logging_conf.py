# src/sharelink/shared/logging_conf.py
"""
Logging Configuration - Logging Setup and Configuration

Sets up stdout and/or rotating file output for the server and the operator
script. Outbound HTTP clients (urllib3 under requests) are held at WARNING
because every domain probe and provider upload would otherwise log a
connection line.

Files that USE this module:
- sharelink.app (configure_from_settings at startup)
- scripts/check_domain.py (console-only logging)
- tests.test_logging_conf (unit tests)

Files that this module USES:
- sharelink.config (Settings, only for configure_from_settings)
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Union

if TYPE_CHECKING:
    from sharelink.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "sharelink.log"
QUIET_LOGGERS = ("urllib3", "multipart")


def _log_path(log_file: Optional[Union[str, Path]], log_dir: Optional[Union[str, Path]]) -> Optional[Path]:
    """A log directory wins over an explicit file; the parent is created either way."""
    if log_dir:
        path = Path(log_dir) / LOG_FILE_NAME
    elif log_file:
        path = Path(log_file)
    else:
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_to_stdout: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Union[str, Path]] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> Optional[Path]:
    """
    Configure application-wide logging.

    Args:
        level: Logging level or level name ("DEBUG", "INFO", ...)
        log_to_stdout: Write to stdout (process managers may capture it instead)
        log_file: Optional path to a log file
        log_dir: Optional directory for sharelink.log (takes precedence over log_file)
        max_bytes: Size per log file before rotation
        backup_count: Rotated files to keep

    Returns:
        Path of the rotating log file, or None when logging to stdout only
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    handlers: List[logging.Handler] = []

    if log_to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))

    log_path = _log_path(log_file, log_dir)
    if log_path is not None:
        handlers.append(
            RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        )

    # Never leave the process silent
    if not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s stdout=%s file=%s",
        logging.getLevelName(level),
        log_to_stdout,
        log_path or "-",
    )
    return log_path


def configure_from_settings(cfg: "Settings") -> Optional[Path]:
    """Apply the logging section of the settings."""
    return setup_logging(
        level=cfg.log_level,
        log_to_stdout=cfg.log_stdout,
        log_file=cfg.log_file,
        log_dir=cfg.log_dir,
        max_bytes=cfg.log_max_bytes,
        backup_count=cfg.log_backup_count,
    )
