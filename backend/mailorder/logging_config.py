"""Centralized logging configuration for order extraction.

This module provides structured logging with context fields for extraction runs.
Logs always go to the console; rotating files are added when a log directory
is configured (MAILORDER_LOG_DIR, or ExtractionConfig.log_dir).

Usage:
    from mailorder.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Platform detected", extra={'platform': 'amazon', 'message_id': msg_id})
"""

import logging
import os
from logging.handlers import RotatingFileHandler

ROOT_LOGGER_NAME = "mailorder"
DEFAULT_LOG_LEVEL = "WARNING"

LOG_FILE = "extraction.log"
ERROR_LOG_FILE = "extraction_errors.log"


class StructuredFormatter(logging.Formatter):
    """Custom formatter that adds context fields to log records.

    Supports the following context fields via extra={} parameter:
    - platform: Detected platform id
    - message_id: Provider message id of the email
    - rule: Name of the extraction rule involved
    """

    def format(self, record):
        """Format log record with context fields."""
        record.platform = getattr(record, "platform", None)
        record.message_id = getattr(record, "message_id", None)
        record.rule = getattr(record, "rule", None)

        return super().format(record)


def get_log_dir() -> str | None:
    return os.getenv("MAILORDER_LOG_DIR") or None


def get_logger(name: str) -> logging.Logger:
    """Get configured logger for extraction modules.

    Handlers live on the package root logger ("mailorder"); module loggers
    propagate to it. The first call configures the root from the
    environment (see configure_logging); later calls reuse it.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logging.Logger instance
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)

    # Skip if already configured (prevents duplicate handlers)
    if not root.handlers:
        configure_logging(os.getenv("MAILORDER_LOG_LEVEL", DEFAULT_LOG_LEVEL), get_log_dir())

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: str = DEFAULT_LOG_LEVEL, log_dir: str | None = None) -> logging.Logger:
    """(Re)install the handlers of the package root logger.

    Existing handlers are closed and replaced, so this can be called again
    once the extraction config (and its .env file) has been loaded. Creates:
    - Console handler at the given level
    - Rotating file handler for all logs (only when log_dir is given)
    - Separate error file handler (only when log_dir is given)

    Args:
        level: Console log level name
        log_dir: Directory for rotating log files, or None for console only

    Returns:
        The package root logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    root.setLevel(logging.DEBUG)
    root.propagate = False

    # ========================================
    # Console Handler
    # ========================================
    console = logging.StreamHandler()
    console.setLevel((level or DEFAULT_LOG_LEVEL).upper())
    console.setFormatter(
        StructuredFormatter("[%(levelname)s] [platform:%(platform)s] %(message)s")
    )
    root.addHandler(console)

    if not log_dir:
        return root

    os.makedirs(log_dir, exist_ok=True)
    file_format = (
        "[%(asctime)s] [%(levelname)s] [%(name)s] "
        "[platform:%(platform)s msg:%(message_id)s rule:%(rule)s] %(message)s"
    )

    # ========================================
    # File Handler (rotating, all levels)
    # ========================================
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE),
        maxBytes=10 * 1024 * 1024,  # 10MB per file
        backupCount=30,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(StructuredFormatter(file_format))
    root.addHandler(file_handler)

    # ========================================
    # Error File Handler (errors only)
    # ========================================
    error_handler = RotatingFileHandler(
        os.path.join(log_dir, ERROR_LOG_FILE),
        maxBytes=10 * 1024 * 1024,
        backupCount=30,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(StructuredFormatter(file_format))
    root.addHandler(error_handler)

    return root


def get_log_file_path(filename: str) -> str | None:
    """Get full path to log file.

    Args:
        filename: Name of log file (e.g., 'extraction.log')

    Returns:
        Full path to log file, or None when file logging is disabled
    """
    log_dir = get_log_dir()
    if not log_dir:
        return None
    return os.path.join(log_dir, filename)
