"""Structured logging framework using structlog.

This module provides centralized logging configuration with:
- ISO-8601 timestamps
- JSON rendering for structured logs
- Automatic sanitization of credentials (passwords, tokens, DSN user info)
- Context binding support
- Dual output (stdout + optional file logging)

Configuration is loaded from sqlcraft.config.settings:
- SQLCRAFT_LOG_LEVEL / LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: INFO
- LOG_TO_FILE: Enable file logging (1, true, yes). Default: disabled
- LOG_FILE_DIR: Directory for log files. Default: logs/

Usage:
    >>> from sqlcraft.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("connection_opened", connection_id="default")
"""

import logging
import os
import re
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, MutableMapping

import structlog
from structlog.types import EventDict, Processor

from sqlcraft.config import get_settings

# Sensitive key patterns for sanitization
SENSITIVE_PATTERNS = [
    re.compile(r".*password.*", re.IGNORECASE),
    re.compile(r".*token.*", re.IGNORECASE),
    re.compile(r".*api_key.*", re.IGNORECASE),
    re.compile(r".*secret.*", re.IGNORECASE),
]

# Keys holding a database URL: kept, with the user info masked
DSN_PATTERNS = [
    re.compile(r"^dsn$", re.IGNORECASE),
    re.compile(r".*_url$", re.IGNORECASE),
]

_DSN_USERINFO = re.compile(r"(?P<scheme>[\w+.-]+://)(?P<userinfo>[^@/]+)@")

REDACTED_VALUE = "[REDACTED]"


def mask_dsn(dsn: str) -> str:
    """Replace the user info of a database URL with the redaction marker.

    Example:
        >>> mask_dsn("postgresql://app:secret@db:5432/app")
        'postgresql://[REDACTED]@db:5432/app'
    """
    return _DSN_USERINFO.sub(rf"\g<scheme>{REDACTED_VALUE}@", dsn)


def _sanitize_value(key: str, value: Any) -> Any:
    if any(pattern.match(key) for pattern in SENSITIVE_PATTERNS):
        return REDACTED_VALUE
    if isinstance(value, str) and any(pattern.match(key) for pattern in DSN_PATTERNS):
        return mask_dsn(value)
    if isinstance(value, dict):
        return sanitize_for_logging(value)
    return value


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Redact sensitive values from a dictionary before logging.

    Args:
        data: Dictionary that may contain sensitive data

    Returns:
        New dictionary with sensitive values replaced by [REDACTED] and
        database URLs stripped of their credentials

    Example:
        >>> sanitize_for_logging({"password": "secret123", "user": "admin"})
        {'password': '[REDACTED]', 'user': 'admin'}
    """
    return {key: _sanitize_value(key, value) for key, value in data.items()}


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    """Structlog processor that sanitizes sensitive fields in event_dict."""
    return {key: _sanitize_value(key, value) for key, value in event_dict.items()}


def _get_log_level() -> int:
    """Get log level from settings, falling back to the raw environment."""
    try:
        level_name = get_settings().log_level.upper()
    except Exception:
        # Settings may be unloadable (broken .env or connection list);
        # logging must still come up.
        level_name = os.getenv("LOG_LEVEL", "INFO").upper()

    return getattr(logging, level_name, logging.INFO)


def _should_log_to_file() -> bool:
    """Check if file logging is enabled via environment."""
    log_to_file = os.getenv("LOG_TO_FILE", "").lower()
    return log_to_file in ("1", "true", "yes")


def _get_log_file_path() -> Path:
    """Get the log file path with date-based naming."""
    log_dir = Path(os.getenv("LOG_FILE_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    # Format: sqlcraft-YYYYMMDD.log
    date_str = datetime.now().strftime("%Y%m%d")
    return log_dir / f"sqlcraft-{date_str}.log"


def _configure_structlog() -> None:
    """Configure structlog with JSON rendering and sanitization."""
    level = _get_log_level()

    logging.basicConfig(format="%(message)s", level=level, handlers=[])

    stdout_handler = logging.StreamHandler()
    stdout_handler.setLevel(level)
    logging.root.addHandler(stdout_handler)

    if _should_log_to_file():
        file_handler = TimedRotatingFileHandler(
            filename=str(_get_log_file_path()),
            when="midnight",
            interval=1,
            backupCount=30,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        logging.root.addHandler(file_handler)

    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Configure structlog on module import
_configure_structlog()


def get_logger(name: str) -> Any:
    """Get a structlog BoundLogger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        A structlog BoundLogger configured with JSON rendering and sanitization
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> Any:
    """Create a logger with bound context fields.

    Example:
        >>> logger = bind_context(connection_id="default", statement="select")
        >>> logger.debug("statement_executed", rows=3)
    """
    return structlog.get_logger().bind(**kwargs)
