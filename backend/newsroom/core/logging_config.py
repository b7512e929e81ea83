"""
Structured JSON logging configuration.

Sets up application-wide JSON logging with:
- Consistent field names across all logs
- Request correlation IDs
- Caller identity (user_id, role) for auth decisions
- Timestamp, level, message, path, status code, latency

Logs are written to stdout as one JSON object per line so that any log
shipper can parse them.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# LogRecord attributes that are never copied into the JSON payload
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName",
})

# Fields that must never reach a log line even if passed via extra=
_REDACTED_FIELDS = frozenset({"password", "hashed_password", "token", "otp"})


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as single-line JSON objects with consistent fields:
    - timestamp: ISO 8601 UTC
    - level, message, logger
    - path, method, status_code, latency_ms, request_id (if available)
    - user_id, role (if available)
    - exception: formatted traceback (if an exception occurred)
    - any other field passed via ``extra=``

    Example output:
        {"timestamp": "2025-11-24T10:30:00.123456+00:00", "level": "INFO",
         "message": "Request completed", "path": "/api/v1/news",
         "status_code": 200, "latency_ms": 12.5, "request_id": "abc-123"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in log_data:
                continue
            if key in _REDACTED_FIELDS:
                log_data[key] = "[redacted]"
                continue
            if value is not None:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True
) -> None:
    """
    Configure application logging.

    Replaces any existing root handlers with a single stdout handler using
    either the JSON formatter or a plain text one.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatter (True) or simple formatter (False)

    Note:
        Call this once at application startup, before any logging occurs.
    """
    root_logger = logging.getLogger()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Suppress noisy third-party loggers
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance with given name.

    Example:
        logger = get_logger(__name__)
        logger.info("Article published", extra={"content_id": "abc-123"})
    """
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
    path: Optional[str] = None,
    method: Optional[str] = None,
    status_code: Optional[int] = None,
    latency_ms: Optional[float] = None,
    **extra_fields: Any
) -> None:
    """
    Log message with structured context fields.

    Example:
        log_with_context(
            logger,
            "warning",
            "Login failed",
            user_id="a1b2",
            failed_attempts=3,
        )
    """
    extra: Dict[str, Any] = {}

    if request_id is not None:
        extra["request_id"] = request_id
    if user_id is not None:
        extra["user_id"] = user_id
    if path is not None:
        extra["path"] = path
    if method is not None:
        extra["method"] = method
    if status_code is not None:
        extra["status_code"] = status_code
    if latency_ms is not None:
        extra["latency_ms"] = latency_ms

    extra.update(extra_fields)

    log_method = getattr(logger, level.lower())
    log_method(message, extra=extra)
