"""
CI Summarizer - Structured Logging
==================================

Consistent logging for every command. Records can be rendered as JSON
(one object per line, for CI log collectors) or as a pipe-delimited
human-readable line. Every record carries the run ID of the current
invocation.

Logs are written to stderr: stdout is reserved for the generated
review, diagnosis or release notes.

Usage:
    from ci_summarizer.utils.logging import get_logger, setup_logging

    setup_logging(service_name="review", log_level="INFO")
    logger = get_logger(__name__)

    logger.info("Resolved commits", extra={"count": 3})
"""

import logging
import json
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Optional
from contextvars import ContextVar

# Context variable for the current invocation's run ID
run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)

_STANDARD_ATTRS = {
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message"
}


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs log records as JSON.

    Each entry includes:
    - timestamp (ISO 8601 format with timezone)
    - level (log level name)
    - service (command that generated the log)
    - logger (logger name, typically module path)
    - message (the log message)
    - run_id (if set for the current context)
    - Additional fields from the extra dict
    """

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
        }

        run_id = run_id_var.get()
        if run_id:
            log_entry["run_id"] = run_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that injects the run ID into every record."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        extra = kwargs.get("extra", {})

        if "run_id" not in extra:
            run_id = run_id_var.get()
            if run_id:
                extra["run_id"] = run_id

        kwargs["extra"] = extra
        return msg, kwargs


_loggers: dict[str, ContextualLogger] = {}


def setup_logging(
    service_name: str,
    log_level: str = "INFO",
    json_output: bool = False
) -> None:
    """
    Configure logging for a command.

    Should be called once at startup, before any run begins.

    Args:
        service_name: Name of the command (e.g., "review")
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format; otherwise use text format
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)

    if json_output:
        handler.setFormatter(StructuredFormatter(service_name))
    else:
        handler.setFormatter(logging.Formatter(
            f"%(asctime)s | {service_name} | %(levelname)s | %(name)s | %(message)s"
        ))

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def get_logger(name: str) -> ContextualLogger:
    """
    Get a contextual logger for the given module.

    Args:
        name: Logger name, typically __name__

    Returns:
        ContextualLogger instance
    """
    if name not in _loggers:
        base_logger = logging.getLogger(name)
        _loggers[name] = ContextualLogger(base_logger, {})
    return _loggers[name]


def new_run_id() -> str:
    """Generate a run ID and bind it to the current context."""
    run_id = uuid.uuid4().hex[:12]
    run_id_var.set(run_id)
    return run_id


def get_run_id() -> Optional[str]:
    """Return the run ID bound to the current context, if any."""
    return run_id_var.get()
