"""Logging setup for the OCR client and its console sample.

Two output modes: a plain single-line format for terminals and a JSON
formatter for log aggregation. Records emitted while a task is being
polled carry its task id via a context variable.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

# Context var to carry the vendor task id across awaits in the poll loop
_task_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("task_id", default="-")

PLAIN_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | task_id=%(task_id)s | %(message)s"


def get_task_id() -> str:
    return _task_id_ctx.get()


@contextmanager
def task_id_context(task_id: str) -> Iterator[None]:
    """Bind ``task_id`` to log records emitted inside the block."""
    token = _task_id_ctx.set(task_id)
    try:
        yield
    finally:
        _task_id_ctx.reset(token)


class TaskIdFilter(logging.Filter):
    """Inject task_id from contextvars into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 (shadow builtins)
        record.task_id = get_task_id()
        return True


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Example:
        >>> logger.info("Polling", extra={"poll_attempt": 3})
        # Output: {"timestamp": "...", "level": "INFO", "message": "Polling",
        #          "task_id": "abc", "poll_attempt": 3, ...}
    """

    EXTRA_KEYS = ("task_id", "file_name", "result_code", "poll_attempt", "http_status", "error_code")

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key in self.EXTRA_KEYS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, ensure_ascii=False, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Configure root logging.

    Safe to call repeatedly; existing root handlers are replaced.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSON formatter (True) or plain text (False)
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level.upper())
    handler.addFilter(TaskIdFilter())
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=PLAIN_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    root.addHandler(handler)

    # Suppress noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

