from __future__ import annotations

import json
import logging

from muhimbi_ocr.core.logging import (
    StructuredFormatter,
    TaskIdFilter,
    configure_logging,
    get_task_id,
    task_id_context,
)


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("muhimbi_ocr.test", logging.INFO, __file__, 1, msg, None, None)


def test_task_id_context_sets_and_resets() -> None:
    assert get_task_id() == "-"
    with task_id_context("abc123"):
        assert get_task_id() == "abc123"
    assert get_task_id() == "-"


def test_filter_injects_task_id() -> None:
    record = _record()
    with task_id_context("abc123"):
        TaskIdFilter().filter(record)
    assert record.task_id == "abc123"


def test_structured_formatter_outputs_json() -> None:
    record = _record("Polling for result")
    record.task_id = "abc123"
    record.poll_attempt = 2

    data = json.loads(StructuredFormatter().format(record))

    assert data["message"] == "Polling for result"
    assert data["level"] == "INFO"
    assert data["task_id"] == "abc123"
    assert data["poll_attempt"] == 2


def test_configure_logging_replaces_handlers() -> None:
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        configure_logging("DEBUG")
        configure_logging("warning", json_format=True)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        assert root.level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
