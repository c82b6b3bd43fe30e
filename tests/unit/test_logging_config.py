"""Tests for structured log output."""

from __future__ import annotations

import io
import json
import logging
import sys

from mcp_codeberg.exceptions import ApiError
from mcp_codeberg.logging_config import (
    SafeStreamHandler,
    StructuredLogFormatter,
    configure_logging,
)


def _record(msg: str = "getIssue request failed", **kwargs) -> logging.LogRecord:
    return logging.LogRecord(
        "mcp_codeberg.executor", logging.WARNING, __file__, 1, msg, (), kwargs.get("exc_info")
    )


def test_flattens_context():
    record = _record()
    record.context = {"owner": "goern", "attempt": 2, "error": ApiError("boom", 502)}
    payload = json.loads(StructuredLogFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "mcp_codeberg.executor"
    assert payload["message"] == "getIssue request failed"
    assert payload["owner"] == "goern"
    assert payload["attempt"] == 2
    assert payload["error"]["status_code"] == 502


def test_context_cannot_override_core_fields():
    record = _record()
    record.context = {"message": "spoofed", "level": "DEBUG"}
    payload = json.loads(StructuredLogFormatter().format(record))
    assert payload["message"] == "getIssue request failed"
    assert payload["level"] == "WARNING"


def test_includes_exception():
    try:
        raise RuntimeError("cache unavailable")
    except RuntimeError:
        record = _record("Failed to rollback optimistic update", exc_info=sys.exc_info())
    payload = json.loads(StructuredLogFormatter().format(record))
    assert "RuntimeError: cache unavailable" in payload["exception"]


def test_safe_handler_ignores_closed_stream(capsys):
    stream = io.StringIO()
    handler = SafeStreamHandler(stream)
    stream.close()
    handler.emit(_record())
    assert capsys.readouterr().err == ""


def test_safe_handler_reports_other_errors(capsys):
    class Broken(io.StringIO):
        def write(self, s):
            raise OSError("disk full")

    SafeStreamHandler(Broken()).emit(_record())
    assert "disk full" in capsys.readouterr().err


def test_configure_logging():
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        configure_logging("debug")
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, StructuredLogFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
