"""Structured JSON logging for the MCP server."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from .errors import to_jsonable


class SafeStreamHandler(logging.StreamHandler):
    """Stream handler that ignores writes to a stream closed during shutdown."""

    def handleError(self, record: logging.LogRecord) -> None:
        error = sys.exc_info()[1]
        if isinstance(error, (ValueError, OSError)):
            message = str(error).lower()
            if "closed file" in message or "bad file descriptor" in message:
                return
        super().handleError(record)


class StructuredLogFormatter(logging.Formatter):
    """Formats records as one JSON object, flattening ``extra={"context": {...}}``."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if isinstance(context, dict):
            for key, value in to_jsonable(context).items():
                log_record.setdefault(key, value)
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        elif record.exc_text:
            log_record["exception"] = record.exc_text
        return json.dumps(log_record, ensure_ascii=False, default=str)


def configure_logging(log_level: str = "INFO") -> None:
    """Send structured logs to stderr; stdout is reserved for the stdio transport."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    handler = SafeStreamHandler(sys.stderr)
    handler.setFormatter(StructuredLogFormatter())
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())
    for name in ("httpx", "httpcore", "mcp"):
        logging.getLogger(name).setLevel("WARNING")
