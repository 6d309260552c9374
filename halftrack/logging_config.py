"""Structured JSON logging for the engine and the API.

Modules log event-style messages (``plan_generated``, ``paces_recalibrated``)
and attach details as ``extra={"ctx_<name>": value}``. The formatter
collects those under ``context`` with the prefix stripped.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Optional

CONTEXT_PREFIX = "ctx_"

_QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access", "httpx")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }
        context = {
            k[len(CONTEXT_PREFIX):]: v
            for k, v in record.__dict__.items()
            if k.startswith(CONTEXT_PREFIX)
        }
        request_id = context.pop("request_id", None)
        if request_id:
            log_entry["request_id"] = request_id
        if context:
            log_entry["context"] = context
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", stream: Optional[IO[str]] = None) -> None:
    """Install the JSON handler on the root logger once."""
    root = logging.getLogger()
    if root.handlers:
        return

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
