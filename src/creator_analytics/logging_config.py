"""
Logging configuration for the Creator Analytics engine.

Two output formats, selected with ``LOG_FORMAT``:

- ``text`` (default): one human-readable line per record
- ``json``: one JSON object per record, for log aggregation

Every record carries the current request id and the creator identifier
being analysed (``-`` outside a request).  ``LOG_LEVEL`` sets the root
level.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from contextvars import ContextVar

from config import LOG_FORMAT, LOG_LEVEL

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")
creator_ctx: ContextVar[str] = ContextVar("creator", default="-")

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(request_id)s %(creator)s) %(message)s"


class JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": request_id_ctx.get(),
            "creator": creator_ctx.get(),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class _ContextFilter(logging.Filter):
    """Copy the request context vars onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get()  # type: ignore[attr-defined]
        record.creator = creator_ctx.get()  # type: ignore[attr-defined]
        return True


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure the root logger; arguments override the env settings."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if (fmt or LOG_FORMAT) == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(_TEXT_FORMAT, defaults={"request_id": "-", "creator": "-"})
        )
    handler.addFilter(_ContextFilter())
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def generate_request_id() -> str:
    """Create a short unique request ID."""
    return uuid.uuid4().hex[:12]
