"""Structured logging for Semantic Recall.

Records are emitted as one JSON object per line. Fields bound with
``log_context`` (or passed as ``extra={"ctx_...": ...}``) appear as
``ctx_*`` keys, so a background job's lines can be correlated with the
content id they were working on.
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Mapping

import orjson

LOG_LEVEL_ENV = "RECALL_LOG_LEVEL"
LOG_JSON_ENV = "RECALL_LOG_JSON"
CONTEXT_PREFIX = "ctx_"

_context: ContextVar[Mapping[str, Any]] = ContextVar("recall_log_context", default={})


class ContextFilter(logging.Filter):
    """Copy the fields bound by ``log_context`` onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _context.get().items():
            attribute = f"{CONTEXT_PREFIX}{key}"
            if not hasattr(record, attribute):
                setattr(record, attribute, value)
        return True


class JsonFormatter(logging.Formatter):
    """Render a record and its ``ctx_*`` attributes as a JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in vars(record).items() if key.startswith(CONTEXT_PREFIX)
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return orjson.dumps(payload, default=str).decode("utf-8")


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Bind fields to every record logged inside the block, on this thread or task."""
    token = _context.set({**_context.get(), **fields})
    try:
        yield
    finally:
        _context.reset(token)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


def configure_logging(level: str | int | None = None, use_json: bool | None = None) -> None:
    """Install a single stdout handler on the root logger."""
    level = level or os.environ.get(LOG_LEVEL_ENV, "INFO")
    use_json = _env_flag(LOG_JSON_ENV, True) if use_json is None else use_json
    logging.captureWarnings(True)
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ContextFilter())
    if use_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"))
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]


def get_logger(name: str = "semantic_recall") -> logging.Logger:
    """Return a logger, configuring the root logger on first use."""
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


__all__ = ["ContextFilter", "JsonFormatter", "configure_logging", "get_logger", "log_context"]
