"""Tests for structured logging."""

from __future__ import annotations

import logging

import orjson

from semantic_recall.core.logging import ContextFilter, JsonFormatter, log_context


def _record(message: str = "hello %s", args: tuple = ("world",)) -> logging.LogRecord:
    return logging.LogRecord("semantic_recall.test", logging.INFO, __file__, 1, message, args, None)


def test_json_formatter_includes_context_fields() -> None:
    record = _record()
    record.ctx_content_id = "cnt_1"
    payload = orjson.loads(JsonFormatter().format(record))
    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["ctx_content_id"] == "cnt_1"


def test_log_context_binds_and_unbinds() -> None:
    context_filter = ContextFilter()
    with log_context(job="index", content_id="cnt_2"):
        inside = _record()
        context_filter.filter(inside)
    outside = _record()
    context_filter.filter(outside)
    assert inside.ctx_job == "index"
    assert inside.ctx_content_id == "cnt_2"
    assert not hasattr(outside, "ctx_job")


def test_explicit_extra_wins_over_context() -> None:
    with log_context(content_id="bound"):
        record = _record()
        record.ctx_content_id = "explicit"
        ContextFilter().filter(record)
    assert record.ctx_content_id == "explicit"
