# tests/unit/logging/test_unit_logger.py — v1
"""Tests for logging/logger.py — formatters, setup and input previews."""

from __future__ import annotations

import json
import logging

from classboard.logging.context import clear_context, set_request_context, set_stage
from classboard.logging.logger import (
    ROOT_LOGGER_NAME,
    JsonFormatter,
    TextFormatter,
    get_logger,
    preview,
    setup_logging,
)


def _record(msg: str = "Hello", data: dict | None = None) -> logging.LogRecord:
    record = logging.LogRecord(
        name="classboard.test", level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )
    if data is not None:
        record.data = data
    return record


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        set_request_context("req1", "categorize")
        set_stage("formatting")
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["context"] == {
            "request_id": "req1",
            "operation": "categorize",
            "stage": "formatting",
        }

    def test_format_with_data(self):
        parsed = json.loads(JsonFormatter().format(_record(data={"provider": "Gemini-1"})))
        assert parsed["data"] == {"provider": "Gemini-1"}


class TestTextFormatter:
    def teardown_method(self):
        clear_context()

    def test_includes_request_and_stage(self):
        set_request_context("abc123")
        set_stage("categorizing")
        out = TextFormatter().format(_record("msg", data={"k": "v"}))
        assert "[abc123]" in out
        assert "(categorizing)" in out
        assert "- msg" in out
        assert "k=v" in out


class TestSetupLogging:
    def teardown_method(self):
        root = logging.getLogger(ROOT_LOGGER_NAME)
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.NOTSET)

    def test_no_handler_stacking(self):
        setup_logging(level="DEBUG", log_format="text")
        setup_logging(level="DEBUG", log_format="text")
        root = logging.getLogger(ROOT_LOGGER_NAME)
        assert len(root.handlers) == 1
        assert root.level == logging.DEBUG

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "classboard.log"
        setup_logging(log_format="json", log_file=log_file)
        get_logger("unit").warning("written")
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()
        assert "written" in log_file.read_text(encoding="utf-8")


class TestPreview:
    def test_short_text_flattened(self):
        assert preview("a\n  b\tc") == "a b c"

    def test_long_text_truncated(self):
        out = preview("x" * 200, limit=20)
        assert len(out) == 20
        assert out.endswith("...")
