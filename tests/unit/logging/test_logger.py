# tests/unit/logging/test_logger.py — v1
"""Tests for logging/logger.py — formatters and setup."""

from __future__ import annotations

import json
import logging

from toolfactory.logging.context import clear_context, set_job_context, set_stage_context
from toolfactory.config.settings import Settings
from toolfactory.logging.logger import (
    JsonFormatter,
    TextFormatter,
    setup_logging,
    setup_logging_from_settings,
)


def _record(msg: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="test", level=level, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record("Hello")))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        set_job_context("job1", "run1")
        set_stage_context("extraction")
        parsed = json.loads(JsonFormatter().format(_record("test msg")))
        assert parsed["context"] == {"job_id": "job1", "run_id": "run1", "stage": "extraction"}

    def test_format_extra_data(self):
        record = _record("with data")
        record.data = {"tokens": 12}
        parsed = json.loads(JsonFormatter().format(record))
        assert parsed["data"] == {"tokens": 12}


class TestTextFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "INFO" in output

    def test_format_with_job_and_stage(self):
        set_job_context("job42")
        set_stage_context("generation")
        output = TextFormatter().format(_record("stage msg"))
        assert "[job=job42]" in output
        assert "(generation)" in output

    def test_run_id_shortened(self):
        set_job_context("job42", "0123456789abcdef")
        output = TextFormatter().format(_record("run msg"))
        assert "[job=job42 run=01234567]" in output


class TestSetupLogging:
    def test_setup_json(self):
        setup_logging(level="DEBUG", log_format="json")
        root = logging.getLogger("toolfactory")
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_setup_text(self):
        setup_logging(level="INFO", log_format="text")
        root = logging.getLogger("toolfactory")
        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_reinit_does_not_duplicate_handlers(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger("toolfactory").handlers) == 1

    def test_file_handler_added(self, tmp_path):
        setup_logging(log_file=str(tmp_path / "logs" / "factory.log"))
        root = logging.getLogger("toolfactory")
        assert len(root.handlers) == 2
        assert (tmp_path / "logs").is_dir()
        for handler in root.handlers[1:]:
            handler.close()
        setup_logging()

    def test_quiets_sdk_loggers(self):
        setup_logging()
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("anthropic").level == logging.WARNING


class TestSetupLoggingFromSettings:
    def test_applies_settings(self, tmp_path):
        settings = Settings(
            _env_file=None, log_level="ERROR", log_format="text",
            log_file=tmp_path / "factory.log", log_rotation="1MB", log_retention=2,
        )
        setup_logging_from_settings(settings)
        root = logging.getLogger("toolfactory")
        assert root.level == logging.ERROR
        assert isinstance(root.handlers[0].formatter, TextFormatter)
        file_handler = root.handlers[1]
        assert file_handler.maxBytes == 1024 * 1024
        assert file_handler.backupCount == 2
        for handler in root.handlers[1:]:
            handler.close()
        setup_logging()

    def test_verbose_forces_debug(self):
        setup_logging_from_settings(Settings(_env_file=None, log_level="WARNING"), verbose=True)
        root = logging.getLogger("toolfactory")
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        setup_logging()
