"""Tests for structured logging configuration."""

import json
import logging
from io import StringIO

from glycotrack.logging_config import (
    REDACTED,
    JsonFormatter,
    StructuredLogger,
    TextFormatter,
    correlation_id_ctx,
    get_logger,
    setup_logging,
)


def _record(level=logging.INFO, msg="Test message", **attrs) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="/app/test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_fields(self):
        parsed = json.loads(JsonFormatter(service_name="test-service").format(_record()))

        assert parsed["level"] == "INFO"
        assert parsed["service"] == "test-service"
        assert parsed["message"] == "Test message"
        assert parsed["logger"] == "test.logger"
        assert "timestamp" in parsed
        assert "correlation_id" not in parsed

    def test_includes_correlation_id(self):
        token = correlation_id_ctx.set("corr-123")
        try:
            parsed = json.loads(JsonFormatter().format(_record()))
        finally:
            correlation_id_ctx.reset(token)

        assert parsed["correlation_id"] == "corr-123"

    def test_extra_fields_are_merged(self):
        record = _record(extra_fields={"user_id": "abc", "count": 3})
        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["user_id"] == "abc"
        assert parsed["count"] == 3

    def test_error_includes_location(self):
        record = _record(level=logging.ERROR, funcName="restore")
        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["location"] == {
            "file": "/app/test.py",
            "line": 42,
            "function": "restore",
        }

    def test_timestamp_is_record_time(self):
        record = _record()
        record.created = 0.0
        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["timestamp"] == "1970-01-01T00:00:00+00:00"

    def test_credential_fields_are_redacted(self):
        record = _record(
            extra_fields={"user_id": "abc", "password": "SecurePass123", "token": "t"}
        )
        output = JsonFormatter().format(record)
        parsed = json.loads(output)

        assert parsed["password"] == REDACTED
        assert parsed["token"] == REDACTED
        assert parsed["user_id"] == "abc"
        assert "SecurePass123" not in output


class TestTextFormatter:
    def test_text_line(self):
        output = TextFormatter(service_name="svc").format(
            _record(extra_fields={"period": "fasting"})
        )

        assert " - svc - INFO - [-] - Test message" in output
        assert output.endswith("period=fasting")


class TestStructuredLogger:
    def test_get_logger(self):
        logger = get_logger("glycotrack.test")
        assert isinstance(logger, StructuredLogger)

    def test_keyword_fields_reach_the_handler(self):
        setup_logging(log_format="json", log_level="DEBUG", service_name="svc")
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JsonFormatter(service_name="svc"))
        logging.getLogger().addHandler(handler)
        try:
            get_logger("glycotrack.test").info("Alert created", alert_type="low_glucose")
        finally:
            logging.getLogger().removeHandler(handler)

        parsed = json.loads(stream.getvalue().strip())
        assert parsed["message"] == "Alert created"
        assert parsed["alert_type"] == "low_glucose"

    def test_setup_logging_installs_single_handler(self):
        setup_logging(log_format="text", log_level="WARNING")
        root = logging.getLogger()

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)
        assert root.level == logging.WARNING

    def test_exception_carries_traceback(self):
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JsonFormatter())
        logging.getLogger("glycotrack.test.exc").addHandler(handler)
        try:
            try:
                raise RuntimeError("restore failed")
            except RuntimeError:
                get_logger("glycotrack.test.exc").exception(
                    "Unhandled", user_id="abc"
                )
        finally:
            logging.getLogger("glycotrack.test.exc").removeHandler(handler)

        parsed = json.loads(stream.getvalue().strip())
        assert parsed["level"] == "ERROR"
        assert "RuntimeError: restore failed" in parsed["exception"]
        assert parsed["user_id"] == "abc"
