"""Unit tests for telemetry module."""

import asyncio
import json
import logging
import sys

import pytest

from video_service.commons.telemetry.decorators import LogContext, timed
from video_service.commons.telemetry.logger import (
    JsonFormatter,
    TextFormatter,
    build_formatter,
    clear_log_context,
    configure_logging,
    get_correlation_id,
    get_log_context,
    redact,
    set_correlation_id,
    set_log_context,
)


def _record(msg="Test", level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="/test/file.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCorrelationId:
    """Tests for correlation ID management."""

    def test_set_and_get_correlation_id(self):
        cid = set_correlation_id("test-123")
        assert cid == "test-123"
        assert get_correlation_id() == "test-123"

    def test_auto_generate_correlation_id(self):
        cid = set_correlation_id()
        assert len(cid) == 36  # UUID format


class TestLogContext:
    """Tests for logging context management."""

    def setup_method(self):
        clear_log_context()

    def teardown_method(self):
        clear_log_context()

    def test_set_and_get_context(self):
        set_log_context(video_id="abc", stage="transcoding")
        ctx = get_log_context()
        assert ctx["video_id"] == "abc"
        assert ctx["stage"] == "transcoding"

    def test_context_is_copied(self):
        set_log_context(key="value")
        ctx = get_log_context()
        ctx["new_key"] = "new_value"
        assert "new_key" not in get_log_context()


class TestRedact:
    """Tests for credential redaction."""

    def test_masks_sensitive_keys(self):
        result = redact({"apikey": "secret", "Authorization": "Bearer x", "path": "a"})
        assert result["apikey"] == "***"
        assert result["Authorization"] == "***"
        assert result["path"] == "a"

    def test_masks_nested_mappings(self):
        result = redact({"headers": {"api_key": "secret", "Accept": "json"}})
        assert result["headers"]["api_key"] == "***"
        assert result["headers"]["Accept"] == "json"


class TestJsonFormatter:
    """Tests for JSON log formatter."""

    def setup_method(self):
        clear_log_context()

    def teardown_method(self):
        clear_log_context()

    def test_basic_format(self):
        data = json.loads(JsonFormatter().format(_record("Test message")))

        assert data["level"] == "INFO"
        assert data["logger"] == "test.logger"
        assert data["message"] == "Test message"
        assert "timestamp" in data
        assert data["path"] == "/test/file.py:42"

    def test_format_with_correlation_id(self):
        set_correlation_id("test-cid")
        data = json.loads(JsonFormatter().format(_record()))
        assert data["correlation_id"] == "test-cid"

    def test_format_with_context(self):
        set_log_context(video_id="vid-1")
        data = json.loads(JsonFormatter().format(_record()))
        assert data["context"]["video_id"] == "vid-1"

    def test_extra_fields_are_included_and_redacted(self):
        record = _record(bucket="videos", api_key="secret-value")
        output = JsonFormatter().format(record)
        data = json.loads(output)

        assert data["bucket"] == "videos"
        assert data["api_key"] == "***"
        assert "secret-value" not in output

    def test_format_with_exception(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = _record("Error occurred", logging.ERROR, sys.exc_info())
            data = json.loads(JsonFormatter().format(record))

        assert "ValueError" in data["exception"]


class TestTextFormatter:
    """Tests for text log formatter."""

    def setup_method(self):
        clear_log_context()

    def teardown_method(self):
        clear_log_context()

    def test_basic_format(self):
        output = TextFormatter().format(_record("Test message"))

        assert "INFO" in output
        assert "[test.logger]" in output
        assert "Test message" in output

    def test_shows_video_id_from_context(self):
        set_log_context(video_id="vid-42")
        output = TextFormatter().format(_record())
        assert "[video=vid-42]" in output

    def test_redacts_extra_fields(self):
        output = TextFormatter().format(_record(secret_key="hidden"))
        assert "hidden" not in output
        assert "secret_key=***" in output


class TestConfigureLogging:
    """Tests for logger configuration."""

    def test_configure_json_logger(self):
        logger = configure_logging(
            level="DEBUG", format_type="json", logger_name="test.json"
        )
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)

    def test_configure_text_logger(self):
        logger = configure_logging(
            level="INFO", format_type="text", logger_name="test.text"
        )
        assert isinstance(logger.handlers[0].formatter, TextFormatter)

    def test_build_formatter(self):
        assert isinstance(build_formatter("json"), JsonFormatter)
        assert isinstance(build_formatter("text"), TextFormatter)


class TestTimedDecorator:
    """Tests for @timed decorator."""

    def test_timed_sync_function(self, caplog):
        log = logging.getLogger("test.timed.sync")

        @timed(logger=log)
        def add(x, y):
            return x + y

        with caplog.at_level(logging.DEBUG, logger="test.timed.sync"):
            result = add(1, 2)

        assert result == 3
        assert any(r.outcome == "ok" for r in caplog.records)

    def test_timed_async_function(self, caplog):
        log = logging.getLogger("test.timed.async")

        @timed(logger=log)
        async def double(x):
            await asyncio.sleep(0)
            return x * 2

        with caplog.at_level(logging.DEBUG, logger="test.timed.async"):
            result = asyncio.run(double(5))

        assert result == 10
        assert any("duration_ms" in r.__dict__ for r in caplog.records)

    def test_timed_records_exception_type(self, caplog):
        log = logging.getLogger("test.timed.error")

        @timed(logger=log)
        def failing():
            raise RuntimeError("boom")

        with caplog.at_level(logging.DEBUG, logger="test.timed.error"):
            with pytest.raises(RuntimeError):
                failing()

        assert any(r.outcome == "RuntimeError" for r in caplog.records)

    def test_timed_with_threshold(self, caplog):
        log = logging.getLogger("test.timed.threshold")

        @timed(logger=log, threshold_ms=10_000)
        def fast_function():
            return "fast"

        with caplog.at_level(logging.DEBUG, logger="test.timed.threshold"):
            assert fast_function() == "fast"

        assert not caplog.records


class TestLogContextManager:
    """Tests for LogContext context manager."""

    def setup_method(self):
        clear_log_context()

    def teardown_method(self):
        clear_log_context()

    def test_context_manager_restores_context(self):
        set_log_context(existing="value")

        with LogContext(temporary="data"):
            ctx = get_log_context()
            assert ctx["existing"] == "value"
            assert ctx["temporary"] == "data"

        ctx = get_log_context()
        assert ctx["existing"] == "value"
        assert "temporary" not in ctx

    def test_update_adds_values_until_exit(self):
        with LogContext(video_id="abc") as ctx:
            ctx.update(stage="uploading_video")
            assert get_log_context() == {"video_id": "abc", "stage": "uploading_video"}

        assert get_log_context() == {}
