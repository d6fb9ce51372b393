"""Unit tests for logging infrastructure."""

import json
import logging
import sys

import pytest
from rich.logging import RichHandler

from pantrypal.utils.logger import JSONFormatter, SessionFormatter, get_logger, logger, session_logger


def make_record(msg="Test message", level=logging.INFO, name="pantrypal.test", exc_info=None, **extra):
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="test.py",
        lineno=10,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def fresh_logger_name():
    """Yield a logger name with no handlers attached, cleaned up afterwards."""
    name = "pantrypal.test_fresh"
    logging.getLogger(name).handlers.clear()
    yield name
    logging.getLogger(name).handlers.clear()


class TestJSONFormatter:
    """Test JSONFormatter produces valid JSON output."""

    def test_outputs_core_fields(self):
        parsed = json.loads(JSONFormatter().format(make_record()))

        assert parsed["level"] == "INFO"
        assert parsed["logger"] == "pantrypal.test"
        assert parsed["message"] == "Test message"
        assert "timestamp" in parsed

    def test_includes_context_fields_when_present(self):
        """session_id and recipe_id are copied from the record."""
        record = make_record(session_id="sess-456", recipe_id=3)
        parsed = json.loads(JSONFormatter().format(record))

        assert parsed["session_id"] == "sess-456"
        assert parsed["recipe_id"] == 3
        assert "request_id" not in parsed

    def test_includes_exception_traceback(self):
        try:
            raise ValueError("Test error")
        except ValueError:
            record = make_record("Error occurred", level=logging.ERROR, exc_info=sys.exc_info())

        parsed = json.loads(JSONFormatter().format(record))
        assert "ValueError" in parsed["exception"]


class TestSessionFormatter:
    """Test SessionFormatter produces the message text RichHandler renders."""

    def test_message_only(self):
        output = SessionFormatter().format(make_record("Custom message", name="my_logger"))
        assert output == "Custom message"

    def test_prefixes_session_id(self):
        output = SessionFormatter().format(make_record("Search", session_id="abc"))
        assert output == "[abc] Search"

    def test_includes_exception_traceback(self):
        try:
            raise RuntimeError("Test error")
        except RuntimeError:
            record = make_record("Error occurred", level=logging.ERROR, exc_info=sys.exc_info())

        output = SessionFormatter().format(record)
        assert output.startswith("Error occurred")
        assert "RuntimeError: Test error" in output


class TestGetLogger:
    """Test get_logger function."""

    def test_returns_logger_instance(self):
        assert isinstance(get_logger("pantrypal.test_module"), logging.Logger)

    def test_attaches_handler_once(self, fresh_logger_name):
        first = get_logger(fresh_logger_name)
        second = get_logger(fresh_logger_name)

        assert first is second
        assert len(second.handlers) == 1

    def test_respects_log_level_env(self, monkeypatch, fresh_logger_name):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert get_logger(fresh_logger_name).level == logging.DEBUG

    def test_invalid_log_level_defaults_to_info(self, monkeypatch, fresh_logger_name):
        monkeypatch.setenv("LOG_LEVEL", "INVALID")
        assert get_logger(fresh_logger_name).level == logging.INFO

    def test_json_log_type(self, monkeypatch, fresh_logger_name):
        monkeypatch.setenv("LOG_TYPE", "json")
        handler = get_logger(fresh_logger_name).handlers[0]
        assert isinstance(handler.formatter, JSONFormatter)

    def test_text_log_type_is_default(self, monkeypatch, fresh_logger_name):
        monkeypatch.delenv("LOG_TYPE", raising=False)
        handler = get_logger(fresh_logger_name).handlers[0]
        assert isinstance(handler, RichHandler)
        assert isinstance(handler.formatter, SessionFormatter)


class TestModuleLevelLogger:
    """Test module-level logger instance and session adapter."""

    def test_logger_name_and_handlers(self):
        assert logger.name == "pantrypal"
        assert len(logger.handlers) > 0

    def test_session_logger_stamps_session_id(self):
        captured = []

        class _Capture(logging.Handler):
            def emit(self, record):
                captured.append(record)

        handler = _Capture(level=logging.DEBUG)
        logger.addHandler(handler)
        previous_level = logger.level
        logger.setLevel(logging.INFO)
        try:
            session_logger("sess-1").info("hello")
        finally:
            logger.removeHandler(handler)
            logger.setLevel(previous_level)

        assert len(captured) == 1
        assert captured[0].session_id == "sess-1"
        assert captured[0].getMessage() == "hello"
