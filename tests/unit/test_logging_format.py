"""Tests for the unified logging format.

Target format: 2026-01-06T14:05:52Z [source] LEVEL message
"""

from __future__ import annotations

import io
import logging
import re
import sys
from datetime import datetime

import pytest

from ticketing.logging_config import (
    TRACE,
    HealthCheckFilter,
    ISO8601Formatter,
    configure_logging,
    get_logger,
)


def make_record(msg: str, level: int = logging.INFO, args: tuple = (), name: str = "test") -> logging.LogRecord:
    return logging.LogRecord(name=name, level=level, pathname="", lineno=0, msg=msg, args=args, exc_info=None)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging replaces root handlers; put them back for the next test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestISO8601Formatter:
    def test_format_matches_layout(self):
        output = ISO8601Formatter(source="api").format(make_record("Issued ticket Q-001"))
        pattern = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z \[api\] INFO Issued ticket Q-001$"
        assert re.match(pattern, output), f"Output '{output}' doesn't match expected format"

    def test_timestamp_is_utc(self):
        output = ISO8601Formatter(source="api").format(make_record("x"))
        timestamp_str = output.split(" ")[0]
        assert timestamp_str.endswith("Z")
        assert datetime.fromisoformat(timestamp_str.replace("Z", "+00:00")) is not None

    @pytest.mark.parametrize(
        "level,level_name",
        [(TRACE, "TRACE"), (logging.DEBUG, "DEBUG"), (logging.WARNING, "WARNING"), (logging.ERROR, "ERROR")],
    )
    def test_level_names(self, level, level_name):
        output = ISO8601Formatter(source="test").format(make_record("Message", level=level))
        assert f"] {level_name} Message" in output

    def test_message_args_are_interpolated(self):
        record = make_record("Request %s moved to %s", args=("REQ-20250101-001", "queued"))
        output = ISO8601Formatter(source="test").format(record)
        assert output.endswith("Request REQ-20250101-001 moved to queued")

    def test_exception_traceback_is_appended(self):
        try:
            raise RuntimeError("store unavailable")
        except RuntimeError:
            record = logging.LogRecord("test", logging.ERROR, "", 0, "Rollback failed", (), sys.exc_info())

        output = ISO8601Formatter(source="api").format(record)
        first_line, rest = output.split("\n", 1)
        assert first_line.endswith("ERROR Rollback failed")
        assert "RuntimeError: store unavailable" in rest


class TestHealthCheckFilter:
    @pytest.mark.parametrize(
        "line",
        [
            '127.0.0.1:56948 - "GET /health HTTP/1.1" 200 OK',
            '192.168.32.3:40210 - "GET /api/health HTTP/1.1" 200 OK',
            '10.0.0.7:5100 - "GET /api/queue/display HTTP/1.1" 200 OK',
        ],
    )
    def test_suppresses_polling_at_info(self, line):
        assert HealthCheckFilter().filter(make_record(line, name="uvicorn.access")) is False

    def test_allows_other_endpoints(self):
        record = make_record('127.0.0.1:56948 - "POST /api/queue/next HTTP/1.1" 200 OK', name="uvicorn.access")
        assert HealthCheckFilter().filter(record) is True

    def test_allows_polling_at_debug(self):
        record = make_record('127.0.0.1:56948 - "GET /health HTTP/1.1" 200 OK', level=logging.DEBUG)
        assert HealthCheckFilter().filter(record) is True


class TestConfigureLogging:
    def test_default_level_is_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert configure_logging(source="test", debug=False).level == logging.INFO

    def test_debug_flag(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert configure_logging(source="test", debug=True).level == logging.DEBUG

    def test_trace_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "trace")
        assert configure_logging(source="test").level == TRACE

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert configure_logging(source="test", level=logging.WARNING).level == logging.WARNING

    def test_httpx_is_quieted(self):
        configure_logging(source="test", level=logging.DEBUG)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_get_logger_returns_named_logger(self):
        assert get_logger("ticketing.queue").name == "ticketing.queue"

    def test_logger_trace_method(self):
        stream = io.StringIO()
        configure_logging(source="repair", level=TRACE)
        root = logging.getLogger()
        root.handlers.clear()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(ISO8601Formatter(source="repair"))
        root.addHandler(handler)

        get_logger("ticketing.data.store").trace("find tickets limit=1")

        pattern = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z \[repair\] TRACE find tickets limit=1\n$"
        assert re.match(pattern, stream.getvalue())
