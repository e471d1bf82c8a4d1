"""Tests for structured logging."""

import json
import logging
import sys

import pytest

from fitlog.errors import ConfigError
from fitlog.logging import ContextFormatter, JSONFormatter, resolve_level, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="fitlog.rest_client",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="GET %s failed with HTTP %d",
        args=("sessions", 500),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


REQUEST_CONTEXT = dict(
    fitlog_user_id="u1",
    fitlog_duration_ms=12.5,
    fitlog_status=500,
    fitlog_operation="List",
)


class TestJSONFormatter:
    def test_includes_fitlog_extras(self):
        entry = json.loads(JSONFormatter().format(_record(**REQUEST_CONTEXT, other="x")))
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "fitlog.rest_client"
        assert entry["message"] == "GET sessions failed with HTTP 500"
        assert entry["fitlog_status"] == 500
        assert entry["fitlog_operation"] == "List"
        assert "other" not in entry

    def test_context_fields_in_fixed_order(self):
        line = JSONFormatter().format(_record(fitlog_zone="eu", **REQUEST_CONTEXT))
        keys = [key for key in json.loads(line) if key.startswith("fitlog_")]
        assert keys == [
            "fitlog_operation",
            "fitlog_status",
            "fitlog_duration_ms",
            "fitlog_user_id",
            "fitlog_zone",
        ]

    def test_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in entry["exception"]


class TestContextFormatter:
    def test_appends_context_pairs(self):
        line = ContextFormatter().format(_record(**REQUEST_CONTEXT))
        assert line.endswith(
            "fitlog.rest_client: GET sessions failed with HTTP 500 "
            "[operation=List status=500 duration_ms=12.5 user_id=u1]"
        )

    def test_skips_missing_values(self):
        line = ContextFormatter().format(_record(fitlog_user_id=None))
        assert line.endswith("GET sessions failed with HTTP 500")

    def test_context_stays_on_first_line_with_traceback(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(fitlog_operation="Get")
            record.exc_info = sys.exc_info()
        first, rest = ContextFormatter().format(record).split("\n", 1)
        assert first.endswith("[operation=Get]")
        assert "ValueError: boom" in rest


class TestResolveLevel:
    @pytest.mark.parametrize("level, expected", [("debug", logging.DEBUG), (" Warning ", logging.WARNING), (15, 15)])
    def test_accepts_names_and_numbers(self, level, expected):
        assert resolve_level(level) == expected

    def test_unknown_name_is_config_error(self):
        with pytest.raises(ConfigError, match="FITLOG_LOG_LEVEL"):
            resolve_level("chatty")


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize("log_format, formatter", [("json", JSONFormatter), ("text", ContextFormatter)])
def test_setup_logging_replaces_handlers(restore_root, log_format, formatter):
    setup_logging(log_format, "DEBUG")
    setup_logging(log_format, logging.DEBUG)
    assert len(restore_root.handlers) == 1
    assert type(restore_root.handlers[0].formatter) is formatter
    assert restore_root.level == logging.DEBUG


def test_setup_logging_rejects_unknown_format(restore_root):
    handlers = restore_root.handlers[:]
    with pytest.raises(ConfigError, match="FITLOG_LOG_FORMAT"):
        setup_logging("xml")
    assert restore_root.handlers == handlers
