"""
Tests for structured logging.
"""
import json
import logging

import pytest

from tomorrowdao_skill.logging_utils import (
    JsonLineFormatter,
    configure_logging,
    new_trace_id,
    parse_level,
    sanitize,
)


def _record(message, fields=None, level=logging.ERROR):
    record = logging.LogRecord("tomorrowdao_skill.test", level, __file__, 1, message, None, None)
    if fields is not None:
        record.fields = fields
    return record


class TestSanitize:
    """Test secret redaction."""

    def test_redacts_secrets(self):
        clean = sanitize({
            "privateKey": "abc",
            "TMRW_PRIVATE_KEY": "abc",
            "accessToken": "tok",
            "Authorization": "Bearer tok",
            "refresh_token": "r",
            "txId": "keep",
        })

        assert clean["privateKey"] == "[REDACTED]"
        assert clean["TMRW_PRIVATE_KEY"] == "[REDACTED]"
        assert clean["accessToken"] == "[REDACTED]"
        assert clean["Authorization"] == "[REDACTED]"
        assert clean["refresh_token"] == "[REDACTED]"
        assert clean["txId"] == "keep"


class TestFormatter:
    """Test JSON line rendering."""

    def test_json_line(self):
        line = JsonLineFormatter().format(_record("tool_failed", {"code": "X", "accessToken": "secret"}))
        entry = json.loads(line)

        assert entry["level"] == "error"
        assert entry["event"] == "tool_failed"
        assert entry["code"] == "X"
        assert entry["accessToken"] == "[REDACTED]"
        assert "secret" not in line

    def test_without_fields(self):
        entry = json.loads(JsonLineFormatter().format(_record("plain", level=logging.INFO)))
        assert entry["level"] == "info"
        assert "ts" in entry


class TestConfigureLogging:
    """Test handler installation."""

    @pytest.mark.parametrize("raw,expected", [
        ("debug", "debug"), ("INFO", "info"), ("warning", "warn"), ("bogus", "error"), (None, "error"),
    ])
    def test_parse_level(self, raw, expected):
        assert parse_level(raw) == expected

    def test_level_from_env_and_single_handler(self, monkeypatch):
        monkeypatch.setenv("TMRW_LOG_LEVEL", "debug")
        package_logger = logging.getLogger("tomorrowdao_skill")

        assert configure_logging() == "debug"
        configure_logging()

        assert package_logger.level == logging.DEBUG
        assert sum(1 for h in package_logger.handlers if h.get_name() == "tomorrowdao-json") == 1

    def test_trace_ids_are_unique(self):
        assert new_trace_id() != new_trace_id()
