"""
Tests for the log formatters.
"""

import json
import logging
import sys

from core.logging import JSONFormatter, TextFormatter


def _record(msg="Audit: research.create", exc_info=None, **extra):
    record = logging.LogRecord("services.audit_log", logging.INFO, __file__, 42, msg, None, exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_timestamp_matches_stored_format(self, frozen_now):
        data = json.loads(JSONFormatter().format(_record()))
        assert data["timestamp"] == "2024-04-10T12:00:00.000Z"
        assert data["level"] == "INFO"
        assert data["logger"] == "services.audit_log"
        assert data["message"] == "Audit: research.create"

    def test_extra_fields_merged_flat(self, frozen_now):
        record = _record(extra_fields={"user_id": 1, "entity_type": "research"})
        data = json.loads(JSONFormatter().format(record))
        assert data["user_id"] == 1
        assert data["entity_type"] == "research"

    def test_exception_included(self, frozen_now):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(exc_info=sys.exc_info())
        data = json.loads(JSONFormatter().format(record))
        assert "RuntimeError: boom" in data["exception"]


def test_text_formatter(frozen_now):
    line = TextFormatter().format(_record(extra_fields={"path": "/checkin"}))
    assert line.startswith("2024-04-10T12:00:00.000Z INFO")
    assert line.endswith("path=/checkin")
