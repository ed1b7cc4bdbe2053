"""Tests for the log entry model."""

import datetime

import pytest

from logspool.models import (
    LogEntry,
    Severity,
    create_log_entry,
    entry_from_dict,
    entry_to_dict,
)


class TestLogEntry:
    def test_defaults(self):
        entry = LogEntry("auth", "login failed")
        assert entry.category == "auth"
        assert entry.message == "login failed"
        assert entry.attributes == {}
        assert entry.severity is Severity.NOTICE

    def test_none_attributes_become_empty_dict(self):
        entry = LogEntry("auth", "login failed", attributes=None)
        assert entry.attributes == {}
        assert isinstance(entry.attributes, dict)

    def test_auto_timestamp(self):
        entry = LogEntry("auth", "login failed")
        ts = datetime.datetime.fromisoformat(entry.created_at)
        now = datetime.datetime.now(datetime.timezone.utc)
        delta = (now - ts).total_seconds()
        assert 0 <= delta < 2

    def test_created_at_is_read_only(self):
        entry = LogEntry("auth", "login failed")
        with pytest.raises(AttributeError):
            entry.created_at = "2000-01-01T00:00:00+00:00"

    def test_other_fields_are_mutable(self):
        entry = LogEntry("auth", "login failed")
        entry.category = "cron"
        entry.message = "job ran"
        entry.attributes = {"@job": "backup"}
        entry.severity = Severity.DEBUG
        assert entry.category == "cron"
        assert entry.message == "job ran"
        assert entry.attributes == {"@job": "backup"}
        assert entry.severity is Severity.DEBUG

    def test_empty_message_allowed_at_construction(self):
        entry = LogEntry("auth", "")
        assert entry.message == ""

    def test_severity_int_is_coerced(self):
        entry = LogEntry("auth", "x", severity=4)
        assert entry.severity is Severity.WARNING

    def test_attributes_set_to_none_become_empty_dict(self):
        entry = LogEntry("auth", "x", {"@user": "bob"})
        entry.attributes = None
        assert entry.attributes == {}

    def test_severity_assignment_is_coerced(self):
        entry = LogEntry("auth", "x")
        entry.severity = "warn"
        assert entry.severity is Severity.WARNING

    def test_unknown_severity_raises_where_set(self):
        with pytest.raises(ValueError):
            LogEntry("auth", "x", severity="loud")
        entry = LogEntry("auth", "x")
        with pytest.raises(ValueError):
            entry.severity = 42
        assert entry.severity is Severity.NOTICE


class TestSeverity:
    def test_ordering(self):
        assert Severity.EMERGENCY < Severity.ERROR < Severity.NOTICE < Severity.DEBUG

    def test_parse_names_case_insensitive(self):
        assert Severity.parse("warning") is Severity.WARNING
        assert Severity.parse("Error") is Severity.ERROR

    def test_parse_aliases(self):
        assert Severity.parse("WARN") is Severity.WARNING
        assert Severity.parse("crit") is Severity.CRITICAL

    def test_parse_numbers(self):
        assert Severity.parse(3) is Severity.ERROR
        assert Severity.parse("7") is Severity.DEBUG

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            Severity.parse("loud")
        with pytest.raises(ValueError):
            Severity.parse(42)


class TestHelpers:
    def test_create_log_entry(self):
        entry = create_log_entry("auth", "login failed", {"@user": "bob"}, "warning")
        assert entry.severity is Severity.WARNING
        assert entry.attributes == {"@user": "bob"}

    def test_create_log_entry_default_attributes(self):
        entry = create_log_entry("auth", "login failed")
        assert entry.attributes == {}
        assert entry.severity is Severity.NOTICE

    def test_entry_to_dict(self):
        entry = create_log_entry("auth", "login failed", severity=Severity.ERROR)
        d = entry_to_dict(entry)
        assert d == {
            "category": "auth",
            "message": "login failed",
            "attributes": {},
            "severity": 3,
            "created_at": entry.created_at,
        }

    def test_entry_from_dict_keeps_timestamp(self):
        d = {
            "category": "auth",
            "message": "login failed",
            "attributes": {"ip": "10.0.0.1"},
            "severity": 4,
            "created_at": "2024-01-15T08:23:45+00:00",
        }
        entry = entry_from_dict(d)
        assert entry.created_at == "2024-01-15T08:23:45+00:00"
        assert entry.severity is Severity.WARNING
        assert entry.attributes == {"ip": "10.0.0.1"}

    def test_entry_from_dict_ignores_unknown_keys(self):
        entry = entry_from_dict({"category": "a", "message": "b", "extra": 1})
        assert entry.message == "b"
