"""Log entry model with severity levels and dict conversion helpers."""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import IntEnum


class Severity(IntEnum):
    """Syslog severity levels, most severe first."""

    EMERGENCY = 0
    ALERT = 1
    CRITICAL = 2
    ERROR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7

    @classmethod
    def parse(cls, value) -> "Severity":
        """Accept a Severity, an int level, or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        name = str(value).strip().upper()
        if name.isdigit():
            return cls(int(name))
        name = _SEVERITY_ALIASES.get(name, name)
        try:
            return cls[name]
        except KeyError:
            raise ValueError(f"Unknown severity: {value!r}") from None


_SEVERITY_ALIASES = {
    "EMERG": "EMERGENCY",
    "CRIT": "CRITICAL",
    "ERR": "ERROR",
    "WARN": "WARNING",
}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class LogEntry:
    """One log record. ``created_at`` is stamped once and cannot be reassigned.

    ``attributes`` set to None becomes an empty dict and ``severity`` is
    coerced through ``Severity.parse``, both at construction and on later
    assignment, so an unknown severity raises ValueError where it is set.
    """

    category: str
    message: str
    attributes: dict = field(default_factory=dict)
    severity: Severity = Severity.NOTICE
    created_at: str = field(default_factory=_utc_now)

    def __setattr__(self, name, value):
        if name == "created_at" and "created_at" in self.__dict__:
            raise AttributeError("created_at is read-only")
        if name == "attributes" and value is None:
            value = {}
        elif name == "severity":
            value = Severity.parse(value)
        super().__setattr__(name, value)


def create_log_entry(
    category: str,
    message: str,
    attributes: dict | None = None,
    severity: Severity | int | str = Severity.NOTICE,
) -> LogEntry:
    """Factory function that creates a LogEntry stamped with the current time."""
    return LogEntry(
        category=category,
        message=message,
        attributes=attributes if attributes is not None else {},
        severity=Severity.parse(severity),
    )


def entry_to_dict(entry: LogEntry) -> dict:
    """Convert a LogEntry to a plain dictionary (severity as its int value)."""
    return {
        "category": entry.category,
        "message": entry.message,
        "attributes": dict(entry.attributes),
        "severity": int(entry.severity),
        "created_at": entry.created_at,
    }


def entry_from_dict(data: dict) -> LogEntry:
    """Rebuild a LogEntry from ``entry_to_dict`` output, keeping its timestamp."""
    known = {f.name for f in fields(LogEntry)}
    return LogEntry(**{k: v for k, v in data.items() if k in known})
