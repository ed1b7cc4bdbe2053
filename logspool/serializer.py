"""Spool record format — versioned JSON objects separated by a delimiter token.

Each queued entry is written as ``serialize_entry(entry) + DELIMITER``. The
delimiter is long enough that it never shows up inside encoded JSON, so the
spool can be split on it without scanning for record lengths.
"""

import json
import logging

from logspool.models import LogEntry, Severity, entry_from_dict, entry_to_dict

logger = logging.getLogger(__name__)

DELIMITER = "<<<---LOGSPOOL-QUEUE-DELIMITER-2npBE--->>>\n"

FORMAT_VERSION = 1

_STR_FIELDS = ("category", "message", "created_at")
_SEVERITY_VALUES = frozenset(int(level) for level in Severity)


def serialize_entry(entry: LogEntry) -> str:
    """Encode one entry as a single-line JSON record (no delimiter)."""
    record = {"v": FORMAT_VERSION, **entry_to_dict(entry)}
    return json.dumps(record, separators=(",", ":"), default=str)


def deserialize_entry(raw: str) -> LogEntry | None:
    """Decode one record. Returns None for anything malformed or unknown."""
    raw = raw.strip()
    if not raw:
        return None

    try:
        record = json.loads(raw)
    except json.JSONDecodeError:
        logger.debug("Skipping undecodable spool record (%d chars)", len(raw))
        return None

    if not isinstance(record, dict) or record.get("v") != FORMAT_VERSION:
        return None
    if not all(isinstance(record.get(name), str) for name in _STR_FIELDS):
        return None
    if not isinstance(record.get("attributes", {}), dict):
        return None

    severity = record.get("severity", int(Severity.NOTICE))
    if not isinstance(severity, int) or severity not in _SEVERITY_VALUES:
        return None

    record.pop("v")
    return entry_from_dict(record)


def split_records(contents: str) -> list[str]:
    """Split spool contents on the delimiter; the trailing remainder is kept.

    A record without its delimiter (an interrupted append) is still returned
    so that ``deserialize_entry`` can decide whether it is usable.
    """
    return [chunk for chunk in contents.split(DELIMITER) if chunk.strip()]


def iter_entries(contents: str):
    """Yield every record in *contents* that deserializes to a LogEntry."""
    for chunk in split_records(contents):
        entry = deserialize_entry(chunk)
        if entry is not None:
            yield entry
