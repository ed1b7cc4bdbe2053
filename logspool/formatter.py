"""Render log entries into flat sink records and NDJSON lines."""

import html
import json

from logspool.models import LogEntry

PLACEHOLDER_PREFIXES = ("@", "%", "!")


def format_message(message: str, attributes: dict) -> str:
    """Substitute ``@name``, ``%name`` and ``!name`` placeholders.

    ``@`` values are HTML-escaped, ``%`` values are escaped and wrapped in an
    ``<em class="placeholder">`` tag, ``!`` values are inserted verbatim.
    Attribute keys without one of those prefixes are ignored.
    """
    keys = [k for k in attributes if isinstance(k, str) and k[:1] in PLACEHOLDER_PREFIXES]
    # Longest first so "@user_id" is not clobbered by "@user".
    for key in sorted(keys, key=len, reverse=True):
        value = str(attributes[key])
        if key[0] == "@":
            value = html.escape(value)
        elif key[0] == "%":
            value = f'<em class="placeholder">{html.escape(value)}</em>'
        message = message.replace(key, value)
    return message


def build_record(entry: LogEntry, context) -> dict:
    """Flatten an entry and its delivery context into one sink record."""
    return {
        "type": entry.category,
        "message": entry.message,
        "variables": dict(entry.attributes),
        "severity": int(entry.severity),
        "link": context.link,
        "uid": context.uid,
        "request_uri": context.request_uri,
        "referer": context.referer,
        "ip": context.ip,
        "timestamp": entry.created_at,
    }


def format_ndjson(record: dict) -> str:
    """Serialize a dict to compact JSON + newline."""
    return json.dumps(record, separators=(",", ":"), default=str) + "\n"
