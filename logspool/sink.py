"""Sink collaborators — delivery context and a file-backed primary sink."""

import logging
import os
from dataclasses import dataclass
from typing import Callable

from logspool.formatter import build_record, format_message, format_ndjson
from logspool.models import LogEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryContext:
    """Request/user details assembled by the host and handed to the sink."""

    uid: int = 0
    request_uri: str = ""
    referer: str = ""
    ip: str = ""
    link: str = ""


ReadinessCheck = Callable[[], bool]
DeliverFn = Callable[[LogEntry, DeliveryContext], None]


class FileSink:
    """Append-only NDJSON sink, ready once its target directory exists.

    Each delivery opens the file, writes one line and closes it again, so a
    sink that is not ready yet never leaves a stray handle behind.
    """

    def __init__(self, path: str):
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def ready(self) -> bool:
        directory = os.path.dirname(os.path.abspath(self._path))
        return os.path.isdir(directory) and os.access(directory, os.W_OK)

    def deliver(self, entry: LogEntry, context: DeliveryContext) -> None:
        record = build_record(entry, context)
        record["formatted"] = format_message(entry.message, entry.attributes)
        with open(self._path, "a", encoding="utf-8") as f:
            f.write(format_ndjson(record))
            f.flush()
        logger.debug("Delivered %s entry to %s", entry.category, self._path)
