"""Spool queue: deliver log entries now, or park them on disk until the sink is ready.

The spool is a single append-only file holding ``serialize_entry(entry) +
DELIMITER`` records. It moves between two states:

    EMPTY --enqueue--> HAS_BACKLOG --flush (sink ready) / empty_spool--> EMPTY

Readiness is sampled on every ``log``/``flush`` call and never cached. The
file handle only lives for the duration of a single read, append or truncate.
A flush replays the backlog and then truncates, so a crash in between can
deliver some entries twice but never loses them.
"""

import dataclasses
import logging
import os
from typing import Callable

from logspool.config import Config, DeliveryPolicy
from logspool.models import LogEntry
from logspool.serializer import DELIMITER, iter_entries, serialize_entry
from logspool.sink import DeliverFn, DeliveryContext, ReadinessCheck

logger = logging.getLogger(__name__)

_DELIMITER_BYTES = DELIMITER.encode("utf-8")


class SpoolQueue:
    """File-backed fallback queue in front of a primary logging sink.

    Constructing the queue is enough to drain a backlog left by an earlier
    process once the sink has become ready. Use it as a context manager (or
    call ``close``) to get a last flush attempt on the way out.

    Note that ``log`` delivers a new entry *before* replaying the backlog, so
    entries that arrive right after the sink comes up overtake older spooled
    ones.
    """

    def __init__(
        self,
        sink_ready: ReadinessCheck,
        deliver: DeliverFn,
        entry: LogEntry | None = None,
        config: Config | None = None,
        context_provider: Callable[[], DeliveryContext] | None = None,
    ):
        self._config = config or Config()
        self._sink_ready = sink_ready
        self._deliver = deliver
        self._context_provider = context_provider or DeliveryContext
        self._path = self._config.spool_path
        self._closed = False

        self._ensure_spool()
        if entry is not None:
            self.log(entry)
        self.flush()

    @property
    def path(self) -> str:
        return self._path

    @property
    def backlog_size(self) -> int:
        return len(self.pending())

    def __enter__(self) -> "SpoolQueue":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @staticmethod
    def is_valid(entry) -> bool:
        """True for a LogEntry carrying a non-empty string message."""
        return (
            isinstance(entry, LogEntry)
            and isinstance(entry.message, str)
            and entry.message != ""
        )

    def log(self, entry: LogEntry) -> None:
        """Deliver *entry* if the sink is ready (then drain the backlog), else spool it."""
        if not self.is_valid(entry):
            logger.debug("Dropping invalid log entry: %r", entry)
            return

        if not self._ready():
            self.enqueue(entry)
            return

        if self._try_deliver(entry):
            self.flush()
        elif self._config.delivery_policy is DeliveryPolicy.RESPOOL:
            self.enqueue(entry)

    def enqueue(self, entry: LogEntry) -> None:
        """Append a marked copy of *entry* to the spool without delivering it."""
        if not self.is_valid(entry):
            logger.debug("Dropping invalid log entry: %r", entry)
            return

        queued = dataclasses.replace(
            entry,
            message=self._config.queued_marker + entry.message,
            attributes=dict(entry.attributes),
        )
        self._append([queued])

    def flush(self) -> bool:
        """Replay every spooled entry to the sink and clear the spool.

        Returns False (leaving the file alone) when the sink is not ready or
        the spool cannot be opened. Records that fail to decode are dropped.
        """
        if not self._ready():
            return False

        replayed = 0
        failed: list[LogEntry] = []
        try:
            with self._open() as f:
                for entry in iter_entries(f.read()):
                    if not self.is_valid(entry):
                        continue
                    if self._try_deliver(entry):
                        replayed += 1
                    else:
                        failed.append(entry)

                f.seek(0)
                f.truncate()
                if failed and self._config.delivery_policy is DeliveryPolicy.RESPOOL:
                    f.write(_encode(failed))
        except OSError as e:
            logger.error("Could not flush spool %s: %s", self._path, e)
            return False

        if replayed or failed:
            logger.info(
                "Flushed spool %s: replayed=%d, failed=%d", self._path, replayed, len(failed),
            )
        return True

    def empty_spool(self) -> bool:
        """Discard the backlog without delivering it."""
        try:
            with open(self._path, "w", encoding="utf-8"):
                pass
        except OSError as e:
            logger.error("Could not empty spool %s: %s", self._path, e)
            return False
        return True

    def pending(self) -> list[LogEntry]:
        """Return the valid spooled entries without delivering or removing them."""
        if not os.path.exists(self._path):
            return []
        try:
            with open(self._path, "r", encoding="utf-8", errors="replace") as f:
                contents = f.read()
        except OSError as e:
            logger.error("Could not read spool %s: %s", self._path, e)
            return []
        return [entry for entry in iter_entries(contents) if self.is_valid(entry)]

    def close(self) -> None:
        """Make a last best-effort flush. Never raises."""
        if self._closed:
            return
        self._closed = True
        try:
            self.flush()
        except Exception:
            logger.warning("Final flush of spool %s failed", self._path, exc_info=True)

    def _ready(self) -> bool:
        try:
            return bool(self._sink_ready())
        except Exception:
            logger.warning("Sink readiness check failed, treating sink as not ready", exc_info=True)
            return False

    def _try_deliver(self, entry: LogEntry) -> bool:
        """Hand *entry* to the sink. Returns False on failure unless the policy is RAISE."""
        try:
            self._deliver(entry, self._context_provider())
        except Exception:
            if self._config.delivery_policy is DeliveryPolicy.RAISE:
                raise
            logger.warning(
                "Delivery of %s entry failed (policy=%s)",
                entry.category, self._config.delivery_policy.value, exc_info=True,
            )
            return False
        return True

    def _ensure_spool(self) -> None:
        try:
            os.makedirs(self._config.spool_dir, exist_ok=True)
            with open(self._path, "a", encoding="utf-8"):
                pass
        except OSError as e:
            logger.error("Could not create spool %s: %s", self._path, e)

    def _open(self):
        mode = "r+" if os.path.exists(self._path) else "w+"
        return open(self._path, mode, encoding="utf-8", errors="replace")

    def _append(self, entries: list[LogEntry]) -> None:
        payload = _encode(entries).encode("utf-8")
        try:
            with open(self._path, "ab+") as f:
                size = f.seek(0, os.SEEK_END)
                if size:
                    # Terminate any fragment left by an interrupted append.
                    f.seek(max(0, size - len(_DELIMITER_BYTES)))
                    if f.read() != _DELIMITER_BYTES:
                        payload = _DELIMITER_BYTES + payload
                f.write(payload)
                f.flush()
        except OSError as e:
            for entry in entries:
                logger.error(
                    "Could not spool entry to %s (%s): [%s] %s",
                    self._path, e, entry.category, entry.message,
                )


def _encode(entries: list[LogEntry]) -> str:
    return "".join(serialize_entry(entry) + DELIMITER for entry in entries)
