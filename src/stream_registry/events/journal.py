"""
Event journal for the Stream Registry.

Appends registry events to a JSONL file with thread and process level
locking. The journal is an observability trail; the commit log in the
store remains the source of truth.
"""

import fcntl
import json
import logging
import os
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from stream_registry.events.models import RegistryEvent

logger = logging.getLogger(__name__)


@dataclass
class WriteResult:
    """Result of a journal write."""

    success: bool
    event_id: str
    log_file: str
    error: str | None = None
    bytes_written: int = 0


class JsonlEventJournal:
    """
    Thread-safe JSONL event writer.

    Implements the NotificationSink protocol; write failures are reported
    in the returned WriteResult and logged, never raised.
    """

    DEFAULT_PATH = Path("var/events/registry_events.jsonl")

    def __init__(self, path: Path | None = None, fsync: bool = True):
        """
        Initialize the journal.

        Args:
            path: JSONL file to append to (default: var/events/registry_events.jsonl)
            fsync: Force each write to disk before returning
        """
        self._path = Path(path) if path else self.DEFAULT_PATH
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._fsync = fsync
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def notify(self, event: RegistryEvent) -> None:
        self.write(event)

    def write(self, event: RegistryEvent) -> WriteResult:
        """Append one event to the journal."""
        line = event.to_log_line() + "\n"
        bytes_to_write = len(line.encode("utf-8"))

        try:
            with self._lock:
                with open(self._path, "a", encoding="utf-8") as f:
                    try:
                        fcntl.flock(f.fileno(), fcntl.LOCK_EX)
                    except OSError:
                        # Lock unsupported on this filesystem
                        pass

                    try:
                        f.write(line)
                        f.flush()
                        if self._fsync:
                            os.fsync(f.fileno())
                    finally:
                        try:
                            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
                        except OSError:
                            pass
        except OSError as e:
            logger.warning(f"Failed to journal event {event.event_id}: {e}")
            return WriteResult(
                success=False,
                event_id=event.event_id,
                log_file=str(self._path),
                error=str(e),
            )

        return WriteResult(
            success=True,
            event_id=event.event_id,
            log_file=str(self._path),
            bytes_written=bytes_to_write,
        )

    def read(self) -> Iterator[RegistryEvent]:
        """Yield journaled events in write order, skipping corrupt lines."""
        if not self._path.exists():
            return
        with open(self._path, encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield RegistryEvent.model_validate(json.loads(line))
                except (json.JSONDecodeError, ValidationError) as e:
                    logger.warning(f"Skipping corrupt journal line {line_no} in {self._path}: {e}")
