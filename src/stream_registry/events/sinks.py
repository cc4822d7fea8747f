"""
Notification sinks.

Sinks are best-effort: the registry hands them events after a transition
is committed and never lets a sink failure reach the caller.
"""

import logging
import threading
from collections.abc import Iterable

from stream_registry.events.models import EventKind, RegistryEvent

logger = logging.getLogger(__name__)


class LoggingSink:
    """Writes each event to a standard library logger."""

    def __init__(self, logger_name: str = "stream_registry.events", level: int = logging.INFO):
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def notify(self, event: RegistryEvent) -> None:
        self._logger.log(
            self._level,
            f"{event.kind.value} record={event.record_id} "
            f"hash={event.content_hash} controller={event.controller} seq={event.sequence}",
        )


class MemorySink:
    """Collects events in memory."""

    def __init__(self):
        self.events: list[RegistryEvent] = []
        self._lock = threading.Lock()

    def notify(self, event: RegistryEvent) -> None:
        with self._lock:
            self.events.append(event)

    def of_kind(self, kind: EventKind) -> list[RegistryEvent]:
        return [e for e in self.events if e.kind == kind]

    def clear(self) -> None:
        with self._lock:
            self.events.clear()


class FanOutSink:
    """
    Delivers every event to several sinks.

    A failing sink is logged and skipped; the remaining sinks still
    receive the event.
    """

    def __init__(self, sinks: Iterable = ()):
        self._sinks = list(sinks)

    def add(self, sink) -> None:
        self._sinks.append(sink)

    def notify(self, event: RegistryEvent) -> None:
        for sink in self._sinks:
            try:
                sink.notify(event)
            except Exception as e:
                logger.warning(
                    f"Sink {type(sink).__name__} failed for event {event.event_id}: {e}"
                )
