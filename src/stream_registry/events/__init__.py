"""
Stream Registry Events Module.

Notification of committed transitions: event model and sinks.
"""

__all__ = [
    "EventKind",
    "FanOutSink",
    "JsonlEventJournal",
    "LoggingSink",
    "MemorySink",
    "RegistryEvent",
    "WriteResult",
]

from stream_registry.events.journal import JsonlEventJournal, WriteResult
from stream_registry.events.models import EventKind, RegistryEvent
from stream_registry.events.sinks import FanOutSink, LoggingSink, MemorySink
