"""
Stream Registry State Machine Module.

Provides the registry operations, the typed table views they use, and
the collaborator protocols they depend on.
"""

__all__ = [
    "StreamRegistry",
    "TransitionResult",
    "RecordStore",
    "HashIndex",
    "CommitLog",
    "CommitHistory",
    "LinkTable",
    # Collaborators
    "Authorizer",
    "SchemaValidator",
    "LocatorValidator",
    "LedgerClock",
    "NotificationSink",
    "IdentityAuthorizer",
    "StaticAuthorizer",
    "ManualClock",
    "CounterClock",
    "SchemaBook",
    "SchemaEntry",
    "CidLocatorValidator",
    # Verification
    "IntegrityReport",
    "verify_stream",
]

from stream_registry.registry.collaborators import (
    Authorizer,
    CounterClock,
    IdentityAuthorizer,
    LedgerClock,
    LocatorValidator,
    ManualClock,
    NotificationSink,
    SchemaValidator,
    StaticAuthorizer,
)
from stream_registry.registry.commit_log import CommitHistory, CommitLog
from stream_registry.registry.hash_index import HashIndex
from stream_registry.registry.integrity import IntegrityReport, verify_stream
from stream_registry.registry.links import LinkTable
from stream_registry.registry.locator import CidLocatorValidator
from stream_registry.registry.machine import StreamRegistry, TransitionResult
from stream_registry.registry.records import RecordStore
from stream_registry.registry.schemas import SchemaBook, SchemaEntry
