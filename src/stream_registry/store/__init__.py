"""
Stream Registry Store Module.

Provides the transactional key-value store abstraction and its backends.
"""

__all__ = [
    "InMemoryStore",
    "RegistryStore",
    "SqliteStore",
    "StoreTransaction",
]

from stream_registry.store.base import RegistryStore, StoreTransaction
from stream_registry.store.memory import InMemoryStore
from stream_registry.store.sqlite import SqliteStore
