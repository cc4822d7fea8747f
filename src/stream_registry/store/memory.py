"""
In-memory store backend.

Keeps all four tables in dictionaries. Transactions stage their writes
in an overlay that is merged into the committed tables only when the
transaction block exits cleanly.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from stream_registry.core.models import CommitEntry, LinkEntry, StreamRecord
from stream_registry.store.base import RegistryStore, StoreTransaction


class _MemoryTransaction(StoreTransaction):
    """Overlay of pending writes on top of an InMemoryStore."""

    def __init__(self, store: "InMemoryStore"):
        self._store = store
        self._records: dict[str, StreamRecord] = {}
        self._commits: dict[str, list[CommitEntry]] = {}
        self._links: dict[str, list[LinkEntry]] = {}
        self._hashes: dict[str, str] = {}

    def get_record(self, record_id: str) -> StreamRecord | None:
        if record_id in self._records:
            return self._records[record_id]
        return self._store._records.get(record_id)

    def get_commits(self, record_id: str) -> list[CommitEntry]:
        committed = self._store._commits.get(record_id, [])
        return [*committed, *self._commits.get(record_id, [])]

    def get_links(self, target_id: str) -> list[LinkEntry]:
        committed = self._store._links.get(target_id, [])
        return [*committed, *self._links.get(target_id, [])]

    def get_hash(self, content_hash: str) -> str | None:
        if content_hash in self._hashes:
            return self._hashes[content_hash]
        return self._store._hashes.get(content_hash)

    def add_link(self, target_id: str, entry: LinkEntry) -> None:
        self._links.setdefault(target_id, []).append(entry)

    def set_hash(self, content_hash: str, record_id: str) -> None:
        self._hashes[content_hash] = record_id

    def _append_commit(self, record_id: str, entry: CommitEntry) -> None:
        self._commits.setdefault(record_id, []).append(entry)

    def _put_record(self, record: StreamRecord) -> None:
        self._records[record.id] = record

    def apply(self) -> None:
        """Merge staged writes into the owning store."""
        store = self._store
        for record_id, entries in self._commits.items():
            store._commits.setdefault(record_id, []).extend(entries)
        for target_id, entries in self._links.items():
            store._links.setdefault(target_id, []).extend(entries)
        store._hashes.update(self._hashes)
        store._records.update(self._records)


class InMemoryStore(RegistryStore):
    """
    Dictionary-backed registry store.

    Suitable for tests and for embedding the registry in a process that
    supplies its own persistence. Thread-safe: one transaction at a time.
    """

    backend = "memory"

    def __init__(self):
        """Initialize empty tables."""
        self._records: dict[str, StreamRecord] = {}
        self._commits: dict[str, list[CommitEntry]] = {}
        self._links: dict[str, list[LinkEntry]] = {}
        self._hashes: dict[str, str] = {}
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        with self._lock:
            txn = _MemoryTransaction(self)
            yield txn
            # Reached only when the block raised nothing; staged writes
            # are otherwise dropped with the overlay.
            txn.apply()

    def iter_commits(self, record_id: str) -> Iterator[CommitEntry]:
        with self._lock:
            entries = list(self._commits.get(record_id, []))
        yield from entries

    def __len__(self) -> int:
        """Number of stored records."""
        return len(self._records)
