"""
Store abstraction for the Stream Registry.

A store holds four keyed tables (records, commits, links, hashes) and
exposes them only through transactions. All backends must implement:
- transaction(): an atomic unit that commits on success, rolls back on error
- iter_commits(): a lazy, ordered read of one record's history
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import AbstractContextManager

from stream_registry.core.models import CommitEntry, LinkEntry, StreamRecord


class StoreTransaction(ABC):
    """
    One atomic unit of work against a store.

    Reads observe the transaction's own pending writes. Nothing written
    through a transaction becomes visible to other readers until the
    enclosing ``RegistryStore.transaction()`` block exits cleanly.
    """

    @abstractmethod
    def get_record(self, record_id: str) -> StreamRecord | None:
        """Return the current record, or None if absent."""

    @abstractmethod
    def get_commits(self, record_id: str) -> list[CommitEntry]:
        """Return the record's commit history in append order."""

    @abstractmethod
    def get_links(self, target_id: str) -> list[LinkEntry]:
        """Return link entries stored under ``target_id`` in insertion order."""

    @abstractmethod
    def get_hash(self, content_hash: str) -> str | None:
        """Return the record id currently mapped to ``content_hash``."""

    @abstractmethod
    def add_link(self, target_id: str, entry: LinkEntry) -> None:
        """Append a link entry under ``target_id``."""

    @abstractmethod
    def set_hash(self, content_hash: str, record_id: str) -> None:
        """Map ``content_hash`` to ``record_id``, overwriting any prior mapping."""

    def record_transition(self, record: StreamRecord, entry: CommitEntry) -> None:
        """
        Append a commit entry and replace the record's current state.

        This is the only way to write a record: the history entry is
        always appended before the record is replaced, and both land in
        the same transaction.
        """
        self._append_commit(record.id, entry)
        self._put_record(record)

    @abstractmethod
    def _append_commit(self, record_id: str, entry: CommitEntry) -> None:
        """Append one commit entry to the record's history."""

    @abstractmethod
    def _put_record(self, record: StreamRecord) -> None:
        """Insert or replace the record's current state."""


class RegistryStore(ABC):
    """
    Persistent key-value store consumed by the registry.

    Mutating transactions are serialized: at most one writer runs at a
    time against a given store.
    """

    backend: str = "base"

    @abstractmethod
    def transaction(self) -> AbstractContextManager[StoreTransaction]:
        """
        Open an atomic transaction.

        Usage:
            with store.transaction() as txn:
                txn.set_hash(...)

        Commits when the block exits normally; rolls back and re-raises
        when it exits with an exception.
        """

    @abstractmethod
    def iter_commits(self, record_id: str) -> Iterator[CommitEntry]:
        """
        Yield a record's committed history in append order.

        The history is read once, when iteration starts; commits made while
        the iterator is being consumed are not seen by it.
        """

    def close(self) -> None:
        """Release backend resources."""

    def __enter__(self) -> "RegistryStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
