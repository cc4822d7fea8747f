"""
Commit Log: append-only, per-record history of state transitions.

Entries are appended only through ``CommitLog.append``, which hands the
entry and the new record state to ``StoreTransaction.record_transition``
so both are written together. Nothing is ever removed or rewritten.
"""

from collections.abc import Iterator

from stream_registry.core.models import CommitEntry, StreamRecord
from stream_registry.store.base import RegistryStore, StoreTransaction


class CommitHistory:
    """
    Lazy view of one record's committed history.

    Every iteration re-reads the store, so the view can be iterated any
    number of times and always reflects the latest committed entries.
    """

    def __init__(self, store: RegistryStore, record_id: str):
        self._store = store
        self.record_id = record_id

    def __iter__(self) -> Iterator[CommitEntry]:
        return self._store.iter_commits(self.record_id)

    def __repr__(self) -> str:
        return f"CommitHistory(record_id={self.record_id!r})"


class CommitLog:
    """Access to commit histories, inside or outside a transaction."""

    def __init__(self, store: RegistryStore):
        self._store = store

    def history(self, record_id: str) -> CommitHistory:
        """Return a restartable view of ``record_id``'s committed history."""
        return CommitHistory(self._store, record_id)

    @staticmethod
    def pending(txn: StoreTransaction, record_id: str) -> list[CommitEntry]:
        """Return the history as seen from inside ``txn``, including its own writes."""
        return txn.get_commits(record_id)

    @staticmethod
    def append(txn: StoreTransaction, record: StreamRecord, entry: CommitEntry) -> None:
        """Append ``entry`` to ``record``'s history and store ``record`` as its new state."""
        txn.record_transition(record, entry)
