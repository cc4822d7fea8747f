"""Record Store: canonical current state of every stream record."""

from stream_registry.core.exceptions import StreamNotFound
from stream_registry.core.models import CommitEntry, StreamRecord
from stream_registry.registry.commit_log import CommitLog
from stream_registry.store.base import StoreTransaction


class RecordStore:
    """Typed view over the records table of one transaction."""

    def __init__(self, txn: StoreTransaction):
        self._txn = txn

    def get(self, record_id: str) -> StreamRecord | None:
        return self._txn.get_record(record_id)

    def contains(self, record_id: str) -> bool:
        return self._txn.get_record(record_id) is not None

    def require(self, record_id: str, operation: str | None = None) -> StreamRecord:
        """
        Return the record or raise.

        Raises:
            StreamNotFound: If no record has this id
        """
        record = self._txn.get_record(record_id)
        if record is None:
            raise StreamNotFound(record_id=record_id, operation=operation)
        return record

    def commit(self, record: StreamRecord, entry: CommitEntry) -> None:
        """Write the record together with the history entry describing the change."""
        CommitLog.append(self._txn, record, entry)
