"""
Link Table: inbound link declarations, keyed by target record.

Links are validated once, when the source record is created. Entries
stay in place whatever happens to the target afterwards.
"""

from stream_registry.core.models import LinkEntry
from stream_registry.store.base import StoreTransaction


class LinkTable:
    """Typed view over the links table of one transaction."""

    def __init__(self, txn: StoreTransaction):
        self._txn = txn

    def add_link(self, target_id: str, entry: LinkEntry) -> None:
        self._txn.add_link(target_id, entry)

    def links_of(self, target_id: str) -> list[LinkEntry]:
        """Return links declared against ``target_id`` in insertion order."""
        return self._txn.get_links(target_id)
