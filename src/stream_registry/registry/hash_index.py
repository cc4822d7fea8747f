"""
Hash Index: content hash -> owning record id.

Mappings are overwritten by every create/update that introduces a hash
and are never removed, so a superseded hash keeps pointing at the record
that last anchored it. No cross-record uniqueness is enforced: a second
record anchoring the same hash takes the mapping over.
"""

from stream_registry.store.base import StoreTransaction


class HashIndex:
    """Typed view over the hashes table of one transaction."""

    def __init__(self, txn: StoreTransaction):
        self._txn = txn

    def lookup(self, content_hash: str) -> str | None:
        """Return the record id mapped to ``content_hash``, if any."""
        return self._txn.get_hash(content_hash)

    def set(self, content_hash: str, record_id: str) -> None:
        """Map ``content_hash`` to ``record_id`` (idempotent overwrite)."""
        self._txn.set_hash(content_hash, record_id)
