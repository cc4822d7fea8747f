"""Tests for link validation, the hash index, and the commit log."""

import pytest

from stream_registry.core.exceptions import (
    StreamLinkNotFound,
    StreamLinkRevoked,
    UnauthorizedOperation,
)
from stream_registry.core.models import CommitEntry, CommitKind, LinkEntry, StreamRecord
from stream_registry.registry.commit_log import CommitLog
from stream_registry.registry.hash_index import HashIndex
from stream_registry.registry.links import LinkTable
from stream_registry.registry.machine import StreamRegistry
from stream_registry.registry.records import RecordStore
from stream_registry.store.base import RegistryStore


class TestLinks:
    """Tests for links declared at creation time."""

    def test_link_recorded_under_target(self, registry: StreamRegistry) -> None:
        """A linked create adds an entry under the target record."""
        registry.create("alice", "stream-a", "hash-1")
        registry.create("bob", "stream-b", "hash-2", link_ref="stream-a")

        assert registry.links_of("stream-a") == [LinkEntry(source_id="stream-b", controller="bob")]
        assert registry.links_of("stream-b") == []
        assert registry.require("stream-b").link_ref == "stream-a"

    def test_multiple_links_in_order(self, registry: StreamRegistry) -> None:
        """Several records may link to the same target."""
        registry.create("alice", "stream-a", "hash-1")
        registry.create("bob", "stream-b", "hash-2", link_ref="stream-a")
        registry.create("carol", "stream-c", "hash-3", link_ref="stream-a")

        assert [link.source_id for link in registry.links_of("stream-a")] == [
            "stream-b",
            "stream-c",
        ]

    def test_missing_link_target(self, registry: StreamRegistry) -> None:
        """Linking to an unknown record fails without side effects."""
        with pytest.raises(StreamLinkNotFound):
            registry.create("alice", "stream-b", "hash-2", link_ref="stream-a")

        assert registry.get("stream-b") is None
        assert registry.links_of("stream-a") == []
        assert list(registry.history("stream-b")) == []
        assert registry.lookup_hash("hash-2") is None

    def test_revoked_link_target(self, registry: StreamRegistry) -> None:
        """Linking to a revoked record fails and changes no table."""
        registry.create("alice", "stream-a", "hash-1")
        registry.set_status("alice", "stream-a", True)
        target_history = list(registry.history("stream-a"))

        with pytest.raises(StreamLinkRevoked):
            registry.create("bob", "stream-b", "hash-3", link_ref="stream-a")

        assert registry.get("stream-b") is None
        assert list(registry.history("stream-b")) == []
        assert registry.lookup_hash("hash-3") is None
        assert registry.links_of("stream-a") == []
        assert list(registry.history("stream-a")) == target_history

    def test_links_survive_target_revocation(self, registry: StreamRegistry) -> None:
        """Links are not revalidated when the target is later revoked."""
        registry.create("alice", "stream-a", "hash-1")
        registry.create("bob", "stream-b", "hash-2", link_ref="stream-a")
        registry.set_status("alice", "stream-a", True)

        assert len(registry.links_of("stream-a")) == 1
        assert registry.require("stream-b").link_ref == "stream-a"
        assert registry.require("stream-b").revoked is False

    def test_link_after_restore(self, registry: StreamRegistry) -> None:
        """A restored target accepts new links again."""
        registry.create("alice", "stream-a", "hash-1")
        registry.set_status("alice", "stream-a", True)
        registry.set_status("alice", "stream-a", False)
        registry.create("bob", "stream-b", "hash-2", link_ref="stream-a")
        assert len(registry.links_of("stream-a")) == 1

    def test_linking_needs_no_target_ownership(self, registry: StreamRegistry) -> None:
        """Any controller may link to an active record, but not mutate it."""
        registry.create("alice", "stream-a", "hash-1")
        registry.create("bob", "stream-b", "hash-2", link_ref="stream-a")

        with pytest.raises(UnauthorizedOperation):
            registry.set_status("bob", "stream-a", True)

    def test_link_table_view(self, store: RegistryStore) -> None:
        """LinkTable reads and writes through a transaction."""
        with store.transaction() as txn:
            LinkTable(txn).add_link("stream-a", LinkEntry(source_id="stream-b", controller="bob"))
        with store.transaction() as txn:
            assert len(LinkTable(txn).links_of("stream-a")) == 1


class TestHashIndex:
    """Tests for the content hash index."""

    def test_lookup_unknown_hash(self, registry: StreamRegistry) -> None:
        """Unknown hashes map to nothing."""
        assert registry.lookup_hash("never-seen") is None

    def test_set_is_idempotent(self, store: RegistryStore) -> None:
        """Setting the same mapping twice leaves one mapping."""
        with store.transaction() as txn:
            index = HashIndex(txn)
            index.set("hash-1", "stream-a")
            index.set("hash-1", "stream-a")
            assert index.lookup("hash-1") == "stream-a"

    def test_no_cross_record_uniqueness(self, registry: StreamRegistry) -> None:
        """
        Two records may anchor the same hash; the later one owns the mapping.

        The index does not reject a hash already mapped to another record.
        This is a known gap kept as-is: a stronger uniqueness guarantee
        would have to be added deliberately.
        """
        registry.create("alice", "stream-a", "shared-hash")
        registry.create("bob", "stream-b", "shared-hash")

        assert registry.lookup_hash("shared-hash") == "stream-b"
        assert registry.require("stream-a").content_hash == "shared-hash"

    def test_update_can_take_over_hash(self, registry: StreamRegistry) -> None:
        """An update to another record's hash overwrites the mapping."""
        registry.create("alice", "stream-a", "hash-1")
        registry.create("bob", "stream-b", "hash-2")
        registry.update("bob", "stream-b", "hash-1")

        assert registry.lookup_hash("hash-1") == "stream-b"

    def test_stale_mappings_remain(self, registry: StreamRegistry) -> None:
        """Superseded hashes keep pointing at their record."""
        registry.create("alice", "stream-a", "hash-1")
        registry.update("alice", "stream-a", "hash-2")
        registry.update("alice", "stream-a", "hash-3")

        for content_hash in ("hash-1", "hash-2", "hash-3"):
            assert registry.lookup_hash(content_hash) == "stream-a"

    def test_status_change_does_not_touch_index(self, registry: StreamRegistry) -> None:
        """Revocation leaves hash mappings in place."""
        registry.create("alice", "stream-a", "hash-1")
        registry.set_status("alice", "stream-a", True)
        assert registry.lookup_hash("hash-1") == "stream-a"


class TestCommitLog:
    """Tests for appending to and reading the commit log."""

    def test_append_writes_entry_and_record(self, store: RegistryStore) -> None:
        """append stores the new record state alongside its history entry."""
        record = StreamRecord(id="stream-a", content_hash="hash-1", controller="alice", sequence=1)
        entry = CommitEntry(content_hash="hash-1", sequence=1, kind=CommitKind.GENESIS)

        with store.transaction() as txn:
            CommitLog.append(txn, record, entry)
            assert CommitLog.pending(txn, "stream-a") == [entry]

        log = CommitLog(store)
        assert list(log.history("stream-a")) == [entry]
        with store.transaction() as txn:
            assert RecordStore(txn).get("stream-a") == record

    def test_append_rolls_back_with_transaction(self, store: RegistryStore) -> None:
        """An append inside a failed transaction leaves no trace."""
        record = StreamRecord(id="stream-a", content_hash="hash-1", controller="alice", sequence=1)
        entry = CommitEntry(content_hash="hash-1", sequence=1, kind=CommitKind.GENESIS)

        with pytest.raises(RuntimeError):
            with store.transaction() as txn:
                RecordStore(txn).commit(record, entry)
                raise RuntimeError("abort")

        assert list(CommitLog(store).history("stream-a")) == []
        with store.transaction() as txn:
            assert RecordStore(txn).get("stream-a") is None
