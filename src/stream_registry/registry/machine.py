"""
Registry State Machine.

Orchestrates the three mutating operations (create, update, set_status)
against the record store, hash index, commit log, and link table. Each
operation runs inside one store transaction: every precondition is
checked before the first write, and any failure rolls the whole
transaction back.
"""

import logging
from dataclasses import dataclass
from typing import Any

from stream_registry.core.exceptions import (
    CidAlreadyAnchored,
    InvalidRequest,
    SameIdentifierAndHash,
    StatusChangeNotRequired,
    StreamAlreadyAnchored,
    StreamLinkNotFound,
    StreamLinkRevoked,
    StreamRegistryError,
    StreamRevoked,
    UnauthorizedOperation,
)
from stream_registry.core.models import CommitEntry, CommitKind, LinkEntry, StreamRecord
from stream_registry.events.models import EventKind, RegistryEvent
from stream_registry.registry.collaborators import (
    Authorizer,
    LedgerClock,
    LocatorValidator,
    NotificationSink,
    SchemaValidator,
)
from stream_registry.registry.commit_log import CommitHistory, CommitLog
from stream_registry.registry.hash_index import HashIndex
from stream_registry.registry.links import LinkTable
from stream_registry.registry.records import RecordStore
from stream_registry.store.base import RegistryStore

logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    """Result of a committed registry operation."""

    operation: CommitKind
    record_id: str
    record: StreamRecord
    commit: CommitEntry
    event: RegistryEvent


def _require_text(name: str, value: Any, optional: bool = False) -> None:
    if value is None and optional:
        return
    if not isinstance(value, str) or not value:
        raise InvalidRequest(
            f"'{name}' must be a non-empty string",
            details={"field": name, "value": repr(value)},
        )


class StreamRegistry:
    """
    Registry of content-addressed stream records.

    All collaborators are injected:
    - store: transactional persistence for the four registry tables
    - authorizer: caller credential -> controller id
    - schema_validator / locator_validator: input checks
    - clock: ledger sequence stamped on every transition
    - sink: optional receiver of committed-transition events

    Authorization is ownership equality: a caller may mutate a record only
    when its resolved controller equals the record's stored controller.
    """

    def __init__(
        self,
        store: RegistryStore,
        authorizer: Authorizer,
        schema_validator: SchemaValidator,
        locator_validator: LocatorValidator,
        clock: LedgerClock,
        sink: NotificationSink | None = None,
    ):
        self._store = store
        self._authorizer = authorizer
        self._schema_validator = schema_validator
        self._locator_validator = locator_validator
        self._clock = clock
        self._sink = sink
        self._commit_log = CommitLog(store)

    @property
    def store(self) -> RegistryStore:
        return self._store

    # -- operations -----------------------------------------------------------

    def create(
        self,
        caller: Any,
        record_id: str,
        content_hash: str,
        locator: str | None = None,
        schema_ref: str | None = None,
        link_ref: str | None = None,
    ) -> TransitionResult:
        """
        Anchor a new stream record.

        Raises:
            AuthError: If the caller cannot be resolved
            InvalidRequest: If an argument is missing or malformed
            SameIdentifierAndHash: If content_hash equals record_id
            InvalidLocatorEncoding: If the locator is not a valid CID
            StreamAlreadyAnchored: If record_id is taken
            SchemaError: If the schema is unusable by the caller
            StreamLinkNotFound: If link_ref names no record
            StreamLinkRevoked: If the linked record is revoked
        """
        try:
            controller = self._authorizer.authorize(caller)
            _require_text("record_id", record_id)
            _require_text("content_hash", content_hash)
            _require_text("locator", locator, optional=True)
            _require_text("schema_ref", schema_ref, optional=True)
            _require_text("link_ref", link_ref, optional=True)
            if content_hash == record_id:
                raise SameIdentifierAndHash(record_id=record_id, operation="create")
            if locator is not None:
                self._locator_validator.validate_locator(locator)

            with self._store.transaction() as txn:
                records = RecordStore(txn)
                if records.contains(record_id):
                    raise StreamAlreadyAnchored(record_id=record_id, operation="create")
                if schema_ref is not None:
                    self._schema_validator.validate_schema(schema_ref, controller)
                if link_ref is not None:
                    target = records.get(link_ref)
                    if target is None:
                        raise StreamLinkNotFound(
                            record_id=record_id, operation="create", details={"link_ref": link_ref}
                        )
                    if target.revoked:
                        raise StreamLinkRevoked(
                            record_id=record_id, operation="create", details={"link_ref": link_ref}
                        )

                sequence = self._clock.current_sequence()
                record = StreamRecord(
                    id=record_id,
                    content_hash=content_hash,
                    locator=locator,
                    schema_ref=schema_ref,
                    link_ref=link_ref,
                    controller=controller,
                    sequence=sequence,
                )
                commit = CommitEntry(
                    content_hash=content_hash,
                    locator=locator,
                    sequence=sequence,
                    kind=CommitKind.GENESIS,
                )

                if link_ref is not None:
                    LinkTable(txn).add_link(
                        link_ref, LinkEntry(source_id=record_id, controller=controller)
                    )
                records.commit(record, commit)
                HashIndex(txn).set(content_hash, record_id)
        except StreamRegistryError as e:
            logger.warning(f"create rejected for stream {record_id}: {e.code}")
            raise

        event = RegistryEvent(
            kind=EventKind.CREATED,
            record_id=record_id,
            content_hash=content_hash,
            controller=controller,
            sequence=sequence,
        )
        self._emit(event)
        logger.debug(f"Created stream {record_id} for {controller} at {sequence}")
        return TransitionResult(CommitKind.GENESIS, record_id, record, commit, event)

    def update(
        self,
        caller: Any,
        record_id: str,
        content_hash: str,
        locator: str | None = None,
    ) -> TransitionResult:
        """
        Anchor new content for an existing record.

        The previous locator becomes the record's ``parent_locator``.

        Raises:
            AuthError: If the caller cannot be resolved
            InvalidRequest: If an argument is missing or malformed
            SameIdentifierAndHash: If content_hash equals record_id
            StreamNotFound: If the record does not exist
            CidAlreadyAnchored: If locator equals the record's current locator
            InvalidLocatorEncoding: If the locator is not a valid CID
            StreamRevoked: If the record is revoked
            UnauthorizedOperation: If the caller is not the controller
        """
        try:
            updater = self._authorizer.authorize(caller)
            _require_text("record_id", record_id)
            _require_text("content_hash", content_hash)
            _require_text("locator", locator, optional=True)
            if content_hash == record_id:
                raise SameIdentifierAndHash(record_id=record_id, operation="update")

            with self._store.transaction() as txn:
                records = RecordStore(txn)
                previous = records.require(record_id, operation="update")
                if locator is not None:
                    if locator == previous.locator:
                        raise CidAlreadyAnchored(
                            record_id=record_id, operation="update", details={"locator": locator}
                        )
                    self._locator_validator.validate_locator(locator)
                if previous.revoked:
                    raise StreamRevoked(record_id=record_id, operation="update")
                if previous.controller != updater:
                    raise UnauthorizedOperation(record_id=record_id, operation="update")

                sequence = self._clock.current_sequence()
                record = previous.revise(
                    content_hash=content_hash,
                    locator=locator,
                    controller=updater,
                    sequence=sequence,
                )
                commit = CommitEntry(
                    content_hash=content_hash,
                    locator=locator,
                    sequence=sequence,
                    kind=CommitKind.UPDATE,
                )
                records.commit(record, commit)
                HashIndex(txn).set(content_hash, record_id)
        except StreamRegistryError as e:
            logger.warning(f"update rejected for stream {record_id}: {e.code}")
            raise

        event = RegistryEvent(
            kind=EventKind.UPDATED,
            record_id=record_id,
            content_hash=content_hash,
            controller=updater,
            sequence=sequence,
        )
        self._emit(event)
        logger.debug(f"Updated stream {record_id} at {sequence}")
        return TransitionResult(CommitKind.UPDATE, record_id, record, commit, event)

    def set_status(self, caller: Any, record_id: str, revoked: bool) -> TransitionResult:
        """
        Revoke or restore a record.

        Raises:
            AuthError: If the caller cannot be resolved
            InvalidRequest: If an argument is missing or malformed
            StreamNotFound: If the record does not exist
            StatusChangeNotRequired: If the record already has this status
            UnauthorizedOperation: If the caller is not the controller
        """
        try:
            updater = self._authorizer.authorize(caller)
            _require_text("record_id", record_id)
            if not isinstance(revoked, bool):
                raise InvalidRequest(
                    "'revoked' must be a boolean",
                    details={"field": "revoked", "value": repr(revoked)},
                )

            with self._store.transaction() as txn:
                records = RecordStore(txn)
                current = records.require(record_id, operation="set_status")
                if current.revoked == revoked:
                    raise StatusChangeNotRequired(record_id=record_id, operation="set_status")
                if current.controller != updater:
                    raise UnauthorizedOperation(record_id=record_id, operation="set_status")

                sequence = self._clock.current_sequence()
                record = current.with_status(revoked=revoked, sequence=sequence)
                commit = CommitEntry(
                    content_hash=current.content_hash,
                    locator=current.locator,
                    sequence=sequence,
                    kind=CommitKind.STATUS_CHANGE,
                )
                records.commit(record, commit)
        except StreamRegistryError as e:
            logger.warning(f"set_status rejected for stream {record_id}: {e.code}")
            raise

        event = RegistryEvent(
            kind=EventKind.STATUS_CHANGED,
            record_id=record_id,
            controller=updater,
            sequence=sequence,
        )
        self._emit(event)
        logger.debug(f"Stream {record_id} revoked={revoked} at {sequence}")
        return TransitionResult(CommitKind.STATUS_CHANGE, record_id, record, commit, event)

    def _emit(self, event: RegistryEvent) -> None:
        if self._sink is None:
            return
        try:
            self._sink.notify(event)
        except Exception as e:
            logger.warning(f"Notification sink failed for event {event.event_id}: {e}")

    # -- queries --------------------------------------------------------------

    def get(self, record_id: str) -> StreamRecord | None:
        """Return the current record, or None."""
        with self._store.transaction() as txn:
            return RecordStore(txn).get(record_id)

    def require(self, record_id: str) -> StreamRecord:
        """
        Return the current record.

        Raises:
            StreamNotFound: If the record does not exist
        """
        with self._store.transaction() as txn:
            return RecordStore(txn).require(record_id, operation="read")

    def history(self, record_id: str) -> CommitHistory:
        """Return the record's commit history (lazy and restartable)."""
        return self._commit_log.history(record_id)

    def links_of(self, target_id: str) -> list[LinkEntry]:
        """Return links declared against ``target_id``."""
        with self._store.transaction() as txn:
            return LinkTable(txn).links_of(target_id)

    def lookup_hash(self, content_hash: str) -> str | None:
        """Return the record id currently mapped to ``content_hash``."""
        with self._store.transaction() as txn:
            return HashIndex(txn).lookup(content_hash)
