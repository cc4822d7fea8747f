"""
Core data models for the Stream Registry.

Defines the canonical record, commit, and link types shared by the
state machine and every store backend.
"""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from stream_registry.core.exceptions import SameIdentifierAndHash


class CommitKind(str, Enum):
    """Kind of state transition captured by a commit entry."""

    GENESIS = "genesis"
    UPDATE = "update"
    STATUS_CHANGE = "status_change"


class StreamRecord(BaseModel):
    """
    Current state of one registered stream.

    Records are immutable values; every transition produces a new record
    through ``revise`` or ``with_status``, which re-runs validation so the
    hash/identifier invariant holds on every write.
    """

    id: str = Field(min_length=1, description="Caller-assigned identifier, immutable")
    content_hash: str = Field(min_length=1, description="Hash of the anchored content")
    locator: str | None = Field(default=None, description="External content locator (CID)")
    parent_locator: str | None = Field(default=None, description="Locator of the previous version")
    schema_ref: str | None = Field(default=None, description="Schema reference, immutable")
    link_ref: str | None = Field(default=None, description="Linked record, immutable")
    controller: str = Field(min_length=1, description="Identity allowed to mutate this record")
    sequence: int = Field(ge=0, description="Ledger sequence at last mutation")
    revoked: bool = False

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _hash_differs_from_id(self) -> "StreamRecord":
        if self.content_hash == self.id:
            raise SameIdentifierAndHash(record_id=self.id)
        return self

    def revise(
        self,
        *,
        content_hash: str,
        locator: str | None,
        controller: str,
        sequence: int,
    ) -> "StreamRecord":
        """Return the record as it stands after a content update."""
        data = self.model_dump()
        data.update(
            content_hash=content_hash,
            locator=locator,
            parent_locator=self.locator,
            controller=controller,
            sequence=sequence,
        )
        return StreamRecord.model_validate(data)

    def with_status(self, *, revoked: bool, sequence: int) -> "StreamRecord":
        """Return the record with its revocation flag flipped."""
        data = self.model_dump()
        data.update(revoked=revoked, sequence=sequence)
        return StreamRecord.model_validate(data)


class CommitEntry(BaseModel):
    """One append-only history entry for a stream record."""

    content_hash: str
    locator: str | None = None
    sequence: int = Field(ge=0)
    kind: CommitKind

    model_config = {"frozen": True}


class LinkEntry(BaseModel):
    """Declaration that ``source_id`` links to the record it is stored under."""

    source_id: str
    controller: str

    model_config = {"frozen": True}
