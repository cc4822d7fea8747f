"""
Stream history verification.

Re-checks the invariants that tie a record to its commit history:
- the history starts with exactly one Genesis entry
- commit sequences never decrease
- the newest commit matches the record's content hash and locator
- the record's content hash differs from its identifier
"""

from dataclasses import dataclass, field

from stream_registry.core.exceptions import IntegrityError, StreamNotFound
from stream_registry.core.models import CommitKind
from stream_registry.registry.commit_log import CommitLog
from stream_registry.registry.records import RecordStore
from stream_registry.store.base import RegistryStore


@dataclass
class IntegrityReport:
    """Outcome of verifying one record."""

    record_id: str
    commit_count: int = 0
    violations: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations


def verify_stream(store: RegistryStore, record_id: str, strict: bool = False) -> IntegrityReport:
    """
    Verify one record against its commit history.

    Args:
        store: Store holding the record
        record_id: Record to verify
        strict: Raise instead of returning a failing report

    Raises:
        StreamNotFound: If the record does not exist
        IntegrityError: If strict and any invariant is violated
    """
    with store.transaction() as txn:
        record = RecordStore(txn).get(record_id)
        commits = CommitLog.pending(txn, record_id)

    if record is None:
        raise StreamNotFound(record_id=record_id, operation="verify")

    report = IntegrityReport(record_id=record_id, commit_count=len(commits))

    if not commits:
        report.violations.append("history is empty")
    else:
        if commits[0].kind != CommitKind.GENESIS:
            report.violations.append(f"first commit is {commits[0].kind.value}, not genesis")
        genesis_count = sum(1 for c in commits if c.kind == CommitKind.GENESIS)
        if genesis_count > 1:
            report.violations.append(f"history holds {genesis_count} genesis commits")
        for prev, curr in zip(commits, commits[1:]):
            if curr.sequence < prev.sequence:
                report.violations.append(
                    f"sequence decreases from {prev.sequence} to {curr.sequence}"
                )
        newest = commits[-1]
        if newest.content_hash != record.content_hash:
            report.violations.append("newest commit hash does not match record")
        if newest.locator != record.locator:
            report.violations.append("newest commit locator does not match record")
        if newest.sequence != record.sequence:
            report.violations.append("newest commit sequence does not match record")

    if record.content_hash == record.id:
        report.violations.append("content hash equals record id")

    if strict and report.violations:
        raise IntegrityError(
            f"Stream '{record_id}' failed verification",
            record_id=record_id,
            operation="verify",
            violations=report.violations,
        )
    return report
