"""
SQLite store backend.

Persists the four registry tables in a single SQLite database:
- streams  (record id -> current record)
- commits  (record id, position -> commit entry)
- links    (target id -> link entries, insertion ordered)
- hashes   (content hash -> record id)

Each registry operation runs inside one BEGIN IMMEDIATE transaction, so
the commit append and the record write land together or not at all.
"""

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from stream_registry.core.exceptions import StorageError
from stream_registry.core.models import CommitEntry, CommitKind, LinkEntry, StreamRecord
from stream_registry.store.base import RegistryStore, StoreTransaction

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS streams (
        id TEXT PRIMARY KEY,
        content_hash TEXT NOT NULL,
        locator TEXT,
        parent_locator TEXT,
        schema_ref TEXT,
        link_ref TEXT,
        controller TEXT NOT NULL,
        sequence INTEGER NOT NULL,
        revoked INTEGER NOT NULL DEFAULT 0
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS commits (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        record_id TEXT NOT NULL,
        position INTEGER NOT NULL,
        content_hash TEXT NOT NULL,
        locator TEXT,
        sequence INTEGER NOT NULL,
        kind TEXT NOT NULL,
        UNIQUE (record_id, position)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS links (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        target_id TEXT NOT NULL,
        source_id TEXT NOT NULL,
        controller TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS hashes (
        content_hash TEXT PRIMARY KEY,
        record_id TEXT NOT NULL
    )
    """,
)

_INDEXES = [
    ("idx_commits_record", "commits", "record_id"),
    ("idx_links_target", "links", "target_id"),
    ("idx_hashes_record", "hashes", "record_id"),
]


def _row_to_record(row: sqlite3.Row) -> StreamRecord:
    return StreamRecord(
        id=row["id"],
        content_hash=row["content_hash"],
        locator=row["locator"],
        parent_locator=row["parent_locator"],
        schema_ref=row["schema_ref"],
        link_ref=row["link_ref"],
        controller=row["controller"],
        sequence=row["sequence"],
        revoked=bool(row["revoked"]),
    )


def _row_to_commit(row: sqlite3.Row) -> CommitEntry:
    return CommitEntry(
        content_hash=row["content_hash"],
        locator=row["locator"],
        sequence=row["sequence"],
        kind=CommitKind(row["kind"]),
    )


class _SqliteTransaction(StoreTransaction):
    """Transaction bound to an open connection with BEGIN already issued."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise StorageError(f"SQLite statement failed: {e}", backend="sqlite") from e

    def get_record(self, record_id: str) -> StreamRecord | None:
        row = self._execute("SELECT * FROM streams WHERE id = ?", (record_id,)).fetchone()
        return _row_to_record(row) if row else None

    def get_commits(self, record_id: str) -> list[CommitEntry]:
        rows = self._execute(
            "SELECT * FROM commits WHERE record_id = ? ORDER BY position",
            (record_id,),
        ).fetchall()
        return [_row_to_commit(row) for row in rows]

    def get_links(self, target_id: str) -> list[LinkEntry]:
        rows = self._execute(
            "SELECT source_id, controller FROM links WHERE target_id = ? ORDER BY id",
            (target_id,),
        ).fetchall()
        return [LinkEntry(source_id=row["source_id"], controller=row["controller"]) for row in rows]

    def get_hash(self, content_hash: str) -> str | None:
        row = self._execute(
            "SELECT record_id FROM hashes WHERE content_hash = ?", (content_hash,)
        ).fetchone()
        return row["record_id"] if row else None

    def add_link(self, target_id: str, entry: LinkEntry) -> None:
        self._execute(
            "INSERT INTO links (target_id, source_id, controller) VALUES (?, ?, ?)",
            (target_id, entry.source_id, entry.controller),
        )

    def set_hash(self, content_hash: str, record_id: str) -> None:
        self._execute(
            "INSERT OR REPLACE INTO hashes (content_hash, record_id) VALUES (?, ?)",
            (content_hash, record_id),
        )

    def _append_commit(self, record_id: str, entry: CommitEntry) -> None:
        row = self._execute(
            "SELECT COALESCE(MAX(position), -1) + 1 AS next FROM commits WHERE record_id = ?",
            (record_id,),
        ).fetchone()
        self._execute(
            """
            INSERT INTO commits (record_id, position, content_hash, locator, sequence, kind)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record_id,
                row["next"],
                entry.content_hash,
                entry.locator,
                entry.sequence,
                entry.kind.value,
            ),
        )

    def _put_record(self, record: StreamRecord) -> None:
        self._execute(
            """
            INSERT OR REPLACE INTO streams (
                id, content_hash, locator, parent_locator, schema_ref,
                link_ref, controller, sequence, revoked
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.content_hash,
                record.locator,
                record.parent_locator,
                record.schema_ref,
                record.link_ref,
                record.controller,
                record.sequence,
                1 if record.revoked else 0,
            ),
        )


class SqliteStore(RegistryStore):
    """
    SQLite-backed registry store.

    Uses one connection per thread and a process-wide lock so that at most
    one write transaction is open at a time.
    """

    backend = "sqlite"
    DEFAULT_PATH = Path("var/registry/streams.db")

    def __init__(self, database_path: Path | None = None, journal_mode: str = "WAL"):
        """
        Initialize the store and create tables if needed.

        Args:
            database_path: SQLite file (default: var/registry/streams.db)
            journal_mode: SQLite journal mode pragma (default: WAL)
        """
        self._database_path = Path(database_path) if database_path else self.DEFAULT_PATH
        self._database_path.parent.mkdir(parents=True, exist_ok=True)
        self._journal_mode = journal_mode
        self._lock = threading.RLock()
        self._local = threading.local()
        self._connections: list[sqlite3.Connection] = []

        self._init_schema()
        logger.info(f"Opened SQLite stream store at {self._database_path}")

    @property
    def database_path(self) -> Path:
        return self._database_path

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local SQLite connection."""
        conn = getattr(self._local, "conn", None)
        if conn is None:
            try:
                conn = sqlite3.connect(
                    str(self._database_path),
                    check_same_thread=False,
                    isolation_level=None,
                )
                conn.row_factory = sqlite3.Row
                conn.execute(f"PRAGMA journal_mode = {self._journal_mode}")
                conn.execute("PRAGMA synchronous = NORMAL")
            except sqlite3.Error as e:
                raise StorageError(
                    f"Cannot open SQLite database: {e}",
                    backend=self.backend,
                    details={"path": str(self._database_path)},
                ) from e
            self._local.conn = conn
            with self._lock:
                self._connections.append(conn)
        return conn

    def _init_schema(self) -> None:
        """Create tables and indexes."""
        conn = self._get_connection()
        with self._lock:
            try:
                for statement in _SCHEMA:
                    conn.execute(statement)
                for idx_name, table, col in _INDEXES:
                    conn.execute(f"CREATE INDEX IF NOT EXISTS {idx_name} ON {table}({col})")
            except sqlite3.Error as e:
                raise StorageError(f"Cannot initialize schema: {e}", backend=self.backend) from e

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        with self._lock:
            conn = self._get_connection()
            try:
                conn.execute("BEGIN IMMEDIATE")
            except sqlite3.Error as e:
                raise StorageError(f"Cannot begin transaction: {e}", backend=self.backend) from e

            try:
                yield _SqliteTransaction(conn)
            except BaseException:
                conn.execute("ROLLBACK")
                raise

            try:
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                conn.execute("ROLLBACK")
                raise StorageError(f"Cannot commit transaction: {e}", backend=self.backend) from e

    def iter_commits(self, record_id: str) -> Iterator[CommitEntry]:
        conn = self._get_connection()
        try:
            rows = conn.execute(
                "SELECT * FROM commits WHERE record_id = ? ORDER BY position",
                (record_id,),
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Cannot read commits: {e}", backend=self.backend) from e
        for row in rows:
            yield _row_to_commit(row)

    def close(self) -> None:
        """Close every connection opened by this store."""
        with self._lock:
            for conn in self._connections:
                conn.close()
            self._connections.clear()
            self._local = threading.local()
        logger.info(f"Closed SQLite stream store at {self._database_path}")
