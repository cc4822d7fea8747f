"""
In-process schema directory.

Tracks schema ownership and activity so the state machine can check a
``schema_ref`` without a separate schema service. Hosts with their own
schema registry implement the ``SchemaValidator`` protocol instead.
"""

import logging
import threading

from pydantic import BaseModel

from stream_registry.core.exceptions import SchemaNotFound, SchemaRevoked, SchemaUnauthorized

logger = logging.getLogger(__name__)


class SchemaEntry(BaseModel):
    """One registered schema."""

    schema_ref: str
    owner: str
    revoked: bool = False


class SchemaBook:
    """Thread-safe schema directory implementing SchemaValidator."""

    def __init__(self):
        self._schemas: dict[str, SchemaEntry] = {}
        self._lock = threading.Lock()

    def register(self, schema_ref: str, owner: str) -> SchemaEntry:
        """Register an active schema owned by ``owner``."""
        entry = SchemaEntry(schema_ref=schema_ref, owner=owner)
        with self._lock:
            self._schemas[schema_ref] = entry
        logger.debug(f"Registered schema {schema_ref} for {owner}")
        return entry

    def revoke(self, schema_ref: str) -> None:
        self._set_revoked(schema_ref, True)

    def restore(self, schema_ref: str) -> None:
        self._set_revoked(schema_ref, False)

    def _set_revoked(self, schema_ref: str, revoked: bool) -> None:
        with self._lock:
            entry = self._schemas.get(schema_ref)
            if entry is None:
                raise SchemaNotFound(schema_ref=schema_ref)
            self._schemas[schema_ref] = entry.model_copy(update={"revoked": revoked})

    def get(self, schema_ref: str) -> SchemaEntry | None:
        return self._schemas.get(schema_ref)

    def validate_schema(self, schema_ref: str, controller: str) -> None:
        """
        Check that ``schema_ref`` can be used by ``controller``.

        Raises:
            SchemaNotFound: If the schema is not registered
            SchemaRevoked: If the schema has been revoked
            SchemaUnauthorized: If the schema belongs to another controller
        """
        entry = self._schemas.get(schema_ref)
        if entry is None:
            raise SchemaNotFound(schema_ref=schema_ref, controller=controller)
        if entry.revoked:
            raise SchemaRevoked(schema_ref=schema_ref, controller=controller)
        if entry.owner != controller:
            raise SchemaUnauthorized(schema_ref=schema_ref, controller=controller)
