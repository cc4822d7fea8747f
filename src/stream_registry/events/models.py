"""
Registry event models.

Events describe committed transitions and are handed to notification
sinks after the store transaction succeeds.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class EventKind(str, Enum):
    """Kinds of registry events."""

    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"


def _utc_now() -> str:
    """Return current UTC timestamp as ISO8601 string."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class RegistryEvent(BaseModel):
    """
    Notification of one committed transition.

    ``content_hash`` is None for status changes, which do not touch the
    anchored content.
    """

    event_id: str = Field(default_factory=lambda: f"evt_{uuid4().hex[:16]}")
    timestamp: str = Field(default_factory=_utc_now)
    kind: EventKind
    record_id: str
    content_hash: str | None = None
    controller: str
    sequence: int

    model_config = {"frozen": True}

    def to_log_line(self) -> str:
        """Serialize to a single JSON line."""
        return json.dumps(self.model_dump(mode="json"), sort_keys=True, separators=(",", ":"))
