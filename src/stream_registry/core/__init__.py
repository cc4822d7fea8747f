"""
Stream Registry Core Module.

Provides the data model and exception hierarchy shared by every layer.
"""

__all__ = [
    "CommitEntry",
    "CommitKind",
    "LinkEntry",
    "StreamRecord",
    # Exceptions
    "StreamRegistryError",
    "RecordError",
    "InputValidityError",
    "StateConflictError",
    "RecordNotFoundError",
    "AuthorizationError",
    "RevocationError",
    "SchemaError",
    "SameIdentifierAndHash",
    "InvalidLocatorEncoding",
    "InvalidRequest",
    "StreamAlreadyAnchored",
    "CidAlreadyAnchored",
    "StatusChangeNotRequired",
    "StreamNotFound",
    "StreamLinkNotFound",
    "AuthError",
    "UnauthorizedOperation",
    "StreamRevoked",
    "StreamLinkRevoked",
    "SchemaNotFound",
    "SchemaRevoked",
    "SchemaUnauthorized",
    "StorageError",
    "ConfigurationError",
    "IntegrityError",
]

from stream_registry.core.exceptions import (
    AuthError,
    AuthorizationError,
    CidAlreadyAnchored,
    ConfigurationError,
    InputValidityError,
    IntegrityError,
    InvalidLocatorEncoding,
    InvalidRequest,
    RecordError,
    RecordNotFoundError,
    RevocationError,
    SameIdentifierAndHash,
    SchemaError,
    SchemaNotFound,
    SchemaRevoked,
    SchemaUnauthorized,
    StateConflictError,
    StatusChangeNotRequired,
    StorageError,
    StreamAlreadyAnchored,
    StreamLinkNotFound,
    StreamLinkRevoked,
    StreamNotFound,
    StreamRegistryError,
    StreamRevoked,
    UnauthorizedOperation,
)
from stream_registry.core.models import CommitEntry, CommitKind, LinkEntry, StreamRecord
