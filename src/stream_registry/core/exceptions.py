"""
Stream Registry Exception Hierarchy.

Defines every error raised by the registry state machine, its stores,
and its collaborators. Errors are grouped by kind so callers can catch
a whole family (e.g. all not-found errors) or a single condition.
"""

from typing import Any


class StreamRegistryError(Exception):
    """Root of every error the registry raises; ``code`` names the condition."""

    code: str = "StreamRegistryError"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({context})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and error payloads."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class RecordError(StreamRegistryError):
    """
    Errors tied to a single stream record.

    Carries the record identifier (and optionally the operation being
    performed) in ``details`` so log lines and serialized errors are
    self-describing.
    """

    default_message = "Stream record error"

    def __init__(
        self,
        message: str | None = None,
        *,
        record_id: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if record_id:
            details["record_id"] = record_id
        if operation:
            details["operation"] = operation

        super().__init__(message or self.default_message, details=details)
        self.record_id = record_id
        self.operation = operation


# -- kinds -------------------------------------------------------------------


class InputValidityError(RecordError):
    """The request itself is malformed."""


class StateConflictError(RecordError):
    """The request conflicts with the record's current state."""


class RecordNotFoundError(RecordError):
    """A referenced record does not exist."""


class AuthorizationError(RecordError):
    """The caller may not perform the operation."""


class RevocationError(RecordError):
    """A record involved in the operation is revoked."""


class SchemaError(RecordError):
    """Raised by the schema validator for an unusable schema reference."""

    def __init__(
        self,
        message: str | None = None,
        *,
        schema_ref: str | None = None,
        controller: str | None = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {}) or {}
        if schema_ref:
            details["schema_ref"] = schema_ref
        if controller:
            details["controller"] = controller
        kwargs["details"] = details

        super().__init__(message, **kwargs)
        self.schema_ref = schema_ref
        self.controller = controller


# -- input validity ----------------------------------------------------------


class SameIdentifierAndHash(InputValidityError):
    """Raised when a content hash equals the record identifier."""

    code = "SameIdentifierAndHash"
    default_message = "Content hash and record identifier are the same"


class InvalidLocatorEncoding(InputValidityError):
    """Raised when a content locator is not a well-formed CID."""

    code = "InvalidLocatorEncoding"
    default_message = "Invalid locator encoding"

    def __init__(self, message: str | None = None, *, locator: str | None = None, **kwargs):
        details = kwargs.pop("details", {}) or {}
        if locator is not None:
            details["locator"] = locator
        kwargs["details"] = details

        super().__init__(message, **kwargs)
        self.locator = locator


class InvalidRequest(InputValidityError):
    """Raised when request arguments are missing or of the wrong shape."""

    code = "InvalidRequest"
    default_message = "Invalid request"


# -- conflicts ---------------------------------------------------------------


class StreamAlreadyAnchored(StateConflictError):
    """Raised when creating a record whose identifier is already taken."""

    code = "StreamAlreadyAnchored"
    default_message = "Stream identifier is already anchored"


class CidAlreadyAnchored(StateConflictError):
    """Raised when an update re-submits the record's current locator."""

    code = "CidAlreadyAnchored"
    default_message = "Locator is already anchored on this stream"


class StatusChangeNotRequired(StateConflictError):
    """Raised when a status change would not change anything."""

    code = "StatusChangeNotRequired"
    default_message = "No status change required"


# -- not found ---------------------------------------------------------------


class StreamNotFound(RecordNotFoundError):
    """Raised when the target record does not exist."""

    code = "StreamNotFound"
    default_message = "Stream not found"


class StreamLinkNotFound(RecordNotFoundError):
    """Raised when a link reference names a record that does not exist."""

    code = "StreamLinkNotFound"
    default_message = "Linked stream not found"


# -- authorization -----------------------------------------------------------


class AuthError(AuthorizationError):
    """Raised by the authorizer when a caller cannot be resolved."""

    code = "AuthError"
    default_message = "Caller could not be resolved to a controller"


class UnauthorizedOperation(AuthorizationError):
    """Raised when the caller is not the record's controller."""

    code = "UnauthorizedOperation"
    default_message = "Caller is not the stream controller"


# -- revocation --------------------------------------------------------------


class StreamRevoked(RevocationError):
    """Raised when mutating the content of a revoked record."""

    code = "StreamRevoked"
    default_message = "Stream is revoked"


class StreamLinkRevoked(RevocationError):
    """Raised when linking to a revoked record."""

    code = "StreamLinkRevoked"
    default_message = "Linked stream is revoked"


# -- schema ------------------------------------------------------------------


class SchemaNotFound(SchemaError):
    """Raised when the referenced schema is unknown."""

    code = "SchemaNotFound"
    default_message = "Schema not found"


class SchemaRevoked(SchemaError):
    """Raised when the referenced schema is no longer active."""

    code = "SchemaRevoked"
    default_message = "Schema is revoked"


class SchemaUnauthorized(SchemaError):
    """Raised when the referenced schema is owned by another controller."""

    code = "SchemaUnauthorized"
    default_message = "Schema is not owned by the controller"


# -- infrastructure ----------------------------------------------------------


class StorageError(StreamRegistryError):
    """
    Errors raised by a store backend.

    Wraps engine-specific failures (e.g. sqlite3.Error); the original
    exception is kept as ``__cause__``.
    """

    code = "StorageError"

    def __init__(
        self,
        message: str,
        *,
        backend: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if backend:
            details["backend"] = backend
        super().__init__(message, details=details)
        self.backend = backend


class ConfigurationError(StreamRegistryError):
    """
    Errors in configuration loading or validation.

    Raised when:
    - Configuration files are missing or malformed
    - Environment variables hold invalid values
    """

    code = "ConfigurationError"

    def __init__(
        self,
        message: str,
        *,
        config_file: str | None = None,
        env_var: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if config_file:
            details["config_file"] = config_file
        if env_var:
            details["env_var"] = env_var
        super().__init__(message, details=details)
        self.config_file = config_file
        self.env_var = env_var


class IntegrityError(RecordError):
    """Raised when a record's stored history violates its invariants."""

    code = "IntegrityError"
    default_message = "Stream history failed verification"

    def __init__(self, message: str | None = None, *, violations: list[str] | None = None, **kwargs):
        details = kwargs.pop("details", {}) or {}
        if violations:
            details["violations"] = violations
        kwargs["details"] = details

        super().__init__(message, **kwargs)
        self.violations = violations or []
