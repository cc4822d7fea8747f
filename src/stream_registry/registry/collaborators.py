"""
External collaborators consumed by the registry state machine.

Each boundary is a Protocol so production hosts can plug in their own
identity, schema, locator, clock, and notification services. Simple
in-process implementations live alongside them.
"""

import threading
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from stream_registry.core.exceptions import AuthError
from stream_registry.events.models import RegistryEvent


@runtime_checkable
class Authorizer(Protocol):
    """Resolves a caller credential to a controller identity."""

    def authorize(self, caller: Any) -> str:
        """Return the caller's controller id or raise AuthError."""
        ...


@runtime_checkable
class SchemaValidator(Protocol):
    """Checks that a schema is active and owned by a controller."""

    def validate_schema(self, schema_ref: str, controller: str) -> None:
        """Raise a SchemaError subclass if the schema is unusable."""
        ...


@runtime_checkable
class LocatorValidator(Protocol):
    """Checks the encoding of an external content locator."""

    def validate_locator(self, locator: str) -> None:
        """Raise InvalidLocatorEncoding if the locator is malformed."""
        ...


@runtime_checkable
class LedgerClock(Protocol):
    """Source of the monotonic ledger sequence."""

    def current_sequence(self) -> int:
        ...


@runtime_checkable
class NotificationSink(Protocol):
    """Receives registry events after a transition is committed."""

    def notify(self, event: RegistryEvent) -> None:
        ...


class IdentityAuthorizer:
    """Treats the caller value itself as the controller id."""

    def authorize(self, caller: Any) -> str:
        if not isinstance(caller, str) or not caller:
            raise AuthError(details={"caller": repr(caller)})
        return caller


class StaticAuthorizer:
    """
    Resolves callers through a fixed credential -> controller mapping.

    Unknown credentials are rejected with AuthError.
    """

    def __init__(self, controllers: Mapping[str, str]):
        self._controllers = dict(controllers)

    def grant(self, credential: str, controller: str) -> None:
        """Add or replace a credential mapping."""
        self._controllers[credential] = controller

    def authorize(self, caller: Any) -> str:
        try:
            return self._controllers[caller]
        except (KeyError, TypeError):
            raise AuthError(details={"caller": repr(caller)}) from None


class ManualClock:
    """Clock whose sequence only moves when told to."""

    def __init__(self, start: int = 0):
        if start < 0:
            raise ValueError("sequence cannot be negative")
        self._sequence = start
        self._lock = threading.Lock()

    def current_sequence(self) -> int:
        return self._sequence

    def advance(self, steps: int = 1) -> int:
        """Move the sequence forward and return the new value."""
        if steps < 0:
            raise ValueError("clock cannot move backwards")
        with self._lock:
            self._sequence += steps
            return self._sequence

    def set(self, sequence: int) -> None:
        """Jump to ``sequence``; it may not be lower than the current value."""
        with self._lock:
            if sequence < self._sequence:
                raise ValueError(
                    f"clock cannot move backwards ({sequence} < {self._sequence})"
                )
            self._sequence = sequence


class CounterClock:
    """Clock that advances by one on every read."""

    def __init__(self, start: int = 0):
        self._next = start
        self._lock = threading.Lock()

    def current_sequence(self) -> int:
        with self._lock:
            value = self._next
            self._next += 1
            return value
