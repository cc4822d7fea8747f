"""
Stream Registry - anchored content streams with append-only history.

Anchors content-addressed stream records for their controllers, keeps a
per-record commit history of every transition, and validates links
between records against their revocation state.
"""

__version__ = "0.1.0"

__all__ = [
    "StreamRegistry",
    "TransitionResult",
    "__version__",
]

from stream_registry.registry.machine import StreamRegistry, TransitionResult
