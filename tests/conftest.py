"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from stream_registry.events.sinks import MemorySink
from stream_registry.registry.collaborators import IdentityAuthorizer, ManualClock
from stream_registry.registry.locator import CidLocatorValidator
from stream_registry.registry.machine import StreamRegistry
from stream_registry.registry.schemas import SchemaBook
from stream_registry.store.base import RegistryStore
from stream_registry.store.memory import InMemoryStore
from stream_registry.store.sqlite import SqliteStore

# Well-formed content locators
CID_V0 = "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"
CID_V0_ALT = "QmT78zSuBmuS4z925WZfrqQ1qHaJ56DQaTfyMUF7F8ff5o"
CID_V1 = "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"
CID_V1_HEX = "f01711220" + "ab" * 32


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, temp_dir: Path) -> Generator[RegistryStore, None, None]:
    """Provide each store backend in turn."""
    if request.param == "memory":
        backend: RegistryStore = InMemoryStore()
    else:
        backend = SqliteStore(temp_dir / "streams.db")
    yield backend
    backend.close()


@pytest.fixture
def clock() -> ManualClock:
    """Provide a clock starting at sequence 1."""
    return ManualClock(start=1)


@pytest.fixture
def schemas() -> SchemaBook:
    """Provide a schema directory with one schema owned by alice."""
    book = SchemaBook()
    book.register("schema-alice", owner="alice")
    return book


@pytest.fixture
def sink() -> MemorySink:
    """Provide a sink that records emitted events."""
    return MemorySink()


@pytest.fixture
def registry(
    store: RegistryStore, clock: ManualClock, schemas: SchemaBook, sink: MemorySink
) -> StreamRegistry:
    """Provide a registry where the caller string is the controller id."""
    return StreamRegistry(
        store=store,
        authorizer=IdentityAuthorizer(),
        schema_validator=schemas,
        locator_validator=CidLocatorValidator(),
        clock=clock,
        sink=sink,
    )
