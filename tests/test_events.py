"""Tests for registry events and notification sinks."""

import json
import logging
from pathlib import Path

import pytest

from stream_registry.events.journal import JsonlEventJournal
from stream_registry.events.models import EventKind, RegistryEvent
from stream_registry.events.sinks import FanOutSink, LoggingSink, MemorySink


def make_event(**overrides) -> RegistryEvent:
    data = {
        "kind": EventKind.CREATED,
        "record_id": "stream-a",
        "content_hash": "hash-1",
        "controller": "alice",
        "sequence": 1,
    }
    data.update(overrides)
    return RegistryEvent(**data)


class TestRegistryEvent:
    """Tests for RegistryEvent model."""

    def test_defaults(self) -> None:
        """Events get an id and timestamp."""
        event = make_event()
        assert event.event_id.startswith("evt_")
        assert event.timestamp.endswith("Z")

    def test_unique_ids(self) -> None:
        """Each event gets its own id."""
        assert make_event().event_id != make_event().event_id

    def test_to_log_line(self) -> None:
        """Events serialize to one JSON line."""
        line = make_event(kind=EventKind.STATUS_CHANGED, content_hash=None).to_log_line()
        assert "\n" not in line
        data = json.loads(line)
        assert data["kind"] == "status_changed"
        assert data["content_hash"] is None
        assert data["record_id"] == "stream-a"


class TestSinks:
    """Tests for in-process sinks."""

    def test_memory_sink(self) -> None:
        """MemorySink keeps events and filters by kind."""
        sink = MemorySink()
        sink.notify(make_event())
        sink.notify(make_event(kind=EventKind.UPDATED, content_hash="hash-2"))

        assert len(sink.events) == 2
        assert len(sink.of_kind(EventKind.UPDATED)) == 1
        sink.clear()
        assert sink.events == []

    def test_logging_sink(self, caplog: pytest.LogCaptureFixture) -> None:
        """LoggingSink writes one log record per event."""
        with caplog.at_level(logging.INFO, logger="stream_registry.events"):
            LoggingSink().notify(make_event())

        assert len(caplog.records) == 1
        assert "created record=stream-a" in caplog.records[0].getMessage()

    def test_fan_out_isolates_failures(self, caplog: pytest.LogCaptureFixture) -> None:
        """A failing sink does not stop delivery to the others."""

        class BrokenSink:
            def notify(self, event: RegistryEvent) -> None:
                raise RuntimeError("down")

        first, last = MemorySink(), MemorySink()
        fan_out = FanOutSink([first, BrokenSink()])
        fan_out.add(last)

        with caplog.at_level(logging.WARNING):
            fan_out.notify(make_event())

        assert len(first.events) == 1
        assert len(last.events) == 1
        assert any("BrokenSink" in r.getMessage() for r in caplog.records)


class TestJsonlEventJournal:
    """Tests for the JSONL event journal."""

    def test_write_and_read(self, temp_dir: Path) -> None:
        """Events written to the journal can be read back in order."""
        journal = JsonlEventJournal(temp_dir / "events" / "journal.jsonl", fsync=False)
        first = make_event()
        second = make_event(kind=EventKind.UPDATED, content_hash="hash-2", sequence=2)

        result = journal.write(first)
        journal.notify(second)

        assert result.success
        assert result.bytes_written > 0
        assert list(journal.read()) == [first, second]

    def test_read_missing_file(self, temp_dir: Path) -> None:
        """A journal with no writes reads as empty."""
        assert list(JsonlEventJournal(temp_dir / "journal.jsonl").read()) == []

    def test_corrupt_lines_skipped(self, temp_dir: Path) -> None:
        """Corrupt lines are skipped when reading."""
        journal = JsonlEventJournal(temp_dir / "journal.jsonl", fsync=False)
        journal.write(make_event())
        with open(journal.path, "a", encoding="utf-8") as f:
            f.write("{not json\n")
            f.write('{"kind": "created"}\n')
            f.write("\n")
        journal.write(make_event(sequence=2))

        assert [e.sequence for e in journal.read()] == [1, 2]

    def test_write_failure_reported(self, temp_dir: Path) -> None:
        """An unwritable path yields a failed WriteResult instead of raising."""
        journal = JsonlEventJournal(temp_dir / "journal.jsonl")
        journal.path.mkdir()

        result = journal.write(make_event())

        assert result.success is False
        assert result.error
