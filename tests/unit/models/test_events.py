"""Unit tests for file event models."""

import pytest
from fswatch_bridge.models import FileEvent, FileEventKind, RawChangeEvent
from pydantic import ValidationError


class TestFileEvent:
    """Test cases for FileEvent."""

    def test_present_event(self):
        """Test creating a snapshot entry event."""
        event = FileEvent.present("notes.txt")

        assert event.event == FileEventKind.PRESENT
        assert event.to_message() == {"event": "present", "path": "notes.txt"}

    def test_present_done_has_no_path(self):
        """Test that the terminal snapshot event carries only its kind."""
        assert FileEvent.present_done().to_message() == {"event": "present-done"}

    def test_present_done_rejects_path(self):
        """Test that present-done cannot carry a path."""
        with pytest.raises(ValidationError) as exc_info:
            FileEvent(event=FileEventKind.PRESENT_DONE, path="/tmp")

        assert "present-done events carry no path" in str(exc_info.value)

    def test_change_event_requires_path(self):
        """Test that change events need a path."""
        with pytest.raises(ValidationError):
            FileEvent(event=FileEventKind.CHANGED)

    def test_other_only_for_moves(self):
        """Test that only moved events may carry an other path."""
        with pytest.raises(ValidationError) as exc_info:
            FileEvent(event=FileEventKind.CREATED, path="/a/new", other="/a/old")

        assert "only moved events carry an other path" in str(exc_info.value)

    def test_moved_message(self):
        """Test wire record of a move."""
        event = FileEvent(event=FileEventKind.MOVED, path="/a/old", tag="-", other="/a/new")

        assert event.to_message() == {"event": "moved", "path": "/a/old", "tag": "-", "other": "/a/new"}

    def test_absent_tag_is_omitted(self):
        """Test that a missing tag is left out of the wire record."""
        message = FileEvent(event=FileEventKind.DELETED, path="/a/gone").to_message()

        assert "tag" not in message
        assert message == {"event": "deleted", "path": "/a/gone"}

    def test_kind_accepts_wire_string(self):
        """Test constructing from the wire spelling of a kind."""
        event = FileEvent(event="attribute-changed", path="/a/file")

        assert event.event is FileEventKind.ATTRIBUTE_CHANGED

    def test_events_are_immutable(self):
        """Test that events cannot be modified once built."""
        event = FileEvent.present("a")

        with pytest.raises(ValidationError):
            event.path = "b"

    def test_string_representation(self):
        """Test string representation of a move."""
        event = FileEvent(event=FileEventKind.MOVED, path="/a/old", other="/a/new")

        assert str(event) == "FileEvent(moved /a/old -> /a/new)"


class TestRawChangeEvent:
    """Test cases for RawChangeEvent."""

    def test_attributes(self):
        raw = RawChangeEvent("moved", "/a/old", "/a/new")

        assert raw.kind == "moved"
        assert raw.path == "/a/old"
        assert raw.other == "/a/new"

    def test_string_representation(self):
        assert str(RawChangeEvent("created", "/a/file")) == "RawChangeEvent(created: /a/file)"
        assert str(RawChangeEvent("moved", "/a", "/b")) == "RawChangeEvent(moved: /a -> /b)"
