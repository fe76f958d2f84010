"""
Data models for file events exchanged over a watch channel.

A FileEvent is produced, serialized into one outbound message and discarded;
RawChangeEvent is the untranslated notification as the OS facility delivers it.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FileEventKind(str, Enum):
    """Wire event kinds."""

    PRESENT = "present"
    PRESENT_DONE = "present-done"
    CHANGED = "changed"
    CREATED = "created"
    DELETED = "deleted"
    ATTRIBUTE_CHANGED = "attribute-changed"
    MOVED = "moved"
    DONE_HINT = "done-hint"
    PRE_UNMOUNT = "pre-unmount"
    UNMOUNTED = "unmounted"
    UNKNOWN = "unknown"


class FileEvent(BaseModel):
    """
    One outbound message on a watch channel.

    Snapshot listings produce "present" events (path is the entry name) and a
    single terminal "present-done" without a path. Change notifications carry
    the affected path, its tag when one could be computed and, for "moved",
    the counterpart path in "other".
    """

    event: FileEventKind = Field(..., description="Wire event kind")
    path: str | None = Field(None, description="Primary path or entry name")
    tag: str | None = Field(None, description="Content fingerprint of path")
    other: str | None = Field(None, description="Counterpart path of a move")

    @model_validator(mode='after')
    def validate_fields_for_kind(self):
        """Enforce which optional fields each kind may carry."""
        if self.event == FileEventKind.PRESENT_DONE:
            if self.path is not None or self.tag is not None:
                raise ValueError("present-done events carry no path or tag")
        elif not self.path:
            raise ValueError(f"{self.event.value} events require a path")
        if self.other is not None and self.event != FileEventKind.MOVED:
            raise ValueError("only moved events carry an other path")
        return self

    @classmethod
    def present(cls, name: str) -> "FileEvent":
        """Create a snapshot entry event."""
        return cls(event=FileEventKind.PRESENT, path=name)

    @classmethod
    def present_done(cls) -> "FileEvent":
        """Create the terminal snapshot event."""
        return cls(event=FileEventKind.PRESENT_DONE)

    def to_message(self) -> dict[str, Any]:
        """Serialize to the wire record, omitting absent fields."""
        return self.model_dump(mode="json", exclude_none=True)

    def __str__(self) -> str:
        parts = [self.event.value]
        if self.path is not None:
            parts.append(self.path)
        if self.other is not None:
            parts.append(f"-> {self.other}")
        return f"FileEvent({' '.join(parts)})"

    model_config = ConfigDict(frozen=True)


class RawChangeEvent:
    """A notification as delivered by the OS watch facility, before translation."""

    def __init__(self, kind: str, path: str | None, other: str | None = None):
        self.kind = kind  # watchdog event_type, or one of the extra raw codes
        self.path = path
        self.other = other

    def __str__(self) -> str:
        if self.other:
            return f"RawChangeEvent({self.kind}: {self.path} -> {self.other})"
        return f"RawChangeEvent({self.kind}: {self.path})"
