"""
Translation of raw change notifications into wire events.

Raw kinds are watchdog event types plus a few codes for notifications that
only some facilities report. Unrecognized kinds become "unknown" events.
"""

import logging
from collections.abc import Callable

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
)

from fswatch_bridge.core.interfaces import IChangeSink
from fswatch_bridge.models.events import FileEvent, FileEventKind
from fswatch_bridge.monitoring.tags import get_file_tag

logger = logging.getLogger(__name__)

RAW_ATTRIBUTE_CHANGED = "attribute_changed"
RAW_PRE_UNMOUNT = "pre_unmount"
RAW_UNMOUNTED = "unmounted"

_WIRE_KINDS: dict[str, FileEventKind] = {
    EVENT_TYPE_MODIFIED: FileEventKind.CHANGED,
    EVENT_TYPE_CLOSED: FileEventKind.DONE_HINT,
    EVENT_TYPE_CREATED: FileEventKind.CREATED,
    EVENT_TYPE_DELETED: FileEventKind.DELETED,
    EVENT_TYPE_MOVED: FileEventKind.MOVED,
    RAW_ATTRIBUTE_CHANGED: FileEventKind.ATTRIBUTE_CHANGED,
    RAW_PRE_UNMOUNT: FileEventKind.PRE_UNMOUNT,
    RAW_UNMOUNTED: FileEventKind.UNMOUNTED,
}

TagProvider = Callable[[str], str | None]


def translate_kind(raw_kind: str) -> FileEventKind:
    """Map a raw notification kind to its wire kind."""
    return _WIRE_KINDS.get(raw_kind, FileEventKind.UNKNOWN)


def build_change_event(
    raw_kind: str,
    path: str | None,
    other: str | None = None,
    tagger: TagProvider = get_file_tag,
) -> FileEvent:
    """
    Build the wire event for one raw notification.

    Args:
        raw_kind: Raw notification kind
        path: Primary path of the notification
        other: Counterpart path, kept only for moves
        tagger: Tag utility applied to the primary path

    Returns:
        The translated FileEvent
    """
    kind = translate_kind(raw_kind)

    tag = None
    if path:
        try:
            tag = tagger(path)
        except (OSError, ValueError) as e:
            logger.debug("Omitting tag for %s: %s", path, e)

    return FileEvent(
        event=kind,
        path=path,
        tag=tag,
        other=other if kind == FileEventKind.MOVED else None,
    )


class EventTranslator(IChangeSink):
    """Change sink that translates raw notifications and forwards wire events."""

    def __init__(self, emit: Callable[[FileEvent], None], tagger: TagProvider = get_file_tag):
        self.emit = emit
        self.tagger = tagger

    def on_event(self, kind: str, path: str | None, other: str | None) -> None:
        if not path:
            logger.debug("Ignoring %s notification without a path", kind)
            return
        event = build_change_event(kind, path, other, self.tagger)
        logger.debug("Translated %s notification: %s", kind, event)
        self.emit(event)
