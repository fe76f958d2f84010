"""Session mode and lifecycle enumerations."""

from enum import Enum


class WatchMode(str, Enum):
    """Channel payload types served by a watch session."""

    WATCH = "fswatch1"  # change events only
    SNAPSHOT = "fsdir1"  # directory listing, then change events


class SessionState(str, Enum):
    """Watch session lifecycle states."""

    CREATED = "created"
    PREPARING = "preparing"
    READY = "ready"
    CLOSING = "closing"
    CLOSED = "closed"
