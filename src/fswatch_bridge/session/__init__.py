"""Watch session orchestration."""

from .watch_session import WatchSession, open_session

__all__ = [
    "WatchSession",
    "open_session",
]
