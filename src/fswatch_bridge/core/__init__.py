"""Core interfaces shared by sessions, monitors and channels."""

from fswatch_bridge.core.interfaces import IChangeSink, IChannel

__all__ = [
    "IChangeSink",
    "IChannel",
]
