"""Data models, enumerations and exceptions for the watch bridge."""

from fswatch_bridge.models.events import FileEvent, FileEventKind, RawChangeEvent
from fswatch_bridge.models.exceptions import (
    INTERNAL_ERROR,
    PROTOCOL_ERROR,
    BaseError,
    ConfigurationError,
    EnumerationError,
    MonitoringError,
    ProtocolError,
)
from fswatch_bridge.models.session import SessionState, WatchMode

__all__ = [
    "FileEvent",
    "FileEventKind",
    "RawChangeEvent",
    "SessionState",
    "WatchMode",
    "BaseError",
    "ConfigurationError",
    "EnumerationError",
    "MonitoringError",
    "ProtocolError",
    "INTERNAL_ERROR",
    "PROTOCOL_ERROR",
]
