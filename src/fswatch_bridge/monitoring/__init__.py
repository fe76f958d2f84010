"""
Monitoring package for filesystem change notifications.

Provides watchdog-backed change subscriptions, translation of raw
notifications into wire events, and file tag computation.
"""

from .change_monitor import ChangeMonitor, ChangeSubscription
from .tags import MISSING_FILE_TAG, get_file_tag
from .translation import EventTranslator, build_change_event, translate_kind

__all__ = [
    "ChangeMonitor",
    "ChangeSubscription",
    "EventTranslator",
    "MISSING_FILE_TAG",
    "build_change_event",
    "get_file_tag",
    "translate_kind",
]
