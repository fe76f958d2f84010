"""Snapshot enumeration of directory contents."""

from .directory_enumerator import DEFAULT_BATCH_SIZE, DirectoryEnumerator

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DirectoryEnumerator",
]
