"""Filesystem snapshot and change-notification bridge for message channels."""

__version__ = "0.1.0"
