"""Concrete channel adapters."""

from .console import ConsoleChannel

__all__ = ["ConsoleChannel"]
