"""
Abstract interfaces for the watch bridge.

The channel is the external, multiplexed message abstraction a watch session
runs inside; the change sink is the typed callback a monitor subscription
delivers raw notifications to.
"""

from abc import ABC, abstractmethod
from typing import Any


class IChannel(ABC):
    """Interface to the message channel a watch session runs inside."""

    @abstractmethod
    def get_option(self, name: str) -> Any:
        """
        Look up an open option of the channel.

        Args:
            name: Option name, e.g. "path" or "payload"

        Returns:
            The option value, or None when the option is absent
        """
        pass

    @abstractmethod
    def ready(self) -> None:
        """Signal the peer that the session is established."""
        pass

    @abstractmethod
    def send(self, message: dict[str, Any]) -> None:
        """
        Deliver one outbound message.

        Args:
            message: Wire record with a required "event" field
        """
        pass

    @abstractmethod
    def close(self, problem: str | None = None, message: str | None = None) -> None:
        """
        Close the channel.

        Args:
            problem: Machine-readable close reason, None for a clean close
            message: Optional human-readable explanation for the peer
        """
        pass


class IChangeSink(ABC):
    """Receiver of raw change notifications from a monitor subscription."""

    @abstractmethod
    def on_event(self, kind: str, path: str | None, other: str | None) -> None:
        """
        Handle one raw notification.

        Args:
            kind: Raw event kind code as delivered by the OS facility
            path: Primary path affected, if any
            other: Counterpart path, only for moves
        """
        pass
