"""
Terminal-backed channel for running a watch session by hand.

Events are written to stdout as compact JSON lines; lifecycle notices go to
stderr so the event stream stays machine-readable.
"""

import asyncio
import json
import logging
from typing import Any

from rich.console import Console
from rich.markup import escape

from fswatch_bridge.core.interfaces import IChannel

logger = logging.getLogger(__name__)


class ConsoleChannel(IChannel):
    """Channel that prints outbound messages with rich."""

    def __init__(
        self,
        options: dict[str, Any],
        console: Console | None = None,
        status_console: Console | None = None,
    ):
        """
        Initialize the console channel.

        Args:
            options: Channel open options, e.g. {"path": ..., "payload": "fsdir1"}
            console: Console receiving event lines
            status_console: Console receiving ready/close notices
        """
        self.options = dict(options)
        self.console = console or Console()
        self.status_console = status_console or Console(stderr=True)

        self.messages_sent = 0
        self.is_ready = False
        self.problem: str | None = None
        self.close_message: str | None = None
        self._closed = asyncio.Event()

    def get_option(self, name: str) -> Any:
        return self.options.get(name)

    def ready(self) -> None:
        self.is_ready = True
        path = escape(str(self.options.get("path")))
        self.status_console.print(f"[green]ready[/green] watching [bold]{path}[/bold]")

    def send(self, message: dict[str, Any]) -> None:
        if self.closed:
            logger.debug("Dropping message on closed channel: %s", message)
            return
        self.console.print(json.dumps(message), markup=False, highlight=False, soft_wrap=True)
        self.messages_sent += 1

    def close(self, problem: str | None = None, message: str | None = None) -> None:
        if self.closed:
            return
        self.problem = problem
        self.close_message = message
        if problem:
            detail = f": {escape(message)}" if message else ""
            self.status_console.print(f"[red]closed[/red] ({problem}){detail}", highlight=False)
        else:
            self.status_console.print("[dim]closed[/dim]")
        self._closed.set()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def wait_closed(self, timeout: float | None = None) -> bool:
        """
        Wait until the channel is closed.

        Args:
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            True if the channel closed, False on timeout
        """
        try:
            await asyncio.wait_for(self._closed.wait(), timeout)
        except TimeoutError:
            return False
        return True
