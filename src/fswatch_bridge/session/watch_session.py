"""
Watch sessions: one per channel, serving either payload type.

A session validates its path, establishes the change subscription and, in
snapshot mode, only then starts listing the directory, so that no change
between listing and watch establishment can be missed. All terminal errors
are reported through the channel's close call; teardown always runs the
subscription's disconnect, cancel, drain and release steps.
"""

import asyncio
import logging
import threading
from contextlib import AsyncExitStack
from typing import Any

from fswatch_bridge.config import BridgeConfig, get_config
from fswatch_bridge.core.interfaces import IChannel
from fswatch_bridge.enumeration import DirectoryEnumerator
from fswatch_bridge.models import (
    BaseError,
    EnumerationError,
    FileEvent,
    MonitoringError,
    ProtocolError,
    SessionState,
    WatchMode,
)
from fswatch_bridge.monitoring import ChangeMonitor, ChangeSubscription

logger = logging.getLogger(__name__)

_FORWARDING_STATES = (SessionState.PREPARING, SessionState.READY)


class WatchSession:
    """
    Serves one watch channel from preparation to disposal.

    States move strictly forward: created, preparing, ready, closing, closed.
    """

    def __init__(
        self,
        channel: IChannel,
        mode: WatchMode,
        config: BridgeConfig | None = None,
        monitor: ChangeMonitor | None = None,
    ):
        """
        Initialize the session.

        Args:
            channel: Channel the session reads options from and sends events to
            mode: Watch-only or snapshot-and-watch
            config: Bridge configuration (global configuration if None)
            monitor: Change monitor to subscribe with (created from config if None)
        """
        self.channel = channel
        self.mode = WatchMode(mode)
        self.config = config or get_config()
        self.monitor = monitor or ChangeMonitor(self.config)

        self.path: str | None = None
        self.state = SessionState.CREATED
        self.events_sent = 0

        self._cancellable = threading.Event()
        self._resources = AsyncExitStack()
        self._subscription: ChangeSubscription | None = None
        self._enumeration_task: asyncio.Task | None = None

    async def prepare(self) -> None:
        """Validate options, subscribe to changes and, in snapshot mode, start listing."""
        if self.state != SessionState.CREATED:
            logger.warning("Ignoring prepare() on a %s session", self.state.value)
            return
        self.state = SessionState.PREPARING

        path = self.channel.get_option("path")
        if not isinstance(path, str) or not path:
            logger.warning("missing 'path' option for %s channel", self.mode.value)
            await self._fail(ProtocolError("missing 'path' option", option="path", payload=self.mode.value))
            return
        self.path = path

        try:
            self._subscription = await self._resources.enter_async_context(
                self.monitor.subscribe(path, self._emit, directory_only=self.mode == WatchMode.SNAPSHOT)
            )
        except MonitoringError as e:
            logger.info("%s: %s", path, e.message)
            await self._fail(e)
            return

        self.state = SessionState.READY
        self.channel.ready()

        if self.mode == WatchMode.SNAPSHOT:
            enumerator = DirectoryEnumerator(
                path, self._emit, self._cancellable, batch_size=self.config.enumeration_batch_size
            )
            self._enumeration_task = asyncio.create_task(self._run_enumeration(enumerator))

    async def recv(self, message: Any) -> None:
        """Handle an inbound message; none are expected on a watch channel."""
        logger.warning("received unexpected message in %s channel", self.mode.value)
        await self._fail(ProtocolError("unexpected message on watch channel", payload=self.mode.value))

    async def close(self, problem: str | None = None, message: str | None = None) -> None:
        """
        Close the session and report the close reason to the channel.

        Args:
            problem: Machine-readable close reason, None for a clean close
            message: Optional human-readable explanation
        """
        await self._shutdown(report=True, problem=problem, message=message)

    async def dispose(self) -> None:
        """Tear the session down after the channel itself was closed."""
        await self._shutdown(report=False)

    async def _fail(self, error: BaseError) -> None:
        await self.close(error.problem, error.message)

    async def _shutdown(self, report: bool, problem: str | None = None, message: str | None = None) -> None:
        if self.state in (SessionState.CLOSING, SessionState.CLOSED):
            return
        self.state = SessionState.CLOSING

        if report:
            self.channel.close(problem, message)

        try:
            await self._teardown()
        finally:
            self.state = SessionState.CLOSED
            logger.debug("Closed %s session for %s after %d events", self.mode.value, self.path, self.events_sent)

    async def _teardown(self) -> None:
        self._cancellable.set()

        # A blocked listing read must not hold the subscription open
        try:
            await self._resources.aclose()
        finally:
            self._subscription = None

        task = self._enumeration_task
        if task is not None and task is not asyncio.current_task():
            await task

    async def _run_enumeration(self, enumerator: DirectoryEnumerator) -> None:
        try:
            await enumerator.run()
        except EnumerationError as e:
            logger.info("%s", e.message)
            await self._fail(e)
        except Exception as e:
            logger.exception("Listing %s failed", self.path)
            error = EnumerationError(
                f"{self.path}: {e}", path=self.path, entries_listed=enumerator.entries_listed, underlying_error=e
            )
            await self._fail(error)

    def _emit(self, event: FileEvent) -> None:
        if self.state not in _FORWARDING_STATES:
            logger.debug("Dropping %s on a %s session", event, self.state.value)
            return
        self.channel.send(event.to_message())
        self.events_sent += 1

    async def wait_enumerated(self) -> None:
        """Wait until the directory listing, if any, has finished or been abandoned."""
        task = self._enumeration_task
        if task is not None and task is not asyncio.current_task():
            await task

    @property
    def is_snapshot(self) -> bool:
        return self.mode == WatchMode.SNAPSHOT

    @property
    def subscription(self) -> ChangeSubscription | None:
        """The active change subscription, if any."""
        return self._subscription

    async def __aenter__(self) -> "WatchSession":
        await self.prepare()
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.dispose()


async def open_session(
    channel: IChannel,
    config: BridgeConfig | None = None,
    monitor: ChangeMonitor | None = None,
) -> WatchSession:
    """
    Create and prepare the session for a channel's payload type.

    Args:
        channel: Channel whose "payload" option selects the mode
        config: Bridge configuration
        monitor: Optional change monitor

    Returns:
        The prepared session, which may already be closed if preparation failed

    Raises:
        ProtocolError: If the payload type is not a watch payload
    """
    payload = channel.get_option("payload")
    try:
        mode = WatchMode(payload)
    except ValueError as e:
        raise ProtocolError(f"unsupported payload type: {payload}", option="payload", payload=str(payload)) from e

    session = WatchSession(channel, mode, config=config, monitor=monitor)
    await session.prepare()
    return session
