"""
Change monitoring backed by watchdog observers.

A ChangeSubscription owns one observer watching one path. Notifications are
produced on the observer's thread and posted to the subscribing event loop,
where they are handed to the sink; nothing else runs off the loop.

Releasing a subscription is a four step protocol: disconnect the sink, cancel
the observer, drain notifications that were already posted to the loop, and
only then release the observer. close() and the async context manager run
the steps in that order as one unit.
"""

import asyncio
import logging
import os
import threading
from collections.abc import Callable

from watchdog.events import (
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from fswatch_bridge.config import BridgeConfig, get_config
from fswatch_bridge.core.interfaces import IChangeSink
from fswatch_bridge.models import FileEvent, MonitoringError, RawChangeEvent
from fswatch_bridge.models.exceptions import describe_os_error
from fswatch_bridge.monitoring.tags import get_file_tag
from fswatch_bridge.monitoring.translation import EventTranslator, TagProvider

logger = logging.getLogger(__name__)

ObserverFactory = Callable[[], BaseObserver]

# Opened and closed-without-write notifications are not reported.
OBSERVED_EVENT_TYPES = [
    FileCreatedEvent,
    DirCreatedEvent,
    FileDeletedEvent,
    DirDeletedEvent,
    FileModifiedEvent,
    DirModifiedEvent,
    FileMovedEvent,
    DirMovedEvent,
    FileClosedEvent,
]


class _SubscriptionHandler(FileSystemEventHandler):
    """Observer-thread side of a subscription."""

    def __init__(self, subscription: "ChangeSubscription", watch_root: str, target: str | None):
        super().__init__()
        self.subscription = subscription
        self.watch_root = watch_root
        self.target = target

    def on_any_event(self, event: FileSystemEvent) -> None:
        src_path = os.fsdecode(event.src_path)
        dest_path = None
        if event.event_type == EVENT_TYPE_MOVED and event.dest_path:
            dest_path = os.fsdecode(event.dest_path)

        if self.target is not None:
            # Single file watched through its parent directory
            if self.target not in (src_path, dest_path):
                return
        elif event.is_directory and event.event_type == EVENT_TYPE_MODIFIED and src_path == self.watch_root:
            # Synthesized for every change inside the watched directory
            return

        self.subscription.post(RawChangeEvent(event.event_type, src_path, dest_path))


class ChangeSubscription:
    """
    Owned OS-level change subscription for a single path.

    Directories are watched directly and non-recursively. Any other path is
    watched through its parent directory, with notifications filtered to the
    path itself, so files that do not exist yet can still be watched.
    """

    def __init__(
        self,
        path: str,
        sink: IChangeSink,
        observer_factory: ObserverFactory,
        directory_only: bool = False,
        drain_iterations: int = 10,
        join_timeout: float = 5.0,
    ):
        """
        Initialize the subscription without starting it.

        Args:
            path: File or directory to watch
            sink: Receiver of raw notifications, called on the event loop
            observer_factory: Creates the watchdog observer backing this subscription
            directory_only: Fail unless path is a directory
            drain_iterations: Upper bound on loop iterations spent draining on teardown
            join_timeout: Seconds to wait for the observer thread on release
        """
        self.path = str(path)
        self.directory_only = directory_only
        self.drain_iterations = drain_iterations
        self.join_timeout = join_timeout

        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._sink: IChangeSink | None = sink
        self._loop: asyncio.AbstractEventLoop | None = None

        # Posted to the loop but not yet delivered
        self._pending = 0
        self._lock = threading.Lock()

        self._cancelled = False
        self._released = False

    def _resolve_watch_target(self) -> tuple[str, str | None]:
        absolute = os.path.abspath(self.path)
        if os.path.isdir(absolute):
            return absolute, None

        if self.directory_only:
            reason = "Not a directory" if os.path.exists(absolute) else "No such file or directory"
            raise MonitoringError(f"{reason}: {self.path}", path=self.path, operation="subscribe")

        parent = os.path.dirname(absolute)
        if not os.path.isdir(parent):
            raise MonitoringError(f"No such file or directory: {self.path}", path=self.path, operation="subscribe")

        return parent, absolute

    def start(self) -> "ChangeSubscription":
        """
        Establish the subscription.

        Must be called from the event loop that will receive notifications.

        Returns:
            This subscription

        Raises:
            MonitoringError: If the path cannot be watched
        """
        if self._observer is not None or self._released:
            raise MonitoringError("Subscription was already started", path=self.path, operation="subscribe")

        self._loop = asyncio.get_running_loop()
        watch_root, target = self._resolve_watch_target()

        observer = self._observer_factory()
        handler = _SubscriptionHandler(self, watch_root, target)
        try:
            observer.schedule(handler, watch_root, recursive=False, event_filter=OBSERVED_EVENT_TYPES)
            observer.start()
        except Exception as e:
            if observer.is_alive():
                observer.stop()
                observer.join(timeout=self.join_timeout)
            reason = describe_os_error(e) if isinstance(e, OSError) else str(e)
            raise MonitoringError(
                f"Cannot watch {self.path}: {reason}",
                path=self.path,
                operation="subscribe",
                underlying_error=e,
            ) from e

        self._observer = observer
        if target:
            logger.info("Watching %s through %s", target, watch_root)
        else:
            logger.info("Watching directory %s", watch_root)
        return self

    def post(self, raw: RawChangeEvent) -> None:
        """Queue a notification for delivery on the loop. Called on the observer thread."""
        loop = self._loop
        if loop is None or self._sink is None:
            return

        with self._lock:
            self._pending += 1
        try:
            loop.call_soon_threadsafe(self._deliver, raw)
        except RuntimeError:
            with self._lock:
                self._pending -= 1
            logger.debug("Event loop closed, dropping %s", raw)

    def _deliver(self, raw: RawChangeEvent) -> None:
        with self._lock:
            self._pending -= 1

        sink = self._sink
        if sink is None:
            logger.debug("Dropping %s delivered after disconnect", raw)
            return

        sink.on_event(raw.kind, raw.path, raw.other)

    def disconnect(self) -> None:
        """Detach the sink; notifications delivered afterwards are dropped."""
        if self._sink is not None:
            logger.debug("Disconnecting change sink for %s", self.path)
        self._sink = None

    def cancel(self) -> None:
        """
        Stop the observer from producing further notifications.

        Raises:
            MonitoringError: If the observer cannot be stopped
        """
        if self._cancelled:
            return
        self._cancelled = True

        observer = self._observer
        if observer is None:
            return

        try:
            observer.stop()
        except Exception as e:
            raise MonitoringError(
                "Failed to cancel change monitoring", path=self.path, operation="cancel", underlying_error=e
            ) from e

    async def drain(self) -> int:
        """
        Let the loop flush notifications already posted by the observer.

        Yields at most drain_iterations times and stops as soon as nothing is
        pending. This bounds, but cannot rule out, deliveries that arrive later.

        Returns:
            Number of loop iterations spent
        """
        iterations = 0
        while self.pending and iterations < self.drain_iterations:
            await asyncio.sleep(0)
            iterations += 1

        if self.pending:
            logger.warning(
                "%d notifications for %s still queued after %d drain iterations",
                self.pending,
                self.path,
                iterations,
            )
        return iterations

    def release(self) -> None:
        """Join the observer thread and drop every reference the subscription holds."""
        if self._released:
            return
        self._released = True

        observer, self._observer = self._observer, None
        if observer is not None and observer.is_alive():
            observer.join(timeout=self.join_timeout)
            if observer.is_alive():
                logger.warning("Observer for %s did not stop within %.1fs", self.path, self.join_timeout)

        self._sink = None
        self._loop = None
        logger.debug("Released subscription for %s", self.path)

    async def close(self) -> None:
        """Run the full teardown: disconnect, cancel, drain, release."""
        self.disconnect()
        try:
            self.cancel()
            await self.drain()
        finally:
            self.release()

    async def __aenter__(self) -> "ChangeSubscription":
        return self.start()

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.close()

    @property
    def pending(self) -> int:
        """Notifications posted to the loop but not yet delivered."""
        with self._lock:
            return self._pending

    @property
    def is_connected(self) -> bool:
        return self._sink is not None

    @property
    def is_active(self) -> bool:
        """Check if the subscription is established and not yet cancelled."""
        return self._observer is not None and not self._cancelled


class ChangeMonitor:
    """
    Creates change subscriptions whose notifications are translated into wire events.

    Each subscription gets its own observer; there is no shared registry.
    """

    def __init__(
        self,
        config: BridgeConfig | None = None,
        observer_factory: ObserverFactory | None = None,
        tagger: TagProvider = get_file_tag,
    ):
        self.config = config or get_config()
        self.observer_factory = observer_factory or self._create_observer
        self.tagger = tagger

    def _create_observer(self) -> BaseObserver:
        if self.config.observer_polling:
            return PollingObserver(timeout=self.config.polling_interval_seconds)
        return Observer()

    def subscribe(
        self, path: str, emit: Callable[[FileEvent], None], directory_only: bool = False
    ) -> ChangeSubscription:
        """
        Create an unstarted subscription for path.

        Args:
            path: File or directory to watch
            emit: Receives each translated FileEvent on the event loop
            directory_only: Fail unless path is a directory

        Returns:
            Subscription to start directly or enter as an async context manager
        """
        return ChangeSubscription(
            path,
            EventTranslator(emit, self.tagger),
            observer_factory=self.observer_factory,
            directory_only=directory_only,
            drain_iterations=self.config.teardown_drain_iterations,
            join_timeout=self.config.observer_join_timeout_seconds,
        )

    def start(
        self, path: str, emit: Callable[[FileEvent], None], directory_only: bool = False
    ) -> ChangeSubscription:
        """Subscribe to path immediately; see subscribe()."""
        return self.subscribe(path, emit, directory_only).start()

    async def stop(self, subscription: ChangeSubscription) -> None:
        """Tear a subscription down."""
        await subscription.close()
