"""
Asynchronous, cancellable directory enumeration.

Listing runs in worker threads so very large or slow directories never block
the event loop; entries are pulled in small batches and each batch is fully
forwarded before the next one is requested.
"""

import asyncio
import itertools
import logging
import os
import threading
from collections.abc import Callable

from fswatch_bridge.models import EnumerationError, FileEvent
from fswatch_bridge.models.exceptions import describe_os_error

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10


def _open_listing(path: str):
    return os.scandir(path)


def _read_batch(listing, count: int) -> list[str]:
    return [entry.name for entry in itertools.islice(listing, count)]


class DirectoryEnumerator:
    """
    Lists a directory once, emitting one "present" event per entry and a final "present-done".

    The enumeration observes a cancellation token shared with its session:
    once the token is set, any result still in flight is discarded on arrival
    and nothing further is emitted or reported.
    """

    def __init__(
        self,
        path: str,
        emit: Callable[[FileEvent], None],
        cancellable: threading.Event,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        """
        Initialize the enumerator.

        Args:
            path: Directory to list
            emit: Receives each FileEvent, on the event loop
            cancellable: Cancellation token; set it to abandon the enumeration
            batch_size: Entries pulled per worker round-trip
        """
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        self.path = path
        self.emit = emit
        self.cancellable = cancellable
        self.batch_size = batch_size

        self.entries_listed = 0
        self._finished = False
        self._outstanding = False

    @property
    def cancelled(self) -> bool:
        return self.cancellable.is_set()

    @property
    def finished(self) -> bool:
        """True once present-done has been emitted."""
        return self._finished

    async def run(self) -> None:
        """
        Enumerate the directory to completion, failure or cancellation.

        Raises:
            EnumerationError: If the listing cannot be opened or read
        """
        if self._finished or self.cancelled:
            return

        try:
            listing = await asyncio.to_thread(_open_listing, self.path)
        except OSError as e:
            if self.cancelled:
                return
            raise EnumerationError(
                f"{self.path}: {describe_os_error(e)}", path=self.path, entries_listed=0, underlying_error=e
            ) from e

        if self.cancelled:
            listing.close()
            return

        try:
            await self._pull_batches(listing)
        finally:
            # A worker thread abandoned mid-read still holds the listing; it is closed on collection then.
            if not self._outstanding:
                listing.close()

    async def _pull_batches(self, listing) -> None:
        while not self.cancelled:
            self._outstanding = True
            try:
                names = await asyncio.to_thread(_read_batch, listing, self.batch_size)
            except OSError as e:
                self._outstanding = False
                if self.cancelled:
                    return
                raise EnumerationError(
                    f"{self.path}: {describe_os_error(e)}",
                    path=self.path,
                    entries_listed=self.entries_listed,
                    underlying_error=e,
                ) from e
            self._outstanding = False

            if self.cancelled:
                logger.debug("Discarding %d entries of %s after cancellation", len(names), self.path)
                return

            if not names:
                self._finished = True
                logger.debug("Listed %d entries of %s", self.entries_listed, self.path)
                self.emit(FileEvent.present_done())
                return

            for name in names:
                self.entries_listed += 1
                self.emit(FileEvent.present(name))
