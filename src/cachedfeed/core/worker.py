"""QThread worker for running a FetchCoordinator in a Qt application.

Qt widgets must run in the main thread, but the coordinator and its
collaborators use asyncio. This worker runs the asyncio event loop in a
background thread and bridges snapshots to the main thread via Qt signals.
"""

import asyncio
import logging

from PySide6.QtCore import QThread, Signal

from cachedfeed.core.broadcast import SnapshotBroadcast
from cachedfeed.core.coordinator import (
    CoordinatorClosedError,
    FetchCoordinator,
    FetchSource,
    ReadCache,
    WriteCache,
)
from cachedfeed.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class FeedWorker(QThread):
    """Background thread worker owning one FetchCoordinator.

    Runs the coordinator on its own event loop so the main Qt thread
    stays responsive. Emits Qt signals for every published snapshot.

    Example:
        worker = FeedWorker(api.get_items, store.save, store.load)
        worker.snapshot_received.connect(feed_store.apply_snapshot)
        worker.ready.connect(worker.request_fetch)
        worker.start()
    """

    ready = Signal()  # Event loop running, fetches accepted
    stopped = Signal()  # Coordinator closed, loop shutting down

    # Data signals
    snapshot_received = Signal(object)  # Snapshot object
    fetch_finished = Signal()  # Both branches of one fetch completed

    def __init__(
        self,
        fetch_source: FetchSource[object],
        write_cache: WriteCache[object],
        read_cache: ReadCache[object],
        queue_size: int = 0,
        shutdown_timeout: float = 5.0,
    ) -> None:
        """Initialize the worker.

        Args:
            fetch_source: Coroutine function returning fresh items.
            write_cache: Coroutine function persisting items.
            read_cache: Coroutine function returning cached items.
            queue_size: Max pending snapshots per async subscriber (0 = unbounded).
            shutdown_timeout: Seconds to let in-flight work finish on stop.
        """
        super().__init__()
        # Collaborators are validated on the caller's thread
        self._coordinator: FetchCoordinator[object] = FetchCoordinator(
            fetch_source,
            write_cache,
            read_cache,
            broadcast=SnapshotBroadcast(queue_size),
        )
        self._shutdown_timeout = shutdown_timeout
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stop_event: asyncio.Event | None = None
        self._fetch_tasks: set[asyncio.Task[None]] = set()
        self._should_run = True

    @property
    def coordinator(self) -> FetchCoordinator[object]:
        """Return the coordinator driven by this worker."""
        return self._coordinator

    @property
    def is_running_loop(self) -> bool:
        """Return True if the worker's event loop accepts fetches."""
        return self._loop is not None and self._loop.is_running() and self._should_run

    def request_fetch(self) -> None:
        """Start a fetch cycle on the worker loop.

        Thread-safe call from main thread. A no-op before the loop is
        running or after stop().
        """
        if self._loop and self._loop.is_running() and self._should_run:
            asyncio.run_coroutine_threadsafe(self._safe_fetch(), self._loop)
        else:
            logger.debug("Fetch requested while worker is not running, ignored")

    async def _safe_fetch(self) -> None:
        """Run one fetch cycle and report its completion."""
        try:
            task = self._coordinator.fetch()
        except CoordinatorClosedError:
            logger.debug("Fetch requested after coordinator closed, ignored")
            return
        current = asyncio.current_task()
        if current is not None:
            self._fetch_tasks.add(current)
        try:
            await task
        finally:
            if current is not None:
                self._fetch_tasks.discard(current)
        self.fetch_finished.emit()

    def stop(self) -> None:
        """Signal the worker to stop (called from main thread)."""
        self._should_run = False
        if self._loop and self._loop.is_running() and self._stop_event:
            self._loop.call_soon_threadsafe(self._stop_event.set)

    def run(self) -> None:
        """Run the worker thread (entry point)."""
        # Create new event loop for this thread
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)

        try:
            self._loop.run_until_complete(self._serve())
        finally:
            # Clean up
            self._coordinator.close()
            self._loop.run_until_complete(self._drain())
            self._loop.close()
            self._loop = None
            self._stop_event = None
            self.stopped.emit()

    async def _serve(self) -> None:
        """Forward snapshots until stop() is called."""
        self._stop_event = asyncio.Event()
        self._coordinator.updates.add_listener(self._on_snapshot)

        if not self._should_run:
            return
        self.ready.emit()
        await self._stop_event.wait()

    async def _drain(self) -> None:
        """Let in-flight fetches and cache writes finish, then cancel leftovers."""
        pending = set(self._fetch_tasks)
        if pending:
            _, still_pending = await asyncio.wait(pending, timeout=self._shutdown_timeout)
            for task in still_pending:
                logger.warning("Cancelling fetch %s still running at shutdown", task.get_name())
                task.cancel()
            await asyncio.gather(*still_pending, return_exceptions=True)
        try:
            await asyncio.wait_for(
                self._coordinator.wait_for_pending_writes(), self._shutdown_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Cache writes still running at shutdown, cancelling")
            await self._coordinator.cancel_pending_writes()

    def _on_snapshot(self, snapshot: Snapshot[object]) -> None:
        """Bridge a published snapshot to the Qt signal."""
        self.snapshot_received.emit(snapshot)
