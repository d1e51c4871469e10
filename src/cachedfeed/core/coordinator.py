"""Fetch coordinator racing a local cache against an authoritative source.

Each fetch() publishes an immediate "loading" snapshot carrying the last
known items, then reads the cache and fetches the source concurrently:

    initial -> (cache update, only while the source is pending) -> final

The source result is authoritative. Once it has been published, a late
cache result for the same cycle is not published, though it still
becomes the last known data. Successful source results
are written back to the cache by a detached task whose outcome is never
reported.
"""

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from types import TracebackType
from typing import Generic, TypeVar

from cachedfeed.core.broadcast import SnapshotBroadcast
from cachedfeed.models.snapshot import Snapshot

logger = logging.getLogger(__name__)

Item = TypeVar("Item")

FetchSource = Callable[[], Awaitable[Sequence[Item]]]
ReadCache = Callable[[], Awaitable[Sequence[Item]]]
WriteCache = Callable[[Sequence[Item]], Awaitable[object]]


class CoordinatorError(Exception):
    """Base error for FetchCoordinator misuse."""


class CoordinatorClosedError(CoordinatorError):
    """Raised when fetch() is called after close()."""


@dataclass
class _FetchCycle:
    """Per-call state shared by the cache and source branches."""

    number: int
    source_done: bool = False


class FetchCoordinator(Generic[Item]):
    """Coordinates cache reads, source fetches and cache writes.

    The coordinator keeps the most recent items from either branch in
    ``last_known_data`` so later refreshes can show them immediately.
    That field and the per-cycle completion flag are guarded by a lock,
    so branches may finish on different threads.

    Overlapping fetch() calls are independent: each races its own cache
    and source pair, and their snapshots interleave in completion order.

    Example:
        coordinator = FetchCoordinator(api.get_items, store.save, store.load)
        coordinator.updates.add_listener(view.show)
        await coordinator.fetch()
        coordinator.close()
    """

    def __init__(
        self,
        fetch_source: FetchSource[Item],
        write_cache: WriteCache[Item],
        read_cache: ReadCache[Item],
        *,
        broadcast: SnapshotBroadcast[Snapshot[Item]] | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            fetch_source: Coroutine function returning fresh items.
            write_cache: Coroutine function persisting items (best effort).
            read_cache: Coroutine function returning cached items; raising
                means the cache is empty.
            broadcast: Output channel to publish on; a new one by default.

        Raises:
            TypeError: If any collaborator is missing or not callable.
        """
        for name, func in (
            ("fetch_source", fetch_source),
            ("write_cache", write_cache),
            ("read_cache", read_cache),
        ):
            if func is None:
                raise TypeError(f"{name} is required")
            if not callable(func):
                raise TypeError(f"{name} must be callable, got {type(func).__name__}")

        self._fetch_source = fetch_source
        self._write_cache = write_cache
        self._read_cache = read_cache
        self._updates: SnapshotBroadcast[Snapshot[Item]] = (
            broadcast if broadcast is not None else SnapshotBroadcast()
        )
        self._lock = threading.RLock()
        self._last_known_data: tuple[Item, ...] | None = None
        self._cycle_count = 0
        self._in_flight = 0
        self._write_tasks: set[asyncio.Task[None]] = set()

    @property
    def updates(self) -> SnapshotBroadcast[Snapshot[Item]]:
        """Return the broadcast channel snapshots are published on."""
        return self._updates

    @property
    def last_known_data(self) -> tuple[Item, ...] | None:
        """Return the most recent items from cache or source."""
        with self._lock:
            return self._last_known_data

    @property
    def in_flight(self) -> int:
        """Return number of fetch cycles that have not finished."""
        with self._lock:
            return self._in_flight

    @property
    def pending_writes(self) -> int:
        """Return number of detached cache writes still running."""
        return len(self._write_tasks)

    @property
    def is_closed(self) -> bool:
        """Return True once the coordinator was closed."""
        return self._updates.is_closed

    def fetch(self) -> "asyncio.Task[None]":
        """Start a fetch cycle.

        Publishes the initial snapshot before returning. Must be called
        from a running event loop.

        Returns:
            Task resolving once both the cache and source branches finished.

        Raises:
            CoordinatorClosedError: If the coordinator was closed.
            RuntimeError: If no event loop is running.
        """
        if self.is_closed:
            raise CoordinatorClosedError("fetch() called on a closed coordinator")
        loop = asyncio.get_running_loop()

        with self._lock:
            self._cycle_count += 1
            self._in_flight += 1
            cycle = _FetchCycle(self._cycle_count)
            self._updates.publish(Snapshot(is_fetching=True, data=self._last_known_data))

        logger.debug("Fetch cycle %d started", cycle.number)
        return loop.create_task(self._run_cycle(cycle), name=f"fetch-cycle-{cycle.number}")

    async def refresh(self) -> None:
        """Run a full fetch cycle and wait for it to finish."""
        await self.fetch()

    async def _run_cycle(self, cycle: _FetchCycle) -> None:
        try:
            await asyncio.gather(self._cache_branch(cycle), self._source_branch(cycle))
        finally:
            with self._lock:
                self._in_flight -= 1
            logger.debug("Fetch cycle %d finished", cycle.number)

    async def _cache_branch(self, cycle: _FetchCycle) -> None:
        """Read the cache; failures are treated as an empty cache."""
        try:
            items = tuple(await self._read_cache())
        except Exception as e:  # noqa: BLE001
            logger.debug("Cache miss in cycle %d: %s", cycle.number, e)
            return

        with self._lock:
            self._last_known_data = items
            if cycle.source_done:
                # The source result already went out and is authoritative
                logger.debug("Late cache result in cycle %d, not published", cycle.number)
                return
            self._updates.publish(Snapshot(is_fetching=True, data=items))

    async def _source_branch(self, cycle: _FetchCycle) -> None:
        """Fetch the source and publish the final snapshot."""
        try:
            items = tuple(await self._fetch_source())
        except Exception as e:  # noqa: BLE001
            with self._lock:
                cycle.source_done = True
                self._updates.publish(
                    Snapshot(is_fetching=False, data=self._last_known_data, error=e)
                )
            logger.debug("Source fetch failed in cycle %d: %r", cycle.number, e)
            return

        with self._lock:
            cycle.source_done = True
            self._last_known_data = items
            self._updates.publish(Snapshot(is_fetching=False, data=items))

        self._schedule_write(items)

    def _schedule_write(self, items: tuple[Item, ...]) -> None:
        """Persist items in a detached task; the outcome is never reported."""
        task = asyncio.get_running_loop().create_task(self._write(items))
        self._write_tasks.add(task)
        task.add_done_callback(self._forget_write)

    async def _write(self, items: tuple[Item, ...]) -> None:
        await self._write_cache(items)

    def _forget_write(self, task: "asyncio.Task[None]") -> None:
        self._write_tasks.discard(task)
        if not task.cancelled():
            # Retrieve the exception so asyncio does not report it
            task.exception()

    async def wait_for_pending_writes(self) -> None:
        """Wait until detached cache writes have finished.

        Write outcomes are not surfaced.
        """
        while self._write_tasks:
            await asyncio.wait(list(self._write_tasks))

    async def cancel_pending_writes(self) -> None:
        """Cancel detached cache writes and wait for them to unwind."""
        tasks = list(self._write_tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def close(self) -> None:
        """Close the output channel (idempotent).

        In-flight branches keep running; their snapshots are dropped.
        """
        if not self.is_closed:
            logger.debug("Closing fetch coordinator")
        self._updates.close()

    async def __aenter__(self) -> "FetchCoordinator[Item]":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
