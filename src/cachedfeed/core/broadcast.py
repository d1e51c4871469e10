"""Multi-subscriber broadcast channel for snapshots.

Observers either iterate a Subscription from their own event loop or
register a synchronous listener. Only snapshots published after an
observer joined are delivered; there is no replay of earlier values.

Publishing never blocks: subscription queues are unbounded unless a
maxsize is given, in which case the oldest pending snapshot is dropped.
"""

import asyncio
import logging
import threading
from collections.abc import AsyncIterator, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]

_CLOSED = object()  # End-of-stream marker placed on subscription queues


class Subscription(Generic[T]):
    """Async iterator over values published after subscribing.

    Example:
        async for snapshot in broadcast.subscribe():
            render(snapshot)
    """

    def __init__(
        self,
        owner: "SnapshotBroadcast[T]",
        loop: asyncio.AbstractEventLoop,
        maxsize: int = 0,
    ) -> None:
        """Initialize the subscription.

        Args:
            owner: Broadcast this subscription belongs to.
            loop: Event loop the consumer iterates on.
            maxsize: Max pending values (0 for unbounded).
        """
        self._owner = owner
        self._loop = loop
        self._maxsize = maxsize
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._finished = False
        self._closing = False
        self._dropped = 0

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """Return the event loop values are delivered on."""
        return self._loop

    @property
    def pending(self) -> int:
        """Return number of values waiting to be consumed."""
        return self._queue.qsize()

    @property
    def dropped(self) -> int:
        """Return number of values dropped because the queue was full."""
        return self._dropped

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        if self._finished:
            raise StopAsyncIteration
        value = await self._queue.get()
        if value is _CLOSED:
            self._finished = True
            raise StopAsyncIteration
        return value  # type: ignore[return-value]

    async def get(self) -> T:
        """Wait for the next value.

        Raises:
            StopAsyncIteration: If the broadcast was closed.
        """
        return await self.__anext__()

    def close(self) -> None:
        """Stop receiving values and end iteration."""
        self._owner._unsubscribe(self)
        self._put(_CLOSED)

    def _put(self, value: object) -> None:
        """Enqueue a value; must run on the subscription's loop."""
        if self._finished or self._closing:
            return
        if value is _CLOSED:
            # Nothing is queued behind the end marker, so it is never dropped
            self._closing = True
        elif self._maxsize and self._queue.qsize() >= self._maxsize:
            self._queue.get_nowait()
            self._dropped += 1
            logger.warning(
                "Subscription queue full (%d), dropped oldest snapshot", self._maxsize
            )
        self._queue.put_nowait(value)

    def _deliver(self, value: object) -> bool:
        """Deliver from any thread.

        Returns:
            False if the subscription's loop is gone and it should be dropped.
        """
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._put(value)
            return True

        try:
            self._loop.call_soon_threadsafe(self._put, value)
        except RuntimeError:
            # Consumer loop already closed
            return False
        return True


class SnapshotBroadcast(Generic[T]):
    """Forward-only fan-out channel used as a coordinator's output.

    Safe to publish from any thread. After close(), publish() is a no-op.

    Example:
        broadcast = SnapshotBroadcast()
        broadcast.add_listener(lambda s: print(s))
        broadcast.publish(snapshot)
        broadcast.close()
    """

    def __init__(self, queue_size: int = 0) -> None:
        """Initialize the broadcast.

        Args:
            queue_size: Default max pending values per subscription (0 for unbounded).
        """
        self._queue_size = max(0, queue_size)
        self._subscriptions: list[Subscription[T]] = []
        self._listeners: list[Listener[T]] = []
        self._lock = threading.Lock()
        self._closed = False

    @property
    def is_closed(self) -> bool:
        """Return True once close() was called."""
        return self._closed

    @property
    def subscriber_count(self) -> int:
        """Return number of active subscriptions and listeners."""
        with self._lock:
            return len(self._subscriptions) + len(self._listeners)

    def subscribe(self, maxsize: int | None = None) -> Subscription[T]:
        """Subscribe from the running event loop.

        Args:
            maxsize: Max pending values; defaults to the broadcast's queue size.

        Returns:
            A Subscription. If the broadcast is already closed, it is
            returned already finished.
        """
        loop = asyncio.get_running_loop()
        subscription: Subscription[T] = Subscription(
            self, loop, self._queue_size if maxsize is None else max(0, maxsize)
        )
        with self._lock:
            if not self._closed:
                self._subscriptions.append(subscription)
                return subscription
        subscription._put(_CLOSED)
        return subscription

    def add_listener(self, listener: Listener[T]) -> None:
        """Register a callback invoked synchronously on each publish.

        Listeners run in the publishing thread and must not block.

        Args:
            listener: Callable taking the published value.
        """
        with self._lock:
            if not self._closed:
                self._listeners.append(listener)

    def remove_listener(self, listener: Listener[T]) -> bool:
        """Unregister a listener.

        Returns:
            True if the listener was registered.
        """
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                return False
            return True

    def publish(self, value: T) -> None:
        """Send a value to every current observer without blocking.

        Args:
            value: The value to publish.
        """
        with self._lock:
            if self._closed:
                logger.debug("Ignoring publish on closed broadcast")
                return
            subscriptions = list(self._subscriptions)
            listeners = list(self._listeners)

        stale = [s for s in subscriptions if not s._deliver(value)]
        if stale:
            with self._lock:
                self._subscriptions = [s for s in self._subscriptions if s not in stale]

        for listener in listeners:
            try:
                listener(value)
            except Exception:
                logger.warning("Snapshot listener %r failed", listener, exc_info=True)

    def close(self) -> None:
        """Close the channel and end all subscriptions (idempotent)."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscriptions = self._subscriptions
            self._subscriptions = []
            self._listeners = []

        for subscription in subscriptions:
            subscription._deliver(_CLOSED)

    def _unsubscribe(self, subscription: Subscription[T]) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
