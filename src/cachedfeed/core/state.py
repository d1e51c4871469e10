"""Feed state store with Qt signals for reactive UI updates.

The FeedStore holds the latest Snapshot of a feed and emits Qt signals
when an aspect of it changes. Views connect to these signals instead of
reading the coordinator's broadcast directly.

This follows the Observer pattern via Qt's signal/slot mechanism.
"""

import logging

from PySide6.QtCore import QObject, Signal

from cachedfeed.models.snapshot import DisplayMode, Snapshot, display_mode_for

logger = logging.getLogger(__name__)


class FeedStore(QObject):
    """Latest-snapshot store emitting Qt signals on changes.

    Signals are delivered through Qt, so snapshots may be applied from
    the worker thread and observed in the main thread.

    Example:
        store = FeedStore()
        store.data_changed.connect(lambda items: print(f"Items: {items}"))
        worker.snapshot_received.connect(store.apply_snapshot)
    """

    loading_changed = Signal(bool)

    # Note: Using object for complex types (PySide6 limitation)
    snapshot_changed = Signal(object)  # Every new snapshot
    data_changed = Signal(object)  # tuple of items, or None
    error_changed = Signal(object)  # Exception, or None
    display_mode_changed = Signal(object)  # DisplayMode

    def __init__(self) -> None:
        """Initialize the store with no snapshot."""
        super().__init__()
        self._snapshot: Snapshot[object] | None = None

    @property
    def snapshot(self) -> Snapshot[object] | None:
        """Return the latest snapshot, or None before the first one."""
        return self._snapshot

    @property
    def is_loading(self) -> bool:
        """Return True while the source fetch is in progress."""
        return self._snapshot is not None and self._snapshot.is_fetching

    @property
    def items(self) -> tuple[object, ...]:
        """Return the items to show (empty if none)."""
        if self._snapshot is None or self._snapshot.data is None:
            return ()
        return self._snapshot.data

    @property
    def error(self) -> BaseException | None:
        """Return the last source error, if any."""
        return self._snapshot.error if self._snapshot else None

    @property
    def display_mode(self) -> DisplayMode:
        """Return how the feed should currently be presented."""
        return display_mode_for(self._snapshot)

    def apply_snapshot(self, snapshot: Snapshot[object]) -> None:
        """Store a new snapshot and emit signals for what changed.

        Args:
            snapshot: The snapshot just published by the coordinator.
        """
        old = self._snapshot
        old_mode = self.display_mode

        # Update state BEFORE emitting so handlers can read any property
        self._snapshot = snapshot

        loading_changed = old is None or old.is_fetching != snapshot.is_fetching
        data_changed = (old.data if old else None) != snapshot.data
        error_changed = (old.error if old else None) is not snapshot.error
        mode = self.display_mode

        logger.debug(
            "Snapshot applied: fetching=%s items=%d error=%r",
            snapshot.is_fetching,
            snapshot.item_count,
            snapshot.error,
        )

        self.snapshot_changed.emit(snapshot)
        if loading_changed:
            self.loading_changed.emit(snapshot.is_fetching)
        if data_changed:
            self.data_changed.emit(snapshot.data)
        if error_changed:
            self.error_changed.emit(snapshot.error)
        if mode != old_mode:
            self.display_mode_changed.emit(mode)

    def clear(self) -> None:
        """Forget the current snapshot."""
        had_snapshot = self._snapshot is not None
        old_mode = self.display_mode
        self._snapshot = None

        if had_snapshot and old_mode != DisplayMode.LOADING:
            self.display_mode_changed.emit(DisplayMode.LOADING)
