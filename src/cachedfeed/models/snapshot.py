"""Snapshot model describing one point in a fetch timeline."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

Item = TypeVar("Item")


class DisplayMode(Enum):
    """How a presentation layer should render a snapshot."""

    LOADING = "loading"  # Full-screen loader, nothing to show yet
    ITEMS = "items"
    ITEMS_WITH_ERROR = "items_with_error"  # Error banner above stale items
    ERROR = "error"  # Full-screen error, no items to fall back on


@dataclass(frozen=True, slots=True)
class Snapshot(Generic[Item]):
    """Immutable status update emitted by a FetchCoordinator.

    An in-flight fetch can never report an error, so ``is_fetching=True``
    together with an ``error`` is rejected at construction time.

    Attributes:
        is_fetching: Whether the source fetch is still in progress.
        data: Best items known at emission time, or None before any arrived.
        error: Error raised by the source fetch, if it failed.
    """

    is_fetching: bool
    data: tuple[Item, ...] | None = None
    error: BaseException | None = None

    def __post_init__(self) -> None:
        """Reject fetching snapshots with errors and freeze data into a tuple."""
        if not isinstance(self.is_fetching, bool):
            raise TypeError(f"is_fetching must be a bool, got {type(self.is_fetching).__name__}")
        if self.is_fetching and self.error is not None:
            raise ValueError("a snapshot cannot be fetching and carry an error")
        if self.data is not None and not isinstance(self.data, tuple):
            if not isinstance(self.data, Sequence):
                raise TypeError(f"data must be a sequence, got {type(self.data).__name__}")
            object.__setattr__(self, "data", tuple(self.data))

    @property
    def has_data(self) -> bool:
        """Return True if any items are present."""
        return self.data is not None

    @property
    def has_error(self) -> bool:
        """Return True if the source fetch failed."""
        return self.error is not None

    @property
    def item_count(self) -> int:
        """Return number of items (0 when no data)."""
        return len(self.data) if self.data is not None else 0

    @property
    def display_mode(self) -> DisplayMode:
        """Return how this snapshot should be presented."""
        return display_mode_for(self)


def display_mode_for(snapshot: "Snapshot[object] | None") -> DisplayMode:
    """Pick the display mode for the latest snapshot.

    Args:
        snapshot: Latest snapshot, or None if nothing was emitted yet.

    Returns:
        The DisplayMode a view should switch to.
    """
    if snapshot is None or not (snapshot.has_data or snapshot.has_error):
        return DisplayMode.LOADING
    # While fetching there is no error, so data must be present here
    if snapshot.is_fetching or not snapshot.has_error:
        return DisplayMode.ITEMS
    if snapshot.has_data:
        return DisplayMode.ITEMS_WITH_ERROR
    return DisplayMode.ERROR
