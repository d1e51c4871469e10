"""Cached feed: show cached items immediately while a fresh fetch runs."""

from cachedfeed.core.broadcast import SnapshotBroadcast, Subscription
from cachedfeed.core.coordinator import (
    CoordinatorClosedError,
    CoordinatorError,
    FetchCoordinator,
)
from cachedfeed.models.snapshot import DisplayMode, Snapshot, display_mode_for

__version__ = "0.1.0"

__all__ = [
    "CoordinatorClosedError",
    "CoordinatorError",
    "DisplayMode",
    "FetchCoordinator",
    "Snapshot",
    "SnapshotBroadcast",
    "Subscription",
    "display_mode_for",
]
