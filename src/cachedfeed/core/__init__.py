"""Core coordination layer.

This module contains the fetch coordination logic and the Qt bridge
that delivers its snapshots to the UI thread.

Classes:
    FetchCoordinator: Races cache reads against source fetches.
    SnapshotBroadcast: Multi-subscriber output channel.
    FeedStore: Latest snapshot with Qt signals.
    FeedWorker: QThread worker running the coordinator's event loop.
    ConfigManager: QSettings wrapper for configuration.
"""

from cachedfeed.core.broadcast import SnapshotBroadcast, Subscription
from cachedfeed.core.config import ConfigManager
from cachedfeed.core.coordinator import (
    CoordinatorClosedError,
    CoordinatorError,
    FetchCoordinator,
)
from cachedfeed.core.state import FeedStore
from cachedfeed.core.worker import FeedWorker

__all__ = [
    "ConfigManager",
    "CoordinatorClosedError",
    "CoordinatorError",
    "FeedStore",
    "FeedWorker",
    "FetchCoordinator",
    "SnapshotBroadcast",
    "Subscription",
]
