"""Data models for fetch snapshots."""

from cachedfeed.models.snapshot import DisplayMode, Snapshot, display_mode_for

__all__ = ["DisplayMode", "Snapshot", "display_mode_for"]
