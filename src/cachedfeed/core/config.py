"""Configuration manager using QSettings for persistent storage."""

import logging

from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)

# Broadcast
_KEY_QUEUE_SIZE = "broadcast/queue_size"

# Logging
_KEY_LOG_LEVEL = "logging/level"

# Demo feed
_KEY_DEMO_CACHE_DELAY = "demo/cache_delay"
_KEY_DEMO_SOURCE_DELAY = "demo/source_delay"
_KEY_DEMO_SOURCE_FAILS = "demo/source_fails"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_MAX_QUEUE_SIZE = 10000
_MAX_DELAY = 30.0


class ConfigManager:
    """Wrapper around QSettings for type-safe config access.

    QSettings stores config in platform-specific locations:
    - Windows: HKEY_CURRENT_USER\\Software\\CachedFeed\\CachedFeed
    - macOS: ~/Library/Preferences/com.CachedFeed.CachedFeed.plist
    - Linux: ~/.config/CachedFeed/CachedFeed.conf

    Example:
        config = ConfigManager()
        worker = FeedWorker(..., queue_size=config.get_queue_size())
    """

    def __init__(self, organization: str = "CachedFeed", application: str = "CachedFeed") -> None:
        """Initialize the config manager.

        Args:
            organization: Organization name for QSettings.
            application: Application name for QSettings.
        """
        self._settings = QSettings(organization, application)

    @property
    def settings(self) -> QSettings:
        """Return the underlying QSettings instance."""
        return self._settings

    # -- Broadcast settings ----------------------------------------------------

    def get_queue_size(self) -> int:
        """Return the max pending snapshots per async subscriber.

        Returns:
            Queue size, 0 meaning unbounded (default 0).
        """
        value = self._settings.value(_KEY_QUEUE_SIZE, 0, int)
        return max(0, min(_MAX_QUEUE_SIZE, int(value)))  # type: ignore[arg-type]

    def set_queue_size(self, size: int) -> None:
        """Set the max pending snapshots per async subscriber.

        Args:
            size: Queue size (0-10000, 0 for unbounded).
        """
        self._settings.setValue(_KEY_QUEUE_SIZE, max(0, min(_MAX_QUEUE_SIZE, size)))

    # -- Logging settings ------------------------------------------------------

    def get_log_level(self) -> str:
        """Return the log level name.

        Returns:
            One of "DEBUG", "INFO", "WARNING", "ERROR". Default "INFO".
        """
        value = str(self._settings.value(_KEY_LOG_LEVEL, "INFO", str)).upper()
        return value if value in LOG_LEVELS else "INFO"

    def set_log_level(self, level: str) -> None:
        """Set the log level name.

        Args:
            level: One of "DEBUG", "INFO", "WARNING", "ERROR".
        """
        level = level.upper()
        if level not in LOG_LEVELS:
            logger.warning("Ignoring unknown log level: %s", level)
            return
        self._settings.setValue(_KEY_LOG_LEVEL, level)

    # -- Demo feed settings ----------------------------------------------------

    def get_cache_delay(self) -> float:
        """Return the simulated cache read delay in seconds (default 0.2)."""
        return self._get_delay(_KEY_DEMO_CACHE_DELAY, 0.2)

    def set_cache_delay(self, seconds: float) -> None:
        """Set the simulated cache read delay (0-30 seconds)."""
        self._settings.setValue(_KEY_DEMO_CACHE_DELAY, self._clamp_delay(seconds))

    def get_source_delay(self) -> float:
        """Return the simulated source fetch delay in seconds (default 1.0)."""
        return self._get_delay(_KEY_DEMO_SOURCE_DELAY, 1.0)

    def set_source_delay(self, seconds: float) -> None:
        """Set the simulated source fetch delay (0-30 seconds)."""
        self._settings.setValue(_KEY_DEMO_SOURCE_DELAY, self._clamp_delay(seconds))

    def get_source_fails(self) -> bool:
        """Return whether the simulated source fetch fails (default False)."""
        return bool(self._settings.value(_KEY_DEMO_SOURCE_FAILS, False, bool))

    def set_source_fails(self, fails: bool) -> None:
        """Enable or disable simulated source failures."""
        self._settings.setValue(_KEY_DEMO_SOURCE_FAILS, fails)

    def _get_delay(self, key: str, default: float) -> float:
        value = self._settings.value(key, default, float)
        try:
            return self._clamp_delay(float(value))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            logger.warning("Invalid value for %s: %r, using %.1f", key, value, default)
            return default

    @staticmethod
    def _clamp_delay(seconds: float) -> float:
        return max(0.0, min(_MAX_DELAY, float(seconds)))

    # -- General settings ------------------------------------------------------

    def clear(self) -> None:
        """Clear all settings (useful for testing or reset)."""
        self._settings.clear()

    def sync(self) -> None:
        """Force settings to be written to disk."""
        self._settings.sync()
