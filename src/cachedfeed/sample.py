"""Simulated collaborators for trying out a FetchCoordinator.

SimulatedFeed stands in for a real API and on-disk cache: every call
sleeps for a configurable delay and the source can be told to fail.
"""

import asyncio
import logging
from collections.abc import Sequence

logger = logging.getLogger(__name__)


class SourceUnavailableError(ConnectionError):
    """Raised by the simulated source when failure injection is on."""


class SimulatedFeed:
    """In-memory cache plus a fake remote source.

    Example:
        feed = SimulatedFeed(cache_delay=0.1, source_delay=1.0)
        coordinator = FetchCoordinator(feed.fetch_source, feed.write_cache, feed.read_cache)
    """

    def __init__(
        self,
        cache_delay: float = 0.2,
        source_delay: float = 1.0,
        source_fails: bool = False,
        cached: Sequence[str] | None = None,
    ) -> None:
        """Initialize the simulated feed.

        Args:
            cache_delay: Seconds a cache read takes.
            source_delay: Seconds a source fetch takes.
            source_fails: Whether source fetches raise.
            cached: Initial cache contents (None for an empty cache).
        """
        self.cache_delay = cache_delay
        self.source_delay = source_delay
        self.source_fails = source_fails
        self._cache: list[str] | None = list(cached) if cached is not None else None
        self._revision = 0

    @property
    def cached(self) -> list[str] | None:
        """Return current cache contents."""
        return list(self._cache) if self._cache is not None else None

    async def read_cache(self) -> list[str]:
        """Return cached items.

        Raises:
            LookupError: If nothing was cached yet.
        """
        await asyncio.sleep(self.cache_delay)
        if self._cache is None:
            raise LookupError("cache is empty")
        return list(self._cache)

    async def fetch_source(self) -> list[str]:
        """Return a fresh set of items.

        Raises:
            SourceUnavailableError: If failure injection is on.
        """
        await asyncio.sleep(self.source_delay)
        if self.source_fails:
            raise SourceUnavailableError("source unavailable")
        self._revision += 1
        return [f"item {i} (rev {self._revision})" for i in range(1, 4)]

    async def write_cache(self, items: Sequence[str]) -> None:
        """Replace cache contents."""
        await asyncio.sleep(self.cache_delay)
        self._cache = list(items)
        logger.debug("Cached %d items", len(items))
