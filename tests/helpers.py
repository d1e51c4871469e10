"""Controllable collaborators and snapshot builders for tests."""

import asyncio
from typing import Any

from cachedfeed.models.snapshot import Snapshot


class Gate:
    """Async collaborator whose calls stay pending until the test settles them.

    Every call gets its own future, so overlapping fetch cycles can be
    resolved independently.
    """

    def __init__(self) -> None:
        self._waiters: list[asyncio.Future[Any]] = []
        self.call_args: list[tuple[Any, ...]] = []

    @property
    def call_count(self) -> int:
        """Return number of calls made so far."""
        return len(self._waiters)

    async def __call__(self, *args: Any) -> Any:
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        self.call_args.append(args)
        return await future

    def resolve(self, value: Any, call: int = -1) -> None:
        """Complete a pending call with a value (latest call by default)."""
        self._waiters[call].set_result(value)

    def fail(self, error: BaseException, call: int = -1) -> None:
        """Complete a pending call with an error (latest call by default)."""
        self._waiters[call].set_exception(error)


async def settle(rounds: int = 10) -> None:
    """Let scheduled tasks run until they block again."""
    for _ in range(rounds):
        await asyncio.sleep(0)


def fetching(*items: Any) -> Snapshot[Any]:
    """Build an in-flight snapshot (no items means no data)."""
    return Snapshot(is_fetching=True, data=items if items else None)


def done(*items: Any, error: BaseException | None = None, empty: bool = False) -> Snapshot[Any]:
    """Build a final snapshot."""
    data = items if items or empty else None
    return Snapshot(is_fetching=False, data=data, error=error)


