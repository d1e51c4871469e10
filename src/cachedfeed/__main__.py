"""Command-line demo: run refresh cycles against a simulated feed."""

import argparse
import logging
import sys

from PySide6.QtCore import QCoreApplication

from cachedfeed.core.config import LOG_LEVELS, ConfigManager
from cachedfeed.core.state import FeedStore
from cachedfeed.core.worker import FeedWorker
from cachedfeed.models.snapshot import Snapshot
from cachedfeed.sample import SimulatedFeed

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser(config: ConfigManager) -> argparse.ArgumentParser:
    """Build the argument parser with defaults from saved settings."""
    parser = argparse.ArgumentParser(
        prog="cachedfeed",
        description="Race a simulated cache against a simulated source",
    )
    parser.add_argument(
        "--cycles", type=int, default=2, help="number of refresh cycles (default: 2)",
    )
    parser.add_argument(
        "--cache-delay", type=float, default=config.get_cache_delay(),
        help="seconds a cache read takes",
    )
    parser.add_argument(
        "--source-delay", type=float, default=config.get_source_delay(),
        help="seconds a source fetch takes",
    )
    parser.add_argument(
        "--fail-source", action="store_true", default=config.get_source_fails(),
        help="make every source fetch fail",
    )
    parser.add_argument(
        "--cached", nargs="*", default=None, metavar="ITEM",
        help="items to seed the cache with",
    )
    parser.add_argument(
        "--log-level", choices=LOG_LEVELS, default=config.get_log_level(),
    )
    return parser


def describe(snapshot: Snapshot[object]) -> str:
    """Return a one-line description of a snapshot."""
    state = "fetching" if snapshot.is_fetching else "done"
    items = "no data" if snapshot.data is None else f"{snapshot.item_count} items"
    error = f", error: {snapshot.error}" if snapshot.has_error else ""
    return f"[{state}] {items}{error} -> {snapshot.display_mode.value}"


def main(argv: list[str] | None = None) -> int:
    """Run the demo.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, 1 if the last cycle ended with an error).
    """
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    config = ConfigManager()
    args = build_parser(config).parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format=_LOG_FORMAT)

    feed = SimulatedFeed(
        cache_delay=args.cache_delay,
        source_delay=args.source_delay,
        source_fails=args.fail_source,
        cached=args.cached,
    )
    store = FeedStore()
    worker = FeedWorker(
        feed.fetch_source,
        feed.write_cache,
        feed.read_cache,
        queue_size=config.get_queue_size(),
    )

    remaining = max(1, args.cycles)

    def on_snapshot(snapshot: object) -> None:
        if isinstance(snapshot, Snapshot):
            logger.info("Snapshot %s", describe(snapshot))
            store.apply_snapshot(snapshot)

    def on_fetch_finished() -> None:
        nonlocal remaining
        remaining -= 1
        if remaining > 0:
            worker.request_fetch()
        else:
            worker.stop()

    worker.snapshot_received.connect(on_snapshot)
    worker.ready.connect(worker.request_fetch)
    worker.fetch_finished.connect(on_fetch_finished)
    worker.stopped.connect(app.quit)

    worker.start()
    app.exec()
    worker.wait()

    logger.info("Cache now holds: %s", feed.cached)
    return 1 if store.error is not None else 0


if __name__ == "__main__":
    sys.exit(main())
