"""Tests for FeedStore with Qt signals."""

import pytest
from pytestqt.qtbot import QtBot

from cachedfeed.core.state import FeedStore
from cachedfeed.models.snapshot import DisplayMode, Snapshot


@pytest.fixture
def store() -> FeedStore:
    """Return a fresh FeedStore for each test."""
    return FeedStore()


class TestFeedStoreBasics:
    """Test basic FeedStore functionality."""

    def test_initial_state(self, store: FeedStore) -> None:
        """Test that FeedStore starts with no snapshot."""
        assert store.snapshot is None
        assert not store.is_loading
        assert store.items == ()
        assert store.error is None
        assert store.display_mode == DisplayMode.LOADING

    def test_apply_snapshot(self, store: FeedStore) -> None:
        """Test properties follow the latest snapshot."""
        error = OSError("down")
        store.apply_snapshot(Snapshot(is_fetching=False, data=("a", "b"), error=error))

        assert not store.is_loading
        assert store.items == ("a", "b")
        assert store.error is error
        assert store.display_mode == DisplayMode.ITEMS_WITH_ERROR


class TestFeedStoreSignals:
    """Test Qt signal emission."""

    def test_snapshot_changed_always_emitted(self, qtbot: QtBot, store: FeedStore) -> None:
        """Test every applied snapshot is re-emitted."""
        snapshot = Snapshot(is_fetching=True)
        with qtbot.wait_signal(store.snapshot_changed, timeout=100) as blocker:
            store.apply_snapshot(snapshot)
        assert blocker.args == [snapshot]

    def test_loading_changed(self, qtbot: QtBot, store: FeedStore) -> None:
        """Test loading state transitions."""
        with qtbot.wait_signal(store.loading_changed, timeout=100) as blocker:
            store.apply_snapshot(Snapshot(is_fetching=True))
        assert blocker.args == [True]

        with qtbot.wait_signal(store.loading_changed, timeout=100) as blocker:
            store.apply_snapshot(Snapshot(is_fetching=False, data=("a",)))
        assert blocker.args == [False]

    def test_loading_not_emitted_when_unchanged(self, qtbot: QtBot, store: FeedStore) -> None:
        """Test a cache update while fetching does not re-emit loading."""
        store.apply_snapshot(Snapshot(is_fetching=True))
        with qtbot.assert_not_emitted(store.loading_changed):
            store.apply_snapshot(Snapshot(is_fetching=True, data=("cached",)))

    def test_data_changed(self, qtbot: QtBot, store: FeedStore) -> None:
        """Test new items are emitted."""
        store.apply_snapshot(Snapshot(is_fetching=True))
        with qtbot.wait_signal(store.data_changed, timeout=100) as blocker:
            store.apply_snapshot(Snapshot(is_fetching=True, data=("cached",)))
        assert blocker.args == [("cached",)]

    def test_data_not_emitted_for_same_items(self, qtbot: QtBot, store: FeedStore) -> None:
        """Test identical items do not trigger a redraw."""
        store.apply_snapshot(Snapshot(is_fetching=True, data=("a",)))
        with qtbot.assert_not_emitted(store.data_changed):
            store.apply_snapshot(Snapshot(is_fetching=False, data=("a",)))

    def test_error_changed(self, qtbot: QtBot, store: FeedStore) -> None:
        """Test a source error is emitted."""
        store.apply_snapshot(Snapshot(is_fetching=True, data=("a",)))
        error = ConnectionError("offline")
        with qtbot.wait_signal(store.error_changed, timeout=100) as blocker:
            store.apply_snapshot(Snapshot(is_fetching=False, data=("a",), error=error))
        assert blocker.args == [error]

    def test_display_mode_changed(self, qtbot: QtBot, store: FeedStore) -> None:
        """Test display mode transitions from loader to items."""
        store.apply_snapshot(Snapshot(is_fetching=True))
        with qtbot.wait_signal(store.display_mode_changed, timeout=100) as blocker:
            store.apply_snapshot(Snapshot(is_fetching=True, data=("a",)))
        assert blocker.args == [DisplayMode.ITEMS]

    def test_display_mode_error_screen(self, qtbot: QtBot, store: FeedStore) -> None:
        """Test switching to the full-screen error."""
        store.apply_snapshot(Snapshot(is_fetching=True))
        with qtbot.wait_signal(store.display_mode_changed, timeout=100) as blocker:
            store.apply_snapshot(Snapshot(is_fetching=False, error=OSError()))
        assert blocker.args == [DisplayMode.ERROR]


class TestFeedStoreClear:
    """Test clearing the store."""

    def test_clear_resets(self, qtbot: QtBot, store: FeedStore) -> None:
        """Test clear returns to the loader."""
        store.apply_snapshot(Snapshot(is_fetching=False, data=("a",)))
        with qtbot.wait_signal(store.display_mode_changed, timeout=100) as blocker:
            store.clear()
        assert blocker.args == [DisplayMode.LOADING]
        assert store.snapshot is None
        assert store.items == ()

    def test_clear_empty_store(self, qtbot: QtBot, store: FeedStore) -> None:
        """Test clearing an empty store emits nothing."""
        with qtbot.assert_not_emitted(store.display_mode_changed):
            store.clear()
