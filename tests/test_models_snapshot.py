"""Tests for the Snapshot model and display mode selection."""

import pytest

from cachedfeed.models.snapshot import DisplayMode, Snapshot, display_mode_for


class TestSnapshotConstruction:
    """Test Snapshot validation."""

    def test_fetching_without_data(self) -> None:
        """Test the very first snapshot of a fresh feed."""
        snapshot = Snapshot(is_fetching=True)
        assert snapshot.is_fetching
        assert snapshot.data is None
        assert snapshot.error is None
        assert not snapshot.has_data
        assert not snapshot.has_error

    def test_fetching_with_error_rejected(self) -> None:
        """Test that an in-flight snapshot cannot carry an error."""
        with pytest.raises(ValueError, match="fetching"):
            Snapshot(is_fetching=True, error=RuntimeError("boom"))

    def test_is_fetching_is_required(self) -> None:
        """Test that is_fetching has no default."""
        with pytest.raises(TypeError):
            Snapshot()  # type: ignore[call-arg]

    def test_is_fetching_must_be_bool(self) -> None:
        """Test that a None is_fetching is rejected."""
        with pytest.raises(TypeError, match="is_fetching"):
            Snapshot(is_fetching=None)  # type: ignore[arg-type]

    def test_data_and_error_together(self) -> None:
        """Test stale data shown alongside a source failure."""
        error = ConnectionError("offline")
        snapshot = Snapshot(is_fetching=False, data=("a",), error=error)
        assert snapshot.has_data
        assert snapshot.has_error
        assert snapshot.error is error

    def test_list_data_frozen_to_tuple(self) -> None:
        """Test that list data is stored as a tuple."""
        items = ["a", "b"]
        snapshot = Snapshot(is_fetching=False, data=items)  # type: ignore[arg-type]
        items.append("c")
        assert snapshot.data == ("a", "b")

    def test_non_sequence_data_rejected(self) -> None:
        """Test that data must be a sequence."""
        with pytest.raises(TypeError, match="sequence"):
            Snapshot(is_fetching=False, data=42)  # type: ignore[arg-type]

    def test_empty_data_is_still_data(self) -> None:
        """Test that an empty result counts as data."""
        snapshot = Snapshot(is_fetching=False, data=())
        assert snapshot.has_data
        assert snapshot.item_count == 0

    def test_immutable(self) -> None:
        """Test that snapshots cannot be modified."""
        snapshot = Snapshot(is_fetching=True)
        with pytest.raises(AttributeError):
            snapshot.is_fetching = False  # type: ignore[misc]

    def test_equality(self) -> None:
        """Test structural equality of snapshots."""
        assert Snapshot(is_fetching=False, data=["x"]) == Snapshot(  # type: ignore[arg-type]
            is_fetching=False, data=("x",)
        )
        assert Snapshot(is_fetching=False, data=("x",)) != Snapshot(is_fetching=True, data=("x",))

    def test_item_count(self) -> None:
        """Test item_count property."""
        assert Snapshot(is_fetching=True).item_count == 0
        assert Snapshot(is_fetching=True, data=(1, 2, 3)).item_count == 3


class TestDisplayMode:
    """Test display mode selection."""

    def test_nothing_emitted_yet(self) -> None:
        """Test loader before the first snapshot."""
        assert display_mode_for(None) == DisplayMode.LOADING

    def test_fetching_without_data(self) -> None:
        """Test loader while nothing is known."""
        assert Snapshot(is_fetching=True).display_mode == DisplayMode.LOADING

    def test_fetching_with_cached_data(self) -> None:
        """Test cached items are shown while fetching."""
        assert Snapshot(is_fetching=True, data=("a",)).display_mode == DisplayMode.ITEMS

    def test_done_successfully(self) -> None:
        """Test fresh items are shown."""
        assert Snapshot(is_fetching=False, data=("a",)).display_mode == DisplayMode.ITEMS

    def test_error_with_stale_data(self) -> None:
        """Test error banner above stale items."""
        snapshot = Snapshot(is_fetching=False, data=("a",), error=OSError())
        assert snapshot.display_mode == DisplayMode.ITEMS_WITH_ERROR

    def test_error_without_data(self) -> None:
        """Test full-screen error when nothing can be shown."""
        snapshot = Snapshot(is_fetching=False, error=OSError())
        assert snapshot.display_mode == DisplayMode.ERROR
