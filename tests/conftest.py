"""Test fixtures for cachedfeed tests."""

import os
from typing import Any

import pytest

# Run Qt headless when no display is available.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from cachedfeed.models.snapshot import Snapshot


@pytest.fixture
def snapshots() -> list[Snapshot[Any]]:
    """Return a list to record published snapshots into."""
    return []
