"""Shared fixtures: a store on a temporary data directory with a pinned clock."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from budget_tracker.storage import StateStorage
from budget_tracker.store import BudgetStore

NOW = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)


class Clock:
    """Settable clock so tests can move "now" between months."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def storage(tmp_path) -> StateStorage:
    return StateStorage(tmp_path / "data")


@pytest.fixture
def store(storage, clock) -> BudgetStore:
    return BudgetStore(storage, clock=clock)
