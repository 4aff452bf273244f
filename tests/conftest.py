"""Shared fixtures for the activity tracker tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from activity_tracker.store import ActivityLogStore


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / ".activity-tracker" / "activity-log.json"


@pytest.fixture
def store(tmp_path, log_path) -> ActivityLogStore:
    return ActivityLogStore(log_path, export_path=tmp_path / "activity-log.csv")
