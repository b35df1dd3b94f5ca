"""Shared test fixtures: repositories and a fast-forwarding clock."""

from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from pomodoro_tracker.config import IntervalConfig
from pomodoro_tracker.db import SQLiteRepository
from pomodoro_tracker.models import Interval
from pomodoro_tracker.repository import InMemoryRepository


class FakeClock:
    """Clock whose waits return immediately after advancing virtual time."""

    def __init__(self) -> None:
        self.now = 0.0

    def monotonic(self) -> float:
        return self.now

    def wait(self, stop_event: threading.Event, timeout: float) -> bool:
        if stop_event.is_set():
            return True
        self.now += max(timeout, 0.0)
        return False


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path):
    """Run each repository-facing test against both storage backends."""
    if request.param == "memory":
        return InMemoryRepository()
    return SQLiteRepository(tmp_path / "intervals.sqlite3")


@pytest.fixture()
def config(repo) -> IntervalConfig:
    return IntervalConfig.from_durations(
        repo,
        pomodoro=timedelta(seconds=3),
        short_break=timedelta(seconds=2),
        long_break=timedelta(seconds=4),
    )


@pytest.fixture()
def add_history(repo):
    """Store intervals given as (category, state) pairs, oldest first."""

    def _add(*specs: tuple[str, int]) -> list[Interval]:
        stored = []
        for category, state in specs:
            interval = Interval(
                category=category,
                planned_duration=timedelta(minutes=5),
                state=state,
            )
            interval.id = repo.create(interval)
            stored.append(interval)
        return stored

    return _add
