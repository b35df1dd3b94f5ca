"""Contract tests shared by the in-memory and SQLite repositories."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from pomodoro_tracker.db import SQLiteRepository
from pomodoro_tracker.errors import InvalidIDError, NoIntervalsError, RepositoryError
from pomodoro_tracker.models import (
    CATEGORY_LONG_BREAK,
    CATEGORY_POMODORO,
    CATEGORY_SHORT_BREAK,
    STATE_DONE,
    STATE_RUNNING,
    Interval,
)


def _interval(category: str = CATEGORY_POMODORO) -> Interval:
    return Interval(
        category=category,
        planned_duration=timedelta(minutes=25),
        start_time=datetime(2024, 5, 1, 9, 30, 0, 123456),
    )


class TestRepositoryContract:
    def test_create_assigns_increasing_ids(self, repo) -> None:
        first = repo.create(_interval())
        second = repo.create(_interval(CATEGORY_SHORT_BREAK))

        assert first >= 1
        assert second > first

    def test_created_fields_are_stored_verbatim(self, repo) -> None:
        interval = _interval()
        interval_id = repo.create(interval)

        stored = repo.by_id(interval_id)

        assert stored.id == interval_id
        assert stored.start_time == interval.start_time
        assert stored.planned_duration == timedelta(minutes=25)
        assert stored.actual_duration == timedelta(0)
        assert stored.category == CATEGORY_POMODORO

    def test_update_overwrites_record(self, repo) -> None:
        interval = _interval()
        interval.id = repo.create(interval)
        interval.actual_duration = timedelta(seconds=42)
        interval.state = STATE_RUNNING

        repo.update(interval)

        stored = repo.by_id(interval.id)
        assert stored.actual_duration == timedelta(seconds=42)
        assert stored.state == STATE_RUNNING

    def test_update_unknown_id_fails(self, repo) -> None:
        interval = _interval()
        interval.id = 99

        with pytest.raises(InvalidIDError):
            repo.update(interval)

    def test_by_id_unknown_id_fails(self, repo) -> None:
        with pytest.raises(InvalidIDError):
            repo.by_id(7)

    def test_last_on_empty_repository_fails(self, repo) -> None:
        with pytest.raises(NoIntervalsError):
            repo.last()

    def test_last_returns_most_recent(self, repo) -> None:
        repo.create(_interval())
        latest = repo.create(_interval(CATEGORY_SHORT_BREAK))

        assert repo.last().id == latest

    def test_breaks_returns_recent_breaks_newest_first(self, repo) -> None:
        categories = [
            CATEGORY_POMODORO,
            CATEGORY_SHORT_BREAK,
            CATEGORY_POMODORO,
            CATEGORY_LONG_BREAK,
            CATEGORY_POMODORO,
            CATEGORY_SHORT_BREAK,
            CATEGORY_POMODORO,
        ]
        ids = [repo.create(_interval(category)) for category in categories]

        breaks = repo.breaks(2)

        assert [interval.id for interval in breaks] == [ids[5], ids[3]]
        assert len(repo.breaks(10)) == 3

    def test_returned_intervals_are_copies(self, repo) -> None:
        interval_id = repo.create(_interval())
        loaded = repo.by_id(interval_id)
        loaded.state = STATE_DONE

        assert repo.by_id(interval_id).state != STATE_DONE


class TestSQLiteRepository:
    def test_intervals_for_day(self, tmp_path) -> None:
        repo = SQLiteRepository(tmp_path / "intervals.sqlite3")
        today = _interval()
        other_day = _interval()
        other_day.start_time = datetime(2024, 5, 2, 0, 0, 1)
        today_id = repo.create(today)
        repo.create(other_day)

        intervals = repo.intervals_for_day(datetime(2024, 5, 1, 18, 0))

        assert [interval.id for interval in intervals] == [today_id]

    def test_data_survives_reopening(self, tmp_path) -> None:
        path = tmp_path / "intervals.sqlite3"
        interval_id = SQLiteRepository(path).create(_interval())

        assert SQLiteRepository(path).last().id == interval_id

    def test_unusable_path_raises_repository_error(self, tmp_path) -> None:
        with pytest.raises(RepositoryError):
            SQLiteRepository(tmp_path)
