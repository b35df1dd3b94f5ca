"""Tests for daily summaries and duration formatting."""

from __future__ import annotations

from datetime import datetime, timedelta

from pomodoro_tracker.db import SQLiteRepository
from pomodoro_tracker.models import (
    CATEGORY_LONG_BREAK,
    CATEGORY_POMODORO,
    CATEGORY_SHORT_BREAK,
    STATE_CANCELLED,
    STATE_DONE,
    Interval,
)
from pomodoro_tracker.reporting import (
    SummaryPrinter,
    format_duration,
    format_remaining,
    summarize,
)


def _interval(category: str, state: int, actual_minutes: int) -> Interval:
    return Interval(
        category=category,
        planned_duration=timedelta(minutes=25),
        actual_duration=timedelta(minutes=actual_minutes),
        start_time=datetime(2024, 5, 1, 9, 0),
        state=state,
    )


def test_summarize_splits_focus_and_breaks() -> None:
    summary = summarize(
        [
            _interval(CATEGORY_POMODORO, STATE_DONE, 25),
            _interval(CATEGORY_SHORT_BREAK, STATE_DONE, 5),
            _interval(CATEGORY_POMODORO, STATE_CANCELLED, 10),
            _interval(CATEGORY_LONG_BREAK, STATE_DONE, 15),
        ]
    )

    assert summary.completed_pomodoros == 1
    assert summary.cancelled == 1
    assert summary.focus_seconds == 35 * 60
    assert summary.break_seconds == 20 * 60


def test_format_duration() -> None:
    assert format_duration(0) == "00:00:00"
    assert format_duration(3725.4) == "01:02:05"


def test_format_remaining_never_negative() -> None:
    interval = _interval(CATEGORY_POMODORO, STATE_DONE, 30)

    assert format_remaining(interval) == "00:00:00"


def test_print_daily_summary(tmp_path, capsys) -> None:
    repo = SQLiteRepository(tmp_path / "intervals.sqlite3")
    repo.create(_interval(CATEGORY_POMODORO, STATE_DONE, 25))

    SummaryPrinter(repo).print_daily_summary(datetime(2024, 5, 1))

    out = capsys.readouterr().out
    assert "Summary for 2024-05-01" in out
    assert "Pomodoros done: 1" in out
    assert "Focus time:     00:25:00" in out


def test_print_daily_summary_without_intervals(tmp_path, capsys) -> None:
    SummaryPrinter(SQLiteRepository(tmp_path / "intervals.sqlite3")).print_daily_summary(
        datetime(2024, 5, 1)
    )

    assert "No intervals recorded" in capsys.readouterr().out
