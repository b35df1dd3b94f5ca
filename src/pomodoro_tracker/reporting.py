"""Simple reporting utilities for CLI output."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from .models import (
    CATEGORY_POMODORO,
    STATE_CANCELLED,
    STATE_DONE,
    Interval,
)


@dataclass(slots=True)
class DailySummary:
    """Totals over the intervals started on one day."""

    completed_pomodoros: int = 0
    cancelled: int = 0
    focus_seconds: float = 0.0
    break_seconds: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "completed_pomodoros": self.completed_pomodoros,
            "cancelled": self.cancelled,
            "focus_seconds": self.focus_seconds,
            "break_seconds": self.break_seconds,
        }


def summarize(intervals: Iterable[Interval]) -> DailySummary:
    summary = DailySummary()
    for interval in intervals:
        seconds = interval.actual_duration.total_seconds()
        if interval.category == CATEGORY_POMODORO:
            summary.focus_seconds += seconds
            if interval.state == STATE_DONE:
                summary.completed_pomodoros += 1
        else:
            summary.break_seconds += seconds
        if interval.state == STATE_CANCELLED:
            summary.cancelled += 1
    return summary


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def __init__(self, repo) -> None:
        self.repo = repo

    def print_daily_summary(self, day: datetime) -> None:
        intervals = self.repo.intervals_for_day(day)
        if not intervals:
            print("No intervals recorded for the selected day.")
            return

        summary = summarize(intervals)
        print(f"Summary for {day.strftime('%Y-%m-%d')}")
        print("-" * 40)
        print(f"Pomodoros done: {summary.completed_pomodoros}")
        print(f"Focus time:     {format_duration(summary.focus_seconds)}")
        print(f"Break time:     {format_duration(summary.break_seconds)}")
        print(f"Cancelled:      {summary.cancelled}")
        print()
        print("Intervals:")
        for interval in intervals:
            print(
                f"  {interval.start_time.strftime('%H:%M')} "
                f"{interval.category:<12} {interval.state_name:<10} "
                f"{format_duration(interval.actual_duration.total_seconds())}"
                f" / {format_duration(interval.planned_duration.total_seconds())}"
            )


def format_duration(seconds: float) -> str:
    total_seconds = int(round(seconds))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_remaining(interval: Interval) -> str:
    remaining = max(interval.remaining, timedelta(0))
    return format_duration(remaining.total_seconds())
