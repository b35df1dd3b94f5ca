"""Configuration models and helpers for the interval engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Optional

from .models import CATEGORY_LONG_BREAK, CATEGORY_POMODORO, CATEGORY_SHORT_BREAK

if TYPE_CHECKING:
    from .repository import Repository


DEFAULT_POMODORO = timedelta(minutes=25)
DEFAULT_SHORT_BREAK = timedelta(minutes=5)
DEFAULT_LONG_BREAK = timedelta(minutes=15)


@dataclass(frozen=True, slots=True)
class IntervalConfig:
    """Process-wide, read-only settings shared by every interval loop."""

    repo: "Repository"
    pomodoro_duration: timedelta = DEFAULT_POMODORO
    short_break_duration: timedelta = DEFAULT_SHORT_BREAK
    long_break_duration: timedelta = DEFAULT_LONG_BREAK

    @classmethod
    def from_durations(
        cls,
        repo: "Repository",
        pomodoro: Optional[timedelta] = None,
        short_break: Optional[timedelta] = None,
        long_break: Optional[timedelta] = None,
    ) -> "IntervalConfig":
        """Build a config, keeping the defaults for missing or non-positive values.

        Durations are rounded to whole seconds.
        """
        return cls(
            repo=repo,
            pomodoro_duration=_positive_or(pomodoro, DEFAULT_POMODORO),
            short_break_duration=_positive_or(short_break, DEFAULT_SHORT_BREAK),
            long_break_duration=_positive_or(long_break, DEFAULT_LONG_BREAK),
        )

    @classmethod
    def from_minutes(
        cls,
        repo: "Repository",
        pomodoro_minutes: float | None = None,
        short_break_minutes: float | None = None,
        long_break_minutes: float | None = None,
    ) -> "IntervalConfig":
        return cls.from_durations(
            repo,
            pomodoro=_minutes(pomodoro_minutes),
            short_break=_minutes(short_break_minutes),
            long_break=_minutes(long_break_minutes),
        )

    def duration_for(self, category: str) -> timedelta:
        if category == CATEGORY_POMODORO:
            return self.pomodoro_duration
        if category == CATEGORY_SHORT_BREAK:
            return self.short_break_duration
        if category == CATEGORY_LONG_BREAK:
            return self.long_break_duration
        raise ValueError(f"Unknown interval category: {category!r}")


def _positive_or(value: Optional[timedelta], default: timedelta) -> timedelta:
    # Elapsed time advances in whole-second ticks and is stored as seconds.
    if value is not None:
        value = timedelta(seconds=round(value.total_seconds()))
        if value > timedelta(0):
            return value
    return default


def _minutes(value: float | None) -> Optional[timedelta]:
    return timedelta(minutes=value) if value is not None else None
