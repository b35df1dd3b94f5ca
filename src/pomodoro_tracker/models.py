"""Domain models for Pomodoro intervals."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

# Categories of interval: the focus block plus the two kinds of break.
CATEGORY_POMODORO = "Pomodoro"
CATEGORY_SHORT_BREAK = "ShortBreak"
CATEGORY_LONG_BREAK = "LongBreak"

CATEGORIES = (CATEGORY_POMODORO, CATEGORY_SHORT_BREAK, CATEGORY_LONG_BREAK)
BREAK_CATEGORIES = (CATEGORY_SHORT_BREAK, CATEGORY_LONG_BREAK)

# Interval states. Only STATE_RUNNING means the clock is ticking.
STATE_NOT_STARTED = 0
STATE_RUNNING = 1
STATE_PAUSED = 2
STATE_DONE = 3
STATE_CANCELLED = 4

STATE_NAMES = {
    STATE_NOT_STARTED: "NotStarted",
    STATE_RUNNING: "Running",
    STATE_PAUSED: "Paused",
    STATE_DONE: "Done",
    STATE_CANCELLED: "Cancelled",
}

TERMINAL_STATES = (STATE_DONE, STATE_CANCELLED)


@dataclass(slots=True)
class Interval:
    """A single timed block of focus work or break.

    ``id`` is zero until the repository assigns one on creation.
    ``actual_duration`` grows one second per tick while running.
    """

    category: str
    planned_duration: timedelta
    start_time: datetime = field(default_factory=datetime.now)
    actual_duration: timedelta = timedelta(0)
    state: int = STATE_NOT_STARTED
    id: int = 0

    @property
    def remaining(self) -> timedelta:
        return self.planned_duration - self.actual_duration

    @property
    def is_break(self) -> bool:
        return self.category in BREAK_CATEGORIES

    @property
    def is_finished(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def state_name(self) -> str:
        return STATE_NAMES.get(self.state, f"Unknown({self.state})")
