"""Interval lifecycle engine: category rotation, creation and the tick loop."""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timedelta
from typing import Callable, Optional

from .config import IntervalConfig
from .errors import (
    IntervalCompletedError,
    IntervalNotRunningError,
    InvalidStateError,
    NoIntervalsError,
)
from .models import (
    CATEGORY_LONG_BREAK,
    CATEGORY_POMODORO,
    CATEGORY_SHORT_BREAK,
    STATE_CANCELLED,
    STATE_DONE,
    STATE_NOT_STARTED,
    STATE_PAUSED,
    STATE_RUNNING,
    Interval,
)
from .repository import Repository

logger = logging.getLogger(__name__)

Callback = Callable[[Interval], None]

TICK = timedelta(seconds=1)

# Short breaks taken before a long break is due.
BREAKS_BEFORE_LONG_BREAK = 3


class SystemClock:
    """Monotonic time source whose waits can be interrupted by a stop event."""

    def monotonic(self) -> float:
        return time.monotonic()

    def wait(self, stop_event: threading.Event, timeout: float) -> bool:
        """Sleep up to ``timeout`` seconds; return True if the event was set."""
        return stop_event.wait(max(timeout, 0.0))


def next_category(repo: Repository) -> str:
    """Decide the category of the interval that follows the stored history."""
    try:
        last = repo.last()
    except NoIntervalsError:
        return CATEGORY_POMODORO

    if last.is_break:
        return CATEGORY_POMODORO

    last_breaks = repo.breaks(BREAKS_BEFORE_LONG_BREAK)
    if len(last_breaks) < BREAKS_BEFORE_LONG_BREAK:
        return CATEGORY_SHORT_BREAK

    for interval in last_breaks:
        if interval.category == CATEGORY_LONG_BREAK:
            return CATEGORY_SHORT_BREAK

    return CATEGORY_LONG_BREAK


def new_interval(config: IntervalConfig) -> Interval:
    """Create and persist a fresh interval for the next category in rotation."""
    category = next_category(config.repo)
    interval = Interval(
        category=category,
        planned_duration=config.duration_for(category),
        start_time=datetime.now(),
    )
    interval.id = config.repo.create(interval)
    logger.info(
        "Created interval %d (%s, %s)",
        interval.id,
        interval.category,
        interval.planned_duration,
    )
    return interval


def get_interval(config: IntervalConfig) -> Interval:
    """Return the unfinished interval to resume, or a new one.

    The latest interval is reused as long as it is not done or cancelled, so
    repeated calls while it is running never create duplicates.
    """
    try:
        last = config.repo.last()
    except NoIntervalsError:
        return new_interval(config)

    if not last.is_finished:
        return last

    return new_interval(config)


def tick(
    interval_id: int,
    config: IntervalConfig,
    start: Callback,
    periodic: Callback,
    end: Callback,
    stop_event: threading.Event,
    clock: Optional[SystemClock] = None,
) -> None:
    """Advance a running interval one second at a time until it ends.

    Returns when the interval expires (state Done, ``end`` called), when
    ``stop_event`` is set (state Cancelled, ``end`` not called) or when a
    pause is found in the repository. A paused, done or cancelled interval
    returns at once without any callback. Repository errors stop the loop and
    propagate. Every wake-up reloads the interval from the repository.
    """
    clock = clock or SystemClock()
    repo = config.repo

    interval = repo.by_id(interval_id)
    if interval.state == STATE_PAUSED or interval.is_finished:
        return

    now = clock.monotonic()
    deadline = now + interval.remaining.total_seconds()
    next_tick = now + TICK.total_seconds()

    start(interval)
    while True:
        if stop_event.is_set() or clock.wait(
            stop_event, min(next_tick, deadline) - clock.monotonic()
        ):
            interval = repo.by_id(interval_id)
            interval.state = STATE_CANCELLED
            repo.update(interval)
            logger.info(
                "Interval %d cancelled after %s", interval_id, interval.actual_duration
            )
            return

        now = clock.monotonic()
        # A tick due at the same instant as the expiry is counted first.
        if now >= next_tick and next_tick <= deadline:
            interval = repo.by_id(interval_id)
            if interval.state == STATE_PAUSED:
                logger.info("Interval %d paused", interval_id)
                return
            interval.actual_duration += TICK
            repo.update(interval)
            logger.debug("Interval %d at %s", interval_id, interval.actual_duration)
            periodic(interval)
            next_tick += TICK.total_seconds()
        elif now >= deadline:
            interval = repo.by_id(interval_id)
            interval.state = STATE_DONE
            end(interval)
            repo.update(interval)
            logger.info("Interval %d done", interval_id)
            return


def start_interval(
    interval: Interval,
    config: IntervalConfig,
    start: Callback,
    periodic: Callback,
    end: Callback,
    stop_event: threading.Event,
    clock: Optional[SystemClock] = None,
) -> None:
    """Mark an interval running and tick it until it stops.

    The decision is taken on the stored record, not on ``interval``, which may
    be stale. An interval already running belongs to another loop and is left
    alone.
    """
    current = config.repo.by_id(interval.id)
    if current.state == STATE_RUNNING:
        logger.info("Interval %d is already running; not starting another loop", current.id)
        return
    if current.state in (STATE_DONE, STATE_CANCELLED):
        raise IntervalCompletedError(
            f"Interval {current.id} is completed or cancelled: cannot start"
        )
    if current.state not in (STATE_NOT_STARTED, STATE_PAUSED):
        raise InvalidStateError(f"Invalid state: {current.state}")

    current.state = STATE_RUNNING
    config.repo.update(current)
    logger.info("Starting interval %d (%s)", current.id, current.category)
    tick(current.id, config, start, periodic, end, stop_event, clock)


def pause_interval(interval: Interval, config: IntervalConfig) -> Interval:
    """Record a pause; a loop ticking this interval returns on its next tick.

    The stored copy is reloaded first so the elapsed time written back is the
    latest one persisted by the loop.
    """
    current = config.repo.by_id(interval.id)
    if current.state != STATE_RUNNING:
        raise IntervalNotRunningError(f"Interval {current.id} is not running")
    current.state = STATE_PAUSED
    config.repo.update(current)
    logger.info("Paused interval %d at %s", current.id, current.actual_duration)
    return current
