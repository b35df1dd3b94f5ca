"""Run the interval tick loop in a background thread."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .config import IntervalConfig
from .engine import Callback, SystemClock, get_interval, start_interval
from .models import STATE_DONE, Interval

logger = logging.getLogger(__name__)


def _ignore(interval: Interval) -> None:
    return None


class IntervalRunner:
    """Own the single tick loop of this process.

    ``start`` resumes the unfinished interval (or creates the next one) and
    ticks it in a daemon thread; ``stop`` cancels it through the stop event.
    With ``count`` > 1 the thread moves on to the next interval each time one
    completes, and ends early on a pause or cancellation.
    """

    def __init__(self, config: IntervalConfig, clock: Optional[SystemClock] = None) -> None:
        self._config = config
        self._clock = clock
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._current_id: Optional[int] = None
        self.last_error: Optional[BaseException] = None

    def start(
        self,
        on_start: Callback = _ignore,
        on_tick: Callback = _ignore,
        on_end: Callback = _ignore,
        count: int = 1,
    ) -> Interval:
        with self._lock:
            if self._thread and self._thread.is_alive() and self._current_id is not None:
                return self._config.repo.by_id(self._current_id)
            interval = get_interval(self._config)
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run_intervals,
                args=(interval, (on_start, on_tick, on_end), stop_event, count),
                daemon=True,
            )
            self._thread = thread
            self._stop_event = stop_event
            self._current_id = interval.id
            self.last_error = None
            thread.start()
            logger.info("Interval thread started for interval %d.", interval.id)
            return interval

    def stop(self, timeout: float = 10) -> None:
        thread: Optional[threading.Thread] = None
        with self._lock:
            if not self._thread or not self._thread.is_alive() or not self._stop_event:
                return
            self._stop_event.set()
            thread = self._thread
            self._thread = None
            self._stop_event = None
        if thread:
            thread.join(timeout=timeout)
            logger.info("Interval thread stopped.")

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the loop thread; return True once it has finished."""
        with self._lock:
            thread = self._thread
        if thread is None:
            return True
        thread.join(timeout=timeout)
        return not thread.is_alive()

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive())

    @property
    def current_interval_id(self) -> Optional[int]:
        with self._lock:
            return self._current_id

    def _run_intervals(
        self,
        interval: Interval,
        callbacks: tuple[Callback, Callback, Callback],
        stop_event: threading.Event,
        count: int,
    ) -> None:
        on_start, on_tick, on_end = callbacks
        try:
            for remaining in range(count, 0, -1):
                start_interval(
                    interval,
                    self._config,
                    on_start,
                    on_tick,
                    on_end,
                    stop_event,
                    self._clock,
                )
                finished = self._config.repo.by_id(interval.id)
                if finished.state != STATE_DONE or remaining == 1:
                    return
                interval = get_interval(self._config)
                with self._lock:
                    self._current_id = interval.id
        except Exception as exc:
            logger.exception("Interval loop for interval %d failed.", interval.id)
            self.last_error = exc
