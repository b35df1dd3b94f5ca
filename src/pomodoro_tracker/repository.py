"""Repository contract for interval storage plus an in-memory implementation."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Protocol

from .errors import InvalidIDError, NoIntervalsError
from .models import Interval


class Repository(Protocol):
    """Storage consulted and mutated by the interval engine."""

    def create(self, interval: Interval) -> int:
        """Store a new interval and return its freshly assigned id."""
        ...

    def update(self, interval: Interval) -> None:
        """Overwrite the stored interval with ``interval.id``."""
        ...

    def by_id(self, interval_id: int) -> Interval:
        ...

    def last(self) -> Interval:
        """Return the most recently created interval."""
        ...

    def breaks(self, n: int) -> list[Interval]:
        """Return up to ``n`` of the most recent break intervals, newest first."""
        ...


class InMemoryRepository:
    """Keeps intervals in a list; ids are list positions starting at 1."""

    def __init__(self) -> None:
        self._intervals: list[Interval] = []
        self._lock = threading.Lock()

    def create(self, interval: Interval) -> int:
        with self._lock:
            interval_id = len(self._intervals) + 1
            self._intervals.append(replace(interval, id=interval_id))
            return interval_id

    def update(self, interval: Interval) -> None:
        with self._lock:
            index = self._index(interval.id)
            self._intervals[index] = replace(interval)

    def by_id(self, interval_id: int) -> Interval:
        with self._lock:
            return replace(self._intervals[self._index(interval_id)])

    def last(self) -> Interval:
        with self._lock:
            if not self._intervals:
                raise NoIntervalsError()
            return replace(self._intervals[-1])

    def breaks(self, n: int) -> list[Interval]:
        with self._lock:
            found: list[Interval] = []
            for interval in reversed(self._intervals):
                if len(found) >= n:
                    break
                if interval.is_break:
                    found.append(replace(interval))
            return found

    def _index(self, interval_id: int) -> int:
        if interval_id < 1 or interval_id > len(self._intervals):
            raise InvalidIDError(interval_id)
        return interval_id - 1
