"""Exceptions raised by the interval engine and its repositories."""

from __future__ import annotations


class IntervalError(Exception):
    """Base class for every interval lifecycle error."""


class NoIntervalsError(IntervalError):
    """The repository holds no intervals yet."""

    def __init__(self, message: str = "No intervals") -> None:
        super().__init__(message)


class InvalidIDError(IntervalError):
    """No interval is stored under the requested id."""

    def __init__(self, interval_id: int) -> None:
        super().__init__(f"Invalid ID: {interval_id}")
        self.interval_id = interval_id


class InvalidStateError(IntervalError):
    """An interval carries a state value the engine does not know."""


class IntervalNotRunningError(IntervalError):
    """The operation needs a running interval."""


class IntervalCompletedError(IntervalError):
    """The interval is already done or cancelled."""


class RepositoryError(IntervalError):
    """Generic persistence failure."""
