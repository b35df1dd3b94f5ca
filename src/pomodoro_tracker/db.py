"""SQLite database layer for intervals."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterator

from .errors import InvalidIDError, NoIntervalsError, RepositoryError
from .models import BREAK_CATEGORIES, Interval


DATETIME_FMT = "%Y-%m-%d %H:%M:%S.%f"

_COLUMNS = "id, start_time, planned_seconds, actual_seconds, category, state"


def open_database(path: Path, *, check_same_thread: bool = True) -> sqlite3.Connection:
    """Open (and initialize) the SQLite database."""
    conn = sqlite3.connect(
        path,
        isolation_level=None,
        check_same_thread=check_same_thread,
    )
    conn.row_factory = sqlite3.Row
    initialize_schema(conn)
    return conn


@contextmanager
def database_connection(
    path: Path, *, check_same_thread: bool = True
) -> Iterator[sqlite3.Connection]:
    conn = open_database(path, check_same_thread=check_same_thread)
    try:
        yield conn
    finally:
        conn.close()


def initialize_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS intervals (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            start_time TEXT NOT NULL,
            planned_seconds INTEGER NOT NULL,
            actual_seconds INTEGER NOT NULL DEFAULT 0,
            category TEXT NOT NULL,
            state INTEGER NOT NULL DEFAULT 0
        );

        CREATE INDEX IF NOT EXISTS idx_intervals_start_time
            ON intervals(start_time);
        """
    )


def row_to_interval(row: sqlite3.Row) -> Interval:
    return Interval(
        id=row["id"],
        start_time=datetime.strptime(row["start_time"], DATETIME_FMT),
        planned_duration=timedelta(seconds=row["planned_seconds"]),
        actual_duration=timedelta(seconds=row["actual_seconds"]),
        category=row["category"],
        state=row["state"],
    )


class SQLiteRepository:
    """Interval repository backed by a SQLite file.

    Every call opens its own short-lived connection, so a ticking loop in a
    background thread and request handlers can share one instance.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        with self._connect():
            pass

    def create(self, interval: Interval) -> int:
        with self._connect() as conn:
            cur = conn.execute(
                """
                INSERT INTO intervals (
                    start_time,
                    planned_seconds,
                    actual_seconds,
                    category,
                    state
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    interval.start_time.strftime(DATETIME_FMT),
                    _seconds(interval.planned_duration),
                    _seconds(interval.actual_duration),
                    interval.category,
                    interval.state,
                ),
            )
            return int(cur.lastrowid)

    def update(self, interval: Interval) -> None:
        with self._connect() as conn:
            cur = conn.execute(
                """
                UPDATE intervals
                SET start_time = ?, planned_seconds = ?, actual_seconds = ?,
                    category = ?, state = ?
                WHERE id = ?
                """,
                (
                    interval.start_time.strftime(DATETIME_FMT),
                    _seconds(interval.planned_duration),
                    _seconds(interval.actual_duration),
                    interval.category,
                    interval.state,
                    interval.id,
                ),
            )
            if cur.rowcount == 0:
                raise InvalidIDError(interval.id)

    def by_id(self, interval_id: int) -> Interval:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM intervals WHERE id = ?", (interval_id,)
            ).fetchone()
        if row is None:
            raise InvalidIDError(interval_id)
        return row_to_interval(row)

    def last(self) -> Interval:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM intervals ORDER BY id DESC LIMIT 1"
            ).fetchone()
        if row is None:
            raise NoIntervalsError()
        return row_to_interval(row)

    def breaks(self, n: int) -> list[Interval]:
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT {_COLUMNS}
                FROM intervals
                WHERE category IN (?, ?)
                ORDER BY id DESC
                LIMIT ?
                """,
                (*BREAK_CATEGORIES, n),
            ).fetchall()
        return [row_to_interval(row) for row in rows]

    def intervals_for_day(self, day: datetime) -> list[Interval]:
        """Fetch the intervals started on the provided day, oldest first."""
        start = day.replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1)
        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT {_COLUMNS}
                FROM intervals
                WHERE start_time >= ? AND start_time < ?
                ORDER BY id;
                """,
                (start.strftime(DATETIME_FMT), end.strftime(DATETIME_FMT)),
            ).fetchall()
        return [row_to_interval(row) for row in rows]

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            with database_connection(self.db_path) as conn:
                yield conn
        except sqlite3.Error as exc:
            raise RepositoryError(f"SQLite failure on {self.db_path}: {exc}") from exc


def _seconds(value: timedelta) -> int:
    return round(value.total_seconds())
