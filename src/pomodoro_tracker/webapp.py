"""FastAPI application that exposes a local API for the Pomodoro tracker."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict

from .config import IntervalConfig
from .db import SQLiteRepository
from .engine import pause_interval
from .errors import (
    IntervalError,
    InvalidIDError,
    NoIntervalsError,
    RepositoryError,
)
from .models import Interval
from .paths import get_db_path
from .reporting import summarize
from .runner import IntervalRunner

logger = logging.getLogger(__name__)


class IntervalPayload(BaseModel):
    id: int
    category: str
    state: str
    start_time: datetime
    planned_seconds: float
    actual_seconds: float
    remaining_seconds: float

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_interval(cls, interval: Interval) -> "IntervalPayload":
        return cls(
            id=interval.id,
            category=interval.category,
            state=interval.state_name,
            start_time=interval.start_time,
            planned_seconds=interval.planned_duration.total_seconds(),
            actual_seconds=interval.actual_duration.total_seconds(),
            remaining_seconds=interval.remaining.total_seconds(),
        )


class StartRequest(BaseModel):
    count: int = 1

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    db_path: Optional[Path] = None,
    config: Optional[IntervalConfig] = None,
    runner: Optional[IntervalRunner] = None,
) -> FastAPI:
    """Instantiate the FastAPI application."""
    resolved_config = config or IntervalConfig.from_durations(
        SQLiteRepository(Path(db_path or get_db_path()))
    )
    resolved_runner = runner or IntervalRunner(resolved_config)

    app = FastAPI(title="Pomodoro Tracker", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = resolved_config
    app.state.interval_runner = resolved_runner

    @app.on_event("startup")
    async def _startup() -> None:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        resolved_runner.stop()

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        runner: IntervalRunner = request.app.state.interval_runner
        return {
            "running": runner.is_running(),
            "interval_id": runner.current_interval_id,
            "last_error": str(runner.last_error) if runner.last_error else None,
            "pomodoro_seconds": resolved_config.pomodoro_duration.total_seconds(),
            "short_break_seconds": resolved_config.short_break_duration.total_seconds(),
            "long_break_seconds": resolved_config.long_break_duration.total_seconds(),
        }

    @app.get("/api/interval")
    def current_interval() -> IntervalPayload:
        try:
            interval = resolved_config.repo.last()
        except IntervalError as exc:
            raise _http_error(exc) from exc
        return IntervalPayload.from_interval(interval)

    @app.get("/api/intervals/{interval_id}")
    def interval_by_id(interval_id: int) -> IntervalPayload:
        try:
            interval = resolved_config.repo.by_id(interval_id)
        except IntervalError as exc:
            raise _http_error(exc) from exc
        return IntervalPayload.from_interval(interval)

    @app.post("/api/interval/start")
    def start(payload: Optional[StartRequest] = None) -> IntervalPayload:
        count = payload.count if payload else 1
        if count < 1:
            raise HTTPException(status_code=400, detail="count must be at least 1")
        try:
            interval = resolved_runner.start(count=count)
        except IntervalError as exc:
            raise _http_error(exc) from exc
        return IntervalPayload.from_interval(interval)

    @app.post("/api/interval/pause")
    def pause() -> IntervalPayload:
        try:
            interval = pause_interval(resolved_config.repo.last(), resolved_config)
        except IntervalError as exc:
            raise _http_error(exc) from exc
        return IntervalPayload.from_interval(interval)

    @app.post("/api/interval/cancel")
    def cancel() -> Dict[str, Any]:
        interval_id = resolved_runner.current_interval_id
        if not resolved_runner.is_running() or interval_id is None:
            raise HTTPException(status_code=409, detail="No interval is ticking")
        resolved_runner.stop()
        try:
            interval = resolved_config.repo.by_id(interval_id)
        except IntervalError as exc:
            raise _http_error(exc) from exc
        return {"interval": IntervalPayload.from_interval(interval).model_dump(mode="json")}

    @app.get("/api/intervals")
    def intervals(
        date: Optional[str] = Query(
            default=None,
            description="Target date in YYYY-MM-DD format.",
        ),
    ) -> Dict[str, Any]:
        target_day = _parse_date(date)
        rows = _intervals_for_day(resolved_config, target_day)
        return {
            "date": target_day.strftime("%Y-%m-%d"),
            "intervals": [
                IntervalPayload.from_interval(interval).model_dump(mode="json")
                for interval in rows
            ],
        }

    @app.get("/api/summary")
    def summary(
        date: Optional[str] = Query(
            default=None,
            description="Target date in YYYY-MM-DD format.",
        ),
    ) -> Dict[str, Any]:
        target_day = _parse_date(date)
        rows = _intervals_for_day(resolved_config, target_day)
        return {
            "date": target_day.strftime("%Y-%m-%d"),
            "totals": summarize(rows).to_dict(),
        }

    return app


def _intervals_for_day(config: IntervalConfig, day: datetime) -> list[Interval]:
    fetch = getattr(config.repo, "intervals_for_day", None)
    if fetch is None:
        raise HTTPException(
            status_code=501, detail="Repository does not support history queries"
        )
    try:
        return fetch(day)
    except IntervalError as exc:
        raise _http_error(exc) from exc


def _http_error(exc: IntervalError) -> HTTPException:
    if isinstance(exc, (NoIntervalsError, InvalidIDError)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, RepositoryError):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=409, detail=str(exc))


def _parse_date(value: Optional[str]) -> datetime:
    if not value:
        return _start_of_day(datetime.now())
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid date format") from exc
    return _start_of_day(parsed)


def _start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)
