"""Command-line interface for the Pomodoro tracker."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from .config import IntervalConfig
from .db import SQLiteRepository
from .engine import SystemClock, next_category, pause_interval
from .errors import IntervalError, NoIntervalsError
from .models import STATE_RUNNING, Interval
from .paths import get_db_path
from .reporting import format_duration, format_remaining

app = typer.Typer(help="Pomodoro interval tracker.")

DB_OPTION = typer.Option(
    None,
    "--db",
    path_type=Path,
    help="Location of the interval SQLite database.",
)
POMODORO_OPTION = typer.Option(
    25.0, "--pomodoro", help="Pomodoro length in minutes (non-positive keeps 25)."
)
SHORT_BREAK_OPTION = typer.Option(
    5.0, "--short-break", help="Short break length in minutes (non-positive keeps 5)."
)
LONG_BREAK_OPTION = typer.Option(
    15.0, "--long-break", help="Long break length in minutes (non-positive keeps 15)."
)


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def build_config(
    db_path: Optional[Path],
    pomodoro: Optional[float] = None,
    short_break: Optional[float] = None,
    long_break: Optional[float] = None,
) -> IntervalConfig:
    repo = SQLiteRepository(db_path or get_db_path())
    return IntervalConfig.from_minutes(
        repo,
        pomodoro_minutes=pomodoro,
        short_break_minutes=short_break,
        long_break_minutes=long_break,
    )


@app.command()
def run(
    db_path: Optional[Path] = DB_OPTION,
    pomodoro: float = POMODORO_OPTION,
    short_break: float = SHORT_BREAK_OPTION,
    long_break: float = LONG_BREAK_OPTION,
    count: int = typer.Option(
        1, "--count", "-n", min=1, help="Number of intervals to run back to back."
    ),
) -> None:
    """Start or resume the current interval; Ctrl-C cancels it.

    An interval already running in another process is not ticked a second time.
    """
    from .runner import IntervalRunner

    config = build_config(db_path, pomodoro, short_break, long_break)
    runner = IntervalRunner(config, clock=SystemClock())
    try:
        interval = runner.start(
            on_start=_print_start, on_tick=_print_tick, on_end=_print_end, count=count
        )
    except IntervalError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    # Only one loop may tick an interval; its owner is another process.
    if interval.state == STATE_RUNNING:
        runner.join()
        typer.echo(
            f"Error: interval #{interval.id} is already running elsewhere. "
            "Run `pause` to take it over, then `run` again.",
            err=True,
        )
        raise typer.Exit(code=1)

    try:
        while not runner.join(timeout=0.5):
            pass
    except KeyboardInterrupt:
        typer.echo("\nCancelling interval.")
        runner.stop()

    if runner.last_error is not None:
        typer.echo(f"Error: {runner.last_error}", err=True)
        raise typer.Exit(code=1)


@app.command()
def pause(db_path: Optional[Path] = DB_OPTION) -> None:
    """Pause the running interval; its loop stops on the next tick."""
    config = build_config(db_path)
    try:
        interval = pause_interval(config.repo.last(), config)
    except IntervalError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(
        f"Paused {interval.category} #{interval.id} with "
        f"{format_remaining(interval)} remaining."
    )


@app.command()
def status(db_path: Optional[Path] = DB_OPTION) -> None:
    """Show the latest interval and what comes next."""
    config = build_config(db_path)
    try:
        interval = config.repo.last()
    except NoIntervalsError:
        typer.echo("No intervals recorded yet. Next: Pomodoro")
        return
    typer.echo(
        f"#{interval.id} {interval.category} {interval.state_name} "
        f"{format_duration(interval.actual_duration.total_seconds())} / "
        f"{format_duration(interval.planned_duration.total_seconds())}"
    )
    if interval.is_finished:
        typer.echo(f"Next: {next_category(config.repo)}")


@app.command()
def summary(
    date: Optional[str] = typer.Option(
        None,
        "--date",
        help="Date (YYYY-MM-DD) to summarize. Defaults to today.",
    ),
    db_path: Optional[Path] = DB_OPTION,
) -> None:
    """Print a summary of the intervals for a specific day."""
    from .reporting import SummaryPrinter

    target = datetime.strptime(date, "%Y-%m-%d") if date else datetime.now()
    summary_printer = SummaryPrinter(SQLiteRepository(db_path or get_db_path()))
    summary_printer.print_daily_summary(target)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the API."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the API."
    ),
    db_path: Optional[Path] = DB_OPTION,
    pomodoro: float = POMODORO_OPTION,
    short_break: float = SHORT_BREAK_OPTION,
    long_break: float = LONG_BREAK_OPTION,
) -> None:
    """Serve the HTTP API for starting, pausing and inspecting intervals."""
    from .server_runner import run_server

    run_server(
        host=host,
        port=port,
        config=build_config(db_path, pomodoro, short_break, long_break),
    )


def _print_start(interval: Interval) -> None:
    typer.echo(f"{interval.category} #{interval.id}: {format_remaining(interval)} to go")


def _print_tick(interval: Interval) -> None:
    typer.echo(f"\r{interval.category} {format_remaining(interval)} remaining", nl=False)


def _print_end(interval: Interval) -> None:
    typer.echo(f"\n{interval.category} #{interval.id} done.")
