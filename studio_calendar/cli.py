"""Studio calendar CLI.

Renders the calendar views offline from a JSON file of sessions, using the
same engine as the API, and runs the API server.

Usage:
    studio-calendar month sessions.json --year 2024 --month 2
    studio-calendar week sessions.json --week-start 2024-03-10 --timezone Europe/Berlin
    studio-calendar agenda sessions.json
    studio-calendar server --port 8000
"""

from __future__ import annotations

import json
import os
from datetime import date, datetime
from pathlib import Path

import typer
import uvicorn
from loguru import logger
from rich.console import Console
from rich.table import Table

from studio_calendar.calendar.clock import Clock, FixedClock, SystemClock
from studio_calendar.calendar.day_keys import resolve_timezone
from studio_calendar.calendar.display import format_session_time, format_session_title, format_start_time, status_label
from studio_calendar.calendar.engine import CalendarEngine, MonthViewModel, SessionsViewModel, WeekViewModel
from studio_calendar.calendar.ingest import IngestResult, ingest_sessions
from studio_calendar.calendar.month_grid import WEEKDAY_HEADERS
from studio_calendar.calendar.navigation import MonthAnchor, WeekAnchor
from studio_calendar.calendar.types import ViewMode
from studio_calendar.calendar.week_grid import PixelScale
from studio_calendar.config.settings import settings

console = Console()

app = typer.Typer(
    name="studio-calendar",
    help="Studio calendar - render month, week and agenda views",
    add_completion=False,
)

DEFAULT_HOST = os.getenv("SERVER_HOST", "127.0.0.1")


def _load_sessions(path: Path) -> IngestResult:
    """Read a JSON array of session objects and validate it."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error:[/red] could not read {path}: {e}")
        raise typer.Exit(code=1) from e
    if not isinstance(raw, list):
        console.print(f"[red]Error:[/red] {path} must contain a JSON array of sessions")
        raise typer.Exit(code=1)

    result = ingest_sessions(raw)
    for rejected in result.rejected:
        console.print(f"[yellow]Skipped session {rejected.session_id}: {rejected.reason}[/yellow]")
    return result


def _clock(now: str | None) -> Clock:
    if not now:
        return SystemClock()
    try:
        return FixedClock(datetime.fromisoformat(now.replace("Z", "+00:00")))
    except ValueError as e:
        console.print(f"[red]Error:[/red] invalid --now value: {now}")
        raise typer.Exit(code=1) from e


def _engine(now: str | None, row_height: float | None = None) -> CalendarEngine:
    scale = PixelScale(row_height_px=row_height or settings.week_row_height_px)
    return CalendarEngine(clock=_clock(now), scale=scale)


def _print_month(model: MonthViewModel, timezone: str) -> None:
    tz = resolve_timezone(timezone)
    table = Table(title=f"{model.month_label} {model.year}", show_lines=True)
    for header in WEEKDAY_HEADERS:
        table.add_column(header, vertical="top", min_width=12)

    for week in model.grid.weeks:
        row: list[str] = []
        for cell in week:
            style = "dim" if not cell.is_current_month else ("bold red" if cell.is_today else "bold")
            lines = [f"[{style}]{cell.date.day}[/{style}]"]
            lines.extend(f"{format_start_time(s, tz)} {format_session_title(s)}" for s in cell.visible_sessions)
            if cell.overflow_count:
                lines.append(f"[dim]+{cell.overflow_count} more[/dim]")
            row.append("\n".join(lines))
        row.extend([""] * (7 - len(row)))
        table.add_row(*row)
    console.print(table)


def _print_week(model: WeekViewModel) -> None:
    grid = model.grid
    table = Table(title=f"{model.month_label} {model.year} (week of {grid.week_start.isoformat()})")
    table.add_column("Day")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Top px", justify="right")
    table.add_column("Height px", justify="right")
    table.add_column("Session")
    table.add_column("Time")

    for day in grid.days:
        day_label = f"{day.weekday_label} {day.day_number}"
        if day.is_today:
            day_label = f"[bold red]{day_label}[/bold red]"
        if not day.blocks:
            table.add_row(day_label, "", "", "", "", "[dim]-[/dim]", "")
            continue
        for block in day.blocks:
            label = block.client_label if block.is_continuation else block.title
            if block.is_continuation:
                label = f"{label} [dim](cont.)[/dim]"
            table.add_row(
                day_label,
                str(block.start_minutes),
                str(block.end_minutes),
                f"{block.top_px:.1f}",
                f"{block.height_px:.1f}",
                label,
                block.time_label or "",
            )
            day_label = ""
    console.print(table)
    now = grid.now_indicator
    console.print(f"[red]Now[/red] {now.time_label} on {now.date_key} at {now.top_px:.1f}px")


def _print_agenda(model: SessionsViewModel, timezone: str) -> None:
    tz = resolve_timezone(timezone)
    if not model.groups:
        console.print("[yellow]No sessions scheduled[/yellow]")
        return
    for group in model.groups:
        console.print(f"\n[bold]{group.day_label}[/bold]")
        for session in group.sessions:
            console.print(
                f"  {format_session_time(session, tz)}  {format_session_title(session)}  "
                f"[dim]{status_label(session.status)}[/dim]"
            )


@app.command()
def month(
    sessions_file: Path = typer.Argument(..., help="JSON array of sessions"),
    year: int | None = typer.Option(None, "--year", help="Year (defaults to current)"),
    month_number: int | None = typer.Option(None, "--month", min=1, max=12, help="Month 1-12 (defaults to current)"),
    timezone: str = typer.Option(settings.default_timezone, "--timezone", "-t", help="Studio IANA timezone"),
    now: str | None = typer.Option(None, "--now", help="Fixed current time (ISO 8601)"),
) -> None:
    """Render the month grid."""
    engine = _engine(now)
    result = _load_sessions(sessions_file)
    anchor = MonthAnchor(year, month_number) if year is not None and month_number is not None else None
    model = engine.render(result.accepted, ViewMode.MONTH, timezone, anchor)
    _print_month(model, timezone)


@app.command()
def week(
    sessions_file: Path = typer.Argument(..., help="JSON array of sessions"),
    week_start: str | None = typer.Option(None, "--week-start", help="Any date in the week (YYYY-MM-DD)"),
    timezone: str = typer.Option(settings.default_timezone, "--timezone", "-t", help="Studio IANA timezone"),
    row_height: float | None = typer.Option(None, "--row-height", help="Hour row height in px"),
    now: str | None = typer.Option(None, "--now", help="Fixed current time (ISO 8601)"),
) -> None:
    """Render the week grid with block positions."""
    engine = _engine(now, row_height)
    result = _load_sessions(sessions_file)
    anchor = None
    if week_start:
        try:
            anchor = WeekAnchor.containing(date.fromisoformat(week_start))
        except ValueError as e:
            console.print(f"[red]Error:[/red] invalid --week-start value: {week_start}")
            raise typer.Exit(code=1) from e
    model = engine.render(result.accepted, ViewMode.WEEK, timezone, anchor)
    _print_week(model)


@app.command()
def agenda(
    sessions_file: Path = typer.Argument(..., help="JSON array of sessions"),
    timezone: str = typer.Option(settings.default_timezone, "--timezone", "-t", help="Studio IANA timezone"),
) -> None:
    """List sessions chronologically, grouped by day."""
    engine = _engine(None)
    result = _load_sessions(sessions_file)
    model = engine.render(result.accepted, ViewMode.SESSIONS, timezone)
    _print_agenda(model, timezone)


@app.command()
def server(
    host: str = typer.Option(DEFAULT_HOST, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Run the FastAPI server."""
    logger.info(f"Starting FastAPI server on {host}:{port} (reload={reload})")
    uvicorn.run("studio_calendar.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
