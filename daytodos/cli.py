"""CLI for day todos.

Serves the API, runs the demo walkthrough and talks to a running server.
"""

import asyncio
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from daytodos.client import ClientError, TodoClient, run_demo
from daytodos.config import get_settings
from daytodos.core.calendar import UnknownDayError, parse_day
from daytodos.core.models import Todo

app = typer.Typer(
    name="daytodos",
    help="Day todos - todo items scoped by day of week",
    add_completion=False,
)

console = Console()

DEFAULT_URL = "http://127.0.0.1:8000"


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on"),
) -> None:
    """Serve the HTTP API."""
    from daytodos.api.main import run

    run(host=host, port=port)


@app.command()
def demo(
    db_path: Optional[Path] = typer.Option(
        None, "--db-path", help="SQLite file to use (a temporary file by default, existing files are kept)"
    ),
    keep: bool = typer.Option(False, "--keep", help="Keep a database file the demo created"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show log output"),
) -> None:
    """Post a week of demo todos to an in-process server and read them back."""
    temp_dir: Optional[Path] = None
    if db_path is None:
        temp_dir = Path(tempfile.mkdtemp(prefix="daytodos-"))
        db_path = temp_dir / "todos.db"
    # An existing database belongs to the user and is never removed.
    existed = db_path.exists()

    os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{db_path}"
    get_settings.cache_clear()

    try:
        report = asyncio.run(_run_demo(verbose))
    finally:
        if not keep and temp_dir is not None:
            shutil.rmtree(temp_dir, ignore_errors=True)
        elif not keep and not existed and db_path.exists():
            db_path.unlink()

    for line in report.lines():
        console.print(line)
    if keep and temp_dir is not None:
        console.print(f"[dim]database kept at {db_path}[/dim]")


async def _run_demo(verbose: bool):
    import httpx

    from daytodos.api.main import app as api_app
    from daytodos.monitoring.logging import setup_logging
    from daytodos.storage.connection import close_db, init_db

    setup_logging(level="DEBUG" if verbose else "WARNING")

    await close_db()
    await init_db()
    try:
        transport = httpx.ASGITransport(app=api_app)
        async with TodoClient("http://daytodos", transport=transport) as client:
            return await run_demo(client)
    finally:
        await close_db()


@app.command()
def add(
    day: str = typer.Argument(..., help="Day of week (mon, tuesday, ...)"),
    task: str = typer.Argument(..., help="Task to be done"),
    url: str = typer.Option(DEFAULT_URL, "--url", "-u", help="Server URL"),
) -> None:
    """Add a todo for a day."""
    try:
        parse_day(day)
        receipt = asyncio.run(_post(url, Todo(day=day, task=task)))
    except (UnknownDayError, ClientError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(receipt["message"])


async def _post(url: str, todo: Todo) -> dict:
    async with TodoClient(url) as client:
        return await client.post(todo)


@app.command()
def tasks(
    when: str = typer.Argument(..., help="A day, 'weekdays', 'weekend' or 'week'"),
    url: str = typer.Option(DEFAULT_URL, "--url", "-u", help="Server URL"),
) -> None:
    """Show the tasks for a day, the weekdays, the weekend or the whole week."""
    try:
        grouped = asyncio.run(_tasks(url, when))
    except (UnknownDayError, ClientError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title=f"Tasks: {when}")
    table.add_column("When", style="cyan")
    table.add_column("Tasks")
    for name, task_names in grouped.items():
        table.add_row(name, ", ".join(task_names) or "[dim]none[/dim]")
    console.print(table)


async def _tasks(url: str, when: str) -> dict:
    async with TodoClient(url) as client:
        if when == "week":
            return await client.week()
        if when == "weekdays":
            return {when: await client.weekday_tasks()}
        if when == "weekend":
            return {when: await client.weekend_tasks()}
        day = parse_day(when)
        return {day.value: await client.day_tasks(day)}


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
