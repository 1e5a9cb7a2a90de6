"""Command-line interface for the project tracker."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .config import TrackerSettings
from .paths import get_log_path, resolve_db_path

app = typer.Typer(help="Attribute browsing time to projects.")


@app.callback(no_args_is_help=True)
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the service."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the service."
    ),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the state SQLite database."
    ),
    idle_seconds: float = typer.Option(
        60.0,
        "--idle-threshold",
        min=15.0,
        help="Seconds of inactivity before the host is considered idle.",
    ),
    heartbeat_seconds: float = typer.Option(
        30.0,
        "--heartbeat",
        min=1.0,
        help="Interval in seconds between periodic state saves.",
    ),
    prompt_timeout_minutes: float = typer.Option(
        10.0,
        "--prompt-timeout",
        min=0.0,
        help="Minutes before an unanswered idle prompt is discarded (0 waits forever).",
    ),
    prompt_url: Optional[str] = typer.Option(
        None,
        "--prompt-url",
        help="Page to open in the browser when the idle prompt is requested.",
    ),
    local_idle: bool = typer.Option(
        False,
        "--local-idle/--no-local-idle",
        help="Detect idle state from the local OS input counter (Windows only).",
    ),
) -> None:
    """Run the tracking service until interrupted."""
    from .server_runner import run_server

    file_handler = logging.FileHandler(get_log_path(), encoding="utf-8")
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
    logging.getLogger().addHandler(file_handler)

    settings = TrackerSettings.from_intervals(
        idle_seconds=idle_seconds,
        heartbeat_seconds=heartbeat_seconds,
        prompt_timeout_minutes=prompt_timeout_minutes or None,
    )
    run_server(
        host=host,
        port=port,
        db_path=resolve_db_path(db_path),
        settings=settings,
        prompt_url=prompt_url,
        local_idle=local_idle,
    )


@app.command()
def summary(
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the state SQLite database."
    ),
) -> None:
    """Print total tracked time per project."""
    from .reporting import SummaryPrinter

    SummaryPrinter(db_path=resolve_db_path(db_path)).print_summary()


@app.command()
def reset(
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the state SQLite database."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Erase all tracked time and projects. Stop the service first."""
    from .store import StateStore

    if not yes:
        typer.confirm(
            "Reset all tracked data and projects? This cannot be undone.",
            abort=True,
        )
    store = StateStore(resolve_db_path(db_path))
    try:
        store.reset()
    finally:
        store.close()
    typer.echo("Tracking data and projects reset.")


@app.command("set-project")
def set_project(
    project: str = typer.Argument(..., help="Project to track from now on."),
    db_path: Optional[Path] = typer.Option(
        None, "--db", path_type=Path, help="Location of the state SQLite database."
    ),
) -> None:
    """Change the current project while the service is stopped."""
    from .store import StateStore

    store = StateStore(resolve_db_path(db_path))
    try:
        store.load()
        name = store.set_current(project)
        if name is None:
            typer.echo("Invalid project name provided.", err=True)
            raise typer.Exit(code=1)
        store.save()
    finally:
        store.close()
    typer.echo(f"Current project: {name}")
