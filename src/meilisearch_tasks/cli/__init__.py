"""CLI module for meilisearch-tasks."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import typer

from meilisearch_tasks import __version__
from meilisearch_tasks.api import Client, TasksQuery, TaskStatus
from meilisearch_tasks.config import (
    ConfigurationError,
    LogFormat,
    Settings,
    load_settings,
)
from meilisearch_tasks.exceptions import MeilisearchError, MeilisearchTimeoutError
from meilisearch_tasks.observability import LogLevel, configure_logging


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


app = typer.Typer(
    name="meili-tasks",
    help="Inspect and wait for Meilisearch tasks.",
    no_args_is_help=True,
)

EXIT_FAILED = 1
EXIT_TIMEOUT = 2


@dataclass(slots=True)
class _State:
    settings: Settings


def version_callback(value: bool) -> None:  # noqa: FBT001
    """Print version and exit."""
    if value:
        typer.echo(f"meili-tasks version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--verbose",
        "-V",
        help="Enable verbose (debug) logging.",
    ),
    quiet: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--quiet",
        "-q",
        help="Only show warnings and errors.",
    ),
    config_file: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file.",
    ),
) -> None:
    """meilisearch-tasks CLI."""
    del version  # Handled by callback

    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive.", err=True)
        raise typer.Exit(EXIT_FAILED)

    try:
        settings = load_settings(config_file)
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(EXIT_FAILED) from exc

    logging_config = settings.observability.logging
    level: LogLevel
    if verbose:
        level = LogLevel.DEBUG
    elif quiet:
        level = LogLevel.WARNING
    else:
        level = logging_config.level

    configure_logging(
        level=level,
        force_colors=logging_config.format is LogFormat.CONSOLE,
    )
    ctx.obj = _State(settings=settings)


def _run(ctx: typer.Context, call: Callable[[Client], Awaitable[Any]]) -> Any:  # noqa: ANN401
    """Run ``call`` against a client built from the loaded settings."""
    state: _State = ctx.obj

    async def runner() -> Any:  # noqa: ANN401
        async with Client.from_config(state.settings.meilisearch) as client:
            return await call(client)

    try:
        return asyncio.run(runner())
    except MeilisearchTimeoutError:
        raise
    except MeilisearchError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(EXIT_FAILED) from exc


@app.command()
def task(
    ctx: typer.Context,
    task_uid: int = typer.Argument(..., min=0, help="Task uid."),
) -> None:
    """Print the current record of a task as JSON."""
    record = _run(ctx, lambda client: client.get_task(task_uid))
    typer.echo(record.model_dump_json(by_alias=True, indent=2))


@app.command()
def wait(
    ctx: typer.Context,
    task_uid: int = typer.Argument(..., min=0, help="Task uid."),
    timeout_ms: int | None = typer.Option(
        None,
        "--timeout-ms",
        "-t",
        min=0,
        help="Wait budget in milliseconds (default from config).",
    ),
    interval_ms: int | None = typer.Option(
        None,
        "--interval-ms",
        "-i",
        min=0,
        help="Delay between status fetches (default from config).",
    ),
) -> None:
    """Wait for a task to finish.

    Exits 0 when the task succeeded, 1 when it failed or was canceled and
    2 when it is still running after the timeout.
    """
    try:
        record = _run(
            ctx,
            lambda client: client.wait_for_task(
                task_uid,
                timeout_in_ms=timeout_ms,
                interval_in_ms=interval_ms,
            ),
        )
    except MeilisearchTimeoutError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(EXIT_TIMEOUT) from exc

    typer.echo(f"Task {record.uid} {record.status}")
    if record.error is not None:
        typer.echo(f"{record.error.code}: {record.error.message}", err=True)
    if record.status is not TaskStatus.SUCCEEDED:
        raise typer.Exit(EXIT_FAILED)


@app.command(name="tasks")
def list_tasks(
    ctx: typer.Context,
    statuses: list[TaskStatus] | None = typer.Option(
        None,
        "--status",
        "-s",
        help="Only show tasks with this status (repeatable).",
    ),
    limit: int = typer.Option(20, "--limit", "-l", min=0, help="Page size."),
) -> None:
    """List recent tasks, most recent first."""
    query = TasksQuery(statuses=statuses or None, limit=limit)
    page = _run(ctx, lambda client: client.get_tasks(query))
    for record in page.results:
        typer.echo(
            f"{record.uid}\t{record.status}\t{record.type}\t{record.index_uid or '-'}"
        )


@app.command()
def stats(ctx: typer.Context) -> None:
    """Print database and index statistics as JSON."""
    result = _run(ctx, lambda client: client.get_stats())
    typer.echo(result.model_dump_json(by_alias=True, indent=2))


@app.command()
def health(ctx: typer.Context) -> None:
    """Check that the server is available."""
    payload = _run(ctx, lambda client: client.health())
    status = payload.get("status", "unknown")
    typer.echo(status)
    if status != "available":
        raise typer.Exit(EXIT_FAILED)


__all__ = ["app"]
