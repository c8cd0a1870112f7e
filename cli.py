#!/usr/bin/env python3
"""
Notekeeper CLI.

Primary entry point for all application operations. Every command opens
the application from config/settings/*.yaml, runs, waits for the queued
writes to finish and closes it again.

Usage:
    python cli.py --help
    python cli.py list
    python cli.py list --sort by_creation_date
    python cli.py generate -n 5 --verbose
    python cli.py delete-all
    python cli.py sort by_eta
    python cli.py shell
    python cli.py config
"""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click
import structlog
import yaml
from rich.console import Console

from notekeeper.app import NotesApp
from notekeeper.core.config import get_app_config, validate_project_root
from notekeeper.core.exceptions import ApplicationError
from notekeeper.core.logging import get_logger, setup_logging
from notekeeper.presentation.views import NotesListView, counter_text
from notekeeper.viewmodels.sort_order import SortOrder

T = TypeVar("T")

SORT_CHOICES = click.Choice([order.name for order in SortOrder], case_sensitive=False)

console = Console()


def _run(work: Callable[[NotesApp], Awaitable[T]]) -> T:
    """Run work against a started application, turning errors into exit code 1."""
    logger = get_logger(__name__)

    async def _main() -> T:
        async with NotesApp.from_config() as app:
            return await work(app)

    try:
        return asyncio.run(_main())
    except ApplicationError as e:
        logger.error("Command failed", extra={"code": e.code, "error": e.message})
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        sys.exit(1)


@click.group()
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
def main(verbose: bool, debug: bool) -> None:
    """
    Notekeeper CLI.

    \b
    Examples:
        python cli.py list
        python cli.py list --sort by_eta
        python cli.py generate -n 5
        python cli.py delete-all
        python cli.py sort by_creation_date
        python cli.py shell
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")

    structlog.contextvars.bind_contextvars(source="cli")

    get_logger(__name__).debug("CLI invoked", extra={"log_level": log_level})


@main.command("list")
@click.option(
    "--sort", "sort_order",
    type=SORT_CHOICES,
    default=None,
    help="Remember a new sort order before listing.",
)
def list_notes(sort_order: str | None) -> None:
    """Print the notes, sorted by the remembered order."""

    async def _list(app: NotesApp) -> None:
        if sort_order is not None:
            app.view_model.set_sort_order(sort_order)
        notes = await app.snapshot(app.view_model.observe_sorted())
        view = NotesListView(console)
        view.title = f"Notes ({app.view_model.sort_order.name})"
        view.show(notes or ())

    _run(_list)


@main.command()
def count() -> None:
    """Print the number of notes."""

    async def _count(app: NotesApp) -> int:
        return await app.snapshot(app.view_model.observe_count()) or 0

    click.echo(counter_text(_run(_count)))


@main.command()
@click.option(
    "-n", "--number",
    type=click.IntRange(min=1, max=1000),
    default=1,
    show_default=True,
    help="Number of notes to generate.",
)
def generate(number: int) -> None:
    """Generate random notes."""

    async def _generate(app: NotesApp) -> int:
        for _ in range(number):
            app.view_model.generate_note()
        return await app.snapshot(app.view_model.observe_count()) or 0

    total = _run(_generate)
    click.echo(f"Generated {number} note{'' if number == 1 else 's'}, {counter_text(total)} in total.")


@main.command("delete-all")
@click.confirmation_option(prompt="Delete every note and schedule?")
def delete_all() -> None:
    """Delete every note and schedule."""

    async def _delete(app: NotesApp) -> int:
        app.view_model.delete_all_notes()
        return await app.snapshot(app.view_model.observe_count()) or 0

    _run(_delete)
    click.echo("All notes deleted.")


@main.command()
@click.argument("order", type=SORT_CHOICES, required=False)
def sort(order: str | None) -> None:
    """Show or change the remembered sort order."""

    async def _sort(app: NotesApp) -> SortOrder:
        if order is not None:
            app.view_model.set_sort_order(order)
        return app.view_model.sort_order

    click.echo(f"Sort order: {_run(_sort).name}")


@main.command()
def shell() -> None:
    """Start the interactive shell."""
    from notekeeper.cli.shell import run_shell

    _run(run_shell)


@main.command()
def config() -> None:
    """Display the loaded configuration."""
    app_config = get_app_config()
    sections: dict[str, Any] = {
        "application": app_config.application.model_dump(),
        "database": app_config.database.model_dump(),
        "preferences": app_config.preferences.model_dump(),
        "notes": app_config.notes.model_dump(),
        "logging": app_config.logging.model_dump(),
    }
    click.echo(yaml.safe_dump(sections, default_flow_style=False, sort_keys=False))


if __name__ == "__main__":
    main()
