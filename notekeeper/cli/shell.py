"""
Interactive Shell Mode.

REPL on top of a running NotesApp. The note counter, the sort order and
(while watching) the sorted note list are bound to the view-model, so
every change is printed as soon as the store publishes it; shell commands
only issue commands and never redraw by themselves.

Input is read in a worker thread so the event loop keeps running queued
writes and delivering updates while the prompt waits.
"""

import asyncio
import shlex
from collections.abc import Awaitable, Callable

import structlog
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from notekeeper.app import NotesApp
from notekeeper.core.exceptions import ApplicationError
from notekeeper.core.logging import get_logger
from notekeeper.lifecycle.observable import Subscription
from notekeeper.presentation.views import NotesControlsView, NotesListView, SortOrderView
from notekeeper.viewmodels.sort_order import SortOrder

logger = get_logger(__name__)

MAX_GENERATE = 1000


class InteractiveShell:
    """
    Interactive shell for the notes application.

    Usage:
        async with NotesApp.from_config() as app:
            await InteractiveShell(app).run()
    """

    def __init__(self, app: NotesApp, console: Console | None = None) -> None:
        self.app = app
        self.console = console or Console()
        self.running = False
        self._list_view = NotesListView(self.console)
        self._controls_view = NotesControlsView(self.console)
        self._sort_view = SortOrderView(self.console)
        self._subscriptions: list[Subscription] = []
        self._list_subscription: Subscription | None = None
        self.commands: dict[str, Callable[[list[str]], Awaitable[None]]] = {
            "help": self._cmd_help,
            "list": self._cmd_list,
            "count": self._cmd_count,
            "generate": self._cmd_generate,
            "delete": self._cmd_delete,
            "sort": self._cmd_sort,
            "watch": self._cmd_watch,
            "clear": self._cmd_clear,
            "quit": self._cmd_quit,
            "exit": self._cmd_quit,
        }

    @property
    def watching(self) -> bool:
        return self._list_subscription is not None

    def attach(self) -> None:
        """Bind the views to the view-model."""
        view_model = self.app.view_model
        self._subscriptions.append(self._sort_view.bind(view_model.observe_sort_order()))
        self._subscriptions.append(self._controls_view.bind(view_model.observe_count()))
        self._list_subscription = self._list_view.bind(view_model.observe_sorted())

    def detach(self) -> None:
        """Dispose every view binding."""
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()
        if self._list_subscription is not None:
            self._list_subscription.dispose()
            self._list_subscription = None

    async def run(self) -> None:
        """Run the interactive shell."""
        self.running = True
        structlog.contextvars.bind_contextvars(source="shell")

        self.console.print(Panel(
            "[bold]Notekeeper[/bold]\n"
            "Type [cyan]help[/cyan] for available commands, [cyan]quit[/cyan] to exit.",
            title="Welcome",
        ))
        self.attach()

        try:
            while self.running:
                try:
                    user_input = (await asyncio.to_thread(
                        self.console.input, "[bold cyan]>[/bold cyan] ",
                    )).strip()
                except KeyboardInterrupt:
                    self.console.print("\n[dim]Use 'quit' to exit[/dim]")
                    continue
                except EOFError:
                    break

                if user_input:
                    await self.execute(user_input)
        finally:
            self.detach()
            await self.app.store.join()
            self.console.print("[dim]Goodbye![/dim]")

    async def execute(self, line: str) -> None:
        """Parse and run one command line."""
        parts = shlex.split(line)
        if not parts:
            return
        command, args = parts[0].lower(), parts[1:]

        handler = self.commands.get(command)
        if handler is None:
            self.console.print(f"[red]Unknown command: {command}[/red]")
            self.console.print("Type [cyan]help[/cyan] for available commands.")
            return

        try:
            # Another process may have changed the sort order since the last command.
            self.app.preferences.refresh()
            await handler(args)
        except ApplicationError as e:
            logger.warning("Shell command rejected", extra={"command": command, "error": e.message})
            self.console.print(f"[red]Error: {e.message}[/red]")

    async def _cmd_help(self, args: list[str]) -> None:
        """Display help information."""
        table = Table(title="Available Commands", show_header=True)
        table.add_column("Command", style="cyan")
        table.add_column("Description")

        table.add_row("help", "Show this help message")
        table.add_row("list", "Print the sorted note list")
        table.add_row("count", "Print the number of notes")
        table.add_row("generate [n]", "Generate n random notes (default 1)")
        table.add_row("delete", "Delete all notes")
        table.add_row("sort <order>", f"Sort by {', '.join(o.name for o in SortOrder)}")
        table.add_row("watch", "Toggle live redraw of the note list")
        table.add_row("clear", "Clear the screen")
        table.add_row("quit / exit", "Exit the shell")

        self.console.print(table)

    async def _cmd_list(self, args: list[str]) -> None:
        """Print the current sorted list."""
        notes = await self.app.snapshot(self.app.view_model.observe_sorted())
        self._list_view.show(notes or ())

    async def _cmd_count(self, args: list[str]) -> None:
        """Print the current count."""
        count = await self.app.snapshot(self.app.view_model.observe_count())
        self._controls_view.show(count or 0)

    async def _cmd_generate(self, args: list[str]) -> None:
        """Queue note generation."""
        try:
            count = int(args[0]) if args else 1
        except ValueError:
            self.console.print(f"[red]Not a number: {args[0]}[/red]")
            return
        if not 1 <= count <= MAX_GENERATE:
            self.console.print(f"[red]Generate between 1 and {MAX_GENERATE} notes[/red]")
            return

        for _ in range(count):
            self.app.view_model.generate_note()

    async def _cmd_delete(self, args: list[str]) -> None:
        """Queue deletion of every note."""
        self.app.view_model.delete_all_notes()

    async def _cmd_sort(self, args: list[str]) -> None:
        """Change the sort order."""
        if not args:
            self._sort_view.show(self.app.view_model.sort_order)
            return
        self.app.view_model.set_sort_order(args[0])

    async def _cmd_watch(self, args: list[str]) -> None:
        """Toggle live redraw of the list."""
        if self._list_subscription is not None:
            self._list_subscription.dispose()
            self._list_subscription = None
            self.console.print("[dim]Live list off[/dim]")
        else:
            self.console.print("[dim]Live list on[/dim]")
            self._list_subscription = self._list_view.bind(self.app.view_model.observe_sorted())

    async def _cmd_clear(self, args: list[str]) -> None:
        """Clear the screen."""
        self.console.clear()

    async def _cmd_quit(self, args: list[str]) -> None:
        """Exit the shell."""
        self.running = False


async def run_shell(app: NotesApp) -> None:
    """Run the interactive shell."""
    shell = InteractiveShell(app)
    await shell.run()
