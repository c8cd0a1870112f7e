"""
Note Views.

Rich renderings of the view-model's observables. A view binds to an
observable and prints a fresh rendering on every emission.
"""

from collections.abc import Sequence
from datetime import datetime, timezone

from rich.console import Console
from rich.table import Table
from rich.text import Text

from notekeeper.core.exceptions import InvalidCommandError
from notekeeper.lifecycle.observable import Observable, Subscription
from notekeeper.presentation.rows import PlainRow, ScheduledRow, to_row
from notekeeper.schemas.note import NoteAndSchedule
from notekeeper.viewmodels.sort_order import SortOrder


def counter_text(count: int) -> str:
    return f"{count} note{'' if count == 1 else 's'}"


class NotesListView:
    """Table of notes, one row per note."""

    def __init__(self, console: Console) -> None:
        self._console = console
        self.title = "Notes"

    def bind(self, notes: Observable[Sequence[NoteAndSchedule]]) -> Subscription:
        return notes.subscribe(self.show)

    def show(self, items: Sequence[NoteAndSchedule]) -> None:
        self._console.print(self.render(items))

    def render(self, items: Sequence[NoteAndSchedule], now: datetime | None = None) -> Table:
        now = now or datetime.now(timezone.utc)

        table = Table(title=self.title, show_header=True, expand=False)
        table.add_column("#", justify="right", style="dim")
        table.add_column("", no_wrap=True)
        table.add_column("Title", style="bold")
        table.add_column("Text")
        table.add_column("Due")

        for item in items:
            row = to_row(item, now)
            if isinstance(row, ScheduledRow):
                due = Text(f"⏰ {row.schedule_text}", style=row.schedule_style)
            elif isinstance(row, PlainRow):
                due = Text("")
            else:
                raise InvalidCommandError(f"Unknown row variant {type(row).__name__}")
            table.add_row(
                str(row.note_id),
                Text(row.icon, style=row.style),
                row.title,
                row.text,
                due,
            )

        if not items:
            table.caption = "No notes"
        return table


class NotesControlsView:
    """Note counter line."""

    def __init__(self, console: Console) -> None:
        self._console = console

    def bind(self, count: Observable[int]) -> Subscription:
        return count.subscribe(self.show)

    def show(self, count: int) -> None:
        self._console.print(f"[bold]{counter_text(count)}[/bold]")


class SortOrderView:
    """Line announcing the active sort order."""

    def __init__(self, console: Console) -> None:
        self._console = console

    def bind(self, order: Observable[SortOrder]) -> Subscription:
        return order.subscribe(self.show)

    def show(self, order: SortOrder) -> None:
        self._console.print(f"[dim]Sorted by {order.name}[/dim]")
