"""
Sort Orders.

The sort policies a user can pick for the note list. Each order maps to a
pure function from a note sequence to a new, sorted tuple.
"""

from collections.abc import Callable, Sequence
from enum import Enum

from notekeeper.core.exceptions import InvalidCommandError
from notekeeper.schemas.note import NoteAndSchedule

NoteList = tuple[NoteAndSchedule, ...]


def _by_eta(notes: Sequence[NoteAndSchedule]) -> NoteList:
    # Scheduled first, by due date; unscheduled keep their relative order.
    scheduled = sorted(
        (item for item in notes if item.schedule is not None),
        key=lambda item: item.schedule.date,
    )
    unscheduled = [item for item in notes if item.schedule is None]
    return tuple(scheduled + unscheduled)


def _by_creation_date(notes: Sequence[NoteAndSchedule]) -> NoteList:
    return tuple(sorted(notes, key=lambda item: item.note.creation_date, reverse=True))


def _unsorted(notes: Sequence[NoteAndSchedule]) -> NoteList:
    return tuple(notes)


class SortOrder(str, Enum):
    """Sort possibilities for the note list."""

    BY_ETA = "BY_ETA"
    BY_CREATION_DATE = "BY_CREATION_DATE"
    NONE = "NONE"

    def sort(self, notes: Sequence[NoteAndSchedule]) -> NoteList:
        return _SORTERS[self](notes)

    @classmethod
    def parse(cls, name: str) -> "SortOrder":
        """
        Look up an order by name, case-insensitively.

        Raises:
            InvalidCommandError: If no order has that name
        """
        normalized = name.strip().upper().replace("-", "_")
        try:
            return cls[normalized]
        except KeyError:
            choices = ", ".join(order.name for order in cls)
            raise InvalidCommandError(
                f"Unknown sort order {name!r}, expected one of: {choices}"
            ) from None


_SORTERS: dict[SortOrder, Callable[[Sequence[NoteAndSchedule]], NoteList]] = {
    SortOrder.BY_ETA: _by_eta,
    SortOrder.BY_CREATION_DATE: _by_creation_date,
    SortOrder.NONE: _unsorted,
}
