"""
List Rows.

Each note/schedule item is resolved once into one of two row variants:
PlainRow for notes without a schedule, ScheduledRow for notes with one.
Views render rows and never look at the raw item again.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from notekeeper.core.exceptions import InvalidCommandError
from notekeeper.models.enums import NoteState, NoteType
from notekeeper.schemas.note import NoteAndSchedule

TYPE_ICONS: dict[NoteType, str] = {
    NoteType.NONE: "📝",
    NoteType.TODO: "☑️",
    NoteType.SHOPPING: "🛒",
    NoteType.WORK: "💼",
    NoteType.FAMILY: "👪",
}

STATE_STYLES: dict[NoteState, str] = {
    NoteState.IN_PROGRESS: "grey50",
    NoteState.DONE: "green",
}

LATE_TEXT = "Late"
LATE_STYLE = "red"
SCHEDULE_STYLE = "grey50"


@dataclass(frozen=True)
class PlainRow:
    """Row for a note without a schedule."""

    note_id: int
    title: str
    text: str
    icon: str
    style: str


@dataclass(frozen=True)
class ScheduledRow:
    """Row for a note with a schedule."""

    note_id: int
    title: str
    text: str
    icon: str
    style: str
    schedule_text: str
    late: bool

    @property
    def schedule_style(self) -> str:
        return LATE_STYLE if self.late else SCHEDULE_STYLE


NoteRow = PlainRow | ScheduledRow


def type_icon(note_type: NoteType) -> str:
    try:
        return TYPE_ICONS[note_type]
    except KeyError:
        raise InvalidCommandError(f"No icon for note type {note_type!r}") from None


def state_style(state: NoteState) -> str:
    try:
        return STATE_STYLES[state]
    except KeyError:
        raise InvalidCommandError(f"No style for note state {state!r}") from None


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def relative_time_span(target: datetime, now: datetime) -> str:
    """
    Describe target relative to now at minute resolution.

    Examples: "in 3 days", "2 hours ago", "in 1 minute", "now".
    """
    delta = target - now
    seconds = abs(delta.total_seconds())
    if seconds < 60:
        return "now"

    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            span = _plural(int(seconds // size), unit)
            break

    return f"in {span}" if delta > timedelta(0) else f"{span} ago"


def to_row(item: NoteAndSchedule, now: datetime | None = None) -> NoteRow:
    """
    Resolve an item into its row variant.

    A scheduled note is late when its due date has passed and it is not done.
    """
    note = item.note
    icon = type_icon(note.type)
    style = state_style(note.state)

    if item.schedule is None:
        return PlainRow(note.id, note.title, note.text, icon, style)

    now = now or datetime.now(timezone.utc)
    due = item.schedule.date
    late = due < now and note.state != NoteState.DONE
    schedule_text = LATE_TEXT if late else relative_time_span(due, now)
    return ScheduledRow(note.id, note.title, note.text, icon, style, schedule_text, late)
