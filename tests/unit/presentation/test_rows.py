"""Unit tests for notekeeper.presentation.rows."""

from datetime import timedelta

import pytest

from notekeeper.core.exceptions import InvalidCommandError
from notekeeper.models.enums import NoteState, NoteType
from notekeeper.presentation.rows import (
    LATE_STYLE,
    LATE_TEXT,
    SCHEDULE_STYLE,
    TYPE_ICONS,
    PlainRow,
    ScheduledRow,
    relative_time_span,
    state_style,
    to_row,
    type_icon,
)


class TestRowDispatch:
    def test_unscheduled_note_is_plain_row(self, item_factory, base_time):
        """Should render a note without schedule as a plain row."""
        row = to_row(item_factory(1, note_type=NoteType.SHOPPING), now=base_time)

        assert isinstance(row, PlainRow)
        assert row.note_id == 1
        assert row.icon == TYPE_ICONS[NoteType.SHOPPING]

    def test_scheduled_note_is_scheduled_row(self, item_factory, base_time):
        """Should render the due date for a scheduled note."""
        row = to_row(item_factory(2, due_minutes=3 * 24 * 60), now=base_time)

        assert isinstance(row, ScheduledRow)
        assert row.schedule_text == "in 3 days"
        assert not row.late
        assert row.schedule_style == SCHEDULE_STYLE

    def test_overdue_open_note_is_late(self, item_factory, base_time):
        """Should flag an overdue note that is not done."""
        row = to_row(item_factory(3, due_minutes=-5), now=base_time)

        assert row.late
        assert row.schedule_text == LATE_TEXT
        assert row.schedule_style == LATE_STYLE

    def test_overdue_done_note_is_not_late(self, item_factory, base_time):
        """Should not flag finished notes."""
        row = to_row(item_factory(4, due_minutes=-120, state=NoteState.DONE), now=base_time)

        assert not row.late
        assert row.schedule_text == "2 hours ago"

    def test_state_picks_style(self, item_factory, base_time):
        open_row = to_row(item_factory(5), now=base_time)
        done_row = to_row(item_factory(6, state=NoteState.DONE), now=base_time)
        assert open_row.style != done_row.style


class TestLookups:
    def test_every_type_has_an_icon(self):
        """Should have an icon for every type."""
        assert {type_icon(t) for t in NoteType} == set(TYPE_ICONS.values())

    def test_unknown_type_raises(self):
        """Should fail loudly on an unmapped type."""
        with pytest.raises(InvalidCommandError):
            type_icon("POSTCARD")

    def test_unknown_state_raises(self):
        """Should fail loudly on an unmapped state."""
        with pytest.raises(InvalidCommandError):
            state_style("ARCHIVED")


class TestRelativeTimeSpan:
    @pytest.mark.parametrize(
        ("offset", "expected"),
        [
            (timedelta(seconds=30), "now"),
            (timedelta(seconds=-59), "now"),
            (timedelta(minutes=1), "in 1 minute"),
            (timedelta(minutes=45), "in 45 minutes"),
            (timedelta(hours=-1), "1 hour ago"),
            (timedelta(hours=5, minutes=59), "in 5 hours"),
            (timedelta(days=-2), "2 days ago"),
            (timedelta(days=1), "in 1 day"),
        ],
    )
    def test_describes_offset(self, offset, expected, base_time):
        assert relative_time_span(base_time + offset, base_time) == expected
