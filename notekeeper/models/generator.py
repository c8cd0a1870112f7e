"""
Random Note Generation.

Builds sample notes with random type, state, title and body, and
optionally a schedule whose due date falls within a window around now
(so some schedules are already late).
"""

import random
from collections.abc import Callable
from datetime import datetime, timedelta

from notekeeper.models.base import utc_now
from notekeeper.models.enums import NoteState, NoteType
from notekeeper.models.note import Note, Schedule

_TITLES = {
    NoteType.NONE: ["Idea", "Reminder", "Thought", "Quote", "Random note"],
    NoteType.TODO: ["Fix the bike", "Call the bank", "Renew passport", "Water the plants"],
    NoteType.SHOPPING: ["Groceries", "Hardware store", "Birthday gift", "Pharmacy"],
    NoteType.WORK: ["Sprint review", "Write report", "Team meeting", "Code review"],
    NoteType.FAMILY: ["Dinner with parents", "School pickup", "Holiday plans", "Call grandma"],
}

_WORDS = (
    "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod "
    "tempor incididunt ut labore et dolore magna aliqua ut enim ad minim "
    "veniam quis nostrud exercitation ullamco laboris nisi ut aliquip"
).split()


class NoteGenerator:
    """
    Random note and schedule factory.

    Args:
        schedule_probability: Chance that random_schedule() returns a schedule
        schedule_window_days: Due dates fall within +/- this many days of now
        rng: Random source, seed it for reproducible output
        clock: Returns the current time
    """

    def __init__(
        self,
        schedule_probability: float = 0.7,
        schedule_window_days: int = 14,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if not 0.0 <= schedule_probability <= 1.0:
            raise ValueError("schedule_probability must be between 0 and 1")
        self.schedule_probability = schedule_probability
        self.schedule_window_days = schedule_window_days
        self._rng = rng or random.Random()
        self._clock = clock

    @classmethod
    def from_config(cls) -> "NoteGenerator":
        from notekeeper.core.config import get_app_config

        notes = get_app_config().notes
        return cls(
            schedule_probability=notes.schedule_probability,
            schedule_window_days=notes.schedule_window_days,
        )

    def random_note(self) -> Note:
        note_type = self._rng.choice(list(NoteType))
        return Note(
            title=self._rng.choice(_TITLES[note_type]),
            text=self._random_text(),
            type=note_type,
            state=self._rng.choice(list(NoteState)),
            creation_date=self._clock(),
        )

    def random_schedule(self) -> Schedule | None:
        """Return an unowned schedule, or None when the draw says no schedule."""
        if self._rng.random() >= self.schedule_probability:
            return None

        window = self.schedule_window_days * 24 * 60
        offset = timedelta(minutes=self._rng.randint(-window, window))
        return Schedule(date=self._clock() + offset)

    def _random_text(self) -> str:
        words = self._rng.choices(_WORDS, k=self._rng.randint(5, 20))
        return " ".join(words).capitalize() + "."
