"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Every test that touches the database gets its own SQLite file under
tmp_path, so tests never share state and need no cleanup between runs.
"""

import asyncio
import random
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from notekeeper.core.database import NotesDatabase
from notekeeper.core.preferences import PreferenceStore
from notekeeper.models.enums import NoteState, NoteType
from notekeeper.models.generator import NoteGenerator
from notekeeper.schemas.note import NoteAndSchedule, NoteRead, ScheduleRead
from notekeeper.services.note import NoteStore
from notekeeper.viewmodels.note import NoteViewModel

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# Helpers
# =============================================================================


class Recorder:
    """Observer collecting every value it receives."""

    def __init__(self) -> None:
        self.values: list[Any] = []

    def __call__(self, value: Any) -> None:
        self.values.append(value)

    @property
    def last(self) -> Any:
        return self.values[-1]

    @property
    def count(self) -> int:
        return len(self.values)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll predicate on the event loop until it holds or timeout expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.01)


def make_item(
    note_id: int,
    created_minutes: int = 0,
    due_minutes: int | None = None,
    state: NoteState = NoteState.IN_PROGRESS,
    note_type: NoteType = NoteType.NONE,
) -> NoteAndSchedule:
    """Build a NoteAndSchedule with times relative to BASE_TIME."""
    note = NoteRead(
        id=note_id,
        title=f"Note {note_id}",
        text=f"Text of note {note_id}",
        type=note_type,
        state=state,
        creation_date=BASE_TIME + timedelta(minutes=created_minutes),
    )
    schedule = None
    if due_minutes is not None:
        schedule = ScheduleRead(
            id=note_id,
            owner_id=note_id,
            date=BASE_TIME + timedelta(minutes=due_minutes),
        )
    return NoteAndSchedule(note=note, schedule=schedule)


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def recorder() -> Recorder:
    """A fresh observer recording every emission."""
    return Recorder()


@pytest.fixture
def recorder_factory() -> type[Recorder]:
    """Recorder class, for tests needing several observers."""
    return Recorder


@pytest.fixture
def eventually() -> Callable[..., Any]:
    """Async polling helper: await eventually(lambda: condition)."""
    return wait_until


@pytest.fixture
def base_time() -> datetime:
    """Reference instant item_factory offsets are relative to."""
    return BASE_TIME


@pytest.fixture
def item_factory() -> Callable[..., NoteAndSchedule]:
    """Factory for note/schedule items with deterministic timestamps."""
    return make_item


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible generated notes."""
    return random.Random(1234)


@pytest.fixture
def generator(rng: random.Random) -> NoteGenerator:
    return NoteGenerator(rng=rng)


@pytest.fixture
async def database(tmp_path) -> AsyncGenerator[NotesDatabase, None]:
    """An opened, empty notes database in tmp_path."""
    db = NotesDatabase.at_path(tmp_path / "notes.db")
    await db.open()
    yield db
    await db.close()


@pytest.fixture
def preferences(tmp_path) -> PreferenceStore:
    """A preference store backed by a YAML file in tmp_path."""
    return PreferenceStore(tmp_path / "prefs.yaml")


@pytest.fixture
async def store(
    database: NotesDatabase, generator: NoteGenerator,
) -> AsyncGenerator[NoteStore, None]:
    note_store = NoteStore(database, generator)
    yield note_store
    await note_store.close()


@pytest.fixture
def view_model(store: NoteStore, preferences: PreferenceStore) -> NoteViewModel:
    return NoteViewModel(store, preferences)
