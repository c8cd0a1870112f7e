"""
Application Composition.

NotesApp builds and owns the database, the preference store, the note
store and the view-model, and hands them to the presentation layer. It is
constructed explicitly at startup; nothing is kept in module globals.

Usage:
    async with NotesApp.from_config() as app:
        app.view_model.generate_note()
        await app.store.join()
"""

import random
from pathlib import Path
from typing import TypeVar

from notekeeper.core.concurrency import SerialTaskQueue
from notekeeper.core.database import NotesDatabase
from notekeeper.core.logging import get_logger
from notekeeper.core.preferences import PreferenceStore
from notekeeper.lifecycle.observable import Observable
from notekeeper.models.generator import NoteGenerator
from notekeeper.services.note import NoteStore
from notekeeper.viewmodels.note import SORT_ORDER_KEY, NoteViewModel

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_SEED_COUNT = 10


class NotesApp:
    """
    Owner of every long-lived component.

    Args:
        database: The notes database
        preferences: Preference store holding the sort order
        generator: Source of random notes
        seed_count: Notes generated when the database is first created
        sort_order_key: Preference key of the sort order
    """

    def __init__(
        self,
        database: NotesDatabase,
        preferences: PreferenceStore,
        generator: NoteGenerator | None = None,
        seed_count: int = DEFAULT_SEED_COUNT,
        sort_order_key: str = SORT_ORDER_KEY,
    ) -> None:
        self.database = database
        self.preferences = preferences
        self.seed_count = seed_count
        self.store = NoteStore(database, generator, SerialTaskQueue("note-store"))
        self.view_model = NoteViewModel(self.store, preferences, sort_order_key)
        self._started = False

    @classmethod
    def from_config(cls) -> "NotesApp":
        """Build the application from config/settings/*.yaml."""
        from notekeeper.core.config import get_app_config

        config = get_app_config()
        return cls(
            database=NotesDatabase.from_config(),
            preferences=PreferenceStore.from_config(),
            generator=NoteGenerator.from_config(),
            seed_count=config.database.seed_count,
            sort_order_key=config.preferences.sort_order_key,
        )

    @classmethod
    def in_directory(
        cls,
        data_dir: Path,
        seed_count: int = DEFAULT_SEED_COUNT,
        rng: random.Random | None = None,
    ) -> "NotesApp":
        """Build an application keeping its files in data_dir."""
        return cls(
            database=NotesDatabase.at_path(data_dir / "notes_database.db"),
            preferences=PreferenceStore(data_dir / "notes_prefs.yaml"),
            generator=NoteGenerator(rng=rng),
            seed_count=seed_count,
        )

    async def start(self) -> bool:
        """
        Open the database, populating it if it was just created.

        Population completes before this returns, so the first observer
        already sees the generated notes.

        Returns:
            True if the database was created by this call
        """
        created = await self.database.open()
        self._started = True
        if created and self.seed_count:
            logger.info("Populating new database", extra={"notes": self.seed_count})
            for _ in range(self.seed_count):
                self.store.generate_note()
            await self.store.join()
        return created

    async def snapshot(self, observable: Observable[T]) -> T | None:
        """
        Current value of a view-model observable, after pending writes.

        The observable is kept active while queued commands finish and the
        refreshes they trigger land, so the value read is not stale.
        """
        subscription = observable.subscribe(lambda _: None)
        try:
            await self.store.join()
            return observable.value
        finally:
            subscription.dispose()

    async def close(self) -> None:
        """Finish queued commands and release the database."""
        if not self._started:
            return
        await self.store.close()
        await self.database.close()
        self._started = False

    async def __aenter__(self) -> "NotesApp":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
