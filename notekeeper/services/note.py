"""
Note Store.

Sole owner of the note and schedule tables. Exposes the live note list and
note count as observables, and runs write commands (generate, delete all)
through a serial queue.

Commands are fire-and-forget: they return immediately, never raise, and
report nothing. A failed write is logged and the queue moves on.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.core.concurrency import SerialTaskQueue
from notekeeper.core.database import NotesDatabase
from notekeeper.lifecycle.observable import Observable
from notekeeper.lifecycle.query import QueryObservable
from notekeeper.models.generator import NoteGenerator
from notekeeper.models.note import Note, Schedule
from notekeeper.repositories.note import NoteRepository
from notekeeper.schemas.note import NoteAndSchedule
from notekeeper.services.base import BaseService

NOTE_TABLES = (Note.__tablename__, Schedule.__tablename__)


async def _load_all(session: AsyncSession) -> tuple[NoteAndSchedule, ...]:
    return tuple(await NoteRepository(session).find_all())


async def _load_count(session: AsyncSession) -> int:
    return await NoteRepository(session).count()


class NoteStore(BaseService):
    """
    Store for notes and their schedules.

    Args:
        database: The notes database
        generator: Source of random notes for generate_note()
        queue: Write queue, a private one is created when omitted
    """

    def __init__(
        self,
        database: NotesDatabase,
        generator: NoteGenerator | None = None,
        queue: SerialTaskQueue | None = None,
    ) -> None:
        super().__init__(database)
        self._generator = generator or NoteGenerator()
        self._queue = queue or SerialTaskQueue("note-store")
        self._notes: QueryObservable[tuple[NoteAndSchedule, ...]] = QueryObservable(
            database, NOTE_TABLES, _load_all, name="notes",
        )
        self._count: QueryObservable[int] = QueryObservable(
            database, (Note.__tablename__,), _load_count, name="note-count",
        )

    @property
    def queue(self) -> SerialTaskQueue:
        return self._queue

    def observe_all(self) -> Observable[tuple[NoteAndSchedule, ...]]:
        """Every note with its schedule, ordered by note ID."""
        return self._notes

    def observe_count(self) -> Observable[int]:
        """Number of notes."""
        return self._count

    def generate_note(self) -> None:
        """Queue the creation of one random note, possibly with a schedule."""
        self._log_debug("Queueing note generation")
        self._queue.submit("generate_note", self._generate_note)

    def delete_all_notes(self) -> None:
        """Queue the deletion of every note and every schedule."""
        self._log_debug("Queueing deletion of all notes")
        self._queue.submit("delete_all_notes", self._delete_all_notes)

    async def _generate_note(self) -> int:
        note_id = await self._execute_write(
            "generate_note",
            NOTE_TABLES,
            lambda session: NoteRepository(session).generate_note(self._generator),
        )
        self._log_operation("Note generated", note_id=note_id)
        return note_id

    async def _delete_all_notes(self) -> tuple[int, int]:
        async def _delete(session: AsyncSession) -> tuple[int, int]:
            repo = NoteRepository(session)
            notes = await repo.delete_notes()
            schedules = await repo.delete_schedules()
            return notes, schedules

        notes, schedules = await self._execute_write("delete_all_notes", NOTE_TABLES, _delete)
        self._log_operation("Notes deleted", notes=notes, schedules=schedules)
        return notes, schedules

    async def join(self) -> None:
        """
        Wait for every queued command and the refreshes they triggered.

        Once this returns, active observers have received the state left by
        the last command.
        """
        await self._queue.join()
        await self._notes.wait_refreshed()
        await self._count.wait_refreshed()

    async def close(self) -> None:
        """Drain the queue and stop accepting commands."""
        await self.join()
        await self._queue.close()
