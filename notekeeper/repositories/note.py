"""
Note Repository.

Data access layer for notes and their schedules.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from notekeeper.models.generator import NoteGenerator
from notekeeper.models.note import Note, Schedule
from notekeeper.repositories.base import BaseRepository
from notekeeper.schemas.note import NoteAndSchedule, NoteRead, ScheduleRead


class ScheduleRepository(BaseRepository[Schedule]):
    """Repository for Schedule model."""

    model = Schedule


class NoteRepository(BaseRepository[Note]):
    """
    Repository for Note model.

    Inherits standard operations from BaseRepository and adds the
    note/schedule join and random generation.
    """

    model = Note

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.schedules = ScheduleRepository(session)

    async def find_all(self) -> list[NoteAndSchedule]:
        """
        Get every note with its schedule, ordered by note ID.

        Should a note own several schedules, the oldest one is used.

        Returns:
            List of note/schedule projections
        """
        result = await self.session.execute(
            select(Note, Schedule)
            .outerjoin(Schedule, Schedule.owner_id == Note.id)
            .order_by(Note.id, Schedule.id)
        )

        items: list[NoteAndSchedule] = []
        seen: set[int] = set()
        for note, schedule in result.all():
            if note.id in seen:
                continue
            seen.add(note.id)
            items.append(
                NoteAndSchedule(
                    note=NoteRead.model_validate(note),
                    schedule=ScheduleRead.model_validate(schedule) if schedule else None,
                )
            )
        return items

    async def generate_note(self, generator: NoteGenerator) -> int:
        """
        Insert a random note and, depending on the draw, a schedule it owns.

        Both inserts happen in the caller's transaction.

        Args:
            generator: Source of random notes and schedules

        Returns:
            ID of the inserted note
        """
        note_id = await self.insert(generator.random_note())
        schedule = generator.random_schedule()
        if schedule is not None:
            schedule.owner_id = note_id
            await self.schedules.insert(schedule)
        return note_id

    async def delete_notes(self) -> int:
        """Delete all notes. Their schedules are left untouched."""
        return await self.delete_all()

    async def delete_schedules(self) -> int:
        """Delete all schedules. Delete notes first to avoid orphans."""
        return await self.schedules.delete_all()
