"""
Note and Schedule Models.

A note owns at most one schedule. The link is the schedule's owner_id;
there is no foreign key, so deleting notes leaves their schedules behind
unless schedules are deleted as well.
"""

from datetime import datetime

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from notekeeper.models.base import Base, EpochMillis, utc_now
from notekeeper.models.enums import NoteState, NoteType


class Note(Base):
    """
    Note database model.

    The id is assigned by SQLite on insert. AUTOINCREMENT keeps ids
    monotonic, even after every note has been deleted.
    """

    __tablename__ = "note"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[NoteType] = mapped_column(
        SAEnum(NoteType, native_enum=False, length=16),
        nullable=False,
        default=NoteType.NONE,
    )
    state: Mapped[NoteState] = mapped_column(
        SAEnum(NoteState, native_enum=False, length=16),
        nullable=False,
        default=NoteState.IN_PROGRESS,
    )
    creation_date: Mapped[datetime] = mapped_column(
        EpochMillis,
        nullable=False,
        default=utc_now,
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r})>"


class Schedule(Base):
    """Due date attached to a note."""

    __tablename__ = "schedule"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    date: Mapped[datetime] = mapped_column(EpochMillis, nullable=False)

    def __repr__(self) -> str:
        return f"<Schedule(id={self.id}, owner_id={self.owner_id}, date={self.date})>"
