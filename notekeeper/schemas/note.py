"""
Note Schemas.

Frozen pydantic projections of the database rows. Observers only ever see
these, never live ORM instances bound to a session.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from notekeeper.models.enums import NoteState, NoteType


class NoteRead(BaseModel):
    """Schema for a note."""

    id: int = Field(description="Note identifier, assigned on insert")
    title: str = Field(description="Note title")
    text: str = Field(description="Note body")
    type: NoteType = Field(description="What the note is about")
    state: NoteState = Field(description="Whether the note is done")
    creation_date: datetime = Field(description="Creation timestamp (UTC)")

    model_config = ConfigDict(from_attributes=True, frozen=True)


class ScheduleRead(BaseModel):
    """Schema for a schedule."""

    id: int = Field(description="Schedule identifier")
    owner_id: int = Field(description="Identifier of the owning note")
    date: datetime = Field(description="Due date (UTC)")

    model_config = ConfigDict(from_attributes=True, frozen=True)


class NoteAndSchedule(BaseModel):
    """A note paired with its schedule, if it has one."""

    note: NoteRead
    schedule: ScheduleRead | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_scheduled(self) -> bool:
        return self.schedule is not None
