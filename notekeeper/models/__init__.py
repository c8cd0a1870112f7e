"""
Database Models.

Importing this package registers every table on Base.metadata.
"""

from notekeeper.models.base import Base
from notekeeper.models.enums import NoteState, NoteType
from notekeeper.models.note import Note, Schedule

__all__ = ["Base", "Note", "NoteState", "NoteType", "Schedule"]
