"""
Enum definitions for notes.

Persisted by member name.
"""
from enum import Enum


class NoteType(str, Enum):
    """What a note is about."""
    NONE = "NONE"
    TODO = "TODO"
    SHOPPING = "SHOPPING"
    WORK = "WORK"
    FAMILY = "FAMILY"


class NoteState(str, Enum):
    """Lifecycle state of a note."""
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
