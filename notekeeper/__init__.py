"""
Notekeeper.

- core/: Configuration, logging, exceptions, database, task queue, preferences
- models/: SQLAlchemy models and random note generation
- schemas/: Read-only pydantic projections handed to observers
- repositories/: Session-scoped data access for notes and schedules
- services/: The note store (observable collections and write commands)
- lifecycle/: Observable values, database-backed and preference-backed
- viewmodels/: Sort policy and the sorted note view
- presentation/: Row dispatch and rich views
- cli/: Interactive shell (Rich)
"""

__version__ = "1.0.0"
