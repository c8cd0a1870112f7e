"""Session-scoped data access for notes and schedules."""
