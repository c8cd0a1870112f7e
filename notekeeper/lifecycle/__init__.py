"""Observable values: in-memory, database-backed and preference-backed."""
