"""View-models sitting between the note store and the presentation layer."""
