"""
CLI Module.

Interactive shell built with Rich on top of a running NotesApp. The
one-shot commands live in the root cli.py (click).

Usage:
    python cli.py --help
    python cli.py list --sort by_eta
    python cli.py shell  # Interactive mode
"""
