"""Task organizer: tasks, categories and an audit trail over one SQLite file."""

__version__ = "0.3.0"
