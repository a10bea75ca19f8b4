"""SQLite access layer."""
from datacollections.database.connection import Database

__all__ = ["Database"]
