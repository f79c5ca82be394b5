"""Database layer for dentbooks application."""

from dentbooks.database.base import Database
from dentbooks.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
