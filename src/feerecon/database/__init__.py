"""Database layer for feerecon application."""

from feerecon.database.base import Database
from feerecon.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
