"""Database factory functions for creating database instances."""

from typing import Optional

from feerecon.config import database_path as resolve_database_path
from feerecon.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FEERECON_DB_PATH
            environment variable, then defaults to ~/.feerecon/feerecon.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    database_url = f"sqlite:///{resolve_database_path(database_path)}"
    return SQLAlchemyDatabase(database_url)
