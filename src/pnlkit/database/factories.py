"""Database factory functions for creating database instances."""

import os
from typing import Optional

from pnlkit.config import default_database_path
from pnlkit.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks PNLKIT_DB_PATH
            environment variable, then defaults to ~/.pnlkit/pnlkit.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("PNLKIT_DB_PATH")

    if database_path is None:
        default_path = default_database_path()
        default_path.parent.mkdir(exist_ok=True)
        database_path = str(default_path)

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_database(
    database_url: Optional[str] = None, database_path: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create a database from a SQLAlchemy URL, falling back to SQLite.

    Args:
        database_url: Any SQLAlchemy URL (e.g. a Postgres DSN). If None,
            checks PNLKIT_DB_URL
        database_path: SQLite file used when no URL is configured

    Returns:
        SQLAlchemyDatabase instance
    """
    if database_url is None:
        database_url = os.environ.get("PNLKIT_DB_URL")

    if database_url:
        return SQLAlchemyDatabase(database_url)
    return create_sqlite_database(database_path=database_path)
