"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from moneymind.database.sqlalchemy_db import SQLAlchemyDatabase

DEFAULT_DATA_DIR = Path.home() / ".moneymind"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks MONEYMIND_DB_PATH
            environment variable, then defaults to ~/.moneymind/moneymind.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("MONEYMIND_DB_PATH")

    if database_path is None:
        DEFAULT_DATA_DIR.mkdir(exist_ok=True)
        database_path = str(DEFAULT_DATA_DIR / "moneymind.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)
