"""Factories building Database instances from paths, URLs or the environment."""

import os
from pathlib import Path
from typing import Optional

from finwise.database.sqlalchemy_db import SQLAlchemyDatabase

DEFAULT_DB_DIR = Path.home() / ".finwise"
DEFAULT_DB_NAME = "finwise.db"


def default_database_path() -> Path:
    """Return the database file used when nothing else is configured."""
    return DEFAULT_DB_DIR / DEFAULT_DB_NAME


def sqlite_url(database_path: str | Path) -> str:
    """Build a SQLAlchemy URL for a SQLite file, creating its directory."""
    path = Path(database_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite-backed database.

    Resolution order: ``database_path``, then ``FINWISE_DB_PATH``, then
    ``~/.finwise/finwise.db``.
    """
    database_path = database_path or os.environ.get("FINWISE_DB_PATH")
    if not database_path:
        database_path = default_database_path()
    return SQLAlchemyDatabase(sqlite_url(database_path))


def create_database(database_url: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a database from a SQLAlchemy URL.

    ``FINWISE_DATABASE_URL`` is used when no URL is given, e.g. for a
    PostgreSQL deployment; without either, falls back to the SQLite file.
    """
    database_url = database_url or os.environ.get("FINWISE_DATABASE_URL")
    if not database_url:
        return create_sqlite_database()
    return SQLAlchemyDatabase(database_url)
