"""Database layer: abstract interface and SQLAlchemy-backed factories."""

from finwise.database.base import Database
from finwise.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
