"""Database layer for budgetit application."""

from budgetit.database.base import Database, UnitOfWork
from budgetit.database.factories import create_sqlite_database

__all__ = ["Database", "UnitOfWork", "create_sqlite_database"]
