"""Statement executors: sqlite3 and SQLAlchemy backed."""

from ormspine.executor.engine import EngineCursor, EngineExecutor, create_orm_engine
from ormspine.executor.sqlite import SQLiteCursor, SQLiteExecutor

__all__ = [
    "EngineCursor",
    "EngineExecutor",
    "SQLiteCursor",
    "SQLiteExecutor",
    "create_orm_engine",
]
