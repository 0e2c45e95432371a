"""SQLAlchemy repository implementations."""

from macro_dashboard.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_db,
    get_session,
    init_db,
    init_db_with_path,
    reset_database,
    Base,
)
from macro_dashboard.repositories.sqlalchemy.cache_store import SqlAlchemyCacheStore

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_session",
    "init_db",
    "init_db_with_path",
    "reset_database",
    "Base",
    "SqlAlchemyCacheStore",
]
