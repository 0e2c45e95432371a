"""Database engine and session management for the market cache."""

import logging
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from macro_dashboard.config.settings import get_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# Milliseconds a connection waits on a locked SQLite file before failing
SQLITE_BUSY_TIMEOUT_MS = 5000

# Module-level engine state, rebuilt by reset_database()
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _is_sqlite_file(database_url: str) -> bool:
    return database_url.startswith("sqlite") and ":memory:" not in database_url


def _create_engine(database_url: str) -> Engine:
    """
    Create an engine for the configured URL.

    File-backed SQLite runs in WAL mode so the background refresh thread can
    write while API requests read.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False)

    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False},
        echo=False,
    )
    if _is_sqlite_file(database_url):

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.execute(f"PRAGMA busy_timeout={SQLITE_BUSY_TIMEOUT_MS}")
            cursor.close()

    return engine


def get_engine() -> Engine:
    """Get or create the database engine from settings."""
    global _engine
    if _engine is None:
        database_url = get_settings().get_database_url()
        _engine = _create_engine(database_url)
        logger.info(f"Using database {_engine.url.render_as_string(hide_password=True)}")
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory bound to the engine."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _SessionLocal


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def get_session() -> Session:
    """Open a session owned by the caller (scripts, scheduler cycles)."""
    return get_session_factory()()


def init_db() -> None:
    """Create the market cache tables if they do not exist."""
    # Registers the ORM tables on Base
    from macro_dashboard.repositories.sqlalchemy import orm_models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def init_db_with_path(db_path: Path) -> None:
    """Point the engine at a SQLite file and create the tables there."""
    global _engine, _SessionLocal

    reset_database()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    _engine = _create_engine(f"sqlite:///{db_path}")
    _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    logger.info(f"Using database file {db_path}")

    init_db()


def reset_database() -> None:
    """Dispose the engine so the next access rebuilds it from settings."""
    global _engine, _SessionLocal

    if _engine is not None:
        _engine.dispose()

    _engine = None
    _SessionLocal = None
