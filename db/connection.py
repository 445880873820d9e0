"""Ledger database: the shared engine, unit-of-work sessions and schema setup.

Amounts are stored in text columns (db.types), so the same schema runs on
SQLite and Postgres. SQLite connections get foreign keys and WAL so the API
can read while a replay writes.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config import DatabaseSettings, get_settings
from db.models import Base

logger = logging.getLogger(__name__)

SQLITE_PRAGMAS: tuple[str, ...] = (
    "PRAGMA foreign_keys=ON",
    "PRAGMA journal_mode=WAL",
    "PRAGMA busy_timeout=30000",
)

_engine: Engine | None = None
_sessions: sessionmaker[Session] | None = None


def enable_sqlite_pragmas(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, connection_record):
        cur = dbapi_conn.cursor()
        for pragma in SQLITE_PRAGMAS:
            cur.execute(pragma)
        cur.close()


def build_engine(db: DatabaseSettings, echo: bool = False) -> Engine:
    """Engine for the configured backend: pooled Postgres or a local SQLite file."""
    if db._use_postgres():
        return create_engine(
            db.url,
            echo=echo,
            pool_size=db.pool_size,
            pool_timeout=db.pool_timeout,
            pool_recycle=db.pool_recycle,
            pool_pre_ping=True,
        )
    engine: Engine = create_engine(db.url, echo=echo)
    enable_sqlite_pragmas(engine)
    return engine


def get_engine() -> Engine:
    global _engine

    if _engine is None:
        settings = get_settings()
        _engine = build_engine(settings.database, echo=settings.debug)
        logger.info("Ledger DB: %s", settings.database.db_info_for_logging())
    return _engine


def dispose_engine() -> None:
    """Close pooled connections and forget the shared engine."""
    global _engine, _sessions
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _sessions = None


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """One unit of ledger work. Commits on success, rolls back on any error."""
    global _sessions
    if _sessions is None:
        _sessions = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False)

    session: Session = _sessions()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency."""
    with get_session() as session:
        yield session


def schema_status(engine: Engine) -> tuple[list[str], list[str]]:
    """Ledger tables (present, missing) in the database behind `engine`."""
    existing: set[str] = set(inspect(engine).get_table_names())
    expected: set[str] = set(Base.metadata.tables)
    return sorted(existing & expected), sorted(expected - existing)


def init_database(drop_existing: bool = False, engine: Engine | None = None) -> list[str]:
    """Create missing ledger tables. Returns the tables this call created."""
    engine = engine or get_engine()
    if drop_existing:
        Base.metadata.drop_all(engine)
        logger.info("Schema init: dropped ledger tables")

    _, missing = schema_status(engine)
    Base.metadata.create_all(engine)

    if missing:
        logger.info("Schema init: created tables %s", missing)
    else:
        logger.info("Schema init: all tables present")
    return missing
