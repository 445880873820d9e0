"""Health endpoints."""

import logging
import os

from sqlalchemy.engine import Engine

from config import DatabaseSettings, get_settings
from db.connection import get_engine, schema_status
from stakewatch.services._types import DbInfoDict

logger: logging.Logger = logging.getLogger(__name__)


def get_db_info() -> DbInfoDict:
    """Gather DB info. Never raises."""
    try:
        db: DatabaseSettings = get_settings().database

        if db._use_postgres():
            backend_type: str = "postgres"
            url_or_path: str | None = db._redacted_postgres_dsn()
        else:
            backend_type = "sqlite"
            url_or_path = db._resolved_sqlite_path().as_posix()

        engine: Engine = get_engine()
        present: list[str] = []
        missing: list[str] = []
        try:
            present, missing = schema_status(engine)
        except Exception as e:
            logger.warning("Could not inspect DB: %s", e)
        return DbInfoDict(
            backend_type=backend_type,
            database_url_or_path=url_or_path,
            tables_present=present,
            tables_missing=missing,
            schema_initialized=bool(present) and not missing,
            pid=os.getpid(),
        )
    except Exception as e:
        logger.exception("Health DB check failed: %s", e)
        return DbInfoDict(
            backend_type="unknown",
            database_url_or_path=None,
            tables_present=[],
            tables_missing=[],
            schema_initialized=False,
            error=str(e),
            pid=os.getpid(),
        )
