"""Tests for db.connection."""

from collections.abc import Generator
from pathlib import Path

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine

from config import DatabaseSettings
from db.connection import build_engine, init_database, schema_status
from db.models import Base


@pytest.fixture()
def file_engine(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[Engine, None, None]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    eng: Engine = build_engine(DatabaseSettings(sqlite_path=str(tmp_path / "ledger.db")))
    yield eng
    eng.dispose()


class TestBuildEngine:
    def test_sqlite_pragmas(self, file_engine: Engine) -> None:
        with file_engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
            assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"


class TestInitDatabase:
    def test_creates_every_table_once(self, file_engine: Engine) -> None:
        present, missing = schema_status(file_engine)
        assert present == []
        assert missing == sorted(Base.metadata.tables)

        assert init_database(engine=file_engine) == sorted(Base.metadata.tables)
        assert init_database(engine=file_engine) == []
        assert schema_status(file_engine) == (sorted(Base.metadata.tables), [])

    def test_drop_existing_recreates(self, file_engine: Engine) -> None:
        init_database(engine=file_engine)
        with file_engine.begin() as conn:
            conn.execute(
                text(
                    "INSERT INTO badge_counts (badge_type, count) VALUES ('ItsOnlyWaferThin', 3)"
                )
            )

        assert init_database(drop_existing=True, engine=file_engine) == sorted(Base.metadata.tables)
        with file_engine.connect() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM badge_counts")).scalar() == 0
