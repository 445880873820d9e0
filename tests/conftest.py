"""Shared fixtures: in-memory SQLite ledger with foreign keys enforced."""

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.connection import enable_sqlite_pragmas
from db.models import Base
from stakewatch.services.badges import BadgeAwarder
from stakewatch.services.dispatch import EventDispatcher


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    eng: Engine = create_engine("sqlite:///:memory:", echo=False)
    enable_sqlite_pragmas(eng)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session(engine: Engine) -> Generator[Session, None, None]:
    factory: sessionmaker[Session] = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    sess: Session = factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture()
def dispatcher(session: Session) -> EventDispatcher:
    """Dispatcher with badge awards enabled, bound to the test session."""
    return EventDispatcher(session, badges=BadgeAwarder(session))
