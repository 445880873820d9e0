"""Tests for all API routes via FastAPI TestClient."""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.routes import indexers
from db.connection import get_db
from db.enums import EventType
from db.models import Base
from stakewatch.services.badges import BadgeAwarder
from stakewatch.services.dispatch import EventDispatcher
from stakewatch.services.schemas.events import BlockRef, ChainEvent

GENESIS: int = 1608163200
DAY: int = 86400
INDEXER: str = "0x00000000000000000000000000000000000000aa"
OTHER: str = "0x00000000000000000000000000000000000000bb"
ONE_TOKEN: int = 10**18


def _create_test_app() -> FastAPI:
    """Minimal app without lifespan (no schema init)."""
    test_app: FastAPI = FastAPI()

    @test_app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    test_app.include_router(indexers.router)
    return test_app


_test_app: FastAPI = _create_test_app()


@pytest.fixture()
def _route_engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine with check_same_thread=False for TestClient."""
    eng: Engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def _route_session(_route_engine: Engine) -> Generator[Session, None, None]:
    factory: sessionmaker[Session] = sessionmaker(
        bind=_route_engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    sess: Session = factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture()
def client(_route_session: Session) -> Generator[TestClient, None, None]:
    """TestClient with DB dependency overridden to use test session."""

    def _override_db() -> Generator[Session, None, None]:
        yield _route_session

    _test_app.dependency_overrides[get_db] = _override_db
    with TestClient(_test_app, raise_server_exceptions=True) as c:
        yield c
    _test_app.dependency_overrides.clear()


@pytest.fixture()
def session(_route_session: Session) -> Session:
    """Alias so seed helpers can use the same session as the client."""
    return _route_session


# ---------- seed helpers ----------


def _dispatch(
    session: Session,
    event_type: EventType,
    params: dict[str, object],
    block: int,
    day: int = 0,
    indexer: str = INDEXER,
) -> None:
    EventDispatcher(session, badges=BadgeAwarder(session)).process(
        ChainEvent(
            event_type=event_type,
            indexer=indexer,
            block=BlockRef(number=block, timestamp=GENESIS + day * DAY),
            params=params,
        )
    )


def _seed_ledger(session: Session) -> None:
    _dispatch(
        session,
        EventType.DELEGATION_PARAMETERS_UPDATED,
        {"indexingRewardCut": 500_000, "queryFeeCut": 0, "cooldownBlocks": 0},
        block=1,
    )
    _dispatch(session, EventType.STAKE_DEPOSITED, {"tokens": str(1000 * ONE_TOKEN)}, block=2)
    _dispatch(
        session,
        EventType.STAKE_DELEGATED,
        {"tokens": str(20000 * ONE_TOKEN), "shares": "20000", "delegator": "0xdd"},
        block=3,
    )
    _dispatch(session, EventType.REWARDS_ASSIGNED, {"amount": str(100 * ONE_TOKEN)}, block=4, day=1)
    _dispatch(session, EventType.STAKE_DEPOSITED, {"tokens": str(ONE_TOKEN)}, block=5, indexer=OTHER)


# ---------- health ----------


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ---------- indexers ----------


class TestListIndexers:
    def test_empty(self, client: TestClient) -> None:
        resp = client.get("/api/indexers")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_with_data(self, client: TestClient, session: Session) -> None:
        _seed_ledger(session)
        resp = client.get("/api/indexers")
        assert resp.status_code == 200
        assert [i["id"] for i in resp.json()] == [INDEXER, OTHER]

    def test_over_delegated_filter(self, client: TestClient, session: Session) -> None:
        _seed_ledger(session)
        resp = client.get("/api/indexers", params={"over_delegated": True})
        assert [i["id"] for i in resp.json()] == [INDEXER]

    def test_pagination(self, client: TestClient, session: Session) -> None:
        _seed_ledger(session)
        resp = client.get("/api/indexers", params={"limit": 1, "offset": 1})
        assert [i["id"] for i in resp.json()] == [OTHER]

    def test_invalid_limit(self, client: TestClient) -> None:
        assert client.get("/api/indexers", params={"limit": 0}).status_code == 422


class TestGetIndexer:
    def test_found(self, client: TestClient, session: Session) -> None:
        _seed_ledger(session)
        resp = client.get(f"/api/indexers/{INDEXER}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["ownStake"] == "1000"
        assert data["delegatedStake"] == "20050"
        assert data["maximumDelegation"] == "16000"
        assert data["isOverDelegated"] is True
        assert data["indexingRewardCutRatio"] == "0.5"
        assert data["queryFeeCutRatio"] == "0"
        assert data["delegatorParameterCooldownBlock"] is None
        assert data["delegationPoolShares"] == "20001"
        assert data["lastSnapshotId"] == f"{INDEXER}-1"

    def test_address_is_case_insensitive(self, client: TestClient, session: Session) -> None:
        _seed_ledger(session)
        resp = client.get(f"/api/indexers/{INDEXER.replace('aa', 'AA')}")
        assert resp.status_code == 200
        assert resp.json()["id"] == INDEXER

    def test_not_found(self, client: TestClient) -> None:
        resp = client.get("/api/indexers/0xnope")
        assert resp.status_code == 404


class TestIndexerHistory:
    def test_snapshots(self, client: TestClient, session: Session) -> None:
        _seed_ledger(session)
        resp = client.get(f"/api/indexers/{INDEXER}/snapshots")
        assert resp.status_code == 200
        data = resp.json()
        assert [s["dayIndex"] for s in data] == [1, 0]
        assert data[0]["delegatedStakeInitial"] == "20000"
        assert data[0]["delegationRewards"] == "50"
        assert data[1]["ownStakeDelta"] == "1000"
        assert data[1]["parametersChangeCount"] == 1

    def test_snapshots_limit(self, client: TestClient, session: Session) -> None:
        _seed_ledger(session)
        resp = client.get(f"/api/indexers/{INDEXER}/snapshots", params={"limit": 1})
        assert [s["dayIndex"] for s in resp.json()] == [1]

    def test_pool_rewards(self, client: TestClient, session: Session) -> None:
        _seed_ledger(session)
        resp = client.get(f"/api/indexers/{INDEXER}/pool-rewards")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 1
        assert data[0]["rewardType"] == "IndexingReward"
        assert data[0]["amount"] == "50"
        assert data[0]["pooledTokenRatio"] == "0.0025"

    def test_parameter_updates(self, client: TestClient, session: Session) -> None:
        _seed_ledger(session)
        resp = client.get(f"/api/indexers/{INDEXER}/parameter-updates")
        assert resp.status_code == 200
        data = resp.json()
        assert len(data) == 1
        assert data[0]["previousIndexingRewardCutRatio"] is None
        assert data[0]["indexingRewardCutRatio"] == "0.5"

    def test_badges(self, client: TestClient, session: Session) -> None:
        _seed_ledger(session)
        resp = client.get(f"/api/indexers/{INDEXER}/badges")
        assert resp.status_code == 200
        assert [(b["badgeType"], b["awardedAtBlock"]) for b in resp.json()] == [
            ("AnIndexerIsBorn", 1),
            ("ItsOnlyWaferThin", 3),
        ]

    @pytest.mark.parametrize("suffix", ["snapshots", "pool-rewards", "parameter-updates", "badges"])
    def test_unknown_indexer(self, client: TestClient, suffix: str) -> None:
        resp = client.get(f"/api/indexers/0xnope/{suffix}")
        assert resp.status_code == 404
