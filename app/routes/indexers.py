"""Indexer ledger endpoints (read-only)."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.dependencies import get_db
from stakewatch.services._types import (
    BadgeDict,
    IndexerDict,
    ParameterUpdateDict,
    PoolRewardDict,
    SnapshotDict,
)
from stakewatch.services.queries import IndexerQueryService

router = APIRouter(prefix="/api/indexers", tags=["indexers"])


def _require_indexer(svc: IndexerQueryService, indexer_id: str) -> None:
    if not svc.indexer_exists(indexer_id):
        raise HTTPException(status_code=404, detail="Indexer not found")


@router.get("")
def list_indexers(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    over_delegated: bool = False,
    db: Session = Depends(get_db),
) -> list[IndexerDict]:
    svc = IndexerQueryService(db)
    return svc.list_indexers(limit=limit, offset=offset, over_delegated_only=over_delegated)


@router.get("/{indexer_id}")
def get_indexer(indexer_id: str, db: Session = Depends(get_db)) -> IndexerDict:
    svc = IndexerQueryService(db)
    indexer = svc.get_indexer(indexer_id)
    if not indexer:
        raise HTTPException(status_code=404, detail="Indexer not found")
    return indexer


@router.get("/{indexer_id}/snapshots")
def list_snapshots(
    indexer_id: str,
    limit: int = Query(default=30, ge=1, le=365),
    db: Session = Depends(get_db),
) -> list[SnapshotDict]:
    svc = IndexerQueryService(db)
    _require_indexer(svc, indexer_id)
    return svc.list_snapshots(indexer_id, limit=limit)


@router.get("/{indexer_id}/pool-rewards")
def list_pool_rewards(
    indexer_id: str,
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[PoolRewardDict]:
    svc = IndexerQueryService(db)
    _require_indexer(svc, indexer_id)
    return svc.list_pool_rewards(indexer_id, limit=limit)


@router.get("/{indexer_id}/parameter-updates")
def list_parameter_updates(
    indexer_id: str,
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[ParameterUpdateDict]:
    svc = IndexerQueryService(db)
    _require_indexer(svc, indexer_id)
    return svc.list_parameter_updates(indexer_id, limit=limit)


@router.get("/{indexer_id}/badges")
def list_badges(indexer_id: str, db: Session = Depends(get_db)) -> list[BadgeDict]:
    svc = IndexerQueryService(db)
    _require_indexer(svc, indexer_id)
    return svc.list_badges(indexer_id)
