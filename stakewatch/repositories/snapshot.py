"""Repository for IndexerSnapshots."""

from collections.abc import Sequence

from sqlalchemy import select

from db.models import IndexerSnapshots
from stakewatch.repositories.base import BaseRepository


class IndexerSnapshotRepository(BaseRepository[IndexerSnapshots]):
    model = IndexerSnapshots

    def list_for_indexer(self, indexer_id: str, limit: int = 30) -> Sequence[IndexerSnapshots]:
        """Most recent snapshots first."""
        stmt = (
            select(IndexerSnapshots)
            .where(IndexerSnapshots.indexer_id == indexer_id)
            .order_by(IndexerSnapshots.day_index.desc())
            .limit(limit)
        )
        return self.session.scalars(stmt).all()
