"""Repositories for the append-only logs: pool rewards, parameter updates, badges."""

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models import BadgeAwards, BadgeCounts, IndexerParameterUpdates, PoolRewards
from stakewatch.repositories.base import BaseRepository


class PoolRewardRepository(BaseRepository[PoolRewards]):
    model = PoolRewards

    def list_for_indexer(self, indexer_id: str, limit: int = 100) -> Sequence[PoolRewards]:
        stmt = (
            select(PoolRewards)
            .where(PoolRewards.indexer_id == indexer_id)
            .order_by(PoolRewards.block_number.desc(), PoolRewards.reward_type)
            .limit(limit)
        )
        return self.session.scalars(stmt).all()


class ParameterUpdateRepository(BaseRepository[IndexerParameterUpdates]):
    model = IndexerParameterUpdates

    def list_for_indexer(
        self, indexer_id: str, limit: int = 100
    ) -> Sequence[IndexerParameterUpdates]:
        stmt = (
            select(IndexerParameterUpdates)
            .where(IndexerParameterUpdates.indexer_id == indexer_id)
            .order_by(IndexerParameterUpdates.block_number.desc())
            .limit(limit)
        )
        return self.session.scalars(stmt).all()


class BadgeRepository:
    """Badge awards are keyed by (badge_type, id), so this does not use BaseRepository."""

    def __init__(self, session: Session) -> None:
        self.session: Session = session

    def get_award(self, badge_type: str, award_id: str) -> BadgeAwards | None:
        return self.session.get(BadgeAwards, (badge_type, award_id))

    def next_badge_number(self, badge_type: str) -> int:
        counter = self.session.get(BadgeCounts, badge_type)
        if counter is None:
            counter = BadgeCounts(badge_type=badge_type, count=0)
            self.session.add(counter)
        counter.count += 1
        self.session.flush()
        return counter.count

    def count_for(self, badge_type: str) -> int:
        counter = self.session.get(BadgeCounts, badge_type)
        return counter.count if counter else 0

    def save(self, award: BadgeAwards) -> BadgeAwards:
        self.session.add(award)
        self.session.flush()
        return award

    def list_for_indexer(self, indexer_id: str) -> Sequence[BadgeAwards]:
        stmt = (
            select(BadgeAwards)
            .where(BadgeAwards.indexer_id == indexer_id)
            .order_by(BadgeAwards.awarded_at_block, BadgeAwards.badge_type)
        )
        return self.session.scalars(stmt).all()
