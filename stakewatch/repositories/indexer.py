"""Repositories for Indexers and Delegators."""

from collections.abc import Sequence

from sqlalchemy import select

from db.models import Delegators, Indexers
from stakewatch.repositories.base import BaseRepository


class IndexerRepository(BaseRepository[Indexers]):
    model = Indexers

    def list_indexers(self, limit: int = 100, offset: int = 0) -> Sequence[Indexers]:
        stmt = select(Indexers).order_by(Indexers.id).offset(offset).limit(limit)
        return self.session.scalars(stmt).all()

    def list_over_delegated(self) -> Sequence[Indexers]:
        stmt = select(Indexers).where(Indexers.is_over_delegated.is_(True)).order_by(Indexers.id)
        return self.session.scalars(stmt).all()


class DelegatorRepository(BaseRepository[Delegators]):
    model = Delegators
