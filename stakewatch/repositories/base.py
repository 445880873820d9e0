"""Base repository with load-or-create and upsert helpers."""

from collections.abc import Callable, Sequence
from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db.models import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Base repository over a single model keyed by a string id.

    Entities resolve through the session identity map, so repeated lookups of
    the same id within a session return the same object.
    """

    model: type[T]

    def __init__(self, session: Session) -> None:
        self.session: Session = session

    def get_by_id(self, id: str) -> T | None:
        return self.session.get(self.model, id)

    def get_or_create(self, id: str, factory: Callable[[], T]) -> tuple[T, bool]:
        """Load the entity, or build it with `factory` and persist it.

        Returns the entity and whether this call created it.
        """
        entity = self.get_by_id(id)
        if entity is not None:
            return entity, False
        entity = factory()
        self.save(entity)
        return entity, True

    def save(self, entity: T) -> T:
        self.session.add(entity)
        self.session.flush()
        return entity

    def count(self) -> int:
        stmt = select(func.count()).select_from(self.model)
        return self.session.scalar(stmt) or 0

    def exists(self, id: str) -> bool:
        return self.get_by_id(id) is not None

    def get_all(self, limit: int | None = None, offset: int = 0) -> Sequence[T]:
        stmt = select(self.model).offset(offset)
        if limit:
            stmt = stmt.limit(limit)
        return self.session.scalars(stmt).all()
