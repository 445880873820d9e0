"""Repository layer for data access."""

from stakewatch.repositories.base import BaseRepository
from stakewatch.repositories.indexer import DelegatorRepository, IndexerRepository
from stakewatch.repositories.logs import (
    BadgeRepository,
    ParameterUpdateRepository,
    PoolRewardRepository,
)
from stakewatch.repositories.snapshot import IndexerSnapshotRepository

__all__ = [
    "BaseRepository",
    "BadgeRepository",
    "DelegatorRepository",
    "IndexerRepository",
    "IndexerSnapshotRepository",
    "ParameterUpdateRepository",
    "PoolRewardRepository",
]
