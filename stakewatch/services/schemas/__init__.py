"""Shared dataclasses for stakewatch services."""

from stakewatch.services.schemas.events import BlockRef, ChainEvent
from stakewatch.services.schemas.results import (
    DispatchResult,
    ReplayResult,
    RewardSplit,
)

__all__ = [
    # Event schemas
    "BlockRef",
    "ChainEvent",
    # Result schemas
    "DispatchResult",
    "ReplayResult",
    "RewardSplit",
]
