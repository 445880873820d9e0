"""Result dataclasses returned by service operations."""

from dataclasses import dataclass, field
from decimal import Decimal

from db.enums import BadgeType, EventType


@dataclass(frozen=True)
class RewardSplit:
    indexer_share: Decimal
    delegator_share: Decimal


@dataclass
class DispatchResult:
    indexer_id: str
    event_type: EventType
    created: bool
    badges_awarded: list[BadgeType] = field(default_factory=list)


@dataclass
class ReplayResult:
    run_id: str
    events_processed: int
    events_failed: int
    indexers_touched: int
    badges_awarded: int
    block_range: tuple[int, int] | None
    errors: list[str]
