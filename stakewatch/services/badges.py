"""Milestone badges awarded on indexer state transitions.

The awarder only reads ledger state; it writes badge records and counters.
Slashing and reward compounding can move an indexer across the
over-delegation line, but those events never earn ItsOnlyWaferThin.
"""

import structlog
from sqlalchemy.orm import Session

from db.enums import BadgeType
from db.models import BadgeAwards
from stakewatch.repositories.logs import BadgeRepository
from stakewatch.services.ledger import IndexerLedger, IndexerState
from stakewatch.services.schemas.events import BlockRef

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def badge_award_id(indexer_id: str, block_number: int) -> str:
    return f"{indexer_id}-{block_number}"


def becomes_over_delegated(before: IndexerState, after: IndexerState) -> bool:
    return not before.is_over_delegated and after.is_over_delegated


class BadgeAwarder:
    def __init__(self, session: Session) -> None:
        self.session: Session = session
        self._repo: BadgeRepository = BadgeRepository(session)

    def evaluate(
        self,
        before: IndexerState,
        ledger: IndexerLedger,
        block: BlockRef,
        check_over_delegation: bool = True,
    ) -> list[BadgeType]:
        """Award every badge the transition earns. Returns the badge types awarded."""
        awarded: list[BadgeType] = []
        if ledger.created and self._award(BadgeType.AN_INDEXER_IS_BORN, ledger.id, block):
            awarded.append(BadgeType.AN_INDEXER_IS_BORN)
        if (
            check_over_delegation
            and becomes_over_delegated(before, ledger.state())
            and self._award(BadgeType.ITS_ONLY_WAFER_THIN, ledger.id, block)
        ):
            awarded.append(BadgeType.ITS_ONLY_WAFER_THIN)
        return awarded

    def _award(self, badge_type: BadgeType, indexer_id: str, block: BlockRef) -> bool:
        award_id: str = badge_award_id(indexer_id, block.number)
        if self._repo.get_award(badge_type.value, award_id) is not None:
            return False

        badge_number: int = self._repo.next_badge_number(badge_type.value)
        self._repo.save(
            BadgeAwards(
                badge_type=badge_type.value,
                id=award_id,
                indexer_id=indexer_id,
                awarded_at_block=block.number,
                awarded_at_timestamp=block.timestamp,
                badge_number=badge_number,
            )
        )
        logger.info(
            "Badge awarded",
            badge=badge_type.value,
            indexer=indexer_id,
            block=block.number,
            badge_number=badge_number,
        )
        return True
