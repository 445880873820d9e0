"""History of indexer fee-cut parameter changes."""

from decimal import Decimal

import structlog
from sqlalchemy.orm import Session

from db.models import IndexerParameterUpdates
from stakewatch.repositories.logs import ParameterUpdateRepository
from stakewatch.services.schemas.events import BlockRef

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def parameters_changed(
    previous: tuple[Decimal | None, Decimal | None],
    new: tuple[Decimal, Decimal],
) -> bool:
    """A first-ever update (either previous value absent) counts as a change."""
    prev_indexing, prev_query = previous
    if prev_indexing is None or prev_query is None:
        return True
    return prev_indexing != new[0] or prev_query != new[1]


def parameter_update_id(indexer_id: str, block_number: int) -> str:
    return f"{indexer_id}-{block_number}"


class ParameterUpdateLog:
    """Writes IndexerParameterUpdates entries, one per indexer and block."""

    def __init__(self, session: Session) -> None:
        self.session: Session = session
        self._repo: ParameterUpdateRepository = ParameterUpdateRepository(session)

    def record(
        self,
        indexer_id: str,
        block: BlockRef,
        previous: tuple[Decimal | None, Decimal | None],
        new: tuple[Decimal, Decimal],
        cooldown_block: int | None,
    ) -> IndexerParameterUpdates:
        """Upsert the entry for this block.

        A second update in the same block keeps the first entry's "previous"
        values and overwrites the new ones.
        """
        entry, created = self._repo.get_or_create(
            parameter_update_id(indexer_id, block.number),
            lambda: IndexerParameterUpdates(
                id=parameter_update_id(indexer_id, block.number),
                indexer_id=indexer_id,
                block_number=block.number,
                timestamp=block.timestamp,
                previous_indexing_reward_cut_ratio=previous[0],
                previous_query_fee_cut_ratio=previous[1],
                indexing_reward_cut_ratio=new[0],
                query_fee_cut_ratio=new[1],
                cooldown_block=cooldown_block,
            ),
        )
        if not created:
            entry.indexing_reward_cut_ratio = new[0]
            entry.query_fee_cut_ratio = new[1]
            entry.cooldown_block = cooldown_block
            self._repo.save(entry)

        logger.info(
            "Parameter update recorded",
            indexer=indexer_id,
            block=block.number,
            indexing_reward_cut=str(new[0]),
            query_fee_cut=str(new[1]),
        )
        return entry
