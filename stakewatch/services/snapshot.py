"""Per-day indexer snapshots with trailing reward windows."""

from decimal import Decimal, localcontext

import structlog
from sqlalchemy.orm import Session

from db.models import IndexerSnapshots, Indexers
from stakewatch.repositories.snapshot import IndexerSnapshotRepository
from stakewatch.services.buckets import day_index, snapshot_id
from stakewatch.services.constants import (
    DAY_WINDOW,
    DEFAULT_CONSTANTS,
    MONTH_WINDOW,
    WEEK_WINDOW,
    ZERO,
    ProtocolConstants,
    exact_arithmetic,
)

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def trailing_rewards(
    repo: IndexerSnapshotRepository, indexer_id: str, index: int
) -> tuple[Decimal, Decimal, Decimal]:
    """Sum delegation rewards of the buckets before `index` into day/week/month windows.

    Buckets that were never created contribute nothing.
    """
    day: Decimal = ZERO
    week: Decimal = ZERO
    month: Decimal = ZERO
    for offset in range(1, MONTH_WINDOW + 1):
        past_index: int = index - offset
        if past_index < 0:
            break
        past: IndexerSnapshots | None = repo.get_by_id(snapshot_id(indexer_id, past_index))
        if past is None:
            continue
        rewards: Decimal = past.delegation_rewards
        if offset <= DAY_WINDOW:
            day += rewards
        if offset <= WEEK_WINDOW:
            week += rewards
        month += rewards
    return day, week, month


class IndexerSnapshot:
    """One indexer's accounting record for one day-bucket.

    Baselines are the indexer's balances when the bucket is first touched, not
    at the start of the day. Trailing reward windows are summed once at
    creation and are not revised when earlier buckets receive rewards later.
    """

    def __init__(
        self,
        session: Session,
        entity: IndexerSnapshots,
        constants: ProtocolConstants = DEFAULT_CONSTANTS,
        created: bool = False,
    ) -> None:
        self.session: Session = session
        self.entity: IndexerSnapshots = entity
        self.constants: ProtocolConstants = constants
        self.created: bool = created
        self._repo: IndexerSnapshotRepository = IndexerSnapshotRepository(session)

    @classmethod
    def get_or_create(
        cls,
        session: Session,
        indexer: Indexers,
        timestamp: int,
        constants: ProtocolConstants = DEFAULT_CONSTANTS,
    ) -> "IndexerSnapshot":
        repo: IndexerSnapshotRepository = IndexerSnapshotRepository(session)
        index: int = day_index(timestamp, constants)
        sid: str = snapshot_id(indexer.id, index)

        def _build() -> IndexerSnapshots:
            day, week, month = trailing_rewards(repo, indexer.id, index)
            return IndexerSnapshots(
                id=sid,
                indexer_id=indexer.id,
                day_index=index,
                created_at_timestamp=timestamp,
                own_stake_initial=indexer.own_stake,
                delegated_stake_initial=indexer.delegated_stake,
                own_stake_delta=ZERO,
                delegated_stake_delta=ZERO,
                delegation_rewards=ZERO,
                parameters_change_count=0,
                previous_delegation_rewards_day=day,
                previous_delegation_rewards_week=week,
                previous_delegation_rewards_month=month,
            )

        with localcontext(constants.decimal_context()):
            entity, created = repo.get_or_create(sid, _build)
        if created:
            logger.debug(
                "Snapshot created",
                snapshot_id=sid,
                rewards_day=str(entity.previous_delegation_rewards_day),
                rewards_week=str(entity.previous_delegation_rewards_week),
                rewards_month=str(entity.previous_delegation_rewards_month),
            )
        indexer.last_snapshot_id = sid
        return cls(session, entity, constants, created)

    # ------------------------------------------------------------------
    # Getters
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self.entity.id

    @property
    def previous_delegation_rewards_month(self) -> Decimal:
        return self.entity.previous_delegation_rewards_month

    # ------------------------------------------------------------------
    # Mutators: accumulate, then persist
    # ------------------------------------------------------------------

    @exact_arithmetic
    def add_own_stake_delta(self, delta: Decimal) -> None:
        self.entity.own_stake_delta += delta
        self._repo.save(self.entity)

    @exact_arithmetic
    def add_delegated_stake_delta(self, delta: Decimal) -> None:
        self.entity.delegated_stake_delta += delta
        self._repo.save(self.entity)

    @exact_arithmetic
    def add_delegation_reward(self, amount: Decimal) -> None:
        self.entity.delegation_rewards += amount
        self._repo.save(self.entity)

    def increment_parameter_change_count(self) -> None:
        self.entity.parameters_change_count += 1
        self._repo.save(self.entity)
