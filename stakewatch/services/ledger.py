"""Indexer ledger: running balances and the delegation metrics derived from them.

Every mutation follows the same order: record the delta on the day's
snapshot, update the running balance, recompute derived fields, persist.
Derived fields are never carried over from a previous state.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog
from sqlalchemy.orm import Session

from db.enums import PoolRewardType
from db.models import IndexerParameterUpdates, Indexers, PoolRewards
from stakewatch.repositories.indexer import IndexerRepository
from stakewatch.repositories.logs import PoolRewardRepository
from stakewatch.services.constants import (
    DEFAULT_CONSTANTS,
    ZERO,
    ProtocolConstants,
    exact_arithmetic,
)
from stakewatch.services.parameter_log import ParameterUpdateLog, parameters_changed
from stakewatch.services.schemas.events import BlockRef
from stakewatch.services.schemas.results import RewardSplit
from stakewatch.services.snapshot import IndexerSnapshot

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)


def split_rewards(
    amount: Decimal, cut_ratio: Decimal | None, delegated_stake: Decimal
) -> RewardSplit:
    """Split indexing rewards between the indexer and its delegation pool.

    With an empty pool everything goes to the indexer. An indexer that never
    set its parameters has a cut of zero.
    """
    if delegated_stake == 0:
        return RewardSplit(indexer_share=amount, delegator_share=ZERO)
    indexer_share: Decimal = amount * (cut_ratio if cut_ratio is not None else ZERO)
    return RewardSplit(indexer_share=indexer_share, delegator_share=amount - indexer_share)


def pool_reward_id(indexer_id: str, reward_type: PoolRewardType, block_number: int) -> str:
    return f"{indexer_id}-{reward_type.value}-{block_number}"


@dataclass(frozen=True)
class IndexerState:
    """Read-only copy of the fields observers compare across a mutation."""

    indexer_id: str
    own_stake: Decimal
    delegated_stake: Decimal
    is_over_delegated: bool

    @classmethod
    def capture(cls, entity: Indexers) -> "IndexerState":
        return cls(
            indexer_id=entity.id,
            own_stake=entity.own_stake,
            delegated_stake=entity.delegated_stake,
            is_over_delegated=entity.is_over_delegated,
        )


class IndexerLedger:
    """Mutation operations on one indexer, bound to the block being processed."""

    def __init__(
        self,
        session: Session,
        entity: Indexers,
        block: BlockRef,
        constants: ProtocolConstants = DEFAULT_CONSTANTS,
        created: bool = False,
    ) -> None:
        self.session: Session = session
        self.entity: Indexers = entity
        self.block: BlockRef = block
        self.constants: ProtocolConstants = constants
        self.created: bool = created
        self._repo: IndexerRepository = IndexerRepository(session)
        self._pool_rewards: PoolRewardRepository = PoolRewardRepository(session)
        self._parameter_log: ParameterUpdateLog = ParameterUpdateLog(session)

    @classmethod
    def get_or_create(
        cls,
        session: Session,
        address: str,
        block: BlockRef,
        constants: ProtocolConstants = DEFAULT_CONSTANTS,
    ) -> "IndexerLedger":
        indexer_id: str = address.lower()
        entity, created = IndexerRepository(session).get_or_create(
            indexer_id,
            lambda: Indexers(
                id=indexer_id,
                own_stake=ZERO,
                delegated_stake=ZERO,
                delegation_pool_shares=1,
                allocated_stake=ZERO,
                maximum_delegation=ZERO,
                is_over_delegated=False,
                allocation_ratio=ZERO,
                delegation_ratio=ZERO,
                monthly_delegator_reward_rate=ZERO,
                indexing_reward_cut_ratio=None,
                query_fee_cut_ratio=None,
                delegator_parameter_cooldown_block=None,
                created_at_timestamp=block.timestamp,
                created_at_block=block.number,
                last_snapshot_id=None,
            ),
        )
        if created:
            logger.info("Indexer created", indexer=indexer_id, block=block.number)
        return cls(session, entity, block, constants, created)

    @property
    def id(self) -> str:
        return self.entity.id

    def state(self) -> IndexerState:
        return IndexerState.capture(self.entity)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _snapshot(self) -> IndexerSnapshot:
        return IndexerSnapshot.get_or_create(
            self.session, self.entity, self.block.timestamp, self.constants
        )

    def _save(self) -> None:
        self._repo.save(self.entity)

    def _recompute(self, snapshot: IndexerSnapshot) -> None:
        e: Indexers = self.entity
        e.maximum_delegation = e.own_stake * self.constants.delegation_ratio
        e.is_over_delegated = e.delegated_stake > e.maximum_delegation
        self._recompute_allocation_ratio()
        e.delegation_ratio = (
            ZERO if e.own_stake == 0 else e.delegated_stake / e.maximum_delegation
        )
        e.monthly_delegator_reward_rate = (
            ZERO
            if e.delegated_stake == 0
            else snapshot.previous_delegation_rewards_month / e.delegated_stake
        )

    def _recompute_allocation_ratio(self) -> None:
        e: Indexers = self.entity
        capacity: Decimal = e.own_stake + (
            e.maximum_delegation if e.is_over_delegated else e.delegated_stake
        )
        e.allocation_ratio = ZERO if capacity == 0 else e.allocated_stake / capacity

    def _reward_ratios(self, amount: Decimal) -> tuple[Decimal, Decimal]:
        shares: int = self.entity.delegation_pool_shares
        delegated: Decimal = self.entity.delegated_stake
        share_ratio: Decimal = ZERO if shares == 0 else amount / Decimal(shares)
        pooled_token_ratio: Decimal = ZERO if delegated == 0 else amount / delegated
        return share_ratio, pooled_token_ratio

    # ------------------------------------------------------------------
    # Balance mutations
    # ------------------------------------------------------------------

    @exact_arithmetic
    def apply_own_stake_delta(self, delta: Decimal) -> None:
        """Deposit (+), unstake lock (-) and slash (-)."""
        snapshot = self._snapshot()
        snapshot.add_own_stake_delta(delta)
        self.entity.own_stake += delta
        self._recompute(snapshot)
        self._save()
        logger.debug(
            "Own stake updated",
            indexer=self.id,
            delta=str(delta),
            own_stake=str(self.entity.own_stake),
        )

    @exact_arithmetic
    def apply_delegated_stake_delta(self, delta: Decimal, shares_delta: int = 0) -> None:
        """Delegate (+shares), undelegate lock (-shares) and compounding (no shares)."""
        snapshot = self._snapshot()
        snapshot.add_delegated_stake_delta(delta)
        self.entity.delegated_stake += delta
        self.entity.delegation_pool_shares += shares_delta
        self._recompute(snapshot)
        self._save()
        logger.debug(
            "Delegated stake updated",
            indexer=self.id,
            delta=str(delta),
            shares_delta=shares_delta,
            delegated_stake=str(self.entity.delegated_stake),
        )

    @exact_arithmetic
    def set_allocated_stake(self, value: Decimal) -> None:
        """Absolute set. Own and delegated stake are unchanged, so only the allocation ratio moves."""
        self.entity.allocated_stake = value
        self._recompute_allocation_ratio()
        self._save()

    # ------------------------------------------------------------------
    # Pool rewards and parameters
    # ------------------------------------------------------------------

    @exact_arithmetic
    def credit_pool_reward(
        self, amount: Decimal, reward_type: PoolRewardType
    ) -> PoolRewards | None:
        """Log a delegation pool credit. Non-positive amounts are ignored.

        Ratios are taken against the pool before the credit is compounded.
        """
        if amount <= 0:
            return None

        snapshot = self._snapshot()
        snapshot.add_delegation_reward(amount)

        rid: str = pool_reward_id(self.id, reward_type, self.block.number)
        share_ratio, pooled_token_ratio = self._reward_ratios(amount)
        entry, created = self._pool_rewards.get_or_create(
            rid,
            lambda: PoolRewards(
                id=rid,
                indexer_id=self.id,
                reward_type=reward_type.value,
                block_number=self.block.number,
                timestamp=self.block.timestamp,
                amount=amount,
                share_ratio=share_ratio,
                pooled_token_ratio=pooled_token_ratio,
            ),
        )
        if not created:
            entry.amount += amount
            entry.share_ratio, entry.pooled_token_ratio = self._reward_ratios(entry.amount)
            self._pool_rewards.save(entry)

        self._save()
        logger.debug(
            "Pool reward credited",
            indexer=self.id,
            reward_type=reward_type.value,
            amount=str(amount),
        )
        return entry

    @exact_arithmetic
    def apply_parameter_update(
        self,
        indexing_reward_cut_ratio: Decimal,
        query_fee_cut_ratio: Decimal,
        cooldown_blocks: int,
        current_block: int,
    ) -> IndexerParameterUpdates | None:
        """Set fee-cut parameters. Returns the log entry, or None when nothing changed."""
        e: Indexers = self.entity
        previous: tuple[Decimal | None, Decimal | None] = (
            e.indexing_reward_cut_ratio,
            e.query_fee_cut_ratio,
        )
        new: tuple[Decimal, Decimal] = (indexing_reward_cut_ratio, query_fee_cut_ratio)

        e.indexing_reward_cut_ratio = indexing_reward_cut_ratio
        e.query_fee_cut_ratio = query_fee_cut_ratio
        e.delegator_parameter_cooldown_block = (
            None if cooldown_blocks == 0 else current_block + cooldown_blocks
        )

        entry: IndexerParameterUpdates | None = None
        if parameters_changed(previous, new):
            self._snapshot().increment_parameter_change_count()
            entry = self._parameter_log.record(
                e.id,
                BlockRef(number=current_block, timestamp=self.block.timestamp),
                previous,
                new,
                e.delegator_parameter_cooldown_block,
            )
        else:
            logger.debug("Parameter update unchanged", indexer=e.id, block=current_block)

        self._save()
        return entry
