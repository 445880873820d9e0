"""Read-side queries over the ledger, shaped for the API and CLI."""

from sqlalchemy.orm import Session

from db.models import BadgeAwards, IndexerParameterUpdates, IndexerSnapshots, Indexers, PoolRewards
from stakewatch.repositories import (
    BadgeRepository,
    IndexerRepository,
    IndexerSnapshotRepository,
    ParameterUpdateRepository,
    PoolRewardRepository,
)
from stakewatch.services._helpers import decimal_str
from stakewatch.services._types import (
    BadgeDict,
    IndexerDict,
    ParameterUpdateDict,
    PoolRewardDict,
    SnapshotDict,
)


class IndexerQueryService:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.indexers = IndexerRepository(session)
        self.snapshots = IndexerSnapshotRepository(session)
        self.pool_rewards = PoolRewardRepository(session)
        self.parameter_updates = ParameterUpdateRepository(session)
        self.badges = BadgeRepository(session)

    def list_indexers(
        self, limit: int = 100, offset: int = 0, over_delegated_only: bool = False
    ) -> list[IndexerDict]:
        rows = (
            self.indexers.list_over_delegated()
            if over_delegated_only
            else self.indexers.list_indexers(limit=limit, offset=offset)
        )
        return [self._indexer_to_dict(i) for i in rows]

    def get_indexer(self, indexer_id: str) -> IndexerDict | None:
        entity = self.indexers.get_by_id(indexer_id.lower())
        return self._indexer_to_dict(entity) if entity else None

    def indexer_exists(self, indexer_id: str) -> bool:
        return self.indexers.exists(indexer_id.lower())

    def list_snapshots(self, indexer_id: str, limit: int = 30) -> list[SnapshotDict]:
        return [
            self._snapshot_to_dict(s)
            for s in self.snapshots.list_for_indexer(indexer_id.lower(), limit=limit)
        ]

    def list_pool_rewards(self, indexer_id: str, limit: int = 100) -> list[PoolRewardDict]:
        return [
            self._pool_reward_to_dict(r)
            for r in self.pool_rewards.list_for_indexer(indexer_id.lower(), limit=limit)
        ]

    def list_parameter_updates(
        self, indexer_id: str, limit: int = 100
    ) -> list[ParameterUpdateDict]:
        return [
            self._parameter_update_to_dict(u)
            for u in self.parameter_updates.list_for_indexer(indexer_id.lower(), limit=limit)
        ]

    def list_badges(self, indexer_id: str) -> list[BadgeDict]:
        return [self._badge_to_dict(b) for b in self.badges.list_for_indexer(indexer_id.lower())]

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    @staticmethod
    def _indexer_to_dict(i: Indexers) -> IndexerDict:
        return IndexerDict(
            id=i.id,
            ownStake=decimal_str(i.own_stake),
            delegatedStake=decimal_str(i.delegated_stake),
            delegationPoolShares=str(i.delegation_pool_shares),
            allocatedStake=decimal_str(i.allocated_stake),
            maximumDelegation=decimal_str(i.maximum_delegation),
            isOverDelegated=i.is_over_delegated,
            allocationRatio=decimal_str(i.allocation_ratio),
            delegationRatio=decimal_str(i.delegation_ratio),
            monthlyDelegatorRewardRate=decimal_str(i.monthly_delegator_reward_rate),
            indexingRewardCutRatio=decimal_str(i.indexing_reward_cut_ratio),
            queryFeeCutRatio=decimal_str(i.query_fee_cut_ratio),
            delegatorParameterCooldownBlock=i.delegator_parameter_cooldown_block,
            createdAtTimestamp=i.created_at_timestamp,
            createdAtBlock=i.created_at_block,
            lastSnapshotId=i.last_snapshot_id,
        )

    @staticmethod
    def _snapshot_to_dict(s: IndexerSnapshots) -> SnapshotDict:
        return SnapshotDict(
            id=s.id,
            indexerId=s.indexer_id,
            dayIndex=s.day_index,
            createdAtTimestamp=s.created_at_timestamp,
            ownStakeInitial=decimal_str(s.own_stake_initial),
            delegatedStakeInitial=decimal_str(s.delegated_stake_initial),
            ownStakeDelta=decimal_str(s.own_stake_delta),
            delegatedStakeDelta=decimal_str(s.delegated_stake_delta),
            delegationRewards=decimal_str(s.delegation_rewards),
            parametersChangeCount=s.parameters_change_count,
            previousDelegationRewardsDay=decimal_str(s.previous_delegation_rewards_day),
            previousDelegationRewardsWeek=decimal_str(s.previous_delegation_rewards_week),
            previousDelegationRewardsMonth=decimal_str(s.previous_delegation_rewards_month),
        )

    @staticmethod
    def _pool_reward_to_dict(r: PoolRewards) -> PoolRewardDict:
        return PoolRewardDict(
            id=r.id,
            indexerId=r.indexer_id,
            rewardType=r.reward_type,
            blockNumber=r.block_number,
            timestamp=r.timestamp,
            amount=decimal_str(r.amount),
            shareRatio=decimal_str(r.share_ratio),
            pooledTokenRatio=decimal_str(r.pooled_token_ratio),
        )

    @staticmethod
    def _parameter_update_to_dict(u: IndexerParameterUpdates) -> ParameterUpdateDict:
        return ParameterUpdateDict(
            id=u.id,
            indexerId=u.indexer_id,
            blockNumber=u.block_number,
            timestamp=u.timestamp,
            previousIndexingRewardCutRatio=decimal_str(u.previous_indexing_reward_cut_ratio),
            previousQueryFeeCutRatio=decimal_str(u.previous_query_fee_cut_ratio),
            indexingRewardCutRatio=decimal_str(u.indexing_reward_cut_ratio),
            queryFeeCutRatio=decimal_str(u.query_fee_cut_ratio),
            cooldownBlock=u.cooldown_block,
        )

    @staticmethod
    def _badge_to_dict(b: BadgeAwards) -> BadgeDict:
        return BadgeDict(
            badgeType=b.badge_type,
            id=b.id,
            indexerId=b.indexer_id,
            awardedAtBlock=b.awarded_at_block,
            awardedAtTimestamp=b.awarded_at_timestamp,
            badgeNumber=b.badge_number,
        )
