"""Enumeration types for the stakewatch indexer ledger."""

from enum import Enum


class EventType(str, Enum):
    """Staking and rewards events consumed by the dispatcher."""

    STAKE_DEPOSITED = "StakeDeposited"
    STAKE_LOCKED = "StakeLocked"
    STAKE_WITHDRAWN = "StakeWithdrawn"
    STAKE_SLASHED = "StakeSlashed"
    STAKE_DELEGATED = "StakeDelegated"
    STAKE_DELEGATED_LOCKED = "StakeDelegatedLocked"
    STAKE_DELEGATED_WITHDRAWN = "StakeDelegatedWithdrawn"
    ALLOCATION_CREATED = "AllocationCreated"
    ALLOCATION_COLLECTED = "AllocationCollected"
    ALLOCATION_CLOSED = "AllocationClosed"
    REWARDS_ASSIGNED = "RewardsAssigned"
    REBATE_CLAIMED = "RebateClaimed"
    DELEGATION_PARAMETERS_UPDATED = "DelegationParametersUpdated"


class PoolRewardType(str, Enum):
    """Source of a delegation pool credit."""

    INDEXING_REWARD = "IndexingReward"
    QUERY_FEE = "QueryFee"


class BadgeType(str, Enum):
    """Milestone badges awarded on indexer state transitions."""

    ITS_ONLY_WAFER_THIN = "ItsOnlyWaferThin"
    AN_INDEXER_IS_BORN = "AnIndexerIsBorn"


class RunType(str, Enum):
    """Type of processing run."""

    REPLAY = "replay"


class RunStatus(str, Enum):
    """Status of a processing run."""

    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    PARTIAL = "partial"
