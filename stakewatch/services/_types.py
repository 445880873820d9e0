"""Typed dicts for service-layer return values.

Decimal amounts and ratios are plain decimal strings so that no precision is
lost on the way to JSON.
"""

from typing_extensions import TypedDict

# -- Indexers --------------------------------------------------------------


class IndexerDict(TypedDict):
    id: str
    ownStake: str
    delegatedStake: str
    delegationPoolShares: str
    allocatedStake: str
    maximumDelegation: str
    isOverDelegated: bool
    allocationRatio: str
    delegationRatio: str
    monthlyDelegatorRewardRate: str
    indexingRewardCutRatio: str | None
    queryFeeCutRatio: str | None
    delegatorParameterCooldownBlock: int | None
    createdAtTimestamp: int
    createdAtBlock: int
    lastSnapshotId: str | None


class SnapshotDict(TypedDict):
    id: str
    indexerId: str
    dayIndex: int
    createdAtTimestamp: int
    ownStakeInitial: str
    delegatedStakeInitial: str
    ownStakeDelta: str
    delegatedStakeDelta: str
    delegationRewards: str
    parametersChangeCount: int
    previousDelegationRewardsDay: str
    previousDelegationRewardsWeek: str
    previousDelegationRewardsMonth: str


# -- Logs ------------------------------------------------------------------


class PoolRewardDict(TypedDict):
    id: str
    indexerId: str
    rewardType: str
    blockNumber: int
    timestamp: int
    amount: str
    shareRatio: str
    pooledTokenRatio: str


class ParameterUpdateDict(TypedDict):
    id: str
    indexerId: str
    blockNumber: int
    timestamp: int
    previousIndexingRewardCutRatio: str | None
    previousQueryFeeCutRatio: str | None
    indexingRewardCutRatio: str
    queryFeeCutRatio: str
    cooldownBlock: int | None


class BadgeDict(TypedDict):
    badgeType: str
    id: str
    indexerId: str
    awardedAtBlock: int
    awardedAtTimestamp: int
    badgeNumber: int


# -- Health ----------------------------------------------------------------


class DbInfoDict(TypedDict, total=False):
    backend_type: str
    database_url_or_path: str | None
    tables_present: list[str]
    tables_missing: list[str]
    schema_initialized: bool
    pid: int
    error: str
