"""SQLAlchemy ORM models for the indexer ledger."""

from decimal import Decimal
from typing import Any

from sqlalchemy import ForeignKey, Index, MetaData
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from db.types import BigIntText, DecimalText

convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

_ZERO = Decimal(0)


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=convention)

    def to_dict(self) -> dict[str, Any]:
        return {c.name: getattr(self, c.name) for c in self.__table__.columns}


class Indexers(Base):
    __tablename__ = "indexers"

    id: Mapped[str] = mapped_column(primary_key=True)
    own_stake: Mapped[Decimal] = mapped_column(DecimalText, nullable=False, default=_ZERO)
    delegated_stake: Mapped[Decimal] = mapped_column(DecimalText, nullable=False, default=_ZERO)
    delegation_pool_shares: Mapped[int] = mapped_column(BigIntText, nullable=False, default=1)
    allocated_stake: Mapped[Decimal] = mapped_column(DecimalText, nullable=False, default=_ZERO)
    maximum_delegation: Mapped[Decimal] = mapped_column(DecimalText, nullable=False, default=_ZERO)
    is_over_delegated: Mapped[bool] = mapped_column(nullable=False, default=False)
    allocation_ratio: Mapped[Decimal] = mapped_column(DecimalText, nullable=False, default=_ZERO)
    delegation_ratio: Mapped[Decimal] = mapped_column(DecimalText, nullable=False, default=_ZERO)
    monthly_delegator_reward_rate: Mapped[Decimal] = mapped_column(
        DecimalText, nullable=False, default=_ZERO
    )
    indexing_reward_cut_ratio: Mapped[Decimal | None] = mapped_column(DecimalText)
    query_fee_cut_ratio: Mapped[Decimal | None] = mapped_column(DecimalText)
    delegator_parameter_cooldown_block: Mapped[int | None] = mapped_column()
    created_at_timestamp: Mapped[int] = mapped_column(nullable=False)
    created_at_block: Mapped[int] = mapped_column(nullable=False)
    # Non-owning pointer; snapshots are reached through the relationship below.
    last_snapshot_id: Mapped[str | None] = mapped_column()

    snapshots = relationship(
        "IndexerSnapshots",
        back_populates="indexer",
        cascade="all, delete-orphan",
        order_by="IndexerSnapshots.day_index",
    )


class IndexerSnapshots(Base):
    __tablename__ = "indexer_snapshots"

    id: Mapped[str] = mapped_column(primary_key=True)
    indexer_id: Mapped[str] = mapped_column(ForeignKey("indexers.id"), nullable=False)
    day_index: Mapped[int] = mapped_column(nullable=False)
    created_at_timestamp: Mapped[int] = mapped_column(nullable=False)
    own_stake_initial: Mapped[Decimal] = mapped_column(DecimalText, nullable=False, default=_ZERO)
    delegated_stake_initial: Mapped[Decimal] = mapped_column(
        DecimalText, nullable=False, default=_ZERO
    )
    own_stake_delta: Mapped[Decimal] = mapped_column(DecimalText, nullable=False, default=_ZERO)
    delegated_stake_delta: Mapped[Decimal] = mapped_column(
        DecimalText, nullable=False, default=_ZERO
    )
    delegation_rewards: Mapped[Decimal] = mapped_column(DecimalText, nullable=False, default=_ZERO)
    parameters_change_count: Mapped[int] = mapped_column(nullable=False, default=0)
    previous_delegation_rewards_day: Mapped[Decimal] = mapped_column(
        DecimalText, nullable=False, default=_ZERO
    )
    previous_delegation_rewards_week: Mapped[Decimal] = mapped_column(
        DecimalText, nullable=False, default=_ZERO
    )
    previous_delegation_rewards_month: Mapped[Decimal] = mapped_column(
        DecimalText, nullable=False, default=_ZERO
    )

    __table_args__ = (Index("ix_indexer_snapshots_indexer_day", "indexer_id", "day_index"),)
    indexer = relationship("Indexers", back_populates="snapshots")


class PoolRewards(Base):
    __tablename__ = "pool_rewards"

    id: Mapped[str] = mapped_column(primary_key=True)
    indexer_id: Mapped[str] = mapped_column(ForeignKey("indexers.id"), nullable=False)
    reward_type: Mapped[str] = mapped_column(nullable=False)
    block_number: Mapped[int] = mapped_column(nullable=False)
    timestamp: Mapped[int] = mapped_column(nullable=False)
    amount: Mapped[Decimal] = mapped_column(DecimalText, nullable=False)
    share_ratio: Mapped[Decimal] = mapped_column(DecimalText, nullable=False)
    pooled_token_ratio: Mapped[Decimal] = mapped_column(DecimalText, nullable=False)


class IndexerParameterUpdates(Base):
    __tablename__ = "indexer_parameter_updates"

    id: Mapped[str] = mapped_column(primary_key=True)
    indexer_id: Mapped[str] = mapped_column(ForeignKey("indexers.id"), nullable=False)
    block_number: Mapped[int] = mapped_column(nullable=False)
    timestamp: Mapped[int] = mapped_column(nullable=False)
    previous_indexing_reward_cut_ratio: Mapped[Decimal | None] = mapped_column(DecimalText)
    previous_query_fee_cut_ratio: Mapped[Decimal | None] = mapped_column(DecimalText)
    indexing_reward_cut_ratio: Mapped[Decimal] = mapped_column(DecimalText, nullable=False)
    query_fee_cut_ratio: Mapped[Decimal] = mapped_column(DecimalText, nullable=False)
    cooldown_block: Mapped[int | None] = mapped_column()


class Delegators(Base):
    __tablename__ = "delegators"

    id: Mapped[str] = mapped_column(primary_key=True)
    created_at_timestamp: Mapped[int] = mapped_column(nullable=False)
    created_at_block: Mapped[int] = mapped_column(nullable=False)
    last_indexer_id: Mapped[str | None] = mapped_column()


class BadgeAwards(Base):
    __tablename__ = "badge_awards"

    badge_type: Mapped[str] = mapped_column(primary_key=True)
    id: Mapped[str] = mapped_column(primary_key=True)
    indexer_id: Mapped[str] = mapped_column(ForeignKey("indexers.id"), nullable=False)
    awarded_at_block: Mapped[int] = mapped_column(nullable=False)
    awarded_at_timestamp: Mapped[int] = mapped_column(nullable=False)
    badge_number: Mapped[int] = mapped_column(nullable=False)


class BadgeCounts(Base):
    __tablename__ = "badge_counts"

    badge_type: Mapped[str] = mapped_column(primary_key=True)
    count: Mapped[int] = mapped_column(nullable=False, default=0)


class ProcessingRuns(Base):
    __tablename__ = "processing_runs"

    run_id: Mapped[str] = mapped_column(primary_key=True)
    run_type: Mapped[str] = mapped_column(nullable=False)
    started_at: Mapped[str] = mapped_column(nullable=False)
    completed_at: Mapped[str | None] = mapped_column()
    status: Mapped[str] = mapped_column(nullable=False, default="running")
    source: Mapped[str | None] = mapped_column()
    block_range_start: Mapped[int | None] = mapped_column()
    block_range_end: Mapped[int | None] = mapped_column()
    error_details: Mapped[str | None] = mapped_column()
    records_processed: Mapped[int] = mapped_column(nullable=False, default=0)
    records_created: Mapped[int] = mapped_column(nullable=False, default=0)
    records_skipped: Mapped[int] = mapped_column(nullable=False, default=0)
