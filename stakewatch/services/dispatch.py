"""Routes staking and rewards events to indexer ledger operations."""

from collections.abc import Callable
from decimal import Decimal

import structlog
from sqlalchemy.orm import Session

from db.enums import BadgeType, EventType, PoolRewardType
from db.models import Delegators
from stakewatch.repositories.indexer import DelegatorRepository
from stakewatch.services.badges import BadgeAwarder
from stakewatch.services.buckets import day_index
from stakewatch.services.constants import DEFAULT_CONSTANTS, ProtocolConstants, exact_arithmetic
from stakewatch.services.errors import UnknownEventError
from stakewatch.services.ledger import IndexerLedger, split_rewards
from stakewatch.services.schemas.events import ChainEvent
from stakewatch.services.schemas.results import DispatchResult
from stakewatch.services.units import fee_cut_ratio, token_amount

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

RawParams = dict[str, int]
Handler = Callable[[IndexerLedger, ChainEvent, RawParams], None]

# Integer parameters each event must carry. They are decoded before the
# indexer is resolved, so a malformed or pre-genesis event leaves no trace.
_RAW_PARAMS: dict[EventType, tuple[str, ...]] = {
    EventType.STAKE_DEPOSITED: ("tokens",),
    EventType.STAKE_LOCKED: ("tokens",),
    EventType.STAKE_WITHDRAWN: (),
    EventType.STAKE_SLASHED: ("tokens",),
    EventType.STAKE_DELEGATED: ("tokens", "shares"),
    EventType.STAKE_DELEGATED_LOCKED: ("tokens", "shares"),
    EventType.STAKE_DELEGATED_WITHDRAWN: (),
    EventType.ALLOCATION_CREATED: ("tokens",),
    EventType.ALLOCATION_COLLECTED: (),
    EventType.ALLOCATION_CLOSED: ("tokens",),
    EventType.REWARDS_ASSIGNED: ("amount",),
    EventType.REBATE_CLAIMED: ("delegationFees",),
    EventType.DELEGATION_PARAMETERS_UPDATED: ("indexingRewardCut", "queryFeeCut", "cooldownBlocks"),
}

_DELEGATOR_EVENTS: frozenset[EventType] = frozenset(
    {
        EventType.STAKE_DELEGATED,
        EventType.STAKE_DELEGATED_LOCKED,
        EventType.STAKE_DELEGATED_WITHDRAWN,
    }
)

# Events whose over-delegation transitions do not earn a badge.
_NO_OVER_DELEGATION_BADGE: frozenset[EventType] = frozenset(
    {EventType.STAKE_SLASHED, EventType.REWARDS_ASSIGNED}
)


class EventDispatcher:
    """Processes one event at a time against the indexer it names."""

    def __init__(
        self,
        session: Session,
        constants: ProtocolConstants = DEFAULT_CONSTANTS,
        badges: BadgeAwarder | None = None,
    ) -> None:
        self.session: Session = session
        self.constants: ProtocolConstants = constants
        self.badges: BadgeAwarder | None = badges
        self._delegators: DelegatorRepository = DelegatorRepository(session)
        self._handlers: dict[EventType, Handler] = {
            EventType.STAKE_DEPOSITED: self._on_stake_deposited,
            EventType.STAKE_LOCKED: self._on_stake_locked,
            EventType.STAKE_WITHDRAWN: self._no_op,
            EventType.STAKE_SLASHED: self._on_stake_slashed,
            EventType.STAKE_DELEGATED: self._on_stake_delegated,
            EventType.STAKE_DELEGATED_LOCKED: self._on_stake_delegated_locked,
            EventType.STAKE_DELEGATED_WITHDRAWN: self._no_op,
            EventType.ALLOCATION_CREATED: self._on_allocation_created,
            EventType.ALLOCATION_COLLECTED: self._no_op,
            EventType.ALLOCATION_CLOSED: self._on_allocation_closed,
            EventType.REWARDS_ASSIGNED: self._on_rewards_assigned,
            EventType.REBATE_CLAIMED: self._on_rebate_claimed,
            EventType.DELEGATION_PARAMETERS_UPDATED: self._on_delegation_parameters_updated,
        }

    @exact_arithmetic
    def process(self, event: ChainEvent) -> DispatchResult:
        handler: Handler | None = self._handlers.get(event.event_type)
        if handler is None:
            raise UnknownEventError(f"No handler for event type {event.event_type!r}")

        raw: RawParams = {name: event.raw(name) for name in _RAW_PARAMS[event.event_type]}
        delegator: str | None = (
            event.address("delegator") if event.event_type in _DELEGATOR_EVENTS else None
        )
        day_index(event.block.timestamp, self.constants)

        ledger: IndexerLedger = IndexerLedger.get_or_create(
            self.session, event.indexer, event.block, self.constants
        )
        before = ledger.state()
        handler(ledger, event, raw)
        if delegator is not None:
            self._register_delegator(delegator, ledger, event)

        awarded: list[BadgeType] = (
            self.badges.evaluate(
                before,
                ledger,
                event.block,
                check_over_delegation=event.event_type not in _NO_OVER_DELEGATION_BADGE,
            )
            if self.badges
            else []
        )
        logger.debug(
            "Event processed",
            event_type=event.event_type.value,
            indexer=ledger.id,
            block=event.block.number,
        )
        return DispatchResult(
            indexer_id=ledger.id,
            event_type=event.event_type,
            created=ledger.created,
            badges_awarded=awarded,
        )

    def _register_delegator(self, address: str, ledger: IndexerLedger, event: ChainEvent) -> None:
        delegator, _ = self._delegators.get_or_create(
            address,
            lambda: Delegators(
                id=address,
                created_at_timestamp=event.block.timestamp,
                created_at_block=event.block.number,
                last_indexer_id=ledger.id,
            ),
        )
        delegator.last_indexer_id = ledger.id
        self._delegators.save(delegator)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _tokens(self, raw: RawParams, name: str = "tokens") -> Decimal:
        return token_amount(raw[name], self.constants)

    def _no_op(self, ledger: IndexerLedger, event: ChainEvent, raw: RawParams) -> None:
        # Withdrawals release funds already removed at lock time; collected
        # fees reach the pool through RebateClaimed.
        logger.debug("No ledger change", event_type=event.event_type.value, indexer=ledger.id)

    def _on_stake_deposited(self, ledger: IndexerLedger, event: ChainEvent, raw: RawParams) -> None:
        ledger.apply_own_stake_delta(self._tokens(raw))

    def _on_stake_locked(self, ledger: IndexerLedger, event: ChainEvent, raw: RawParams) -> None:
        ledger.apply_own_stake_delta(-self._tokens(raw))

    def _on_stake_slashed(self, ledger: IndexerLedger, event: ChainEvent, raw: RawParams) -> None:
        ledger.apply_own_stake_delta(-self._tokens(raw))

    def _on_stake_delegated(self, ledger: IndexerLedger, event: ChainEvent, raw: RawParams) -> None:
        ledger.apply_delegated_stake_delta(self._tokens(raw), raw["shares"])

    def _on_stake_delegated_locked(
        self, ledger: IndexerLedger, event: ChainEvent, raw: RawParams
    ) -> None:
        ledger.apply_delegated_stake_delta(-self._tokens(raw), -raw["shares"])

    def _on_allocation_created(
        self, ledger: IndexerLedger, event: ChainEvent, raw: RawParams
    ) -> None:
        ledger.set_allocated_stake(ledger.entity.allocated_stake + self._tokens(raw))

    def _on_allocation_closed(
        self, ledger: IndexerLedger, event: ChainEvent, raw: RawParams
    ) -> None:
        ledger.set_allocated_stake(ledger.entity.allocated_stake - self._tokens(raw))

    def _on_rewards_assigned(
        self, ledger: IndexerLedger, event: ChainEvent, raw: RawParams
    ) -> None:
        split = split_rewards(
            self._tokens(raw, "amount"),
            ledger.entity.indexing_reward_cut_ratio,
            ledger.entity.delegated_stake,
        )
        # The indexer's own share is not restaked.
        if split.delegator_share > 0:
            ledger.credit_pool_reward(split.delegator_share, PoolRewardType.INDEXING_REWARD)
            ledger.apply_delegated_stake_delta(split.delegator_share, 0)

    def _on_rebate_claimed(self, ledger: IndexerLedger, event: ChainEvent, raw: RawParams) -> None:
        fees = self._tokens(raw, "delegationFees")
        if fees > 0:
            ledger.credit_pool_reward(fees, PoolRewardType.QUERY_FEE)
            ledger.apply_delegated_stake_delta(fees, 0)

    def _on_delegation_parameters_updated(
        self, ledger: IndexerLedger, event: ChainEvent, raw: RawParams
    ) -> None:
        ledger.apply_parameter_update(
            fee_cut_ratio(raw["indexingRewardCut"], self.constants),
            fee_cut_ratio(raw["queryFeeCut"], self.constants),
            raw["cooldownBlocks"],
            event.block.number,
        )
