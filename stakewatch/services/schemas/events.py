"""Event data transfer objects consumed by the dispatcher."""

from collections.abc import Mapping
from dataclasses import dataclass, field

from db.enums import EventType
from stakewatch.services.errors import EventDecodeError, UnknownEventError


@dataclass(frozen=True)
class BlockRef:
    number: int
    timestamp: int


@dataclass(frozen=True)
class ChainEvent:
    event_type: EventType
    indexer: str
    block: BlockRef
    params: Mapping[str, object] = field(default_factory=dict)

    def raw(self, name: str) -> int:
        """Integer parameter in base units (token amounts, shares, PPM cuts, block counts)."""
        if name not in self.params:
            raise EventDecodeError(f"{self.event_type.value}: missing parameter '{name}'")
        value = self.params[name]
        if isinstance(value, bool):
            raise EventDecodeError(f"{self.event_type.value}: '{name}' is not an integer")
        try:
            return int(str(value), 0) if isinstance(value, str) else int(value)
        except (TypeError, ValueError) as exc:
            raise EventDecodeError(
                f"{self.event_type.value}: '{name}' is not an integer ({value!r})"
            ) from exc

    def address(self, name: str) -> str:
        value = self.params.get(name)
        if not isinstance(value, str) or not value:
            raise EventDecodeError(f"{self.event_type.value}: missing address '{name}'")
        return value.lower()

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "ChainEvent":
        """Build an event from its JSON form:

        {"event": "StakeDeposited", "indexer": "0x..", "blockNumber": 1,
         "blockTimestamp": 1608163200, "params": {"tokens": "1000"}}
        """
        if not isinstance(data, Mapping):
            raise EventDecodeError("event record must be a JSON object")
        try:
            event_type = EventType(data["event"])
        except KeyError as exc:
            raise EventDecodeError("event record has no 'event' field") from exc
        except ValueError as exc:
            raise UnknownEventError(f"Unknown event type {data['event']!r}") from exc

        indexer = data.get("indexer")
        if not isinstance(indexer, str) or not indexer:
            raise EventDecodeError(f"{event_type.value}: missing 'indexer'")

        params = data.get("params") or {}
        if not isinstance(params, Mapping):
            raise EventDecodeError(f"{event_type.value}: 'params' must be an object")

        try:
            block = BlockRef(
                number=int(data["blockNumber"]),
                timestamp=int(data["blockTimestamp"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise EventDecodeError(f"{event_type.value}: invalid block reference") from exc

        return cls(event_type=event_type, indexer=indexer.lower(), block=block, params=dict(params))
