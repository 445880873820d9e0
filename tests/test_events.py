"""Tests for event decoding."""

import pytest

from db.enums import EventType
from stakewatch.services.errors import EventDecodeError, UnknownEventError
from stakewatch.services.schemas.events import BlockRef, ChainEvent


def _data(**overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "event": "StakeDeposited",
        "indexer": "0xABCDEF",
        "blockNumber": 42,
        "blockTimestamp": 1608163200,
        "params": {"tokens": "1000"},
    }
    data.update(overrides)
    return data


class TestFromDict:
    def test_valid_record(self) -> None:
        event: ChainEvent = ChainEvent.from_dict(_data())
        assert event.event_type == EventType.STAKE_DEPOSITED
        assert event.indexer == "0xabcdef"
        assert event.block == BlockRef(number=42, timestamp=1608163200)
        assert event.raw("tokens") == 1000

    def test_params_default_to_empty(self) -> None:
        event: ChainEvent = ChainEvent.from_dict(_data(params=None))
        assert event.params == {}

    def test_numeric_strings_for_block(self) -> None:
        event: ChainEvent = ChainEvent.from_dict(_data(blockNumber="7", blockTimestamp="1608163201"))
        assert event.block == BlockRef(number=7, timestamp=1608163201)

    def test_unknown_event(self) -> None:
        with pytest.raises(UnknownEventError):
            ChainEvent.from_dict(_data(event="StakeBurned"))

    @pytest.mark.parametrize(
        "overrides",
        [
            {"indexer": ""},
            {"indexer": None},
            {"blockNumber": None},
            {"blockTimestamp": "soon"},
            {"params": ["tokens"]},
        ],
    )
    def test_malformed_record(self, overrides: dict[str, object]) -> None:
        with pytest.raises(EventDecodeError):
            ChainEvent.from_dict(_data(**overrides))

    def test_missing_event_field(self) -> None:
        data: dict[str, object] = _data()
        del data["event"]
        with pytest.raises(EventDecodeError):
            ChainEvent.from_dict(data)

    def test_not_an_object(self) -> None:
        with pytest.raises(EventDecodeError):
            ChainEvent.from_dict([1, 2])  # type: ignore[arg-type]


class TestParameters:
    def test_raw_accepts_int_and_hex(self) -> None:
        event: ChainEvent = ChainEvent.from_dict(_data(params={"a": 5, "b": "0x10"}))
        assert event.raw("a") == 5
        assert event.raw("b") == 16

    def test_raw_keeps_uint256(self) -> None:
        big: int = 2**256 - 1
        event: ChainEvent = ChainEvent.from_dict(_data(params={"tokens": str(big)}))
        assert event.raw("tokens") == big

    def test_address_lowercases(self) -> None:
        event: ChainEvent = ChainEvent.from_dict(_data(params={"delegator": "0xDD"}))
        assert event.address("delegator") == "0xdd"

    def test_missing_address(self) -> None:
        event: ChainEvent = ChainEvent.from_dict(_data())
        with pytest.raises(EventDecodeError):
            event.address("delegator")
