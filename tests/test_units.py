"""Tests for unit conversions and day-bucket arithmetic."""

from decimal import Decimal

import pytest

from stakewatch.services.buckets import bucket_start, day_index, snapshot_id
from stakewatch.services.constants import DEFAULT_CONSTANTS, ProtocolConstants
from stakewatch.services.errors import LedgerError, PreGenesisTimestampError
from stakewatch.services.units import fee_cut_ratio, token_amount

GENESIS: int = 1608163200
DAY: int = 86400
MAX_UINT256: int = 2**256 - 1


class TestTokenAmount:
    def test_one_token(self) -> None:
        assert token_amount(10**18) == Decimal(1)

    def test_smallest_unit(self) -> None:
        assert token_amount(1) == Decimal("0.000000000000000001")

    def test_zero(self) -> None:
        assert token_amount(0) == 0

    def test_uint256_is_exact(self) -> None:
        assert str(token_amount(MAX_UINT256)) == (
            "115792089237316195423570985008687907853269984665640564039457.584007913129639935"
        )

    def test_custom_decimals(self) -> None:
        constants: ProtocolConstants = ProtocolConstants(token_decimals=6)
        assert token_amount(2_500_000, constants) == Decimal("2.5")


class TestFeeCutRatio:
    def test_ppm(self) -> None:
        assert fee_cut_ratio(800_000) == Decimal("0.8")

    def test_full_cut(self) -> None:
        assert fee_cut_ratio(1_000_000) == Decimal(1)

    def test_zero_cut(self) -> None:
        assert fee_cut_ratio(0) == 0


class TestDayIndex:
    def test_genesis_is_day_zero(self) -> None:
        assert day_index(GENESIS) == 0

    def test_last_second_of_day_zero(self) -> None:
        assert day_index(GENESIS + DAY - 1) == 0

    def test_next_day(self) -> None:
        assert day_index(GENESIS + DAY) == 1

    def test_pre_genesis_raises(self) -> None:
        with pytest.raises(PreGenesisTimestampError):
            day_index(GENESIS - 1)

    def test_pre_genesis_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            day_index(0)
        assert issubclass(PreGenesisTimestampError, LedgerError)

    def test_custom_constants(self) -> None:
        constants: ProtocolConstants = ProtocolConstants(genesis_timestamp=0, seconds_per_day=10)
        assert day_index(25, constants) == 2


class TestBucketStart:
    def test_start_of_bucket(self) -> None:
        assert bucket_start(3) == GENESIS + 3 * DAY

    def test_start_maps_back_to_index(self) -> None:
        for index in (0, 1, 30, 365):
            assert day_index(bucket_start(index)) == index

    def test_uses_default_constants(self) -> None:
        assert bucket_start(0) == DEFAULT_CONSTANTS.genesis_timestamp


def test_snapshot_id_format() -> None:
    assert snapshot_id("0xabc", 7) == "0xabc-7"
