"""Tests for stakewatch.services._helpers."""

import json
from decimal import Decimal

from stakewatch.services._helpers import decimal_str, dump_json, new_id, now_iso


def test_new_id_uniqueness() -> None:
    ids: set[str] = {new_id() for _ in range(100)}
    assert len(ids) == 100


def test_now_iso_format() -> None:
    ts: str = now_iso()
    assert "T" in ts
    assert ts.endswith("+00:00")


def test_dump_json_handles_non_serializable() -> None:
    raw: str = dump_json({"amount": Decimal("1.5")})
    parsed: dict[str, object] = json.loads(raw)
    assert parsed["amount"] == "1.5"


def test_decimal_str_none() -> None:
    assert decimal_str(None) is None


def test_decimal_str_zero_with_exponent() -> None:
    assert decimal_str(Decimal("0E-18")) == "0"


def test_decimal_str_strips_trailing_zeros() -> None:
    assert decimal_str(Decimal("1.500")) == "1.5"
    assert decimal_str(Decimal("2.000")) == "2"


def test_decimal_str_never_uses_exponent() -> None:
    assert decimal_str(Decimal("1E+3")) == "1000"
    assert decimal_str(Decimal("1E-18")) == "0.000000000000000001"


def test_decimal_str_keeps_all_digits() -> None:
    value: Decimal = Decimal("115792089237316195423570985008687907853269984665640564039457.584007913129639935")
    assert decimal_str(value) == str(value)
