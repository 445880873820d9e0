"""Protocol constants shared by every ledger component."""

from collections.abc import Callable
from dataclasses import dataclass
from decimal import Context, Decimal, localcontext
from functools import wraps
from typing import TypeVar

R = TypeVar("R")

ZERO: Decimal = Decimal(0)


@dataclass(frozen=True)
class ProtocolConstants:
    genesis_timestamp: int = 1608163200
    seconds_per_day: int = 86400
    token_decimals: int = 18
    cut_divider: int = 1_000_000
    delegation_ratio: int = 16
    decimal_precision: int = 78

    @property
    def token_divisor(self) -> Decimal:
        return Decimal(10) ** self.token_decimals

    def decimal_context(self) -> Context:
        """Context wide enough that uint256 token amounts never round."""
        return Context(prec=self.decimal_precision)


DEFAULT_CONSTANTS: ProtocolConstants = ProtocolConstants()

# Trailing reward windows, in day-buckets.
DAY_WINDOW: int = 1
WEEK_WINDOW: int = 7
MONTH_WINDOW: int = 30


def exact_arithmetic(method: Callable[..., R]) -> Callable[..., R]:
    """Run a method under its owner's `constants.decimal_context()`."""

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with localcontext(self.constants.decimal_context()):
            return method(self, *args, **kwargs)

    return wrapper
