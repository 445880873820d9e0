"""Base-unit conversions for token amounts and fee cuts."""

from decimal import Decimal, localcontext

from stakewatch.services.constants import DEFAULT_CONSTANTS, ProtocolConstants


def token_amount(raw: int, constants: ProtocolConstants = DEFAULT_CONSTANTS) -> Decimal:
    """Convert a raw base-unit integer (wei-style) to a token amount."""
    with localcontext(constants.decimal_context()):
        return Decimal(raw) / constants.token_divisor


def fee_cut_ratio(raw: int, constants: ProtocolConstants = DEFAULT_CONSTANTS) -> Decimal:
    """Convert a cut expressed in millionths (PPM) to a ratio."""
    with localcontext(constants.decimal_context()):
        return Decimal(raw) / Decimal(constants.cut_divider)
