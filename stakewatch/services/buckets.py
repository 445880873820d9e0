"""Day-bucket arithmetic relative to protocol genesis."""

from stakewatch.services.constants import DEFAULT_CONSTANTS, ProtocolConstants
from stakewatch.services.errors import PreGenesisTimestampError


def day_index(timestamp: int, constants: ProtocolConstants = DEFAULT_CONSTANTS) -> int:
    if timestamp < constants.genesis_timestamp:
        raise PreGenesisTimestampError(
            f"Timestamp {timestamp} precedes protocol genesis {constants.genesis_timestamp}"
        )
    return (timestamp - constants.genesis_timestamp) // constants.seconds_per_day


def bucket_start(index: int, constants: ProtocolConstants = DEFAULT_CONSTANTS) -> int:
    return constants.genesis_timestamp + index * constants.seconds_per_day


def snapshot_id(indexer_id: str, index: int) -> str:
    return f"{indexer_id}-{index}"
