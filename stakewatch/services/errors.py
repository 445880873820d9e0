"""Shared exception hierarchy for stakewatch services."""

# ── Ledger ────────────────────────────────────────────────────────────────────


class LedgerError(Exception):
    """Base exception for ledger errors."""


class PreGenesisTimestampError(LedgerError, ValueError):
    """Event timestamp falls before the protocol genesis day-bucket."""


# ── Dispatch ──────────────────────────────────────────────────────────────────


class DispatchError(Exception):
    """Base exception for event dispatch errors."""


class UnknownEventError(DispatchError):
    """No handler is registered for the event type."""


class EventDecodeError(DispatchError):
    """Event is missing a parameter or carries an unparseable value."""


# ── Replay ────────────────────────────────────────────────────────────────────


class ReplayError(Exception):
    """Event replay run failed."""
