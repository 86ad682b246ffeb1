"""Error taxonomy for lock lifecycle operations."""

from __future__ import annotations


class TimelockError(Exception):
    """Base class; ``title`` is the short heading used for notifications."""

    title = "Operation failed"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotConnectedError(TimelockError):
    title = "Wallet not connected"


class InvalidInputError(TimelockError):
    title = "Invalid input"


class OperationInProgressError(TimelockError):
    title = "Operation in progress"


class NotWithdrawableError(TimelockError):
    title = "Cannot withdraw"


class LedgerError(TimelockError):
    title = "Ledger request failed"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class FetchError(TimelockError):
    title = "Failed to refresh locks"

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
