"""Time lock feature module for Time-Locked Wallet.

Locks an amount of an asset until an unlock instant, counts down to it and
lets the owner withdraw once the ledger reports the lock as unlocked.

Usage:
    from timelock_wallet.features.lock import LockLifecycleCoordinator, DurationUnit
    from timelock_wallet.features.lock import LockRecord, normalize, tick
"""

from timelock_wallet.features.lock.errors import (
    FetchError,
    InvalidInputError,
    LedgerError,
    NotConnectedError,
    NotWithdrawableError,
    OperationInProgressError,
    TimelockError,
)
from timelock_wallet.features.lock.policy import (
    DEFAULT_POLICY,
    Asset,
    DurationUnit,
    LockPolicy,
)
from timelock_wallet.features.lock.models import (
    LockRecord,
    OperationKind,
    OperationState,
    OwnerSession,
    PendingOperation,
)
from timelock_wallet.features.lock.normalizer import NormalizedLock, normalize
from timelock_wallet.features.lock.ledger import (
    CreateLockReceipt,
    HttpLedgerClient,
    LedgerClient,
    WithdrawReceipt,
)
from timelock_wallet.features.lock.repository import LockRepository
from timelock_wallet.features.lock.countdown import (
    CountdownScheduler,
    TickResult,
    format_remaining,
    tick,
)
from timelock_wallet.features.lock.coordinator import LockLifecycleCoordinator
from timelock_wallet.features.lock.screen import (
    ConnectWalletScreen,
    CreateLockScreen,
    LockResultScreen,
    LocksTable,
)
from timelock_wallet.features.lock.handlers import LockHandlersMixin

__all__ = [
    "TimelockError",
    "NotConnectedError",
    "InvalidInputError",
    "OperationInProgressError",
    "NotWithdrawableError",
    "LedgerError",
    "FetchError",
    "DEFAULT_POLICY",
    "Asset",
    "DurationUnit",
    "LockPolicy",
    "LockRecord",
    "OperationKind",
    "OperationState",
    "OwnerSession",
    "PendingOperation",
    "NormalizedLock",
    "normalize",
    "CreateLockReceipt",
    "HttpLedgerClient",
    "LedgerClient",
    "WithdrawReceipt",
    "LockRepository",
    "CountdownScheduler",
    "TickResult",
    "format_remaining",
    "tick",
    "LockLifecycleCoordinator",
    "ConnectWalletScreen",
    "CreateLockScreen",
    "LockResultScreen",
    "LocksTable",
    "LockHandlersMixin",
]
