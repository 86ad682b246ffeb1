"""Time-Locked Wallet - a terminal wallet for time-locked deposits.

This package is organized into feature-based modules:
- features.lock: Lock creation, countdown, withdrawal and the lock cache
- shared: Shared utilities (logging, network, configuration, notifications)
"""

from timelock_wallet.shared import (
    AppConfig,
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    NotificationCenter,
    TimeoutConfig,
)
from timelock_wallet.wallet import Wallet, WalletError

__version__ = "0.1.0"
__all__ = [
    "Wallet",
    "WalletError",
    "AppConfig",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "NotificationCenter",
    "TimeoutConfig",
]
