"""Feature modules for Time-Locked Wallet.

- lock: Time lock creation, countdown, withdrawal and the lock cache
"""

from timelock_wallet.features import lock

__all__ = ["lock"]
