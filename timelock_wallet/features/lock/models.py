"""Lock records, owner sessions and pending operation state."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from timelock_wallet.features.lock.policy import Asset


def remaining_seconds_at(unlock_timestamp: int, now: float) -> int:
    return max(0, math.ceil(unlock_timestamp - now))


@dataclass(frozen=True)
class LockRecord:
    lock_id: str
    owner: str
    amount: Decimal
    asset: Asset
    unlock_timestamp: int
    is_withdrawn: bool = False
    created_at: int | None = None

    def is_unlocked(self, now: float) -> bool:
        return now >= self.unlock_timestamp

    def is_pending(self, now: float) -> bool:
        return not self.is_withdrawn and not self.is_unlocked(now)

    def is_withdrawable(self, now: float) -> bool:
        return self.is_unlocked(now) and not self.is_withdrawn

    def is_anomalous(self, now: float) -> bool:
        """A withdrawn record must already be unlocked; anything else is upstream breakage."""
        return self.is_withdrawn and not self.is_unlocked(now)

    def remaining_seconds(self, now: float) -> int:
        return remaining_seconds_at(self.unlock_timestamp, now)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "LockRecord":
        lock_data = data.get("lock", data)
        created_at = lock_data.get("createdAt")
        return cls(
            lock_id=str(lock_data["id"]),
            owner=str(lock_data.get("owner", "")),
            amount=Decimal(str(lock_data["amount"])),
            asset=Asset(lock_data.get("asset", Asset.NATIVE.value)),
            unlock_timestamp=int(lock_data["unlockTimestamp"]),
            is_withdrawn=bool(lock_data.get("isWithdrawn", False)),
            created_at=int(created_at) if created_at is not None else None,
        )


@dataclass(frozen=True)
class OwnerSession:
    identity: str
    public_key: str = ""
    network_name: str = "testnet"


class OperationKind(Enum):
    CREATE = "create"
    WITHDRAW = "withdraw"


class OperationState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class PendingOperation:
    kind: OperationKind
    target: str
    started_at: float = field(default_factory=time.time)
