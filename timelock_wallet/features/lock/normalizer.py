"""Turns a user-entered (amount, duration) pair into an unlock instant.

The conversion is pure: nothing here touches the network, the clock (unless
``now`` is omitted) or any shared state. Month durations use a fixed 30-day
approximation; there is no calendar-accurate month arithmetic.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from timelock_wallet.features.lock.policy import (
    DEFAULT_POLICY,
    Asset,
    DurationUnit,
    LockPolicy,
)
from timelock_wallet.features.lock.validators import LockInputValidator


@dataclass(frozen=True)
class NormalizedLock:
    unlock_timestamp: int | None = None
    error: str | None = None
    amount: Decimal | None = None
    duration_seconds: int | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


def unit_seconds(unit: DurationUnit | str) -> int:
    return DurationUnit(unit).seconds


def normalize(
    amount: Any,
    asset: Asset | str,
    duration_magnitude: Any,
    duration_unit: DurationUnit | str,
    now: float | None = None,
    policy: LockPolicy | None = None,
) -> NormalizedLock:
    policy = policy or DEFAULT_POLICY

    try:
        asset = Asset(asset)
    except ValueError:
        return NormalizedLock(error=f"Unsupported asset: {asset}")

    try:
        duration_unit = DurationUnit(duration_unit)
    except ValueError:
        return NormalizedLock(error=f"Unsupported duration unit: {duration_unit}")

    amount_result = LockInputValidator.parse_amount(amount)
    if not amount_result.is_valid:
        return NormalizedLock(error=amount_result.error_message)

    duration_result = LockInputValidator.parse_duration(duration_magnitude)
    if not duration_result.is_valid:
        return NormalizedLock(error=duration_result.error_message)

    parsed_amount: Decimal = amount_result.normalized_value
    minimum = policy.minimum_amount(asset)
    if parsed_amount < minimum:
        return NormalizedLock(
            error=f"Minimum amount for {policy.symbol(asset)} is {minimum}"
        )

    duration_seconds = duration_result.normalized_value * duration_unit.seconds
    current_time = time.time() if now is None else now

    return NormalizedLock(
        unlock_timestamp=int(current_time) + duration_seconds,
        amount=parsed_amount,
        duration_seconds=duration_seconds,
    )
