"""Asset and duration policy tables for time locks."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
SECONDS_PER_WEEK = 604800
# Calendar approximation: every month counts as 30 days.
SECONDS_PER_MONTH = 30 * SECONDS_PER_DAY


class Asset(Enum):
    NATIVE = "native"
    TOKEN = "token"


class DurationUnit(Enum):
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"

    @property
    def seconds(self) -> int:
        return UNIT_SECONDS[self]


UNIT_SECONDS: dict[DurationUnit, int] = {
    DurationUnit.MINUTES: SECONDS_PER_MINUTE,
    DurationUnit.HOURS: SECONDS_PER_HOUR,
    DurationUnit.DAYS: SECONDS_PER_DAY,
    DurationUnit.WEEKS: SECONDS_PER_WEEK,
    DurationUnit.MONTHS: SECONDS_PER_MONTH,
}

DEFAULT_MINIMUM_AMOUNTS: dict[Asset, Decimal] = {
    Asset.NATIVE: Decimal("0.001"),
    Asset.TOKEN: Decimal("1"),
}

DEFAULT_ASSET_SYMBOLS: dict[Asset, str] = {
    Asset.NATIVE: "XYM",
    Asset.TOKEN: "USDC",
}


def _env_minimum(name: str, default: Decimal) -> Decimal:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        return default
    if not value.is_finite() or value <= 0:
        return default
    return value


@dataclass(frozen=True)
class LockPolicy:
    minimum_amounts: dict[Asset, Decimal] = field(
        default_factory=lambda: dict(DEFAULT_MINIMUM_AMOUNTS)
    )
    asset_symbols: dict[Asset, str] = field(
        default_factory=lambda: dict(DEFAULT_ASSET_SYMBOLS)
    )

    @classmethod
    def from_environment(cls) -> "LockPolicy":
        return cls(
            minimum_amounts={
                Asset.NATIVE: _env_minimum(
                    "TIMELOCK_WALLET_MIN_NATIVE", DEFAULT_MINIMUM_AMOUNTS[Asset.NATIVE]
                ),
                Asset.TOKEN: _env_minimum(
                    "TIMELOCK_WALLET_MIN_TOKEN", DEFAULT_MINIMUM_AMOUNTS[Asset.TOKEN]
                ),
            }
        )

    def minimum_amount(self, asset: Asset) -> Decimal:
        return self.minimum_amounts[asset]

    def symbol(self, asset: Asset) -> str:
        return self.asset_symbols.get(asset, asset.value.upper())


DEFAULT_POLICY = LockPolicy()
