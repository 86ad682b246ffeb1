"""Application configuration loaded from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

from timelock_wallet.shared.network import TimeoutConfig

DEFAULT_LEDGER_URL = "http://localhost:8080"
DEFAULT_NETWORK = "testnet"
SUPPORTED_NETWORKS = ("testnet", "mainnet")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


@dataclass
class AppConfig:
    ledger_url: str = DEFAULT_LEDGER_URL
    network_name: str = DEFAULT_NETWORK
    tick_interval: float = 1.0
    refresh_delay: float = 2.0
    timeout_config: TimeoutConfig | None = None

    def __post_init__(self):
        if self.timeout_config is None:
            self.timeout_config = TimeoutConfig()

    @classmethod
    def from_environment(cls) -> "AppConfig":
        network_name = os.getenv("TIMELOCK_WALLET_NETWORK", DEFAULT_NETWORK).lower()
        if network_name not in SUPPORTED_NETWORKS:
            network_name = DEFAULT_NETWORK

        tick_interval = _env_float("TIMELOCK_WALLET_TICK_INTERVAL", 1.0)
        if tick_interval == 0:
            tick_interval = 1.0

        return cls(
            ledger_url=os.getenv("TIMELOCK_WALLET_LEDGER_URL", DEFAULT_LEDGER_URL),
            network_name=network_name,
            tick_interval=tick_interval,
            refresh_delay=_env_float("TIMELOCK_WALLET_REFRESH_DELAY", 2.0),
        )
