"""Shared utilities for Time-Locked Wallet."""

from timelock_wallet.shared.logging import (
    LoggingConfig,
    LogLevel,
    get_logger,
    get_user_friendly_error,
    log_with_context,
    sanitize_message,
    setup_logging,
)
from timelock_wallet.shared.network import (
    NetworkClient,
    NetworkError,
    NetworkErrorType,
    TimeoutConfig,
)
from timelock_wallet.shared.config import AppConfig
from timelock_wallet.shared.notifications import (
    Notification,
    NotificationCenter,
    NotificationSeverity,
)

__all__ = [
    "LoggingConfig",
    "LogLevel",
    "get_logger",
    "get_user_friendly_error",
    "log_with_context",
    "sanitize_message",
    "setup_logging",
    "NetworkClient",
    "NetworkError",
    "NetworkErrorType",
    "TimeoutConfig",
    "AppConfig",
    "Notification",
    "NotificationCenter",
    "NotificationSeverity",
]
