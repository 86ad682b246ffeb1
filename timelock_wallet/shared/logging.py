"""Logging setup for Time-Locked Wallet.

Log records pass through a redacting formatter so private keys, keystore blobs
and passwords never reach the log file. Ledger failures are also mapped to
short user-facing hints here.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

ENV_PREFIX = "TIMELOCK_WALLET"
DEFAULT_LOG_DIR = Path.home() / ".timelock-wallet"


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


@dataclass
class LoggingConfig:
    log_level: LogLevel = LogLevel.INFO
    log_format: str = "human"
    log_to_file: bool = True
    log_to_stdout: bool = False
    log_dir: Path | None = None
    log_filename: str = "wallet.log"
    redact: bool = True

    @classmethod
    def from_environment(cls) -> "LoggingConfig":
        level_name = os.getenv(f"{ENV_PREFIX}_LOG_LEVEL", "INFO").upper()
        log_level = (
            LogLevel(level_name)
            if level_name in LogLevel.__members__
            else LogLevel.INFO
        )
        log_format = os.getenv(f"{ENV_PREFIX}_LOG_FORMAT", "human").lower()
        log_dir = os.getenv(f"{ENV_PREFIX}_DIR")

        return cls(
            log_level=log_level,
            log_format="json" if log_format == "json" else "human",
            log_to_stdout=_env_flag(f"{ENV_PREFIX}_LOG_STDOUT"),
            log_dir=Path(log_dir).expanduser() if log_dir else None,
        )


_REDACTIONS: list[tuple[re.Pattern[str], str]] = [
    # Key material labelled in the message, e.g. "private_key=..." or a keystore field.
    (
        re.compile(
            r"((?:encrypted[_-]?)?private[_-]?key['\"]?\s*[:=]\s*['\"]?)[A-Za-z0-9+/=_-]{20,}",
            re.IGNORECASE,
        ),
        r"\1[REDACTED]",
    ),
    (
        re.compile(r"(password['\"]?\s*[:=]\s*['\"]?)[^\s'\"]+", re.IGNORECASE),
        r"\1[REDACTED]",
    ),
    # Any other 32-byte hex blob.
    (re.compile(r"\b[A-Fa-f0-9]{64}\b"), "[KEY_REDACTED]"),
]


def sanitize_message(message: str) -> str:
    if not message:
        return message
    for pattern, replacement in _REDACTIONS:
        message = pattern.sub(replacement, message)
    return message


# (pattern, message, suggestion); the first match wins.
_LEDGER_HINTS: list[tuple[str, str, str]] = [
    (
        r"timeout|timed out",
        "Connection timed out. The ledger gateway may be slow or unavailable.",
        "Try again later or check your network connection.",
    ),
    (
        r"connection refused|cannot connect|connection error",
        "Unable to connect to the ledger gateway.",
        "Check your internet connection and try again.",
    ),
    (
        r"insufficient_balance|insufficient funds|not enough balance",
        "Insufficient balance to lock this amount.",
        "Lower the amount or top up the wallet, keeping room for fees.",
    ),
    (
        r"still locked|not yet unlocked|unlock time",
        "These funds are still locked.",
        "Wait for the countdown to finish before withdrawing.",
    ),
    (
        r"already withdrawn",
        "This lock has already been withdrawn.",
        "Refresh the lock list to see the current state.",
    ),
    (
        r"below minimum|minimum amount",
        "The amount is below the minimum for this asset.",
        "Increase the amount and try again.",
    ),
    (
        r"signature.*invalid|invalid.*signature",
        "Request signature verification failed.",
        "Reconnect the wallet and try again.",
    ),
    (
        r"unauthorized|forbidden|401|403",
        "The ledger refused the request.",
        "Check that the connected wallet owns this lock.",
    ),
    (
        r"not found|404",
        "The requested lock was not found.",
        "The lock may have been closed already. Refresh the list.",
    ),
    (
        r"rate limit|too many requests|429",
        "Too many requests to the ledger gateway.",
        "Wait a moment and try again.",
    ),
]


def get_user_friendly_error(error: Exception | str) -> tuple[str, str | None]:
    """Return ``(message, suggestion)`` for a ledger or transport failure."""
    text = str(error).lower()
    for pattern, message, suggestion in _LEDGER_HINTS:
        if re.search(pattern, text):
            return message, suggestion
    return "An unexpected error occurred.", None


class StructuredFormatter(logging.Formatter):
    """One JSON object per line; ``context`` carries fields from :func:`log_with_context`."""

    def __init__(self, redact: bool = True):
        super().__init__()
        self.redact = redact

    def _clean(self, value: Any) -> Any:
        if self.redact and isinstance(value, str):
            return sanitize_message(value)
        return value

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": self._clean(record.getMessage()),
            "function": record.funcName,
            "line": record.lineno,
        }
        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            entry["context"] = {key: self._clean(value) for key, value in context.items()}
        if record.exc_info:
            entry["exception"] = self._clean(self.formatException(record.exc_info))
        return json.dumps(entry, default=str)


class HumanReadableFormatter(logging.Formatter):
    def __init__(self, redact: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.redact = redact

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            text += " " + " ".join(f"{key}={value}" for key, value in context.items())
        return sanitize_message(text) if self.redact else text


_logging_initialized = False


def setup_logging(config: LoggingConfig | None = None) -> None:
    global _logging_initialized

    if _logging_initialized:
        return

    config = config or LoggingConfig.from_environment()
    formatter: logging.Formatter = (
        StructuredFormatter(redact=config.redact)
        if config.log_format == "json"
        else HumanReadableFormatter(redact=config.redact)
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(config.log_level.value)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers: list[logging.Handler] = []
    if config.log_to_file:
        log_dir = config.log_dir or DEFAULT_LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.FileHandler(log_dir / config.log_filename, mode="a", encoding="utf-8")
        )
    if config.log_to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    _logging_initialized = True


def get_logger(name: str) -> logging.Logger:
    if not _logging_initialized:
        setup_logging()
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger, level: int, message: str, **context: Any
) -> None:
    logger.log(level, message, extra={"context": context})


__all__ = [
    "LogLevel",
    "LoggingConfig",
    "StructuredFormatter",
    "HumanReadableFormatter",
    "sanitize_message",
    "get_user_friendly_error",
    "setup_logging",
    "get_logger",
    "log_with_context",
]
