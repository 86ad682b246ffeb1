"""Error and notification surface shared by the lock components.

Holds at most one *current error* (retained until cleared) and emits one-shot
notifications for every operation outcome, success and failure alike.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from timelock_wallet.shared.logging import get_logger

logger = get_logger(__name__)


class NotificationSeverity(Enum):
    INFORMATION = "information"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    severity: NotificationSeverity = NotificationSeverity.INFORMATION
    created_at: float = field(default_factory=time.time)

    @property
    def is_error(self) -> bool:
        return self.severity == NotificationSeverity.ERROR


NotificationListener = Callable[[Notification], None]


class NotificationCenter:
    def __init__(self) -> None:
        self._current_error: str | None = None
        self._history: list[Notification] = []
        self._listeners: list[NotificationListener] = []

    @property
    def current_error(self) -> str | None:
        return self._current_error

    @property
    def history(self) -> list[Notification]:
        return self._history.copy()

    def set_error(self, message: str) -> None:
        self._current_error = message

    def clear_error(self) -> None:
        self._current_error = None

    def add_listener(self, listener: NotificationListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: NotificationListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def notify(
        self,
        title: str,
        description: str = "",
        severity: NotificationSeverity = NotificationSeverity.INFORMATION,
    ) -> Notification:
        notification = Notification(
            title=title, description=description, severity=severity
        )
        self._history.append(notification)
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception as e:
                logger.error("Error in notification listener: %s", e)
        return notification

    def report_success(self, title: str, description: str = "") -> Notification:
        return self.notify(title, description, NotificationSeverity.INFORMATION)

    def report_failure(
        self, title: str, description: str, retain: bool = False
    ) -> Notification:
        """Emit a failure notification; ``retain`` also makes it the current error."""
        if retain:
            self.set_error(description)
        return self.notify(title, description, NotificationSeverity.ERROR)

    def report_warning(
        self, title: str, description: str, retain: bool = False
    ) -> Notification:
        if retain:
            self.set_error(description)
        return self.notify(title, description, NotificationSeverity.WARNING)
