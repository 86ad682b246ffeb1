"""Time lock event handlers for the Time-Locked Wallet TUI."""

from __future__ import annotations

from typing import TYPE_CHECKING

from timelock_wallet.features.lock.coordinator import LockLifecycleCoordinator
from timelock_wallet.features.lock.errors import LedgerError, TimelockError
from timelock_wallet.features.lock.screen import (
    ConnectWalletScreen,
    CreateLockScreen,
    LockResultScreen,
    LocksTable,
)
from timelock_wallet.shared.logging import get_logger, get_user_friendly_error

if TYPE_CHECKING:
    from timelock_wallet.__main__ import TimelockApp

logger = get_logger(__name__)


class LockHandlersMixin:
    """Mixin class providing lock-related event handlers for TimelockApp."""

    coordinator: LockLifecycleCoordinator
    locks_table: LocksTable

    def show_create_lock(self: "TimelockApp") -> None:
        self.push_screen(CreateLockScreen(self.coordinator.policy))

    def show_connect_wallet(self: "TimelockApp") -> None:
        self.push_screen(ConnectWalletScreen(has_saved_wallet=self.wallet.has_wallet()))

    def on_create_lock_screen_create_lock_requested(
        self: "TimelockApp", event: CreateLockScreen.CreateLockRequested
    ) -> None:
        self.run_worker(
            self._create_lock(
                event.amount, event.duration, event.duration_unit, event.asset
            ),
            exclusive=False,
        )

    async def _create_lock(
        self: "TimelockApp", amount: str, duration: str, duration_unit: str, asset: str
    ) -> None:
        try:
            receipt = await self.coordinator.create_lock(
                amount, duration, duration_unit, asset=asset
            )
        except LedgerError as e:
            self._suggest(e.reason)
            return
        except TimelockError as e:
            # The coordinator has already notified the user.
            logger.debug("Create lock rejected: %s", e)
            return
        self.push_screen(
            LockResultScreen("Time Lock Created", receipt.lock_id, receipt.signature)
        )
        self.render_locks()

    def withdraw_selected(self: "TimelockApp") -> None:
        lock_id = self.locks_table.selected_lock_id()
        if lock_id is None:
            self.notify("Select a lock to withdraw", severity="warning")
            return
        self.run_worker(self._withdraw(lock_id), exclusive=False)

    async def _withdraw(self: "TimelockApp", lock_id: str) -> None:
        try:
            receipt = await self.coordinator.withdraw(lock_id)
        except LedgerError as e:
            self._suggest(e.reason)
            return
        except TimelockError as e:
            logger.debug("Withdraw rejected: %s", e)
            return
        self.push_screen(
            LockResultScreen("Withdrawal Submitted", receipt.lock_id, receipt.signature)
        )
        self.render_locks()

    def refresh_locks(self: "TimelockApp") -> None:
        self.run_worker(self._refresh_locks(), exclusive=True, group="refresh")

    async def _refresh_locks(self: "TimelockApp") -> None:
        try:
            await self.coordinator.refresh()
        except TimelockError as e:
            logger.debug("Refresh failed: %s", e)
        self.render_locks()

    def render_locks(self: "TimelockApp") -> None:
        table = self.locks_table
        table.update_locks(
            self.coordinator.current_locks(),
            self.coordinator.now(),
            self.coordinator.policy,
        )
        self.update_error_banner()

    def _suggest(self: "TimelockApp", reason: str) -> None:
        _, suggestion = get_user_friendly_error(reason)
        if suggestion:
            self.notify(suggestion, title="Hint")
