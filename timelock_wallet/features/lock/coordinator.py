"""Lock lifecycle coordinator.

Owns the per-session state of the time-lock feature: validates create and
withdraw intents, submits them to the ledger, tracks pending operations and
keeps the lock cache and countdown in step with the connected wallet. The
ledger is authoritative, so nothing is shown until a refresh brings it back.
"""

from __future__ import annotations

import logging
import time
from decimal import Decimal
from typing import Any, Callable, Protocol

from timelock_wallet.features.lock.countdown import (
    DEFAULT_REFRESH_DELAY,
    DEFAULT_TICK_INTERVAL,
    CountdownScheduler,
    format_remaining,
)
from timelock_wallet.features.lock.errors import (
    FetchError,
    InvalidInputError,
    LedgerError,
    NotConnectedError,
    NotWithdrawableError,
    OperationInProgressError,
    TimelockError,
)
from timelock_wallet.features.lock.ledger import (
    CreateLockReceipt,
    HttpLedgerClient,
    LedgerClient,
    WithdrawReceipt,
)
from timelock_wallet.features.lock.models import (
    LockRecord,
    OperationKind,
    OperationState,
    OwnerSession,
    PendingOperation,
)
from timelock_wallet.features.lock.normalizer import normalize
from timelock_wallet.features.lock.policy import (
    DEFAULT_POLICY,
    Asset,
    DurationUnit,
    LockPolicy,
)
from timelock_wallet.features.lock.repository import LockRepository
from timelock_wallet.shared.config import AppConfig
from timelock_wallet.shared.logging import get_logger, log_with_context
from timelock_wallet.shared.notifications import NotificationCenter

logger = get_logger(__name__)


class WalletProvider(Protocol):
    def get_owner_session(self) -> OwnerSession | None: ...

    def sign(self, message: bytes) -> str: ...


class LockLifecycleCoordinator:
    def __init__(
        self,
        wallet: WalletProvider,
        ledger: LedgerClient,
        policy: LockPolicy | None = None,
        notifications: NotificationCenter | None = None,
        clock: Callable[[], float] = time.time,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        refresh_delay: float = DEFAULT_REFRESH_DELAY,
    ):
        self.wallet = wallet
        self.ledger = ledger
        self.policy = policy or DEFAULT_POLICY
        self.notifications = notifications or NotificationCenter()
        self._clock = clock
        self.repository = LockRepository(ledger, self.notifications, clock)
        self.scheduler = CountdownScheduler(
            self.repository.current_locks,
            self._refresh_after_unlock,
            clock=clock,
            tick_interval=tick_interval,
            refresh_delay=refresh_delay,
        )
        self.repository.add_listener(self._on_cache_changed)
        self.create_state = OperationState.IDLE
        self._withdraw_states: dict[str, OperationState] = {}
        self._pending_create: PendingOperation | None = None
        self._pending_withdraws: dict[str, PendingOperation] = {}

    @classmethod
    def from_config(
        cls,
        wallet: WalletProvider,
        config: AppConfig,
        policy: LockPolicy | None = None,
        notifications: NotificationCenter | None = None,
    ) -> "LockLifecycleCoordinator":
        ledger = HttpLedgerClient(
            config.ledger_url, wallet, timeout_config=config.timeout_config
        )
        return cls(
            wallet,
            ledger,
            policy=policy,
            notifications=notifications,
            tick_interval=config.tick_interval,
            refresh_delay=config.refresh_delay,
        )

    @property
    def is_loading(self) -> bool:
        return self._pending_create is not None or bool(self._pending_withdraws)

    def pending_operations(self) -> list[PendingOperation]:
        operations = list(self._pending_withdraws.values())
        if self._pending_create is not None:
            operations.insert(0, self._pending_create)
        return operations

    def withdraw_state(self, lock_id: str) -> OperationState:
        return self._withdraw_states.get(lock_id, OperationState.IDLE)

    def now(self) -> float:
        return self._clock()

    def current_locks(self) -> list[LockRecord]:
        return self.repository.current_locks()

    def remaining_seconds(self, lock_id: str) -> int:
        """Seconds until ``lock_id`` unlocks, never negative.

        Raises ``KeyError`` when the lock is not in the current cache.
        """
        record = self.repository.get(lock_id)
        if record is None:
            raise KeyError(lock_id)
        return record.remaining_seconds(self._clock())

    def current_error(self) -> str | None:
        return self.notifications.current_error

    def clear_error(self) -> None:
        self.notifications.clear_error()

    def _reject(self, error: TimelockError) -> TimelockError:
        logger.warning("%s: %s", error.title, error.message)
        self.notifications.report_failure(error.title, error.message)
        return error

    def _on_cache_changed(self, records: list[LockRecord]) -> None:
        self.scheduler.sync()

    def _session(self) -> OwnerSession | None:
        session = self.wallet.get_owner_session()
        if session is None:
            if self.repository.owner is not None:
                self.disconnect()
            return None
        if self.repository.owner != session:
            self._bind(session)
        return session

    def _bind(self, session: OwnerSession) -> None:
        self._pending_create = None
        self._pending_withdraws.clear()
        self._withdraw_states.clear()
        self.create_state = OperationState.IDLE
        self.scheduler.activate()
        self.repository.bind(session)

    async def sync_session(self) -> list[LockRecord]:
        """Follow the wallet's connection state and load locks for a connected owner."""
        if self._session() is None:
            return []
        try:
            return await self.repository.refresh()
        except FetchError:
            # Already surfaced by the repository; stale records stay visible.
            return self.repository.current_locks()

    def disconnect(self) -> None:
        self.scheduler.teardown()
        self.repository.clear()
        self._pending_create = None
        self._pending_withdraws.clear()
        self._withdraw_states.clear()
        self.create_state = OperationState.IDLE
        logger.info("Owner session closed")

    def shutdown(self) -> None:
        self.scheduler.teardown()

    async def refresh(self) -> list[LockRecord]:
        if self._session() is None:
            raise self._reject(NotConnectedError("Connect a wallet to load locks"))
        return await self.repository.refresh()

    async def _refresh_after_success(self) -> None:
        if self.repository.owner is None:
            return
        try:
            await self.repository.refresh(fresh=True)
        except FetchError:
            # Already surfaced by the repository.
            pass

    async def _refresh_after_unlock(self) -> None:
        if self.repository.owner is None:
            return
        await self.repository.refresh()

    async def create_lock(
        self,
        amount: Any,
        duration_magnitude: Any,
        duration_unit: DurationUnit | str,
        asset: Asset | str = Asset.NATIVE,
    ) -> CreateLockReceipt:
        if self._session() is None:
            self.create_state = OperationState.FAILED
            raise self._reject(
                NotConnectedError("Connect a wallet before creating a lock")
            )

        if self._pending_create is not None:
            raise self._reject(
                OperationInProgressError("A lock is already being created")
            )

        self.create_state = OperationState.VALIDATING
        result = normalize(
            amount,
            asset,
            duration_magnitude,
            duration_unit,
            now=self._clock(),
            policy=self.policy,
        )
        if not result.is_valid or result.unlock_timestamp is None:
            self.create_state = OperationState.FAILED
            raise self._reject(InvalidInputError(result.error or "Invalid lock request"))

        asset = Asset(asset)
        locked_amount: Decimal = result.amount  # type: ignore[assignment]
        pending = PendingOperation(
            kind=OperationKind.CREATE, target=asset.value, started_at=self._clock()
        )
        self._pending_create = pending
        self.create_state = OperationState.SUBMITTING
        logger.info(
            "Creating lock: %s %s until %d",
            locked_amount,
            self.policy.symbol(asset),
            result.unlock_timestamp,
        )

        try:
            receipt = await self.ledger.create_lock(
                amount=locked_amount,
                asset=asset,
                unlock_timestamp=result.unlock_timestamp,
            )
        except LedgerError as e:
            if self._pending_create is pending:
                self.create_state = OperationState.FAILED
            logger.error("Failed to create lock: %s", e.reason)
            self.notifications.report_failure("Failed to create lock", e.reason, retain=True)
            raise
        finally:
            still_current = self._pending_create is pending
            if still_current:
                self._pending_create = None

        if still_current:
            self.create_state = OperationState.SUCCEEDED
        self.notifications.report_success(
            "Lock created",
            f"{locked_amount} {self.policy.symbol(asset)} locked in {receipt.lock_id} "
            f"(signature {receipt.signature})",
        )
        await self._refresh_after_success()
        return receipt

    async def withdraw(self, lock_id: str) -> WithdrawReceipt:
        session = self._session()
        if session is None:
            raise self._reject(NotConnectedError("Connect a wallet before withdrawing"))

        in_progress = lock_id in self._pending_withdraws
        if not in_progress:
            self._withdraw_states[lock_id] = OperationState.VALIDATING

        record = self.repository.get(lock_id)
        now = self._clock()
        reason: str | None = None
        if record is None:
            reason = f"Lock {lock_id} is not in the current lock list"
        elif record.is_withdrawn:
            reason = f"Lock {lock_id} has already been withdrawn"
        elif not record.is_unlocked(now):
            reason = (
                f"Lock {lock_id} is still locked for "
                f"{format_remaining(record.remaining_seconds(now))}"
            )
        if reason is not None:
            if not in_progress:
                self._withdraw_states[lock_id] = OperationState.FAILED
            raise self._reject(NotWithdrawableError(reason))

        if in_progress:
            raise self._reject(
                OperationInProgressError(f"A withdrawal for {lock_id} is already in progress")
            )

        pending = PendingOperation(
            kind=OperationKind.WITHDRAW, target=lock_id, started_at=now
        )
        self._pending_withdraws[lock_id] = pending
        self._withdraw_states[lock_id] = OperationState.SUBMITTING
        log_with_context(
            logger, logging.INFO, "Submitting withdrawal", lock_id=lock_id, owner=session.identity
        )

        try:
            receipt = await self.ledger.withdraw(lock_id)
        except LedgerError as e:
            if self._pending_withdraws.get(lock_id) is pending:
                self._withdraw_states[lock_id] = OperationState.FAILED
            logger.error("Failed to withdraw lock %s: %s", lock_id, e.reason)
            self.notifications.report_failure("Failed to withdraw", e.reason, retain=True)
            raise
        finally:
            still_current = self._pending_withdraws.get(lock_id) is pending
            if still_current:
                del self._pending_withdraws[lock_id]

        if still_current:
            self._withdraw_states[lock_id] = OperationState.SUCCEEDED
        self.notifications.report_success(
            "Withdrawal submitted",
            f"Lock {lock_id} withdrawn (signature {receipt.signature})",
        )
        await self._refresh_after_success()
        return receipt
