"""Ledger collaborator contract and its HTTP gateway implementation.

The ledger is the system of record for locks: it creates lock accounts, lists
the locks of an owner and executes withdrawals. The coordinator only talks to
the :class:`LedgerClient` protocol; :class:`HttpLedgerClient` is the concrete
client used by the terminal application.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol, cast

from timelock_wallet.features.lock.errors import LedgerError
from timelock_wallet.features.lock.models import LockRecord, OwnerSession
from timelock_wallet.features.lock.policy import Asset
from timelock_wallet.shared.logging import get_logger
from timelock_wallet.shared.network import (
    NetworkClient,
    NetworkError,
    TimeoutConfig,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class CreateLockReceipt:
    lock_id: str
    signature: str


@dataclass(frozen=True)
class WithdrawReceipt:
    lock_id: str
    signature: str


class LedgerClient(Protocol):
    async def create_lock(
        self, amount: Decimal, asset: Asset, unlock_timestamp: int
    ) -> CreateLockReceipt: ...

    async def withdraw(self, lock_id: str) -> WithdrawReceipt: ...

    async def fetch_locks(self, owner: str) -> list[LockRecord]: ...


class SignerProtocol(Protocol):
    def get_owner_session(self) -> OwnerSession | None: ...

    def sign(self, message: bytes) -> str: ...


def canonical_payload(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")


class HttpLedgerClient:
    """Talks to a time-lock gateway over HTTP; every request is signed by the wallet."""

    def __init__(
        self,
        base_url: str,
        signer: SignerProtocol,
        timeout_config: TimeoutConfig | None = None,
    ):
        self.base_url = base_url
        self.signer = signer
        # Ledger calls are never retried automatically.
        self._network_client = NetworkClient(
            base_url=base_url, timeout_config=timeout_config
        )

    def _require_session(self) -> OwnerSession:
        session = self.signer.get_owner_session()
        if session is None:
            raise LedgerError("No wallet connected to sign the request")
        return session

    def _signed_body(self, payload: dict[str, Any]) -> str:
        session = self._require_session()
        body = {**payload, "owner": session.identity, "signerPublicKey": session.public_key}
        signature = self.signer.sign(canonical_payload(body))
        return json.dumps({**body, "signature": signature})

    def _create_lock_sync(
        self, amount: Decimal, asset: Asset, unlock_timestamp: int
    ) -> CreateLockReceipt:
        body = self._signed_body(
            {
                "action": "create",
                "amount": str(amount),
                "asset": asset.value,
                "unlockTimestamp": unlock_timestamp,
            }
        )
        try:
            result = self._network_client.put(
                "/timelocks",
                context="Create lock",
                data=body,
                headers={"Content-Type": "application/json"},
            )
        except NetworkError as e:
            logger.error("Failed to create lock: %s", e.message)
            raise LedgerError(e.message) from e

        lock_id = result.get("lockId") or result.get("timelockAccount")
        if not lock_id:
            raise LedgerError(
                f"Ledger response did not include a lock identifier: {result.get('message', '')}"
            )
        logger.info("Lock created: %s", lock_id)
        return CreateLockReceipt(
            lock_id=str(lock_id), signature=str(result.get("signature", ""))
        )

    def _withdraw_sync(self, lock_id: str) -> WithdrawReceipt:
        body = self._signed_body({"action": "withdraw", "lockId": lock_id})
        try:
            result = self._network_client.put(
                f"/timelocks/{lock_id}/withdraw",
                context="Withdraw lock",
                data=body,
                headers={"Content-Type": "application/json"},
            )
        except NetworkError as e:
            logger.error("Failed to withdraw lock %s: %s", lock_id, e.message)
            raise LedgerError(e.message) from e

        logger.info("Withdrawal submitted for lock %s", lock_id)
        return WithdrawReceipt(lock_id=lock_id, signature=str(result.get("signature", "")))

    def _fetch_locks_sync(self, owner: str) -> list[LockRecord]:
        try:
            result = self._network_client.get(
                "/timelocks",
                context="Fetch locks",
                params={"owner": owner},
            )
        except NetworkError as e:
            logger.error("Failed to fetch locks for %s: %s", owner, e.message)
            raise LedgerError(e.message) from e

        data = result.get("data", []) if isinstance(result, dict) else result
        if not isinstance(data, list):
            raise LedgerError("Malformed lock list returned by ledger")

        locks: list[LockRecord] = []
        for lock_data in cast(list[dict[str, Any]], data):
            try:
                locks.append(LockRecord.from_api_response(lock_data))
            except (KeyError, TypeError, ValueError, ArithmeticError) as e:
                logger.warning("Failed to parse lock record: %s", e)
        return locks

    async def create_lock(
        self, amount: Decimal, asset: Asset, unlock_timestamp: int
    ) -> CreateLockReceipt:
        return await asyncio.to_thread(
            self._create_lock_sync, amount, asset, unlock_timestamp
        )

    async def withdraw(self, lock_id: str) -> WithdrawReceipt:
        return await asyncio.to_thread(self._withdraw_sync, lock_id)

    async def fetch_locks(self, owner: str) -> list[LockRecord]:
        return await asyncio.to_thread(self._fetch_locks_sync, owner)
