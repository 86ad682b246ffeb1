import asyncio
import dataclasses
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest
from symbolchain.CryptoTypes import PrivateKey
from symbolchain.facade.SymbolFacade import SymbolFacade

from timelock_wallet.features.lock.coordinator import LockLifecycleCoordinator
from timelock_wallet.features.lock.errors import LedgerError
from timelock_wallet.features.lock.ledger import CreateLockReceipt, WithdrawReceipt
from timelock_wallet.features.lock.models import LockRecord, OwnerSession
from timelock_wallet.features.lock.policy import Asset
from timelock_wallet.shared.notifications import NotificationCenter

START_TIME = 1_700_000_000.0
OWNER = "TOWNERADDRESSFORTESTS0000000000000000000"


class FakeClock:
    """Injectable wall clock; tests move time with :meth:`advance`."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeWallet:
    def __init__(self, identity: str = OWNER):
        self.session: OwnerSession | None = OwnerSession(
            identity=identity, public_key="AB" * 32
        )
        self.signed: list[bytes] = []

    def get_owner_session(self) -> OwnerSession | None:
        return self.session

    def sign(self, message: bytes) -> str:
        self.signed.append(message)
        return "00" * 64

    def switch_owner(self, identity: str) -> None:
        self.session = OwnerSession(identity=identity, public_key="CD" * 32)

    def disconnect(self) -> None:
        self.session = None


class FakeLedger:
    """In-memory ledger honouring the collaborator contract.

    Each call can be held open with an ``asyncio.Event`` gate or made to fail
    by setting the matching ``*_error`` attribute to a :class:`LedgerError`.
    """

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.records: list[LockRecord] = []
        self.owner = OWNER
        self.create_calls: list[tuple[Decimal, Asset, int]] = []
        self.withdraw_calls: list[str] = []
        self.fetch_calls: list[str] = []
        self.create_error: LedgerError | None = None
        self.withdraw_error: LedgerError | None = None
        self.fetch_error: LedgerError | None = None
        self.create_gate: asyncio.Event | None = None
        self.withdraw_gate: asyncio.Event | None = None
        self.fetch_gate: asyncio.Event | None = None
        self._next_id = 1

    def add_record(self, record: LockRecord) -> LockRecord:
        self.records.append(record)
        return record

    async def create_lock(
        self, amount: Decimal, asset: Asset, unlock_timestamp: int
    ) -> CreateLockReceipt:
        self.create_calls.append((amount, asset, unlock_timestamp))
        if self.create_gate is not None:
            await self.create_gate.wait()
        if self.create_error is not None:
            raise self.create_error
        lock_id = f"lock-{self._next_id}"
        self._next_id += 1
        self.records.append(
            LockRecord(
                lock_id=lock_id,
                owner=self.owner,
                amount=amount,
                asset=asset,
                unlock_timestamp=unlock_timestamp,
                created_at=int(self.clock()),
            )
        )
        return CreateLockReceipt(lock_id=lock_id, signature=f"sig-create-{lock_id}")

    async def withdraw(self, lock_id: str) -> WithdrawReceipt:
        self.withdraw_calls.append(lock_id)
        if self.withdraw_gate is not None:
            await self.withdraw_gate.wait()
        if self.withdraw_error is not None:
            raise self.withdraw_error
        self.records = [
            dataclasses.replace(record, is_withdrawn=True)
            if record.lock_id == lock_id
            else record
            for record in self.records
        ]
        return WithdrawReceipt(lock_id=lock_id, signature=f"sig-withdraw-{lock_id}")

    async def fetch_locks(self, owner: str) -> list[LockRecord]:
        self.fetch_calls.append(owner)
        # The ledger answers with its state as of the request.
        snapshot = [record for record in self.records if record.owner == owner]
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        if self.fetch_error is not None:
            raise self.fetch_error
        return snapshot


def make_record(
    lock_id: str,
    unlock_timestamp: float,
    owner: str = OWNER,
    amount: str = "1",
    asset: Asset = Asset.NATIVE,
    is_withdrawn: bool = False,
) -> LockRecord:
    return LockRecord(
        lock_id=lock_id,
        owner=owner,
        amount=Decimal(amount),
        asset=asset,
        unlock_timestamp=int(unlock_timestamp),
        is_withdrawn=is_withdrawn,
    )


@pytest.fixture
def clock():
    """Fixture providing a controllable clock"""
    return FakeClock()


@pytest.fixture
def fake_ledger(clock):
    """Fixture providing an in-memory ledger"""
    return FakeLedger(clock)


@pytest.fixture
def fake_wallet():
    """Fixture providing a connected wallet"""
    return FakeWallet()


@pytest.fixture
def notifications():
    """Fixture providing a notification center"""
    return NotificationCenter()


@pytest.fixture
def coordinator(fake_wallet, fake_ledger, notifications, clock):
    """Fixture providing a coordinator wired to fakes with fast timers"""
    return LockLifecycleCoordinator(
        fake_wallet,
        fake_ledger,
        notifications=notifications,
        clock=clock,
        tick_interval=0.01,
        refresh_delay=0.01,
    )


@pytest.fixture
def testnet_facade():
    """Fixture providing testnet Symbol facade"""
    return SymbolFacade("testnet")


@pytest.fixture
def random_private_key():
    """Fixture providing a random private key"""
    return PrivateKey.random()


@pytest.fixture(autouse=True)
def isolate_wallet_storage(monkeypatch):
    """Run tests with isolated wallet and log storage."""
    with tempfile.TemporaryDirectory(prefix="timelock-wallet-test-") as tmp_dir:
        monkeypatch.setenv("TIMELOCK_WALLET_DIR", str(Path(tmp_dir)))
        yield
