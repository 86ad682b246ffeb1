"""Tests for the per-owner lock cache."""

import asyncio

import pytest

from conftest import OWNER, make_record
from timelock_wallet.features.lock.errors import FetchError, LedgerError, NotConnectedError
from timelock_wallet.features.lock.models import OwnerSession
from timelock_wallet.features.lock.repository import LockRepository
from timelock_wallet.shared.notifications import NotificationSeverity


@pytest.fixture
def repository(fake_ledger, notifications, clock):
    repo = LockRepository(fake_ledger, notifications, clock)
    repo.bind(OwnerSession(identity=OWNER))
    return repo


class TestLockRepositoryRefresh:
    @pytest.mark.asyncio
    async def test_refresh_replaces_cache_wholesale(self, repository, fake_ledger, clock):
        fake_ledger.add_record(make_record("a", clock() + 60))
        fake_ledger.add_record(make_record("b", clock() + 120))
        assert [r.lock_id for r in await repository.refresh()] == ["a", "b"]

        fake_ledger.records = [make_record("c", clock() + 10)]
        records = await repository.refresh()

        assert [r.lock_id for r in records] == ["c"]
        assert repository.get("a") is None
        assert repository.get("c") is not None

    @pytest.mark.asyncio
    async def test_refresh_preserves_ledger_order(self, repository, fake_ledger, clock):
        for lock_id in ["z", "m", "a"]:
            fake_ledger.add_record(make_record(lock_id, clock() + 60))
        records = await repository.refresh()
        assert [r.lock_id for r in records] == ["z", "m", "a"]

    @pytest.mark.asyncio
    async def test_concurrent_refreshes_are_coalesced(self, repository, fake_ledger, clock):
        fake_ledger.add_record(make_record("a", clock() + 60))
        fake_ledger.fetch_gate = asyncio.Event()

        first = asyncio.ensure_future(repository.refresh())
        second = asyncio.ensure_future(repository.refresh())
        await asyncio.sleep(0)
        assert repository.is_refreshing
        fake_ledger.fetch_gate.set()
        results = await asyncio.gather(first, second)

        assert len(fake_ledger.fetch_calls) == 1
        assert results[0] == results[1]
        assert not repository.is_refreshing

    @pytest.mark.asyncio
    async def test_fresh_refresh_waits_for_follow_up_fetch(
        self, repository, fake_ledger, clock
    ):
        fake_ledger.add_record(make_record("a", clock() + 60))
        fake_ledger.fetch_gate = asyncio.Event()

        stale = asyncio.ensure_future(repository.refresh())
        await asyncio.sleep(0.01)
        # Lands after the in-flight fetch has read the ledger.
        fake_ledger.add_record(make_record("b", clock() + 60))
        fresh = asyncio.ensure_future(repository.refresh(fresh=True))
        also_fresh = asyncio.ensure_future(repository.refresh(fresh=True))
        await asyncio.sleep(0.01)
        fake_ledger.fetch_gate.set()

        assert [r.lock_id for r in await stale] == ["a"]
        assert [r.lock_id for r in await fresh] == ["a", "b"]
        assert [r.lock_id for r in await also_fresh] == ["a", "b"]
        assert len(fake_ledger.fetch_calls) == 2
        assert [r.lock_id for r in repository.current_locks()] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_fresh_refresh_without_inflight_fetches_once(self, repository, fake_ledger):
        await repository.refresh(fresh=True)
        assert len(fake_ledger.fetch_calls) == 1

    @pytest.mark.asyncio
    async def test_sequential_refreshes_each_fetch(self, repository, fake_ledger):
        await repository.refresh()
        await repository.refresh()
        assert len(fake_ledger.fetch_calls) == 2

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_previous_contents(
        self, repository, fake_ledger, notifications, clock
    ):
        fake_ledger.add_record(make_record("a", clock() + 60))
        await repository.refresh()

        fake_ledger.fetch_error = LedgerError("gateway unavailable")
        with pytest.raises(FetchError) as exc_info:
            await repository.refresh()

        assert exc_info.value.reason == "gateway unavailable"
        assert [r.lock_id for r in repository.current_locks()] == ["a"]
        assert notifications.current_error == "gateway unavailable"
        assert notifications.history[-1].severity == NotificationSeverity.ERROR

    @pytest.mark.asyncio
    async def test_refresh_without_owner_raises(self, fake_ledger, notifications):
        repo = LockRepository(fake_ledger, notifications)
        with pytest.raises(NotConnectedError):
            await repo.refresh()
        assert fake_ledger.fetch_calls == []

    @pytest.mark.asyncio
    async def test_clear_discards_inflight_result(self, repository, fake_ledger, clock):
        fake_ledger.add_record(make_record("a", clock() + 60))
        fake_ledger.fetch_gate = asyncio.Event()

        pending = asyncio.ensure_future(repository.refresh())
        await asyncio.sleep(0)
        repository.clear()
        fake_ledger.fetch_gate.set()
        await pending

        assert repository.current_locks() == []
        assert repository.owner is None

    @pytest.mark.asyncio
    async def test_owner_switch_discards_stale_failure(
        self, repository, fake_ledger, notifications
    ):
        fake_ledger.fetch_gate = asyncio.Event()
        fake_ledger.fetch_error = LedgerError("late failure")

        pending = asyncio.ensure_future(repository.refresh())
        await asyncio.sleep(0)
        repository.bind(OwnerSession(identity="TOTHEROWNER"))
        fake_ledger.fetch_gate.set()
        await pending

        assert notifications.current_error is None

    @pytest.mark.asyncio
    async def test_listeners_receive_snapshot(self, repository, fake_ledger, clock):
        snapshots = []
        repository.add_listener(snapshots.append)
        fake_ledger.add_record(make_record("a", clock() + 60))

        await repository.refresh()

        assert [r.lock_id for r in snapshots[-1]] == ["a"]


class TestLockRepositoryAnomalies:
    @pytest.mark.asyncio
    async def test_withdrawn_before_unlock_is_surfaced_once(
        self, repository, fake_ledger, notifications, clock
    ):
        fake_ledger.add_record(make_record("bad", clock() + 600, is_withdrawn=True))

        await repository.refresh()
        await repository.refresh()

        warnings = [
            n for n in notifications.history if n.severity == NotificationSeverity.WARNING
        ]
        assert len(warnings) == 1
        assert "bad" in warnings[0].description
        assert notifications.current_error is not None
        # The record is reported, not corrected.
        record = repository.get("bad")
        assert record.is_withdrawn
        assert not record.is_unlocked(clock())

    @pytest.mark.asyncio
    async def test_withdrawn_after_unlock_is_not_anomalous(
        self, repository, fake_ledger, notifications, clock
    ):
        fake_ledger.add_record(make_record("ok", clock() - 10, is_withdrawn=True))
        await repository.refresh()
        assert repository.anomalies() == []
        assert notifications.history == []
