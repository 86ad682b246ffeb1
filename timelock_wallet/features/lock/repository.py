"""In-memory cache of the connected owner's locks.

The cache is only ever written by :meth:`LockRepository.refresh`, which
replaces the whole list with what the ledger returned. Concurrent refresh
requests share one in-flight fetch, and a fetch that finishes after the owner
changed or disconnected is discarded.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable

from timelock_wallet.features.lock.errors import FetchError, LedgerError, NotConnectedError
from timelock_wallet.features.lock.ledger import LedgerClient
from timelock_wallet.features.lock.models import LockRecord, OwnerSession
from timelock_wallet.shared.logging import get_logger
from timelock_wallet.shared.notifications import NotificationCenter

logger = get_logger(__name__)

ChangeListener = Callable[[list[LockRecord]], None]


class LockRepository:
    def __init__(
        self,
        ledger: LedgerClient,
        notifications: NotificationCenter | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._ledger = ledger
        self._notifications = notifications or NotificationCenter()
        self._clock = clock
        self._owner: OwnerSession | None = None
        self._records: list[LockRecord] = []
        self._generation = 0
        self._inflight: asyncio.Future[list[LockRecord]] | None = None
        self._follow_up: asyncio.Future[list[LockRecord]] | None = None
        self._listeners: list[ChangeListener] = []
        self._reported_anomalies: set[str] = set()

    @property
    def owner(self) -> OwnerSession | None:
        return self._owner

    @property
    def is_refreshing(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def current_locks(self) -> list[LockRecord]:
        return list(self._records)

    def get(self, lock_id: str) -> LockRecord | None:
        for record in self._records:
            if record.lock_id == lock_id:
                return record
        return None

    def anomalies(self) -> list[LockRecord]:
        now = self._clock()
        return [record for record in self._records if record.is_anomalous(now)]

    def bind(self, owner: OwnerSession) -> None:
        if self._owner == owner:
            return
        logger.info("Binding lock cache to owner %s", owner.identity)
        self._reset()
        self._owner = owner
        self._emit_change()

    def clear(self) -> None:
        logger.info("Clearing lock cache")
        self._reset()
        self._owner = None
        self._emit_change()

    def _reset(self) -> None:
        self._generation += 1
        self._records = []
        self._inflight = None
        self._follow_up = None
        self._reported_anomalies.clear()

    async def refresh(self, fresh: bool = False) -> list[LockRecord]:
        """Reload the cache from the ledger.

        Callers arriving while a fetch is in flight share its result. With
        ``fresh=True`` the caller instead waits for one follow-up fetch issued
        after the in-flight one completes, so the result reflects every ledger
        change made before the call.
        """
        owner = self._owner
        if owner is None:
            raise NotConnectedError("Connect a wallet to load locks")

        inflight = self._inflight
        if inflight is None or inflight.done():
            inflight = asyncio.ensure_future(self._fetch(owner, self._generation))
            self._inflight = inflight
        elif fresh:
            follow_up = self._follow_up
            if follow_up is None or follow_up.done():
                logger.debug("Queueing follow-up refresh for %s", owner.identity)
                follow_up = asyncio.ensure_future(
                    self._fetch_after(inflight, owner, self._generation)
                )
                self._follow_up = follow_up
            return await asyncio.shield(follow_up)
        else:
            logger.debug("Joining in-flight refresh for %s", owner.identity)

        return await asyncio.shield(inflight)

    async def _fetch_after(
        self,
        previous: asyncio.Future[list[LockRecord]],
        owner: OwnerSession,
        generation: int,
    ) -> list[LockRecord]:
        await asyncio.wait({previous})
        if generation != self._generation:
            return self.current_locks()
        # Fresh callers from here on must wait for a later fetch.
        if self._follow_up is asyncio.current_task():
            self._follow_up = None

        inflight = self._inflight
        if inflight is None or inflight.done():
            inflight = asyncio.ensure_future(self._fetch(owner, generation))
            self._inflight = inflight
        return await inflight

    async def _fetch(self, owner: OwnerSession, generation: int) -> list[LockRecord]:
        try:
            records = await self._ledger.fetch_locks(owner.identity)
        except LedgerError as e:
            if generation != self._generation:
                logger.info("Ignoring failed refresh for stale owner %s", owner.identity)
                return self.current_locks()
            logger.error("Failed to refresh locks for %s: %s", owner.identity, e.reason)
            self._notifications.report_failure(FetchError.title, e.reason, retain=True)
            raise FetchError(e.reason) from e

        if generation != self._generation:
            logger.info("Discarding refresh result for stale owner %s", owner.identity)
            return self.current_locks()

        self._records = list(records)
        logger.info("Lock cache refreshed: %d record(s)", len(self._records))
        self._surface_anomalies()
        self._emit_change()
        return self.current_locks()

    def _surface_anomalies(self) -> None:
        for record in self.anomalies():
            if record.lock_id in self._reported_anomalies:
                continue
            self._reported_anomalies.add(record.lock_id)
            description = (
                f"Lock {record.lock_id} is reported withdrawn before its unlock time"
            )
            logger.warning("Ledger anomaly: %s", description)
            self._notifications.report_warning("Ledger anomaly", description, retain=True)

    def _emit_change(self) -> None:
        snapshot = self.current_locks()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error("Error in lock cache listener: %s", e)
