"""Per-lock countdown and the expiry-triggered refresh.

:func:`tick` is a pure function of the cached records and an injected ``now``.
:class:`CountdownScheduler` calls it from a single asyncio task once per
``tick_interval`` while at least one lock is still counting down, and
schedules one batched cache refresh whenever a tick sees locks reach zero.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Mapping

from timelock_wallet.features.lock.models import LockRecord, remaining_seconds_at
from timelock_wallet.shared.logging import get_logger

logger = get_logger(__name__)

READY_LABEL = "Ready"

DEFAULT_TICK_INTERVAL = 1.0
DEFAULT_REFRESH_DELAY = 2.0


@dataclass(frozen=True)
class TickResult:
    remaining: dict[str, int] = field(default_factory=dict)
    expired: frozenset[str] = frozenset()

    @property
    def has_pending(self) -> bool:
        return any(value > 0 for value in self.remaining.values())


def tick(
    records: Iterable[LockRecord],
    now: float,
    previous: Mapping[str, int] | None = None,
) -> TickResult:
    previous = previous or {}
    remaining: dict[str, int] = {}
    expired: set[str] = set()

    for record in records:
        if record.is_withdrawn:
            continue
        left = remaining_seconds_at(record.unlock_timestamp, now)
        if left > 0:
            remaining[record.lock_id] = left
        elif previous.get(record.lock_id, 0) > 0:
            remaining[record.lock_id] = 0
            expired.add(record.lock_id)

    return TickResult(remaining=remaining, expired=frozenset(expired))


def format_remaining(seconds: int) -> str:
    if seconds <= 0:
        return READY_LABEL

    days, rest = divmod(int(seconds), 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)

    if days > 0:
        return f"{days}d {hours}h {minutes}m {secs}s"
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


class CountdownScheduler:
    def __init__(
        self,
        records: Callable[[], list[LockRecord]],
        on_expired: Callable[[], Awaitable[Any]],
        clock: Callable[[], float] = time.time,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        refresh_delay: float = DEFAULT_REFRESH_DELAY,
    ):
        self._records = records
        self._on_expired = on_expired
        self._clock = clock
        self.tick_interval = tick_interval
        self.refresh_delay = refresh_delay
        self._remaining: dict[str, int] = {}
        self._task: asyncio.Task[None] | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._refresh_in_flight = False
        self._refresh_again = False
        self._active = True

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def refresh_scheduled(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    @property
    def remaining(self) -> dict[str, int]:
        return dict(self._remaining)

    def on_tick(self) -> TickResult:
        result = tick(self._records(), self._clock(), self._remaining)
        self._remaining = result.remaining
        if result.expired:
            logger.info("Lock(s) reached unlock time: %s", ", ".join(sorted(result.expired)))
            self._schedule_refresh()
        return result

    def sync(self) -> None:
        """Start or stop the tick task to match the current cache contents."""
        if not self._active:
            return

        result = tick(self._records(), self._clock(), self._remaining)
        self._remaining = result.remaining
        if result.expired:
            self._schedule_refresh()

        if result.has_pending and not self.is_running:
            self._task = asyncio.get_running_loop().create_task(self._run())
            logger.debug("Countdown started")
        elif not result.has_pending and self.is_running:
            self._cancel_tick_task()
            logger.debug("Countdown stopped: no pending locks")

    async def _run(self) -> None:
        try:
            while self._active:
                await asyncio.sleep(self.tick_interval)
                if not self._active:
                    break
                result = self.on_tick()
                if not result.has_pending:
                    logger.debug("Countdown finished: no pending locks")
                    break
        finally:
            if self._task is asyncio.current_task():
                self._task = None

    def _schedule_refresh(self) -> None:
        if not self._active:
            return
        if self.refresh_scheduled:
            # Expiries during the delay join the pending refresh; once the
            # fetch is in flight they need a follow-up.
            if self._refresh_in_flight:
                self._refresh_again = True
            return
        self._refresh_task = asyncio.get_running_loop().create_task(
            self._delayed_refresh()
        )

    async def _delayed_refresh(self) -> None:
        try:
            await asyncio.sleep(self.refresh_delay)
            if not self._active:
                return
            # Expired entries have been handed over to the refresh.
            self._remaining = {k: v for k, v in self._remaining.items() if v > 0}
            self._refresh_in_flight = True
            await self._on_expired()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Refresh after unlock failed: %s", e)
        finally:
            self._refresh_in_flight = False
            if self._refresh_task is asyncio.current_task():
                self._refresh_task = None
            if self._refresh_again:
                self._refresh_again = False
                self._schedule_refresh()

    def _cancel_tick_task(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def teardown(self) -> None:
        self._active = False
        self._refresh_again = False
        self._cancel_tick_task()
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None
        self._remaining = {}
        logger.debug("Countdown torn down")

    def activate(self) -> None:
        self._active = True
