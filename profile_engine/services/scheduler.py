"""Delayed task scheduling.

Debounced auto-save needs "run this after N seconds unless cancelled".
The Scheduler abstraction keeps that independent of any UI or web
framework lifecycle:

- AsyncioScheduler: one event-loop task per scheduled call (production)
- ManualScheduler: virtual clock advanced explicitly (tests)

Cancellation only affects tasks that have not started. A task already
running (e.g., a draft save awaiting the store) is allowed to complete.
"""

import asyncio
import contextlib
import itertools
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

ScheduledTask = Callable[[], Awaitable[None]]
"""Zero-argument coroutine function run when the delay elapses."""

_handle_ids = itertools.count(1)


@dataclass(eq=False)
class ScheduleHandle:
    """Reference to one scheduled call.

    Attributes:
        delay: Requested delay in seconds.
        due: Scheduler-relative time the task becomes runnable.
        started: True once the task has begun running.
        cancelled: True once cancel() has been called before start.
    """

    delay: float
    due: float
    task: ScheduledTask
    started: bool = False
    cancelled: bool = False
    id: int = field(default_factory=lambda: next(_handle_ids))
    _future: asyncio.Task[None] | None = field(default=None, repr=False)


class Scheduler(ABC):
    """Runs zero-argument coroutines after a delay."""

    @abstractmethod
    def schedule_after(self, delay: float, task: ScheduledTask) -> ScheduleHandle:
        """Run task after ``delay`` seconds.

        Args:
            delay: Seconds to wait; 0 runs on the next loop iteration.
            task: Coroutine function to call.

        Returns:
            Handle accepted by cancel().
        """
        ...

    @abstractmethod
    def cancel(self, handle: ScheduleHandle) -> bool:
        """Cancel a scheduled task that has not started.

        Returns:
            True if the task was cancelled, False if it already started,
            finished, or was cancelled before.
        """
        ...


async def _run_task(handle: ScheduleHandle) -> None:
    handle.started = True
    try:
        await handle.task()
    except Exception:  # noqa: BLE001
        logger.exception("Scheduled task %d failed", handle.id)


# =============================================================================
# Event loop implementation
# =============================================================================


class AsyncioScheduler(Scheduler):
    """Scheduler backed by asyncio tasks on the running loop.

    Must be used from within a running event loop.
    """

    def __init__(self) -> None:
        self._tasks: dict[asyncio.Task[None], ScheduleHandle] = {}

    def schedule_after(self, delay: float, task: ScheduledTask) -> ScheduleHandle:
        loop = asyncio.get_running_loop()
        handle = ScheduleHandle(delay=delay, due=loop.time() + delay, task=task)
        future = loop.create_task(self._sleep_then_run(handle))
        handle._future = future
        self._tasks[future] = handle
        future.add_done_callback(self._forget)
        return handle

    def cancel(self, handle: ScheduleHandle) -> bool:
        if handle.started or handle.cancelled:
            return False
        handle.cancelled = True
        if handle._future is not None and not handle._future.done():
            handle._future.cancel()
        return True

    @property
    def pending_count(self) -> int:
        """Tasks scheduled or running."""
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait until every scheduled task has finished or been cancelled."""
        while self._tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel tasks that have not started and wait for running ones."""
        for handle in list(self._tasks.values()):
            self.cancel(handle)
        await self.wait_idle()

    def _forget(self, task: asyncio.Task[None]) -> None:
        self._tasks.pop(task, None)

    @staticmethod
    async def _sleep_then_run(handle: ScheduleHandle) -> None:
        await asyncio.sleep(handle.delay)
        if handle.cancelled:
            return
        await _run_task(handle)


# =============================================================================
# Virtual clock implementation
# =============================================================================


class ManualScheduler(Scheduler):
    """Scheduler driven by an explicit virtual clock.

    Nothing runs until advance() is awaited. Tasks that come due during an
    advance run in due-time order (ties in scheduling order), and tasks
    they schedule are picked up in the same advance if they fall due
    before its end.

    Example:
        scheduler = ManualScheduler()
        scheduler.schedule_after(3.0, save)
        await scheduler.advance(2.9)   # nothing runs
        await scheduler.advance(0.1)   # save runs
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._pending: list[ScheduleHandle] = []

    @property
    def now(self) -> float:
        """Current virtual time in seconds."""
        return self._now

    @property
    def pending_count(self) -> int:
        """Tasks scheduled and not yet run or cancelled."""
        return len(self._pending)

    def schedule_after(self, delay: float, task: ScheduledTask) -> ScheduleHandle:
        handle = ScheduleHandle(delay=delay, due=self._now + delay, task=task)
        self._pending.append(handle)
        return handle

    def cancel(self, handle: ScheduleHandle) -> bool:
        if handle.started or handle.cancelled:
            return False
        handle.cancelled = True
        if handle in self._pending:
            self._pending.remove(handle)
        return True

    async def advance(self, seconds: float) -> None:
        """Move the clock forward, running every task that comes due.

        Args:
            seconds: Non-negative amount of virtual time to advance.
        """
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards")
        target = self._now + seconds
        while True:
            due = [h for h in self._pending if h.due <= target]
            if not due:
                break
            handle = min(due, key=lambda h: (h.due, h.id))
            self._pending.remove(handle)
            self._now = max(self._now, handle.due)
            await _run_task(handle)
        self._now = target

    async def run_pending(self) -> None:
        """Run every task due at the current time (zero-delay tasks)."""
        await self.advance(0)
