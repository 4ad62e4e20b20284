"""Cancellable delayed callbacks for the playback controller.

The playback controller only needs one primitive: run a callback after a
delay, with a handle that can cancel it. Two implementations:

- PollingScheduler: the owner calls poll() regularly (the Streamlit app
  from a run_every fragment, tests with a fake clock). Callbacks run on
  the polling thread.
- AsyncioScheduler: wraps loop.call_later; callbacks run on the loop.

Cancelling always succeeds, including after the task already fired.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)


class ScheduledTask(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledTask: ...


@dataclass
class PollingTask:
    """A pending callback of a PollingScheduler."""

    deadline: float
    seq: int
    callback: Callable[[], None] = field(repr=False)
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class PollingScheduler:
    """Single-threaded scheduler driven by explicit poll() calls.

    Args:
        clock: Monotonic time source in seconds (injectable for tests)

    Example:
        scheduler = PollingScheduler()
        scheduler.call_later(3.0, advance)
        ...
        scheduler.poll()  # fires advance() once 3 s have passed
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._tasks: list[PollingTask] = []
        self._next_seq = 0

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> PollingTask:
        if delay_s < 0:
            raise ValueError(f"Delay must not be negative, got {delay_s}")
        task = PollingTask(deadline=self._clock() + delay_s, seq=self._next_seq, callback=callback)
        self._next_seq += 1
        self._tasks.append(task)
        return task

    @property
    def pending_count(self) -> int:
        return sum(1 for task in self._tasks if not task.cancelled)

    def time_until_next(self) -> float | None:
        """Seconds until the earliest pending task is due (0 if overdue), or None."""
        pending = [task.deadline for task in self._tasks if not task.cancelled]
        if not pending:
            return None
        return max(0.0, min(pending) - self._clock())

    def poll(self) -> int:
        """Run every task due now, earliest deadline first.

        Tasks scheduled by a callback during this poll wait for the next
        poll, even when already due.

        Returns:
            Number of callbacks fired.
        """
        now = self._clock()
        limit = self._next_seq
        fired = 0
        while True:
            due = [task for task in self._tasks if not task.cancelled and task.seq < limit and task.deadline <= now]
            if not due:
                break
            task = min(due, key=lambda t: (t.deadline, t.seq))
            self._tasks.remove(task)
            task.cancelled = True
            task.callback()
            fired += 1
        self._tasks = [task for task in self._tasks if not task.cancelled]
        if fired:
            logger.debug(f"[PLAYBACK] Poll fired {fired} task(s), {self.pending_count} pending")
        return fired

    def cancel_all(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks = []


class AsyncioScheduler:
    """Scheduler on an asyncio event loop.

    Without an explicit loop it must be created inside a running loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(delay_s, callback)
