"""
Clock and timer capability for the adaptive UI engine.

Timestamps and the hesitation debounce timer both come from an injected
Clock so tests can move time forward deterministically. Timers never fire
on a separate thread: SystemClock fires due timers when the host event
loop calls run_due(), ManualClock fires them inside advance().
"""

import heapq
import itertools
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class TimerHandle:
    """A scheduled callback that can be cancelled before it fires."""

    def __init__(self, deadline_ms: float, callback: Callable[[], None]):
        self.deadline_ms = deadline_ms
        self._callback = callback
        self._cancelled = False
        self._fired = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        """True while the timer is still waiting to fire."""
        return not (self._cancelled or self._fired)

    def _fire(self) -> None:
        self._fired = True
        self._callback()


class Clock:
    """
    Base clock with a deadline-ordered timer queue.

    Subclasses provide the time source via _now_ms() and now().
    """

    def __init__(self):
        self._timers: List[Tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def now(self) -> datetime:
        raise NotImplementedError

    def _now_ms(self) -> float:
        raise NotImplementedError

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """
        Schedule callback to run after delay_ms milliseconds.

        Args:
            delay_ms: Delay in milliseconds
            callback: Zero-argument callable

        Returns:
            TimerHandle that can cancel the callback
        """
        handle = TimerHandle(self._now_ms() + delay_ms, callback)
        heapq.heappush(self._timers, (handle.deadline_ms, next(self._seq), handle))
        return handle

    def _pop_due(self, until_ms: float) -> Optional[TimerHandle]:
        while self._timers and self._timers[0][0] <= until_ms:
            _, _, handle = heapq.heappop(self._timers)
            if handle.active:
                return handle
        return None

    def run_due(self) -> int:
        """
        Fire every active timer whose deadline has passed.

        Returns:
            Number of callbacks fired
        """
        fired = 0
        handle = self._pop_due(self._now_ms())
        while handle is not None:
            handle._fire()
            fired += 1
            handle = self._pop_due(self._now_ms())
        return fired

    @property
    def pending_count(self) -> int:
        """Number of timers still waiting to fire."""
        return sum(1 for _, _, handle in self._timers if handle.active)


class SystemClock(Clock):
    """Wall-clock time; the host loop must call run_due() to fire timers."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _now_ms(self) -> float:
        return time.monotonic() * 1000.0


class ManualClock(Clock):
    """
    Simulated clock for tests and offline simulations.

    Time only moves when advance() is called. Timers due within the
    advanced span fire in deadline order, and each callback observes
    now() equal to its own deadline.
    """

    def __init__(self, start: Optional[datetime] = None):
        super().__init__()
        self._start = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._elapsed_ms = 0.0

    def now(self) -> datetime:
        return self._start + timedelta(milliseconds=self._elapsed_ms)

    def _now_ms(self) -> float:
        return self._elapsed_ms

    def advance(self, ms: float) -> int:
        """
        Move simulated time forward, firing due timers on the way.

        Args:
            ms: Milliseconds to advance

        Returns:
            Number of callbacks fired
        """
        if ms < 0:
            raise ValueError(f"Cannot move a clock backwards ({ms} ms)")

        target = self._elapsed_ms + ms
        fired = 0
        handle = self._pop_due(target)
        while handle is not None:
            self._elapsed_ms = max(self._elapsed_ms, handle.deadline_ms)
            handle._fire()
            fired += 1
            handle = self._pop_due(target)
        self._elapsed_ms = target

        if fired:
            logger.debug(f"[CLOCK] Advanced {ms}ms, fired {fired} timer(s)")
        return fired
