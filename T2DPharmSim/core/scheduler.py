# T2DPharmSim Scheduler
# Engine-independent timer wheel: one-shot and periodic callbacks
# fired in simulated-time order by `advance(dt)`.

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(order=True)
class TimerHandle:
    """A scheduled callback.

    Ordering is by due time, then by registration order, so timers due at
    the same instant fire in the order they were registered.
    """
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    interval: Optional[float] = field(default=None, compare=False)
    cancelled: bool = field(default=False, compare=False)

    @property
    def periodic(self) -> bool:
        return self.interval is not None


class Scheduler:
    """Cooperative scheduler driven by explicit time advancement.

    Nothing here runs on its own: the owner calls `advance(dt)` once per
    update and every timer that falls due inside that slice fires, in
    due-time order, with `now` set to the timer's due time while its
    callback runs.

    Attributes:
        now (float): Current simulated time in seconds.
    """

    def __init__(self):
        self.now: float = 0.0
        self._queue: List[TimerHandle] = []
        self._counter = itertools.count()

    def schedule_once(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Schedules `callback` to run once, `delay` seconds from now.

        Args:
            delay (float): Seconds until the callback fires. Must be >= 0.
            callback (Callable[[], None]): Effect to run.

        Returns:
            TimerHandle: Handle usable with `cancel`.

        Raises:
            ValueError: If `delay` is negative.
        """
        if delay < 0:
            raise ValueError(f"Delay must be non-negative, got {delay}")
        handle = TimerHandle(self.now + delay, next(self._counter), callback)
        heapq.heappush(self._queue, handle)
        return handle

    def register_periodic(self, interval: float, callback: Callable[[], None],
                          first_delay: Optional[float] = None) -> TimerHandle:
        """Registers `callback` to run every `interval` seconds.

        Args:
            interval (float): Period in seconds. Must be > 0.
            callback (Callable[[], None]): Effect to run on each firing.
            first_delay (Optional[float]): Delay before the first firing.
                Defaults to one full interval.

        Returns:
            TimerHandle: Handle usable with `cancel`.

        Raises:
            ValueError: If `interval` is not positive.
        """
        if interval <= 0:
            raise ValueError(f"Periodic interval must be positive, got {interval}")
        delay = interval if first_delay is None else first_delay
        if delay < 0:
            raise ValueError(f"Delay must be non-negative, got {delay}")
        handle = TimerHandle(self.now + delay, next(self._counter), callback, interval)
        heapq.heappush(self._queue, handle)
        return handle

    def cancel(self, handle: TimerHandle) -> None:
        """Cancels a pending timer. Cancelling twice is harmless."""
        handle.cancelled = True

    def advance(self, dt: float) -> int:
        """Advances simulated time by `dt`, firing every timer due in the slice.

        Timers scheduled by a callback during this call fire in the same
        call if they fall due before the end of the slice.

        Args:
            dt (float): Seconds to advance. Must be >= 0.

        Returns:
            int: Number of callbacks fired.
        """
        if dt < 0:
            raise ValueError(f"Cannot advance by a negative time slice ({dt})")
        target = self.now + dt
        fired = 0
        while self._queue and self._queue[0].due <= target:
            handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = handle.due
            if handle.periodic:
                handle.due += handle.interval
                handle.seq = next(self._counter)
                heapq.heappush(self._queue, handle)
            handle.callback()
            fired += 1
        self.now = target
        return fired

    def pending(self) -> int:
        """Returns the number of live timers still queued."""
        return sum(1 for h in self._queue if not h.cancelled)

    def clear(self) -> None:
        """Drops every pending timer and rewinds the clock to zero."""
        self._queue.clear()
        self.now = 0.0
        logger.debug("Scheduler cleared")
