"""Trailing-edge debouncing of side effects."""

from __future__ import annotations

from threading import Lock, Timer
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def _thread_timer(delay: float, callback: Callable[[], None]) -> TimerHandle:
    timer = Timer(delay, callback)
    timer.daemon = True
    return timer


class Debouncer:
    """Coalesce bursts of :meth:`trigger` calls into one delayed callback.

    Each trigger restarts the delay. With a non-positive delay the callback
    runs synchronously on the triggering thread.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        delay_seconds: float,
        *,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self._callback = callback
        self._delay = delay_seconds
        self._timer_factory = timer_factory or _thread_timer
        self._lock = Lock()
        self._timer: TimerHandle | None = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self) -> None:
        if self._delay <= 0:
            self.cancel()
            self._callback()
            return

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            timer = self._timer_factory(self._delay, lambda: self._fire(generation))
            self._timer = timer
        timer.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A newer trigger superseded this timer.
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
        self._callback()

    def flush(self) -> bool:
        """Run a pending callback now; return ``False`` when nothing was pending."""

        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            self._generation += 1
        self._callback()
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1


__all__ = ["Debouncer", "TimerFactory", "TimerHandle"]
