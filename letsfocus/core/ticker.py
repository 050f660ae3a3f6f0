"""Clock and periodic tick scheduling for the countdown engine.

- `MonotonicClock` is immune to wall-clock adjustments
- `ThreadTicker` fires on absolute instants (start + k * interval) so the
  scheduler itself never accumulates drift
- `cancel()` never blocks; a tick already in flight may still run, owners
  discard it with a generation token
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from ..constants import TICK_INTERVAL_SECONDS

_logger = logging.getLogger("ticker")

TickCallback = Callable[[], None]
ErrorCallback = Callable[[BaseException], None]


class MonotonicClock:
    """Seconds from an arbitrary fixed origin, never going backwards."""

    def now(self) -> float:
        return time.monotonic()


class TickScheduler:
    """Interface of a cancellable periodic scheduling primitive."""

    def start(self, callback: TickCallback, on_error: Optional[ErrorCallback] = None) -> None:
        raise NotImplementedError

    def cancel(self) -> None:
        raise NotImplementedError

    @property
    def active(self) -> bool:
        raise NotImplementedError


class ThreadTicker(TickScheduler):
    def __init__(self, interval: float = TICK_INTERVAL_SECONDS, name: str = "CountdownTicker"):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._interval = float(interval)
        self._name = name
        self._lock = threading.RLock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def active(self) -> bool:
        with self._lock:
            return self._stop_event is not None and not self._stop_event.is_set()

    def start(self, callback: TickCallback, on_error: Optional[ErrorCallback] = None) -> None:
        with self._lock:
            self.cancel()
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run_loop,
                args=(stop_event, callback, on_error),
                name=self._name,
                daemon=True,
            )
            self._stop_event = stop_event
            self._thread = thread
            try:
                thread.start()
            except RuntimeError:
                self._stop_event = None
                self._thread = None
                raise
            _logger.debug("Ticker started (interval=%.2fs)", self._interval)

    def cancel(self) -> None:
        # No join here: the tick thread may be waiting on the caller's lock.
        # Owners discard late callbacks with a generation token instead.
        with self._lock:
            stop_event = self._stop_event
            self._stop_event = None
            self._thread = None
        if stop_event is None:
            return
        stop_event.set()
        _logger.debug("Ticker cancelled")

    def _run_loop(self, stop_event: threading.Event, callback: TickCallback,
                  on_error: Optional[ErrorCallback]) -> None:
        next_fire = time.monotonic() + self._interval
        while not stop_event.is_set():
            delay = max(0.0, next_fire - time.monotonic())
            if stop_event.wait(timeout=delay):
                break
            next_fire += self._interval
            if stop_event.is_set():
                break
            try:
                callback()
            except Exception as exc:
                _logger.error("Tick callback failed, stopping ticker: %s", exc, exc_info=True)
                stop_event.set()
                if on_error is not None:
                    on_error(exc)
                break


__all__ = ["MonotonicClock", "TickScheduler", "ThreadTicker"]
