#!/usr/bin/env python3
"""
⏱️ Countdown Engine for LetsFocus
Owns the focus session state machine:
- Idle -> Running -> Paused/Completed transitions with explicit reset
- Remaining time recomputed from an absolute deadline on every tick
- Completion and state-change notifications for playlist and shell
- Scheduler faults degrade to Paused instead of stalling in Running
"""
from __future__ import annotations

import logging
import math
import threading
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, List, Optional

from ..constants import (DEFAULT_DURATION_MINUTES, MAX_DURATION_MINUTES,
                         MIN_DURATION_MINUTES, STATUS_LABELS)
from ..exceptions import InvalidStateError, TickSchedulerError
from .ticker import MonotonicClock, ThreadTicker, TickScheduler

logger = logging.getLogger("countdown")

StateListener = Callable[[Dict[str, Any]], None]
CompletionListener = Callable[[], None]


class SessionState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


def format_clock(seconds: int) -> str:
    """Format seconds as a zero-padded MM:SS clock (e.g. 1500 -> "25:00")."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def _validate_minutes(minutes: Any) -> int:
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise ValueError(f"Duration must be an integer number of minutes, got {minutes!r}")
    if minutes < MIN_DURATION_MINUTES or minutes > MAX_DURATION_MINUTES:
        raise ValueError(
            f"Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes"
        )
    return minutes


class CountdownEngine:
    """Focus session countdown.

    All mutations happen under ``lock``. Pass the same lock to the playlist
    manager so ticks, user intents and audio notifications never interleave.
    """

    def __init__(
        self,
        duration_minutes: int = DEFAULT_DURATION_MINUTES,
        *,
        clock: Optional[MonotonicClock] = None,
        ticker: Optional[TickScheduler] = None,
        lock: Optional[threading.RLock] = None,
    ):
        minutes = _validate_minutes(duration_minutes)
        self._clock = clock or MonotonicClock()
        self._ticker = ticker or ThreadTicker()
        self._lock = lock or threading.RLock()
        self._configured_seconds = minutes * 60
        self._remaining = self._configured_seconds
        self._state = SessionState.IDLE
        self._target_end: Optional[float] = None
        self._generation = 0
        self._closed = False
        self._state_listeners: List[StateListener] = []
        self._completion_listeners: List[CompletionListener] = []

    # -- read-only state ----------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def configured_duration_seconds(self) -> int:
        return self._configured_seconds

    @property
    def configured_duration_minutes(self) -> int:
        return self._configured_seconds // 60

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            elapsed = self._configured_seconds - self._remaining
            progress = (elapsed / self._configured_seconds) * 100 if self._configured_seconds else 0.0
            return {
                "state": self._state.value,
                "remaining_seconds": self._remaining,
                "configured_duration_seconds": self._configured_seconds,
                "configured_duration_minutes": self.configured_duration_minutes,
                "progress_percent": round(max(0.0, min(100.0, progress)), 2),
                "display": format_clock(self._remaining),
                "status_label": STATUS_LABELS[self._state.value],
                "is_running": self._state is SessionState.RUNNING,
            }

    # -- listeners ----------------------------------------------------------

    def add_state_listener(self, listener: StateListener) -> None:
        with self._lock:
            self._state_listeners.append(listener)

    def add_completion_listener(self, listener: CompletionListener) -> None:
        with self._lock:
            self._completion_listeners.append(listener)

    # -- transitions ----------------------------------------------------------

    def start(self) -> SessionState:
        """Start a fresh session from Idle or Completed."""
        with self._lock:
            self._ensure_open("start")
            if self._state not in (SessionState.IDLE, SessionState.COMPLETED):
                raise InvalidStateError("start", self._state.value)
            self._remaining = self._configured_seconds
            self._begin_running()
            logger.info("🎯 Focus session started (%s)", format_clock(self._remaining))
            self._notify_state()
            return self._state

    def pause(self) -> SessionState:
        with self._lock:
            self._ensure_open("pause")
            if self._state is not SessionState.RUNNING:
                raise InvalidStateError("pause", self._state.value)
            self._recompute()
            if self._state is SessionState.COMPLETED:
                return self._state
            self._halt_ticking()
            self._state = SessionState.PAUSED
            logger.info("⏸️ Focus session paused at %s", format_clock(self._remaining))
            self._notify_state()
            return self._state

    def resume(self) -> SessionState:
        with self._lock:
            self._ensure_open("resume")
            if self._state is not SessionState.PAUSED:
                raise InvalidStateError("resume", self._state.value)
            self._begin_running()
            logger.info("▶️ Focus session resumed at %s", format_clock(self._remaining))
            self._notify_state()
            return self._state

    def toggle(self) -> SessionState:
        """Play/pause shortcut: start when Idle or Completed, else flip Running/Paused."""
        with self._lock:
            if self._state in (SessionState.IDLE, SessionState.COMPLETED):
                return self.start()
            if self._state is SessionState.RUNNING:
                return self.pause()
            return self.resume()

    def reset(self) -> SessionState:
        with self._lock:
            changed = (
                self._state is not SessionState.IDLE
                or self._remaining != self._configured_seconds
            )
            self._halt_ticking()
            self._remaining = self._configured_seconds
            self._state = SessionState.IDLE
            if changed:
                logger.info("🔄 Focus session reset to %s", format_clock(self._remaining))
                self._notify_state()
            return self._state

    def set_duration(self, minutes: int) -> int:
        """Configure the session length; legal only while Idle.

        Returns:
            int: The new configured duration in seconds
        """
        minutes = _validate_minutes(minutes)
        with self._lock:
            self._ensure_open("set duration")
            if self._state is not SessionState.IDLE:
                raise InvalidStateError("set duration", self._state.value)
            self._configured_seconds = minutes * 60
            self._remaining = self._configured_seconds
            logger.debug("Session duration set to %d minutes", minutes)
            self._notify_state()
            return self._configured_seconds

    def tick(self) -> int:
        """Recompute remaining time now; returns the remaining seconds."""
        with self._lock:
            if self._state is SessionState.RUNNING:
                self._recompute()
            return self._remaining

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._halt_ticking()
            self._closed = True
            logger.debug("Countdown engine closed")

    # -- internals ------------------------------------------------------------

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise InvalidStateError(operation, "closed")

    def _begin_running(self) -> None:
        self._generation += 1
        token = self._generation
        self._target_end = self._clock.now() + self._remaining
        self._state = SessionState.RUNNING
        try:
            self._ticker.start(
                partial(self._handle_tick, token),
                partial(self._handle_scheduler_fault, token),
            )
        except Exception as exc:
            self._generation += 1
            self._target_end = None
            self._state = SessionState.PAUSED
            logger.error("Tick scheduler failed to start; session paused at %s",
                         format_clock(self._remaining), exc_info=True)
            self._notify_state()
            raise TickSchedulerError(f"Could not start countdown ticks: {exc}") from exc

    def _halt_ticking(self) -> None:
        self._generation += 1
        self._target_end = None
        try:
            self._ticker.cancel()
        except Exception as exc:
            logger.warning("Ticker cancel failed: %s", exc)

    def _recompute(self) -> None:
        if self._target_end is None:
            return
        remaining = max(0, math.ceil(self._target_end - self._clock.now()))
        if remaining == 0:
            self._complete()
            return
        if remaining != self._remaining:
            self._remaining = remaining
            self._notify_state()

    def _complete(self) -> None:
        self._halt_ticking()
        self._remaining = 0
        self._state = SessionState.COMPLETED
        logger.info("✅ Focus session complete")
        for listener in list(self._completion_listeners):
            try:
                listener()
            except Exception:
                logger.exception("Completion listener failed")
        self._notify_state()

    def _handle_tick(self, token: int) -> None:
        with self._lock:
            if token != self._generation or self._state is not SessionState.RUNNING:
                return
            self._recompute()

    def _handle_scheduler_fault(self, token: int, error: BaseException) -> None:
        with self._lock:
            if token != self._generation or self._state is not SessionState.RUNNING:
                return
            self._halt_ticking()
            self._state = SessionState.PAUSED
            logger.error("Tick scheduler fault (%s); session paused at %s",
                         error, format_clock(self._remaining))
            self._notify_state()

    def _notify_state(self) -> None:
        if not self._state_listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._state_listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("State listener failed")


__all__ = ["CountdownEngine", "SessionState", "format_clock"]
