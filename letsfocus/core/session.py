"""Composition of countdown engine and playlist manager for one focus session.

Both components share one re-entrant lock: timer ticks, user intents and
end-of-track notifications are serialized through it. Completion of the
countdown always stops the music, inside the same critical section.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional

from ..constants import DEFAULT_DURATION_MINUTES, DEFAULT_MUSIC_VOLUME
from .audio import AudioOutput
from .countdown import CountdownEngine
from .discovery import TrackDiscovery
from .playlist import PlaylistManager
from .ticker import MonotonicClock, TickScheduler

logger = logging.getLogger("session")


class FocusSession:
    def __init__(self, engine: CountdownEngine, playlist: PlaylistManager):
        self.engine = engine
        self.playlist = playlist
        self._closed = False
        self._discovery_thread: Optional[threading.Thread] = None
        engine.add_completion_listener(self._on_session_completed)

    @classmethod
    def build(
        cls,
        *,
        duration_minutes: int = DEFAULT_DURATION_MINUTES,
        volume: float = DEFAULT_MUSIC_VOLUME,
        output: Optional[AudioOutput] = None,
        discovery: Optional[TrackDiscovery] = None,
        clock: Optional[MonotonicClock] = None,
        ticker: Optional[TickScheduler] = None,
    ) -> "FocusSession":
        lock = threading.RLock()
        engine = CountdownEngine(duration_minutes, clock=clock, ticker=ticker, lock=lock)
        playlist = PlaylistManager(output, discovery=discovery, volume=volume, lock=lock)
        return cls(engine, playlist)

    def _on_session_completed(self) -> None:
        logger.info("🔕 Session complete - stopping background music")
        self.playlist.stop()

    def start_discovery(self) -> threading.Thread:
        """Run the playlist discovery pass in the background."""
        if self._discovery_thread is not None and self._discovery_thread.is_alive():
            return self._discovery_thread

        def _runner():
            try:
                self.playlist.discover()
            except Exception:
                logger.exception("Track discovery failed")

        self._discovery_thread = threading.Thread(target=_runner, name="TrackDiscovery", daemon=True)
        self._discovery_thread.start()
        return self._discovery_thread

    def snapshot(self) -> Dict[str, Any]:
        with self.engine.lock:
            return {
                "timer": self.engine.snapshot(),
                "music": self.playlist.snapshot(),
            }

    def close(self) -> None:
        """Release the tick scheduler and the audio handle."""
        if self._closed:
            return
        self._closed = True
        self.engine.close()
        self.playlist.close()
        if self._discovery_thread is not None:
            self._discovery_thread.join(timeout=5)
        logger.info("🛑 Focus session closed")


__all__ = ["FocusSession"]
