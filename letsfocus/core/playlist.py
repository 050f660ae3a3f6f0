#!/usr/bin/env python3
"""
🎵 Playlist Manager for LetsFocus
Cycles discovered background tracks through a single audio output:
- enable/disable/stop/skip with modulo wrap-around
- auto-advance on natural end of track, no user action required
- playback failures are logged and reported, never fatal
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..constants import DEFAULT_MUSIC_VOLUME
from .audio import AudioOutput, NullAudioOutput, clamp_gain
from .discovery import Track, TrackDiscovery

logger = logging.getLogger("playlist")

StateListener = Callable[[Dict[str, Any]], None]
DiagnosticListener = Callable[[str, BaseException], None]


class PlaylistManager:
    def __init__(
        self,
        output: Optional[AudioOutput] = None,
        *,
        discovery: Optional[TrackDiscovery] = None,
        volume: float = DEFAULT_MUSIC_VOLUME,
        lock: Optional[threading.RLock] = None,
    ):
        self._output = output or NullAudioOutput()
        self._discovery = discovery
        self._lock = lock or threading.RLock()
        self._tracks: Tuple[Track, ...] = ()
        self._current_index = 0
        self._enabled = False
        self._ready = False
        self._closed = False
        self._volume = clamp_gain(volume)
        self._last_error: Optional[str] = None
        self._state_listeners: List[StateListener] = []
        self._diagnostic_listeners: List[DiagnosticListener] = []

        self._output.set_end_callback(self._handle_track_ended)
        self._guard("set volume", lambda: self._output.set_volume(self._volume))

    # -- read-only state ----------------------------------------------------

    @property
    def tracks(self) -> Tuple[Track, ...]:
        return self._tracks

    @property
    def has_playlist(self) -> bool:
        return len(self._tracks) > 0

    @property
    def track_count(self) -> int:
        return len(self._tracks)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_track(self) -> Optional[Track]:
        if not self._tracks:
            return None
        return self._tracks[self._current_index]

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def volume(self) -> float:
        return self._volume

    @property
    def ready(self) -> bool:
        """True once a discovery pass (or load_tracks) has settled."""
        return self._ready

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            current = self.current_track
            return {
                "enabled": self._enabled,
                "has_playlist": self.has_playlist,
                "ready": self._ready,
                "track_count": self.track_count,
                "current_index": self._current_index,
                "current_track": current.name if current else None,
                "tracks": [track.name for track in self._tracks],
                "volume": self._volume,
                "output_state": self._output.state,
                "last_error": self._last_error,
            }

    # -- listeners ----------------------------------------------------------

    def add_state_listener(self, listener: StateListener) -> None:
        with self._lock:
            self._state_listeners.append(listener)

    def add_diagnostic_listener(self, listener: DiagnosticListener) -> None:
        with self._lock:
            self._diagnostic_listeners.append(listener)

    # -- discovery ----------------------------------------------------------

    def discover(self) -> int:
        """Run the discovery pass (blocking) and install its result.

        Probes run outside the lock; only the install step is serialized.

        Returns:
            int: Number of tracks found
        """
        if self._discovery is None:
            self.load_tracks([])
            return 0
        tracks = self._discovery.run()
        if self._discovery.cancelled or self._closed:
            return 0
        self.load_tracks(tracks)
        return len(tracks)

    def load_tracks(self, tracks: Sequence[Track]) -> None:
        with self._lock:
            if self._closed:
                return
            previous = self.current_track
            self._tracks = tuple(tracks)
            if previous in self._tracks:
                self._current_index = self._tracks.index(previous)
            else:
                self._current_index = 0
                if previous is not None:
                    self._guard("stop", self._output.stop)
                    if self._tracks and self._enabled:
                        self._play_current()
            self._ready = True
            if not self._tracks and self._enabled:
                self._enabled = False
                self._guard("stop", self._output.stop)
            logger.info("🎶 Playlist ready with %d track(s)", len(self._tracks))
            self._notify_state()

    # -- playback control -----------------------------------------------------

    def enable(self) -> bool:
        """Turn background music on; no-op without tracks.

        Returns:
            bool: True if music is now enabled
        """
        with self._lock:
            if not self._tracks or self._closed:
                logger.debug("Enable ignored: no tracks available")
                return False
            self._enabled = True
            self._play_current()
            self._notify_state()
            return True

    def disable(self) -> None:
        with self._lock:
            self._enabled = False
            self._guard("pause", self._output.pause)
            self._notify_state()

    def toggle(self) -> bool:
        with self._lock:
            if self._enabled:
                self.disable()
                return False
            return self.enable()

    def stop(self) -> None:
        """Turn music off and rewind the current track."""
        with self._lock:
            self._enabled = False
            self._guard("stop", self._output.stop)
            logger.debug("Playlist stopped")
            self._notify_state()

    def skip_next(self) -> int:
        with self._lock:
            if len(self._tracks) < 2:
                return self._current_index
            self._advance()
            return self._current_index

    def set_volume(self, gain: float) -> float:
        value = clamp_gain(gain)
        with self._lock:
            self._volume = value
            self._guard("set volume", lambda: self._output.set_volume(value))
            self._notify_state()
            return value

    def close(self) -> None:
        if self._discovery is not None:
            self._discovery.cancel()
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._enabled = False
            self._guard("stop", self._output.stop)
            self._guard("release", self._output.release)
            logger.debug("Playlist manager closed")

    # -- internals ------------------------------------------------------------

    def _advance(self) -> None:
        self._current_index = (self._current_index + 1) % len(self._tracks)
        track = self._tracks[self._current_index]
        self._guard("load", lambda: self._output.load(track.source))
        if self._enabled:
            self._guard("play", self._output.play)
        logger.debug("Now on track %d/%d: %s", self._current_index + 1, len(self._tracks), track.name)
        self._notify_state()

    def _play_current(self) -> None:
        track = self._tracks[self._current_index]
        if self._output.source != track.source:
            if not self._guard("load", lambda: self._output.load(track.source)):
                return
        if self._guard("play", self._output.play):
            self._last_error = None

    def _handle_track_ended(self) -> None:
        with self._lock:
            if self._closed or not self._tracks:
                return
            self._advance()

    def _guard(self, action: str, operation: Callable[[], Any]) -> bool:
        """Run an output command; failures are diagnostics, never fatal."""
        try:
            operation()
            return True
        except Exception as exc:
            self._last_error = f"{action}: {exc}"
            logger.warning("Audio output failed to %s: %s", action, exc)
            for listener in list(self._diagnostic_listeners):
                try:
                    listener(action, exc)
                except Exception:
                    logger.exception("Diagnostic listener failed")
            return False

    def _notify_state(self) -> None:
        if not self._state_listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._state_listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Playlist state listener failed")


__all__ = ["PlaylistManager"]
