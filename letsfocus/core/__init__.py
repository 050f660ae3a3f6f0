"""Core focus-session logic: countdown engine, playlist manager and helpers."""

from .audio import AudioOutput, Mpg123Output, NullAudioOutput, create_audio_output
from .countdown import CountdownEngine, SessionState, format_clock
from .discovery import (FileTrackProber, HttpTrackProber, Track,
                        TrackDiscovery, TrackProber)
from .playlist import PlaylistManager
from .session import FocusSession
from .ticker import MonotonicClock, ThreadTicker, TickScheduler

__all__ = [
    "AudioOutput",
    "Mpg123Output",
    "NullAudioOutput",
    "create_audio_output",
    "CountdownEngine",
    "SessionState",
    "format_clock",
    "FileTrackProber",
    "HttpTrackProber",
    "Track",
    "TrackDiscovery",
    "TrackProber",
    "PlaylistManager",
    "FocusSession",
    "MonotonicClock",
    "ThreadTicker",
    "TickScheduler",
]
