"""Shared pytest fixtures for the LetsFocus test suite."""

from __future__ import annotations

import os

# Keep test runs from writing log files into the user's home directory
os.environ.setdefault("LETSFOCUS_FILE_LOGS", "0")

import threading
import time
from typing import Callable, Dict, Iterable, List, Optional

import pytest

from letsfocus.app import create_app
from letsfocus.config_schema import FocusConfig
from letsfocus.core.audio import (STATE_PAUSED, STATE_PLAYING, STATE_STOPPED,
                                  AudioOutput, clamp_gain)
from letsfocus.core.countdown import CountdownEngine, SessionState
from letsfocus.core.discovery import TrackDiscovery, TrackProber
from letsfocus.core.playlist import PlaylistManager
from letsfocus.core.session import FocusSession
from letsfocus.core.ticker import TickScheduler
from letsfocus.exceptions import AudioOutputError
from letsfocus.services.service_manager import ServiceManager


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.current = float(start)

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class ManualTicker(TickScheduler):
    """Tick scheduler driven explicitly by the test."""

    def __init__(self):
        self.callback: Optional[Callable[[], None]] = None
        self.on_error: Optional[Callable[[BaseException], None]] = None
        self._active = False
        self.starts = 0
        self.cancels = 0
        self.fail_on_start = False

    @property
    def active(self) -> bool:
        return self._active

    def start(self, callback, on_error=None) -> None:
        if self.fail_on_start:
            raise RuntimeError("can't start new thread")
        self.callback = callback
        self.on_error = on_error
        self._active = True
        self.starts += 1

    def cancel(self) -> None:
        if self._active:
            self.cancels += 1
        self._active = False

    def fire(self) -> None:
        if self._active and self.callback is not None:
            self.callback()

    def fault(self, error: BaseException) -> None:
        self._active = False
        if self.on_error is not None:
            self.on_error(error)


class FakeAudioOutput(AudioOutput):
    """Records every command; `finish()` simulates a natural end of track."""

    def __init__(self):
        super().__init__()
        self.commands: List[str] = []
        self.fail_play = False
        self.released = False
        self.state_at_stop: List[Optional[SessionState]] = []
        self.engine: Optional[CountdownEngine] = None

    def load(self, source: str) -> None:
        self.commands.append(f"load {source}")
        self._source = source
        self._state = STATE_STOPPED

    def play(self) -> None:
        if self.fail_play:
            self.commands.append("play-failed")
            raise AudioOutputError("play() blocked by autoplay policy")
        if self._source is None:
            raise AudioOutputError("No track loaded")
        self.commands.append("resume" if self._state == STATE_PAUSED else "play")
        self._state = STATE_PLAYING

    def pause(self) -> None:
        self.commands.append("pause")
        if self._state == STATE_PLAYING:
            self._state = STATE_PAUSED

    def stop(self) -> None:
        self.commands.append("stop")
        if self.engine is not None:
            self.state_at_stop.append(self.engine.state)
        self._state = STATE_STOPPED

    def set_volume(self, gain: float) -> None:
        self._gain = clamp_gain(gain)
        self.commands.append(f"volume {self._gain:.2f}")

    def release(self) -> None:
        self.commands.append("release")
        self.released = True

    def finish(self) -> None:
        self._state = STATE_STOPPED
        self._fire_end()


class FakeProber(TrackProber):
    """In-memory prober with optional per-name delays and failures."""

    def __init__(self, available: Iterable[str], delays: Optional[Dict[str, float]] = None,
                 errors: Iterable[str] = ()):
        self.available = set(available)
        self.delays = delays or {}
        self.errors = set(errors)
        self.probed: List[str] = []
        self._lock = threading.Lock()

    def resolve(self, name: str) -> str:
        return f"mem://{name}"

    def exists(self, name: str) -> bool:
        with self._lock:
            self.probed.append(name)
        delay = self.delays.get(name)
        if delay:
            time.sleep(delay)
        if name in self.errors:
            raise ConnectionError(f"{name} unreachable")
        return name in self.available


def run_until_complete(clock: ManualClock, ticker: ManualTicker, engine: CountdownEngine,
                       limit: int = 10000) -> int:
    """Advance one second per tick until the session completes; returns tick count."""
    ticks = 0
    while engine.state is SessionState.RUNNING and ticks < limit:
        clock.advance(1)
        ticker.fire()
        ticks += 1
    return ticks


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def ticker() -> ManualTicker:
    return ManualTicker()


@pytest.fixture
def engine(clock, ticker) -> CountdownEngine:
    return CountdownEngine(25, clock=clock, ticker=ticker)


@pytest.fixture
def output() -> FakeAudioOutput:
    return FakeAudioOutput()


@pytest.fixture
def three_track_prober() -> FakeProber:
    return FakeProber(["music1.mp3", "music2.mp3", "music3.mp3"])


@pytest.fixture
def playlist(output, three_track_prober) -> PlaylistManager:
    manager = PlaylistManager(output, discovery=TrackDiscovery(three_track_prober, extra_names=()))
    manager.discover()
    return manager


@pytest.fixture
def focus_session(clock, ticker, output, three_track_prober) -> FocusSession:
    session = FocusSession.build(
        duration_minutes=1,
        output=output,
        discovery=TrackDiscovery(three_track_prober, extra_names=()),
        clock=clock,
        ticker=ticker,
    )
    output.engine = session.engine
    session.playlist.discover()
    yield session
    session.close()


@pytest.fixture
def service_manager(focus_session, tmp_path) -> ServiceManager:
    config = FocusConfig(music_dir=str(tmp_path), audio_backend="null").to_dict()
    return ServiceManager(focus_session, config, background_discovery=False)


@pytest.fixture
def app(service_manager):
    flask_app = create_app(service_manager)
    flask_app.config.update({"TESTING": True})
    return flask_app


@pytest.fixture
def client(app):
    """Provide a fresh Flask test client for each test."""
    with app.test_client() as test_client:
        yield test_client
