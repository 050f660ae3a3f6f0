"""
🔊 Audio output handles for the background playlist.

`Mpg123Output` keeps one long-lived ``mpg123 -R`` process and talks to it over
the remote-control protocol on stdin/stdout:

    LOAD <source>   start playing a file or URL from the beginning
    PAUSE           toggle pause
    STOP            stop playback (position lost)
    VOLUME <pct>    set output volume in percent

mpg123 prints ``@P 0`` whenever playback stops. Stops we asked for are
suppressed; every other ``@P 0`` is a natural end of track.
"""

import logging
import shutil
import subprocess
import threading
from typing import Callable, Optional

from ..exceptions import AudioOutputError

logger = logging.getLogger("audio")

EndCallback = Callable[[], None]

STATE_STOPPED = "stopped"
STATE_PLAYING = "playing"
STATE_PAUSED = "paused"


def clamp_gain(gain: float) -> float:
    """Clamp a gain into [0, 1]; raises ValueError for non-numeric input."""
    try:
        value = float(gain)
    except (TypeError, ValueError):
        raise ValueError(f"Volume must be a number between 0 and 1, got {gain!r}")
    if value != value:  # NaN
        raise ValueError("Volume must be a number between 0 and 1, got NaN")
    return max(0.0, min(1.0, value))


class AudioOutput:
    """Single audio output handle owned by the playlist manager."""

    def __init__(self):
        self._source: Optional[str] = None
        self._state = STATE_STOPPED
        self._gain = 1.0
        self._end_callback: Optional[EndCallback] = None

    @property
    def source(self) -> Optional[str]:
        return self._source

    @property
    def state(self) -> str:
        return self._state

    @property
    def gain(self) -> float:
        return self._gain

    def set_end_callback(self, callback: Optional[EndCallback]) -> None:
        self._end_callback = callback

    def load(self, source: str) -> None:
        """Select a track; playback position restarts at zero on the next play()."""
        raise NotImplementedError

    def play(self) -> None:
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError

    def set_volume(self, gain: float) -> None:
        raise NotImplementedError

    def release(self) -> None:
        raise NotImplementedError

    def _fire_end(self) -> None:
        callback = self._end_callback
        if callback is None:
            return
        try:
            callback()
        except Exception:
            logger.exception("End-of-track callback failed")


class NullAudioOutput(AudioOutput):
    """Silent output: keeps track of state so the timer runs without sound."""

    def load(self, source: str) -> None:
        self._source = source
        self._state = STATE_STOPPED

    def play(self) -> None:
        if self._source is None:
            raise AudioOutputError("No track loaded")
        self._state = STATE_PLAYING

    def pause(self) -> None:
        if self._state == STATE_PLAYING:
            self._state = STATE_PAUSED

    def stop(self) -> None:
        self._state = STATE_STOPPED

    def set_volume(self, gain: float) -> None:
        self._gain = clamp_gain(gain)

    def release(self) -> None:
        self._state = STATE_STOPPED
        self._source = None
        self._end_callback = None


class Mpg123Output(AudioOutput):
    def __init__(self, binary: str = "mpg123", popen: Callable[..., subprocess.Popen] = subprocess.Popen):
        super().__init__()
        self._binary = binary
        self._popen = popen
        self._process: Optional[subprocess.Popen] = None
        self._reader: Optional[threading.Thread] = None
        self._io_lock = threading.RLock()
        self._loaded = False
        self._pending_stops = 0

    def _ensure_process(self) -> subprocess.Popen:
        if self._process is not None and self._process.poll() is None:
            return self._process
        try:
            process = self._popen(
                [self._binary, "-R"],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                bufsize=1,
            )
        except OSError as exc:
            raise AudioOutputError(f"Could not launch {self._binary}: {exc}") from exc
        self._process = process
        self._loaded = False
        self._pending_stops = 0
        self._state = STATE_STOPPED
        self._reader = threading.Thread(
            target=self._read_events, args=(process,), name="Mpg123Reader", daemon=True
        )
        self._reader.start()
        logger.info("🎵 mpg123 remote process started (pid=%s)", getattr(process, "pid", "?"))
        self._send(f"VOLUME {round(self._gain * 100)}")
        return process

    def _send(self, command: str) -> None:
        process = self._process
        if process is None or process.stdin is None:
            raise AudioOutputError("mpg123 process is not running")
        try:
            process.stdin.write(command + "\n")
            process.stdin.flush()
        except (BrokenPipeError, OSError, ValueError) as exc:
            raise AudioOutputError(f"mpg123 command '{command.split()[0]}' failed: {exc}") from exc

    def _read_events(self, process: subprocess.Popen) -> None:
        stream = process.stdout
        if stream is None:
            return
        for raw in stream:
            line = raw.strip()
            if line.startswith("@E"):
                logger.warning("mpg123 reported an error: %s", line[2:].strip())
                continue
            if line != "@P 0":
                continue
            with self._io_lock:
                if self._pending_stops > 0:
                    self._pending_stops -= 1
                    continue
                self._loaded = False
                self._state = STATE_STOPPED
            self._fire_end()
        logger.debug("mpg123 event reader exiting")

    def load(self, source: str) -> None:
        with self._io_lock:
            if self._loaded and self._process is not None and self._process.poll() is None:
                self._pending_stops += 1
                self._send("STOP")
            self._source = source
            self._loaded = False
            self._state = STATE_STOPPED

    def play(self) -> None:
        with self._io_lock:
            if self._source is None:
                raise AudioOutputError("No track loaded")
            self._ensure_process()
            if not self._loaded:
                self._send(f"LOAD {self._source}")
                self._loaded = True
            elif self._state == STATE_PAUSED:
                self._send("PAUSE")
            self._state = STATE_PLAYING

    def pause(self) -> None:
        with self._io_lock:
            if self._loaded and self._state == STATE_PLAYING:
                self._send("PAUSE")
                self._state = STATE_PAUSED

    def stop(self) -> None:
        with self._io_lock:
            if self._loaded:
                self._pending_stops += 1
                self._send("STOP")
            self._loaded = False
            self._state = STATE_STOPPED

    def set_volume(self, gain: float) -> None:
        with self._io_lock:
            self._gain = clamp_gain(gain)
            if self._process is not None and self._process.poll() is None:
                self._send(f"VOLUME {round(self._gain * 100)}")

    def release(self) -> None:
        with self._io_lock:
            process = self._process
            self._process = None
            self._loaded = False
            self._state = STATE_STOPPED
            self._end_callback = None
        if process is None:
            return
        try:
            if process.stdin is not None:
                process.stdin.write("QUIT\n")
                process.stdin.flush()
                process.stdin.close()
        except (BrokenPipeError, OSError, ValueError):
            pass
        try:
            process.wait(timeout=1)
        except subprocess.TimeoutExpired:
            process.terminate()
            try:
                process.wait(timeout=1)
            except subprocess.TimeoutExpired:
                process.kill()
        logger.info("🛑 mpg123 remote process released")


def create_audio_output(backend: str = "auto", binary: str = "mpg123") -> AudioOutput:
    """Build the audio output for a configured backend name.

    Args:
        backend: "mpg123", "null" or "auto" (mpg123 when installed)
        binary: mpg123 executable name or path

    Returns:
        AudioOutput: Output handle ready to be owned by a PlaylistManager
    """
    backend = (backend or "auto").lower()
    if backend == "null":
        return NullAudioOutput()
    if backend == "mpg123":
        return Mpg123Output(binary)
    if backend != "auto":
        raise ValueError(f"Unknown audio backend: {backend}")
    if shutil.which(binary):
        return Mpg123Output(binary)
    logger.warning("%s not found on PATH - background music will be silent", binary)
    return NullAudioOutput()


__all__ = [
    "AudioOutput",
    "NullAudioOutput",
    "Mpg123Output",
    "create_audio_output",
    "clamp_gain",
    "STATE_STOPPED",
    "STATE_PLAYING",
    "STATE_PAUSED",
]
