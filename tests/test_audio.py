"""Audio outputs: mpg123 remote protocol and the silent fallback."""

import queue
import threading

import pytest

from letsfocus.core import audio
from letsfocus.core.audio import (Mpg123Output, NullAudioOutput, clamp_gain,
                                  create_audio_output)
from letsfocus.exceptions import AudioOutputError

_EOF = object()


class FakeStdin:
    def __init__(self):
        self.lines = []
        self.closed = False

    def write(self, data):
        if self.closed:
            raise BrokenPipeError("closed")
        self.lines.extend(data.splitlines())

    def flush(self):
        pass

    def close(self):
        self.closed = True


class FakeStdout:
    """Blocking line iterator fed by the test."""

    def __init__(self):
        self._queue = queue.Queue()

    def push(self, line):
        self._queue.put(line + "\n")

    def close(self):
        self._queue.put(_EOF)

    def __iter__(self):
        while True:
            item = self._queue.get()
            if item is _EOF:
                return
            yield item


class FakeProcess:
    pid = 4242

    def __init__(self):
        self.stdin = FakeStdin()
        self.stdout = FakeStdout()
        self.returncode = None

    def poll(self):
        return self.returncode

    def wait(self, timeout=None):
        self.returncode = 0
        self.stdout.close()
        return 0

    def terminate(self):
        self.returncode = -15

    def kill(self):
        self.returncode = -9


@pytest.fixture
def mpg123():
    processes = []

    def popen(args, **kwargs):
        assert args[1] == "-R"
        process = FakeProcess()
        processes.append(process)
        return process

    output = Mpg123Output("mpg123", popen=popen)
    yield output, processes
    output.release()


def wait_for_end(output):
    ended = threading.Event()
    calls = []

    def on_end():
        calls.append(1)
        ended.set()

    output.set_end_callback(on_end)
    return ended, calls


def test_play_launches_process_and_loads_track(mpg123):
    output, processes = mpg123
    output.set_volume(0.3)
    output.load("/music/music1.mp3")
    output.play()

    assert len(processes) == 1
    assert processes[0].stdin.lines == ["VOLUME 30", "LOAD /music/music1.mp3"]
    assert output.state == "playing"


def test_pause_and_resume_use_pause_toggle(mpg123):
    output, processes = mpg123
    output.load("a.mp3")
    output.play()
    output.pause()
    output.play()
    assert processes[0].stdin.lines[-2:] == ["PAUSE", "PAUSE"]
    assert output.state == "playing"


def test_stop_then_play_reloads_from_start(mpg123):
    output, processes = mpg123
    output.load("a.mp3")
    output.play()
    output.stop()
    output.play()
    assert processes[0].stdin.lines[-2:] == ["STOP", "LOAD a.mp3"]


def test_natural_end_fires_callback(mpg123):
    output, processes = mpg123
    ended, calls = wait_for_end(output)
    output.load("a.mp3")
    output.play()

    processes[0].stdout.push("@P 0")
    assert ended.wait(timeout=2)
    assert calls == [1]
    assert output.state == "stopped"


def test_requested_stop_is_not_reported_as_track_end(mpg123):
    output, processes = mpg123
    ended, calls = wait_for_end(output)
    output.load("a.mp3")
    output.play()
    output.load("b.mp3")
    output.play()

    stdout = processes[0].stdout
    stdout.push("@P 0")  # answer to the STOP sent by load()
    stdout.push("@P 2")
    stdout.push("@P 0")  # b.mp3 finished
    assert ended.wait(timeout=2)
    assert calls == [1]


def test_volume_is_sent_to_running_process(mpg123):
    output, processes = mpg123
    output.load("a.mp3")
    output.play()
    output.set_volume(1.7)
    assert output.gain == 1.0
    assert processes[0].stdin.lines[-1] == "VOLUME 100"


def test_play_without_track_raises(mpg123):
    output, processes = mpg123
    with pytest.raises(AudioOutputError):
        output.play()
    assert processes == []


def test_broken_pipe_surfaces_as_audio_error(mpg123):
    output, processes = mpg123
    output.load("a.mp3")
    output.play()
    processes[0].stdin.closed = True
    with pytest.raises(AudioOutputError):
        output.pause()


def test_missing_binary_surfaces_as_audio_error():
    def popen(args, **kwargs):
        raise FileNotFoundError(args[0])

    output = Mpg123Output("mpg123", popen=popen)
    output.load("a.mp3")
    with pytest.raises(AudioOutputError):
        output.play()


def test_release_sends_quit(mpg123):
    output, processes = mpg123
    output.load("a.mp3")
    output.play()
    output.release()
    assert processes[0].stdin.lines[-1] == "QUIT"
    assert processes[0].returncode == 0


def test_null_output_tracks_state():
    output = NullAudioOutput()
    with pytest.raises(AudioOutputError):
        output.play()
    output.load("a.mp3")
    output.play()
    assert output.state == "playing"
    output.pause()
    assert output.state == "paused"
    output.stop()
    assert output.state == "stopped"


@pytest.mark.parametrize("value,expected", [(0.4, 0.4), (2, 1.0), (-1, 0.0), ("0.5", 0.5)])
def test_clamp_gain(value, expected):
    assert clamp_gain(value) == expected


@pytest.mark.parametrize("value", [None, "loud", float("nan")])
def test_clamp_gain_rejects_non_numbers(value):
    with pytest.raises(ValueError):
        clamp_gain(value)


def test_create_audio_output_backends(monkeypatch):
    assert isinstance(create_audio_output("null"), NullAudioOutput)
    assert isinstance(create_audio_output("mpg123"), Mpg123Output)

    monkeypatch.setattr(audio.shutil, "which", lambda binary: None)
    assert isinstance(create_audio_output("auto"), NullAudioOutput)

    monkeypatch.setattr(audio.shutil, "which", lambda binary: "/usr/bin/mpg123")
    assert isinstance(create_audio_output("auto"), Mpg123Output)

    with pytest.raises(ValueError):
        create_audio_output("alsa")
