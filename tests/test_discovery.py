"""Track discovery: ordering, gap handling and probers."""

import threading
import time
from unittest.mock import Mock

import pytest
import requests

from letsfocus.core.discovery import (FileTrackProber, HttpTrackProber, Track,
                                      TrackDiscovery, candidate_names,
                                      select_consecutive)

from .conftest import FakeProber


def names(tracks):
    return [track.name for track in tracks]


@pytest.mark.parametrize("found,expected", [
    ([], []),
    ([1, 2, 3], [1, 2, 3]),
    ([3, 1, 2], [1, 2, 3]),
    ([1, 3], [1]),
    ([1, 2, 4, 5], [1, 2]),
    ([2, 3], [2, 3]),
])
def test_select_consecutive(found, expected):
    assert select_consecutive(found) == expected


def test_candidate_names_use_pattern():
    assert candidate_names("track_{index}.ogg", 3) == [
        (1, "track_1.ogg"), (2, "track_2.ogg"), (3, "track_3.ogg")
    ]


def test_order_is_independent_of_probe_completion_order():
    # Later ordinals answer first
    prober = FakeProber(
        ["music1.mp3", "music2.mp3", "music3.mp3"],
        delays={"music1.mp3": 0.15, "music2.mp3": 0.08, "music3.mp3": 0.0},
    )
    tracks = TrackDiscovery(prober, extra_names=()).run()
    assert names(tracks) == ["music1.mp3", "music2.mp3", "music3.mp3"]
    assert [t.ordinal for t in tracks] == [1, 2, 3]
    assert tracks[0].source == "mem://music1.mp3"


def test_gap_stops_numbered_run():
    tracks = TrackDiscovery(FakeProber(["music1.mp3", "music3.mp3"]), extra_names=()).run()
    assert names(tracks) == ["music1.mp3"]


def test_leading_gap_starts_at_lowest_found():
    tracks = TrackDiscovery(FakeProber(["music2.mp3", "music3.mp3"]), extra_names=()).run()
    assert names(tracks) == ["music2.mp3", "music3.mp3"]


def test_all_candidates_are_probed_within_limit():
    prober = FakeProber(["music1.mp3"])
    TrackDiscovery(prober, limit=4, extra_names=("focus.mp3",)).run()
    assert sorted(prober.probed) == sorted(["music1.mp3", "music2.mp3", "music3.mp3", "music4.mp3", "focus.mp3"])


def test_extra_names_follow_numbered_tracks_in_listed_order():
    prober = FakeProber(["music1.mp3", "chill.mp3", "background.mp3"])
    discovery = TrackDiscovery(prober, extra_names=("background.mp3", "ambient.mp3", "chill.mp3", "background.mp3"))
    tracks = discovery.run()
    assert names(tracks) == ["music1.mp3", "background.mp3", "chill.mp3"]
    assert tracks[1].ordinal is None


def test_unreachable_probe_counts_as_absent():
    prober = FakeProber(["music1.mp3", "music2.mp3"], errors=["music2.mp3"])
    tracks = TrackDiscovery(prober, extra_names=()).run()
    assert names(tracks) == ["music1.mp3"]


def test_nothing_found_yields_empty_playlist():
    assert TrackDiscovery(FakeProber([]), extra_names=()).run() == []


def test_cancel_returns_no_tracks():
    release = threading.Event()

    class BlockingProber(FakeProber):
        def exists(self, name):
            release.wait(timeout=2)
            return super().exists(name)

    discovery = TrackDiscovery(BlockingProber(["music1.mp3"]), limit=3, extra_names=(), max_workers=1)
    result = []
    worker = threading.Thread(target=lambda: result.extend(discovery.run()))
    worker.start()
    discovery.cancel()
    release.set()
    worker.join(timeout=5)

    assert discovery.cancelled is True
    assert result == []


def test_cancel_reaches_every_overlapping_pass():
    release = threading.Event()

    class BlockingProber(FakeProber):
        def exists(self, name):
            release.wait(timeout=2)
            return super().exists(name)

    discovery = TrackDiscovery(BlockingProber(["music1.mp3"]), limit=3, extra_names=(), max_workers=1)
    results = [[], []]
    workers = [
        threading.Thread(target=lambda slot=slot: slot.extend(discovery.run()))
        for slot in results
    ]
    for worker in workers:
        worker.start()

    deadline = time.monotonic() + 2
    while len(discovery._futures) < 6 and time.monotonic() < deadline:
        time.sleep(0.01)
    pending = list(discovery._futures)
    assert len(pending) == 6, "Both passes must register their probes"

    discovery.cancel()
    assert sum(future.cancelled() for future in pending) >= 4, "Queued probes of both passes must be cancelled"
    release.set()
    for worker in workers:
        worker.join(timeout=5)

    assert results == [[], []]
    assert discovery._futures == set()


def test_cancelled_discovery_does_not_run_again():
    discovery = TrackDiscovery(FakeProber(["music1.mp3"]), extra_names=())
    discovery.cancel()
    assert discovery.run() == []


def test_limit_must_be_positive():
    with pytest.raises(ValueError):
        TrackDiscovery(FakeProber([]), limit=0)


def test_file_prober_ignores_missing_and_empty_files(tmp_path):
    (tmp_path / "music1.mp3").write_bytes(b"ID3fake")
    (tmp_path / "music2.mp3").write_bytes(b"")
    (tmp_path / "focus.mp3").write_bytes(b"ID3fake")

    prober = FileTrackProber(tmp_path)
    assert prober.exists("music1.mp3") is True
    assert prober.exists("music2.mp3") is False
    assert prober.exists("music3.mp3") is False

    tracks = TrackDiscovery(prober, extra_names=("focus.mp3",)).run()
    assert tracks == [
        Track(str(tmp_path / "music1.mp3"), "music1.mp3", 1),
        Track(str(tmp_path / "focus.mp3"), "focus.mp3"),
    ]


def test_http_prober_uses_head_requests():
    session = Mock()
    session.head.side_effect = lambda url, **kwargs: Mock(ok=url.endswith("music1.mp3"))

    prober = HttpTrackProber("http://pi.local:5050/music/", session=session)
    assert prober.resolve("music1.mp3") == "http://pi.local:5050/music/music1.mp3"
    assert prober.exists("music1.mp3") is True
    assert prober.exists("music2.mp3") is False

    _, kwargs = session.head.call_args
    assert kwargs["allow_redirects"] is True
    assert kwargs["timeout"] == (2.0, 3.0)


def test_http_prober_treats_connection_errors_as_absent():
    session = Mock()
    session.head.side_effect = requests.exceptions.ConnectionError("refused")
    prober = HttpTrackProber("http://pi.local/music", session=session)
    assert prober.exists("music1.mp3") is False


def test_http_prober_quotes_names():
    prober = HttpTrackProber("http://pi.local/music", session=Mock())
    assert prober.resolve("deep focus.mp3") == "http://pi.local/music/deep%20focus.mp3"
