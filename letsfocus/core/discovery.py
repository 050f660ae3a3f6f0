#!/usr/bin/env python3
"""
🔎 Track discovery for the background playlist.

Probes a bounded, numbered sequence of candidates (music1.mp3 .. musicN.mp3)
concurrently, then keeps the consecutive run that starts at the lowest
ordinal found. Probing stops at the first gap after a hit, so sparse
numbering (1, 2, 4) yields only 1 and 2. Well-known extra names are
appended afterwards in listed order.

A probe only answers "does this identifier resolve to playable content".
Absent and unreachable candidates are the same thing: no such track.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple
from urllib.parse import quote

import requests

from ..constants import (DEFAULT_EXTRA_TRACK_NAMES, DEFAULT_TRACK_NAME_PATTERN,
                         DEFAULT_TRACK_PROBE_LIMIT)

logger = logging.getLogger("discovery")

MAX_PROBE_WORKERS = 8


@dataclass(frozen=True)
class Track:
    source: str
    name: str
    ordinal: Optional[int] = None

    def to_dict(self) -> Dict[str, object]:
        return {"source": self.source, "name": self.name, "ordinal": self.ordinal}


class TrackProber:
    """Existence check for candidate track names."""

    def resolve(self, name: str) -> str:
        """Map a candidate name to the identifier handed to the audio output."""
        raise NotImplementedError

    def exists(self, name: str) -> bool:
        raise NotImplementedError


class FileTrackProber(TrackProber):
    def __init__(self, directory):
        self.directory = Path(directory)

    def resolve(self, name: str) -> str:
        return str(self.directory / name)

    def exists(self, name: str) -> bool:
        path = self.directory / name
        try:
            return path.is_file() and path.stat().st_size > 0
        except OSError:
            return False


class HttpTrackProber(TrackProber):
    """HEAD-probes tracks published by an HTTP server (e.g. our /music route)."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None,
                 timeout: Tuple[float, float] = (2.0, 3.0)):
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._timeout = timeout

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            from ..api.http import get_http_session
            self._session = get_http_session()
        return self._session

    def resolve(self, name: str) -> str:
        return f"{self.base_url}/{quote(name)}"

    def exists(self, name: str) -> bool:
        try:
            response = self.session.head(self.resolve(name), timeout=self._timeout, allow_redirects=True)
        except requests.exceptions.RequestException as exc:
            logger.debug("Probe for %s unreachable: %s", name, exc)
            return False
        return response.ok


def candidate_names(pattern: str, limit: int) -> List[Tuple[int, str]]:
    """Numbered candidate names, ordinal first: [(1, "music1.mp3"), ...]."""
    return [(index, pattern.format(index=index)) for index in range(1, limit + 1)]


def select_consecutive(found: Iterable[int]) -> List[int]:
    """Keep the run of consecutive ordinals starting at the lowest hit."""
    ordered = sorted(set(found))
    if not ordered:
        return []
    run = [ordered[0]]
    for ordinal in ordered[1:]:
        if ordinal != run[-1] + 1:
            break
        run.append(ordinal)
    return run


class TrackDiscovery:
    """One-shot discovery pass with cancellable, concurrent probes."""

    def __init__(
        self,
        prober: TrackProber,
        *,
        pattern: str = DEFAULT_TRACK_NAME_PATTERN,
        limit: int = DEFAULT_TRACK_PROBE_LIMIT,
        extra_names: Sequence[str] = DEFAULT_EXTRA_TRACK_NAMES,
        max_workers: int = MAX_PROBE_WORKERS,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.prober = prober
        self.pattern = pattern
        self.limit = limit
        self.extra_names = tuple(extra_names)
        self.max_workers = max(1, max_workers)
        self._cancel_event = threading.Event()
        self._lock = threading.Lock()
        self._futures: Set[Future] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        """Abort an in-flight pass; pending probes never run."""
        self._cancel_event.set()
        with self._lock:
            futures = list(self._futures)
        for future in futures:
            future.cancel()
        if futures:
            logger.debug("Discovery cancelled (%d probes pending)", sum(not f.done() for f in futures))

    def _probe(self, name: str) -> bool:
        if self._cancel_event.is_set():
            return False
        try:
            return bool(self.prober.exists(name))
        except Exception as exc:
            logger.debug("Probe for %s failed: %s", name, exc)
            return False

    def _probe_all(self, names: Sequence[str]) -> Dict[str, bool]:
        if not names:
            return {}
        results: Dict[str, bool] = {}
        workers = min(self.max_workers, len(names))
        futures: Dict[Future, str] = {}
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="TrackProbe")
        try:
            futures = {executor.submit(self._probe, name): name for name in names}
            with self._lock:
                self._futures.update(futures)
            wait(futures)
            for future, name in futures.items():
                if future.cancelled():
                    results[name] = False
                    continue
                results[name] = future.result()
        finally:
            with self._lock:
                self._futures.difference_update(futures)
            executor.shutdown(wait=False, cancel_futures=True)
        return results

    def run(self) -> List[Track]:
        """Probe all candidates and return the playlist in playback order."""
        if self._cancel_event.is_set():
            return []
        numbered = candidate_names(self.pattern, self.limit)
        numbered_names = {name for _, name in numbered}
        extras = [name for name in dict.fromkeys(self.extra_names) if name not in numbered_names]

        results = self._probe_all([name for _, name in numbered] + extras)
        if self._cancel_event.is_set():
            logger.info("Track discovery cancelled before completion")
            return []

        by_ordinal = {ordinal: name for ordinal, name in numbered}
        hits = [ordinal for ordinal, name in numbered if results.get(name)]
        kept = select_consecutive(hits)
        if len(kept) < len(hits):
            logger.debug("Ignoring tracks after numbering gap: %s",
                         [by_ordinal[o] for o in hits if o not in kept])

        tracks = [
            Track(source=self.prober.resolve(by_ordinal[ordinal]), name=by_ordinal[ordinal], ordinal=ordinal)
            for ordinal in kept
        ]
        tracks.extend(
            Track(source=self.prober.resolve(name), name=name)
            for name in extras if results.get(name)
        )
        logger.info("🎶 Track discovery finished: %d track(s)", len(tracks))
        return tracks


__all__ = [
    "Track",
    "TrackProber",
    "FileTrackProber",
    "HttpTrackProber",
    "TrackDiscovery",
    "candidate_names",
    "select_consecutive",
]
