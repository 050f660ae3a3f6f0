"""
🎵 Music Service - Background Playlist Management
=================================================

Wraps the playlist manager: discovery at startup, enable/disable/skip
intents and volume changes. Audio failures degrade the service to
"degraded" health; the timer keeps running without sound.
"""

from typing import Any, Callable, Dict

from . import BaseService, ServiceResult
from ..core.playlist import PlaylistManager
from ..core.session import FocusSession
from ..utils.validation import ValidationError, validate_volume_payload


class MusicService(BaseService):
    """Service wrapping the session's PlaylistManager."""

    def __init__(self, session: FocusSession, *, autostart: bool = False, background_discovery: bool = True):
        super().__init__("music")
        self.session = session
        self.playlist: PlaylistManager = session.playlist
        self._autostart = autostart
        self._background_discovery = background_discovery
        self._failures = 0
        self.playlist.add_diagnostic_listener(self._record_failure)

    def _record_failure(self, action: str, error: BaseException) -> None:
        self._failures += 1

    def initialize(self) -> ServiceResult:
        result = super().initialize()
        if self._background_discovery:
            if self._autostart:
                self.playlist.add_state_listener(self._autostart_once)
            thread = self.session.start_discovery()
            self.logger.debug(f"Discovery running in {thread.name}")
        else:
            self.rescan()
            if self._autostart:
                self.playlist.enable()
        return result

    def _autostart_once(self, snapshot: Dict[str, Any]) -> None:
        if snapshot.get("ready") and self._autostart:
            self._autostart = False
            self.playlist.enable()

    def get_status(self) -> ServiceResult:
        try:
            data = self.playlist.snapshot()
            data["playback_failures"] = self._failures
            return self._success_result(data=data)
        except Exception as e:
            return self._handle_error(e, "get_status")

    def _run_intent(self, operation: str, action: Callable[[], Any], message: str) -> ServiceResult:
        try:
            action()
            return self._success_result(data=self.playlist.snapshot(), message=message)
        except Exception as e:
            return self._handle_error(e, operation)

    def enable(self) -> ServiceResult:
        if not self.playlist.has_playlist:
            return self._error_result(
                "No background tracks available",
                error_code="no_tracks",
                data=self.playlist.snapshot(),
            )
        return self._run_intent("enable", self.playlist.enable, "Background music enabled")

    def disable(self) -> ServiceResult:
        return self._run_intent("disable", self.playlist.disable, "Background music disabled")

    def toggle(self) -> ServiceResult:
        if not self.playlist.enabled and not self.playlist.has_playlist:
            return self.enable()
        return self._run_intent("toggle", self.playlist.toggle, "Background music toggled")

    def skip_next(self) -> ServiceResult:
        return self._run_intent("skip_next", self.playlist.skip_next, "Skipped to next track")

    def set_volume(self, form_data: Dict[str, Any]) -> ServiceResult:
        try:
            volume = validate_volume_payload(form_data)
        except ValidationError as e:
            return self._error_result(f"Invalid {e.field_name}: {e.message}", error_code=e.field_name)
        return self._run_intent("set_volume", lambda: self.playlist.set_volume(volume), f"Volume set to {volume:.2f}")

    def rescan(self) -> ServiceResult:
        """Run a discovery pass synchronously and report the new playlist."""
        try:
            count = self.playlist.discover()
            return self._success_result(data=self.playlist.snapshot(), message=f"Found {count} track(s)")
        except Exception as e:
            return self._handle_error(e, "rescan")

    def health_check(self) -> ServiceResult:
        base_health = super().health_check()
        if not base_health.success:
            return base_health
        last_error = self.playlist.last_error
        return self._success_result(
            data={
                "service": "music",
                "status": "degraded" if last_error else "healthy",
                "ready": self.playlist.ready,
                "track_count": self.playlist.track_count,
                "last_error": last_error,
            }
        )
