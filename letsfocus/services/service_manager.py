"""
🔧 Service Manager - Central Service Coordination
=================================================

Builds the focus session from configuration and exposes the timer and music
services to the Flask application.
"""

import logging
from typing import Any, Dict, Optional

from . import ServiceResult
from .music_service import MusicService
from .timer_service import TimerService
from ..config import config_manager, load_config
from ..core.audio import create_audio_output
from ..core.discovery import FileTrackProber, HttpTrackProber, TrackDiscovery
from ..core.session import FocusSession


def build_focus_session(config: Dict[str, Any]) -> FocusSession:
    """Wire a FocusSession from a validated configuration dict."""
    if config.get("music_base_url"):
        prober = HttpTrackProber(config["music_base_url"])
    else:
        prober = FileTrackProber(config_manager.resolve_path(config.get("music_dir", "music")))
    discovery = TrackDiscovery(
        prober,
        pattern=config["track_name_pattern"],
        limit=config["track_probe_limit"],
        extra_names=config.get("extra_track_names", []),
    )
    output = create_audio_output(config.get("audio_backend", "auto"), config.get("mpg123_binary", "mpg123"))
    return FocusSession.build(
        duration_minutes=config["default_duration_minutes"],
        volume=config["music_volume"],
        output=output,
        discovery=discovery,
    )


class ServiceManager:
    """Central manager for all application services."""

    def __init__(self, session: Optional[FocusSession] = None, config: Optional[Dict[str, Any]] = None,
                 *, background_discovery: bool = True):
        self.logger = logging.getLogger("service_manager")
        self.config = config if config is not None else load_config()
        self.session = session or build_focus_session(self.config)

        self.timer = TimerService(self.session.engine)
        self.music = MusicService(
            self.session,
            autostart=bool(self.config.get("autostart_music", False)),
            background_discovery=background_discovery,
        )
        self.services = {
            "timer": self.timer,
            "music": self.music,
        }
        self._initialize_all()

    def _initialize_all(self) -> None:
        self.logger.info("🚀 Initializing service manager...")
        for name, service in self.services.items():
            try:
                result = service.initialize()
                if result.success:
                    self.logger.info(f"✅ {name} service initialized")
                else:
                    self.logger.error(f"❌ {name} service initialization failed: {result.message}")
            except Exception as e:
                self.logger.error(f"💥 {name} service crashed during initialization: {e}", exc_info=True)
        self.logger.info("🎯 Service manager initialization completed")

    def get_service(self, name: str) -> Optional[Any]:
        return self.services.get(name)

    def get_status(self) -> ServiceResult:
        try:
            return ServiceResult(success=True, data=self.session.snapshot())
        except Exception as e:
            self.logger.error(f"Error building status snapshot: {e}", exc_info=True)
            return ServiceResult(success=False, message=str(e), error_code="STATUS_FAILED")

    def health_check_all(self) -> ServiceResult:
        """Perform health check on all services."""
        try:
            results = {}
            overall_healthy = True
            for name, service in self.services.items():
                health = service.health_check()
                payload = health.data if isinstance(health.data, dict) else {"error": health.message}
                status_value = str(payload.get("status", "")).lower()
                service_healthy = health.success and status_value not in {"degraded", "error", "failed"}
                results[name] = {"healthy": service_healthy, "status": payload}
                if not service_healthy:
                    overall_healthy = False

            return ServiceResult(
                success=True,
                data={
                    "overall_healthy": overall_healthy,
                    "services": results,
                    "total_services": len(self.services),
                    "healthy_services": sum(1 for r in results.values() if r["healthy"])
                },
                message="Health check completed for all services"
            )
        except Exception as e:
            self.logger.error(f"Error during health check: {e}")
            return ServiceResult(
                success=False,
                message=f"Health check failed: {str(e)}",
                error_code="HEALTH_CHECK_FAILED"
            )

    def shutdown(self) -> None:
        self.logger.info("🛑 Shutting down services")
        self.session.close()


# Global service manager instance
_service_manager: Optional[ServiceManager] = None


def get_service_manager() -> ServiceManager:
    """Get the global service manager instance."""
    global _service_manager
    if _service_manager is None:
        _service_manager = ServiceManager()
    return _service_manager
