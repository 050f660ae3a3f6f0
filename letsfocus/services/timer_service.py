"""
⏱️ Timer Service - Business Logic for the Focus Countdown
=========================================================

Exposes the countdown engine's intents (start/pause/resume/toggle/reset,
duration changes) as ServiceResults. Rejected intents are reported, never
raised.
"""

from typing import Any, Callable, Dict

from . import BaseService, ServiceResult
from ..core.countdown import CountdownEngine, SessionState
from ..exceptions import InvalidStateError, TickSchedulerError
from ..utils.validation import ValidationError, validate_duration_payload


class TimerService(BaseService):
    """Service wrapping one CountdownEngine."""

    def __init__(self, engine: CountdownEngine):
        super().__init__("timer")
        self.engine = engine
        self._completed_sessions = 0
        engine.add_completion_listener(self._count_completion)

    def _count_completion(self) -> None:
        self._completed_sessions += 1

    def get_status(self) -> ServiceResult:
        try:
            data = self.engine.snapshot()
            data["completed_sessions"] = self._completed_sessions
            return self._success_result(data=data)
        except Exception as e:
            return self._handle_error(e, "get_status")

    def _run_intent(self, operation: str, action: Callable[[], Any], message: str) -> ServiceResult:
        try:
            action()
            return self._success_result(data=self.engine.snapshot(), message=message)
        except InvalidStateError as e:
            return self._error_result(str(e), error_code="invalid_state", data=self.engine.snapshot())
        except TickSchedulerError as e:
            self.logger.error(f"Countdown scheduling failed during {operation}: {e}")
            return self._error_result(str(e), error_code="scheduler_failed", data=self.engine.snapshot())
        except Exception as e:
            return self._handle_error(e, operation)

    def start(self) -> ServiceResult:
        return self._run_intent("start", self.engine.start, "Focus session started")

    def pause(self) -> ServiceResult:
        return self._run_intent("pause", self.engine.pause, "Focus session paused")

    def resume(self) -> ServiceResult:
        return self._run_intent("resume", self.engine.resume, "Focus session resumed")

    def toggle(self) -> ServiceResult:
        return self._run_intent("toggle", self.engine.toggle, "Focus session toggled")

    def reset(self) -> ServiceResult:
        return self._run_intent("reset", self.engine.reset, "Focus session reset")

    def set_duration(self, form_data: Dict[str, Any]) -> ServiceResult:
        """Validate and apply a new session length (Idle only)."""
        try:
            minutes = validate_duration_payload(form_data)
        except ValidationError as e:
            return self._error_result(f"Invalid {e.field_name}: {e.message}", error_code=e.field_name)
        return self._run_intent(
            "set_duration",
            lambda: self.engine.set_duration(minutes),
            f"Session duration set to {minutes} minutes",
        )

    def health_check(self) -> ServiceResult:
        base_health = super().health_check()
        if not base_health.success:
            return base_health
        return self._success_result(
            data={
                "service": "timer",
                "status": "healthy",
                "state": self.engine.state.value,
                "running": self.engine.state is SessionState.RUNNING,
            }
        )
