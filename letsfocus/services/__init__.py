"""
🏗️ Service Layer
=================

Services wrap the focus-session core. Every intent returns a ServiceResult,
including rejected ones, so routes never see core exceptions.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ServiceResult:
    """Outcome of one service call; ``error_code`` is set only on failure."""
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error_code: Optional[str] = None


class BaseService:
    """Shared lifecycle and result helpers for the timer and music services."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"service.{name}")
        self._initialized = False

    def initialize(self) -> ServiceResult:
        self._initialized = True
        self.logger.info(f"🔧 {self.name} service ready")
        return ServiceResult(success=True, message=f"{self.name} service ready")

    def health_check(self) -> ServiceResult:
        """Base readiness check; subclasses add their component status."""
        if not self._initialized:
            return self._error_result(f"{self.name} service not initialized", error_code="NOT_INITIALIZED")
        return self._success_result(data={"service": self.name, "status": "healthy"})

    def _handle_error(self, error: Exception, operation: str) -> ServiceResult:
        """Log an unexpected failure with traceback and report it as OPERATION_FAILED."""
        error_msg = f"Error in {self.name}.{operation}: {error}"
        self.logger.error(error_msg, exc_info=True)
        return self._error_result(error_msg, error_code="OPERATION_FAILED")

    def _success_result(self, data: Any = None, message: Optional[str] = None) -> ServiceResult:
        return ServiceResult(success=True, data=data, message=message)

    def _error_result(self, message: str, error_code: str = "ERROR", data: Any = None) -> ServiceResult:
        return ServiceResult(success=False, data=data, message=message, error_code=error_code)


__all__ = ["BaseService", "ServiceResult"]
