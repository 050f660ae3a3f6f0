"""
🛠️ Route Helpers
Shared utilities for all route blueprints.
"""

import datetime
import logging
import uuid
from functools import wraps
from typing import Any, Callable, Dict, Optional

from flask import Response, current_app, jsonify, request

from ..services import ServiceResult

logger = logging.getLogger(__name__)

# Service error codes that map to a client error rather than a server fault
CLIENT_ERROR_STATUS = {
    "invalid_state": 409,
    "no_tracks": 409,
    "minutes": 400,
    "volume": 400,
}


def _iso_timestamp_now() -> str:
    """Return ISO 8601 timestamp in UTC with a trailing Z."""
    now_utc = datetime.datetime.now(tz=datetime.timezone.utc)
    return now_utc.isoformat(timespec="microseconds").replace("+00:00", "Z")


def api_response(
    success: bool,
    *,
    data: Optional[Any] = None,
    message: str = "",
    status: int = 200,
    error_code: Optional[str] = None
) -> Response:
    """Create a standardized API response with consistent envelope.

    Args:
        success: Whether the operation succeeded
        data: Optional response data
        message: Optional message string
        status: HTTP status code (default 200)
        error_code: Optional error code for failures

    Returns:
        Flask Response object with JSON payload
    """
    req_id = str(uuid.uuid4())
    timestamp = _iso_timestamp_now()
    payload = {
        "success": success,
        "timestamp": timestamp,
        "request_id": req_id
    }
    if message:
        payload["message"] = message
    if data is not None:
        payload["data"] = data
    if error_code:
        payload["error_code"] = error_code
    resp = jsonify(payload)
    resp.status_code = status
    resp.headers['X-Request-ID'] = req_id
    resp.headers['X-Response-Timestamp'] = timestamp
    return resp


def api_error(
    message: str,
    *,
    status: int = 400,
    error_code: Optional[str] = None,
    data: Optional[Any] = None,
) -> Response:
    """Convenience wrapper for standardized error responses."""
    return api_response(False, data=data, message=message, status=status, error_code=error_code)


def service_response(result: ServiceResult) -> Response:
    """Translate a ServiceResult into the API envelope."""
    if result.success:
        return api_response(True, data=result.data, message=result.message or "")
    status = CLIENT_ERROR_STATUS.get(result.error_code or "", 500)
    return api_error(
        result.message or "Operation failed",
        status=status,
        error_code=result.error_code or "operation_failed",
        data=result.data,
    )


def api_error_handler(func: Callable) -> Callable:
    """Decorator for consistent API error handling."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception:
            logger.exception(f"Error in {func.__name__}")
            return api_error(
                "An internal error occurred",
                status=500,
                error_code="unhandled_exception",
            )
    return wrapper


def request_payload() -> Dict[str, Any]:
    """JSON body if present, otherwise form fields."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()


def get_service_manager():
    return current_app.extensions["letsfocus.services"]


def get_service(name: str) -> Any:
    return get_service_manager().get_service(name)
