"""
❤️ Health Routes Blueprint
Liveness and per-service health.
"""

from flask import Blueprint

from ..version import VERSION
from .helpers import api_error_handler, api_response, get_service_manager, service_response

health_bp = Blueprint("health", __name__)


@health_bp.route("/healthz")
def healthz():
    return api_response(True, data={"status": "ok", "version": VERSION})


@health_bp.route("/api/services/health")
@api_error_handler
def services_health():
    return service_response(get_service_manager().health_check_all())
