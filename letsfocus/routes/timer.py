"""
⏱️ Timer Routes Blueprint
Countdown status and play/pause/reset/duration intents.
"""

from flask import Blueprint

from .helpers import api_error_handler, get_service, request_payload, service_response

timer_bp = Blueprint("timer", __name__, url_prefix="/api/timer")


@timer_bp.route("", methods=["GET"])
@api_error_handler
def timer_status():
    return service_response(get_service("timer").get_status())


@timer_bp.route("/start", methods=["POST"])
@api_error_handler
def start_timer():
    return service_response(get_service("timer").start())


@timer_bp.route("/pause", methods=["POST"])
@api_error_handler
def pause_timer():
    return service_response(get_service("timer").pause())


@timer_bp.route("/resume", methods=["POST"])
@api_error_handler
def resume_timer():
    return service_response(get_service("timer").resume())


@timer_bp.route("/toggle", methods=["POST"])
@api_error_handler
def toggle_timer():
    """Play/pause button and spacebar shortcut."""
    return service_response(get_service("timer").toggle())


@timer_bp.route("/reset", methods=["POST"])
@api_error_handler
def reset_timer():
    return service_response(get_service("timer").reset())


@timer_bp.route("/duration", methods=["POST"])
@api_error_handler
def set_duration():
    """Duration slider: accepts ``minutes`` as JSON or form field."""
    return service_response(get_service("timer").set_duration(request_payload()))
