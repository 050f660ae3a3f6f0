"""
🏠 Main Routes Blueprint
App index, combined status and the local music directory.
"""

from flask import Blueprint, abort, current_app, send_from_directory

from ..version import get_version_dict
from .helpers import api_error_handler, api_response, get_service_manager, service_response

main_bp = Blueprint("main", __name__)

ENDPOINTS = [
    "GET /api/status",
    "GET /api/timer",
    "POST /api/timer/start|pause|resume|toggle|reset",
    "POST /api/timer/duration",
    "GET /api/music",
    "POST /api/music/enable|disable|toggle|next|volume|rescan",
    "GET /music/<filename>",
    "GET /healthz",
    "GET /api/services/health",
]


@main_bp.route("/")
def index():
    return api_response(True, data={**get_version_dict(), "endpoints": ENDPOINTS})


@main_bp.route("/api/status")
@api_error_handler
def combined_status():
    return service_response(get_service_manager().get_status())


@main_bp.route("/music/<path:filename>")
def music_file(filename: str):
    """Serve a track from the configured music directory (GET and HEAD)."""
    music_dir = current_app.config.get("MUSIC_DIR")
    if not music_dir:
        abort(404)
    return send_from_directory(music_dir, filename, conditional=True)
