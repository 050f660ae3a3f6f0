"""
🎵 Music Routes Blueprint
Background playlist status, mute toggle, skip and volume.
"""

from flask import Blueprint

from .helpers import api_error_handler, get_service, request_payload, service_response

music_bp = Blueprint("music", __name__, url_prefix="/api/music")


@music_bp.route("", methods=["GET"])
@api_error_handler
def music_status():
    return service_response(get_service("music").get_status())


@music_bp.route("/enable", methods=["POST"])
@api_error_handler
def enable_music():
    return service_response(get_service("music").enable())


@music_bp.route("/disable", methods=["POST"])
@api_error_handler
def disable_music():
    return service_response(get_service("music").disable())


@music_bp.route("/toggle", methods=["POST"])
@api_error_handler
def toggle_music():
    return service_response(get_service("music").toggle())


@music_bp.route("/next", methods=["POST"])
@api_error_handler
def next_track():
    return service_response(get_service("music").skip_next())


@music_bp.route("/volume", methods=["POST"])
@api_error_handler
def set_volume():
    return service_response(get_service("music").set_volume(request_payload()))


@music_bp.route("/rescan", methods=["POST"])
@api_error_handler
def rescan_tracks():
    return service_response(get_service("music").rescan())
