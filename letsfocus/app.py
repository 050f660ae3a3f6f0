"""
LetsFocus Application Factory
Flask control API over the focus-session core
"""

import os
from typing import Optional

from flask import Flask
from flask_compress import Compress

from .config import config_manager, load_config
from .routes import health_bp, main_bp, music_bp, timer_bp
from .routes.errors import register_error_handlers
from .services.service_manager import ServiceManager, get_service_manager
from .utils.logger import setup_logger, setup_logging

compress = Compress()


def create_app(service_manager: Optional[ServiceManager] = None, config: Optional[dict] = None) -> Flask:
    """Build the Flask app around a service manager.

    Args:
        service_manager: Pre-built manager (tests inject one with fakes);
            defaults to the global manager built from configuration
        config: Configuration dict; defaults to ``load_config()``
    """
    setup_logging()
    logger = setup_logger("letsfocus")

    if config is None:
        config = service_manager.config if service_manager is not None else load_config()
    if service_manager is None:
        service_manager = get_service_manager()

    app = Flask(__name__)
    app.config["JSON_SORT_KEYS"] = False
    app.config["MUSIC_DIR"] = str(config_manager.resolve_path(config.get("music_dir", "music")))
    app.config.setdefault("COMPRESS_MIMETYPES", ["application/json"])
    try:
        app.config["COMPRESS_LEVEL"] = max(1, min(9, int(os.getenv("LETSFOCUS_COMPRESS_LEVEL", "6"))))
    except ValueError:
        app.config["COMPRESS_LEVEL"] = 6
    compress.init_app(app)

    app.extensions["letsfocus.services"] = service_manager

    for blueprint in (main_bp, health_bp, timer_bp, music_bp):
        app.register_blueprint(blueprint)
    register_error_handlers(app)

    logger.debug("Flask application created (environment=%s)", config.get("environment"))
    return app


__all__ = ["create_app"]
