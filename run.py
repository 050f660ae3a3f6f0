#!/usr/bin/env python3
"""
LetsFocus Runner - Starts the focus timer control API
"""

import atexit
import logging
import os

from waitress import serve

from letsfocus.app import create_app
from letsfocus.config import load_config
from letsfocus.services.service_manager import get_service_manager
from letsfocus.utils.logger import log_shutdown, log_startup, setup_logging


def main() -> None:
    logger = setup_logging()
    log_startup(logger)
    config = load_config()
    logging.getLogger().setLevel(config.get("log_level", "INFO"))

    manager = get_service_manager()
    atexit.register(lambda: (manager.shutdown(), log_shutdown(logger, "LetsFocus")))
    app = create_app(manager, config)

    host = config.get("host", "127.0.0.1")
    port = int(config.get("port", 5050))
    debug_mode = config.get("debug", False)

    print(f"🚀 Starting LetsFocus on {host}:{port}")
    print(f"🌍 Environment: {config.get('environment', 'unknown')}")
    print(f"🔧 Debug mode: {debug_mode}")

    if debug_mode:
        # Reloader would build a second session with its own audio handle
        app.run(host=host, port=port, debug=True, use_reloader=False)
    else:
        threads = int(os.environ.get("LETSFOCUS_WAITRESS_THREADS", "4"))
        print(f"🍽️ Using Waitress WSGI server (threads={threads})")
        serve(app, host=host, port=port, threads=threads)


if __name__ == "__main__":
    main()
