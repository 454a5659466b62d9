#!/usr/bin/env python3
"""
NeatoCache - Main Application

This is the entry point for the NeatoCache server. It initializes the NFC
controller and serves the location API until interrupted.
"""

import logging
import time

from .config import CONFIG
from .modules.api import api_server
from .modules.nfc import nfc_controller
from .utils.logger import parse_level, set_global_log_level, setup_logger

logger = logging.getLogger(__name__)


def configure_logging():
    """Configure the package logger from the logging settings."""
    log_config = CONFIG.get("logging", {})
    level = logging.DEBUG if CONFIG.get("debug_mode") else parse_level(log_config.get("level", "INFO"))

    setup_logger("neatocache", log_file=log_config.get("file") or None, level=level)
    if CONFIG.get("debug_mode"):
        set_global_log_level(logging.DEBUG)


def initialize_components():
    """Initialize all application components."""
    logger.info("Initializing NeatoCache components...")

    nfc_controller.initialize(nfc_config=CONFIG["nfc"])

    # Start API server in a separate thread
    api_server.initialize()
    api_server.start()

    logger.info("All components initialized successfully")


def shutdown():
    """Perform graceful shutdown of all components."""
    logger.info("Shutting down NeatoCache...")

    api_server.stop()
    nfc_controller.shutdown()

    logger.info("Shutdown complete")


def main():
    configure_logging()

    try:
        initialize_components()
        while api_server.is_running():
            time.sleep(1)
        logger.error("API server stopped unexpectedly")
        return 1
    except KeyboardInterrupt:
        logger.info("Application shutdown requested")
        return 0
    finally:
        shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
