"""
NeatoCache - API Server

Serves the location API with waitress from a daemon thread so the main
thread stays free for signal handling.
"""

import threading
import time
from flask import Flask, jsonify
from flask_cors import CORS
from waitress import create_server

from ... import __version__
from ...config import CONFIG
from ...utils.logger import get_logger

from .routes import locations
from .middleware import error_handler

logger = get_logger(__name__)

# Module state, one server per process
app = None
_server = None
_server_thread = None
_started_at = None


def create_app(api_config=None):
    """
    Build the Flask application with all routes registered.

    Args:
        api_config (dict, optional): The "api" configuration section

    Returns:
        Flask: Configured application
    """
    api_config = api_config or CONFIG['api']

    flask_app = Flask(__name__)
    flask_app.config.update(ACTION_TIMEOUT=api_config.get('action_timeout', 75))
    # Responses keep the envelope order: success first, then data or error
    flask_app.json.sort_keys = False

    # The front end is served from another origin
    CORS(flask_app, resources={r"/api/*": {"origins": "*"}})

    error_handler.init_error_handlers(flask_app)
    locations.register_routes(flask_app)

    @flask_app.route('/api/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'uptime': get_uptime(),
            'version': __version__
        })

    return flask_app


def initialize():
    """
    Build the application from configuration.

    Returns:
        bool: True if initialization successful
    """
    global app

    app = create_app()
    logger.info("API server initialized")
    return True


def start():
    """
    Bind the configured address and serve requests in a background thread.

    Returns:
        bool: True if the server is listening
    """
    global _server, _server_thread, _started_at

    if is_running():
        logger.warning("API server already running")
        return True

    if app is None:
        initialize()

    host = CONFIG['api']['host']
    port = CONFIG['api']['port']

    try:
        _server = create_server(app, host=host, port=port, threads=4)
    except OSError as e:
        logger.error(f"Could not bind API server to {host}:{port}: {e}")
        return False

    _server_thread = threading.Thread(target=_serve, args=(_server,), name="api-server", daemon=True)
    _server_thread.start()
    _started_at = time.time()

    logger.info(f"API server listening at {get_server_url()}")
    return True


def _serve(server):
    global _server

    try:
        server.run()
    except OSError as e:
        logger.error(f"API server stopped: {e}")
    finally:
        if _server is server:
            _server = None


def stop():
    """
    Close the listening socket and wait for the server thread.

    Returns:
        bool: True if server stopped successfully
    """
    global _server, _server_thread, _started_at

    server = _server
    if server is None:
        logger.debug("API server not running")
        return True

    logger.info("Stopping API server")
    _server = None
    _started_at = None
    server.close()

    if _server_thread is not None:
        _server_thread.join(timeout=5)
        _server_thread = None

    logger.info("API server stopped")
    return True


def is_running():
    return _server is not None


def get_server_url():
    """
    Get the URL where the server is running.

    Returns:
        str: Server URL (e.g., http://localhost:5000), None when stopped
    """
    if not is_running():
        return None

    host = CONFIG['api']['host']
    port = CONFIG['api']['port']

    # Use 'localhost' for user display if server bound to all interfaces
    display_host = 'localhost' if host == '0.0.0.0' else host
    return f"http://{display_host}:{port}"


def get_uptime():
    """
    Get the uptime of the API server in seconds.

    Returns:
        float: Uptime in seconds or None if server not running
    """
    if not is_running() or _started_at is None:
        return None
    return time.time() - _started_at
