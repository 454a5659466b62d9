"""
NeatoCache - Location Routes

This module implements the API routes for reading location tags and
adding visitors to them. Each request holds a reader session open until
the tag interaction finishes.

Invalid names surface as ValidationError and failed tag actions as the
NFCError they ended with; the error handler middleware renders both.
"""

from flask import current_app, jsonify, request

from ....utils.logger import get_logger
from ...nfc import nfc_controller
from ...nfc.actions import AddVisitor, ReadLocation, SetupLocation

logger = get_logger(__name__)


def register_routes(app):
    """
    Register location routes with the Flask application.

    Args:
        app: Flask application instance
    """

    @app.route('/api/location/scan', methods=['POST'])
    def scan_location():
        """Read the location on the next tag presented to the reader."""
        return _run_action(ReadLocation())

    @app.route('/api/location/setup', methods=['POST'])
    def setup_location():
        """Write a new, empty location to the next tag."""
        return _run_action(SetupLocation(_requested_name()))

    @app.route('/api/location/visitors', methods=['POST'])
    def add_visitor():
        """Add a visitor to the location on the next tag."""
        return _run_action(AddVisitor(_requested_name()))


def _requested_name():
    data = request.get_json(silent=True)
    return data.get('name') if isinstance(data, dict) else None


def _run_action(action):
    timeout = current_app.config.get('ACTION_TIMEOUT', 75)
    logger.info(f"{type(action).__name__} requested")

    location = nfc_controller.perform_action_sync(action, timeout=timeout).get()

    return jsonify({
        'success': True,
        'data': {
            'location': location.to_dict(),
            'visitor_count': len(location.visitors)
        }
    })
