"""
NeatoCache - Error Handler Middleware

Turns everything a route can raise into the JSON error envelope:

    {"success": false, "error": {"message": ..., "status": ..., "details": ...}}

Routes raise ValidationError for bad input and let NFC errors from the
tag action propagate; the status mapping lives in TagActionError.
"""

from flask import jsonify, request

from ....utils.exceptions import ValidationError
from ....utils.logger import get_logger
from ...nfc.exceptions import NFCError
from ..exceptions import APIError, InvalidRequestError, TagActionError

logger = get_logger(__name__)

HTTP_ERROR_MESSAGES = {
    400: lambda error: getattr(error, 'description', None) or "Bad request",
    404: lambda error: f"Resource not found: {request.path}",
    405: lambda error: f"Method {request.method} not allowed for {request.path}",
}


def init_error_handlers(app):
    """
    Initialize error handlers for the Flask application.

    Args:
        app: Flask application instance
    """
    for status_code in HTTP_ERROR_MESSAGES:
        app.register_error_handler(status_code, handle_http_error)
    app.register_error_handler(500, handle_internal_error)

    app.register_error_handler(ValidationError, handle_validation_error)
    app.register_error_handler(NFCError, handle_nfc_error)
    app.register_error_handler(APIError, handle_api_error)

    logger.info("Error handlers initialized")


def handle_http_error(error):
    """Handle werkzeug HTTP errors raised by routing."""
    status_code = getattr(error, 'code', None) or 400
    return api_error_response(HTTP_ERROR_MESSAGES[status_code](error), status_code)


def handle_internal_error(error):
    # Full traceback stays in the log, the client gets a generic message
    original = getattr(error, 'original_exception', None) or error
    logger.error(
        f"Internal server error on {request.path}: {original!r}",
        exc_info=(type(original), original, original.__traceback__)
    )
    return api_error_response("An internal server error occurred", 500)


def handle_validation_error(error):
    """Reject a request whose location or visitor name is unusable."""
    return handle_api_error(InvalidRequestError(error.message, payload=error.details))


def handle_nfc_error(error):
    """Report a tag action that ended without a location."""
    return handle_api_error(TagActionError.from_nfc_error(error))


def handle_api_error(error):
    """
    Handle custom API errors.

    Args:
        error: APIError instance

    Returns:
        Response: JSON error response
    """
    if error.status_code >= 500:
        logger.error(f"API error {error.status_code}: {error.message}")
    else:
        logger.info(f"API error {error.status_code}: {error.message}")

    return api_error_response(error.message, error.status_code, error.payload)


def api_error_response(message, status_code, details=None):
    """
    Create a standardized error response.

    Args:
        message (str): Error message
        status_code (int): HTTP status code
        details (dict, optional): Additional error details

    Returns:
        tuple: (JSON response, status code)
    """
    error = {'message': message, 'status': status_code}
    if details:
        error['details'] = details

    return jsonify({'success': False, 'error': error}), status_code
