"""
NeatoCache - API Exceptions

This module defines custom exceptions for the API module.
"""

from ..nfc.exceptions import (
    NFCBusyError, NFCHardwareError, NFCInvalidPayloadSizeError,
    NFCTimeoutError, NFCUnavailableError
)


class APIError(Exception):
    """Base exception for all API related errors."""
    status_code = 500

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        """Convert exception to dictionary for JSON response."""
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = self.status_code
        return rv


class InvalidRequestError(APIError):
    """Exception raised when the request is invalid."""
    status_code = 400


class TagActionError(APIError):
    """Exception raised when a tag action ends without a location."""
    status_code = 422

    # Checked in order, so subclasses must come before their bases
    STATUS_CODES = (
        (NFCUnavailableError, 503),
        (NFCHardwareError, 503),
        (NFCBusyError, 409),
        (NFCInvalidPayloadSizeError, 413),
        (NFCTimeoutError, 504),
    )

    @classmethod
    def from_nfc_error(cls, error):
        """
        Wrap an NFC error with a matching HTTP status.

        Args:
            error (NFCError): The error the action failed with

        Returns:
            TagActionError: Exception ready to be raised from a route
        """
        status_code = cls.status_code
        for error_type, code in cls.STATUS_CODES:
            if isinstance(error, error_type):
                status_code = code
                break

        return cls(str(error), status_code=status_code, payload={'type': type(error).__name__})
