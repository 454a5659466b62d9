"""
exceptions.py - Custom exception definitions for the NeatoCache application.

This module defines the application-wide exceptions shared by the NFC and API modules.
"""

class AppError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(AppError):
    """Exception raised when validation fails."""
    pass
