"""
NeatoCache - API Middleware

This package contains middleware components for the API server.
"""

from . import error_handler

__all__ = ['error_handler']
