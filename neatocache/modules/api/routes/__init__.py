"""
NeatoCache - API Routes

This package contains all route handlers for the API server.
"""

from . import locations

__all__ = ['locations']
