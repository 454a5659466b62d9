"""
NeatoCache - API Module

This module provides a web-based interface to the location tags. It
creates a REST API server that lets a front end scan a location, set one
up, and add visitors to it.
"""

from .api_server import create_app, initialize, start, stop, is_running, get_server_url

__all__ = [
    'create_app',
    'initialize',
    'start',
    'stop',
    'is_running',
    'get_server_url'
]
