"""
Utils Module - Common utility functions and classes for the NeatoCache application.

This package provides reusable utilities for logging, error handling
and input validation.
"""

from .exceptions import (
    AppError,
    ValidationError
)

from .logger import (
    setup_logger,
    get_logger,
    set_global_log_level,
    parse_level
)

from .validators import (
    sanitize_input,
    validate_required,
    validate_length,
    validate_name,
    MAX_NAME_LENGTH
)
