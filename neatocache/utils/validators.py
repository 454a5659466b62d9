"""
validators.py - Input validation utilities for the NeatoCache application.

Names typed by people end up on a tag with a few hundred bytes of room,
so they are cleaned and bounded before they reach the NFC module.
"""

import re
from typing import Optional

from .exceptions import ValidationError

# Longest name accepted for a location or a visitor
MAX_NAME_LENGTH = 64


def sanitize_input(input_str: str, allowed_chars: Optional[str] = None) -> str:
    """
    Sanitize a string by removing potentially harmful characters.

    Args:
        input_str (str): Input string
        allowed_chars (str, optional): String of allowed characters

    Returns:
        str: Sanitized string
    """
    if not input_str:
        return ""

    if allowed_chars:
        # Only keep allowed characters
        return ''.join(c for c in input_str if c in allowed_chars)

    # Drop HTML tags, then control characters
    no_tags = re.sub(r'<[^>]*>', '', input_str)
    return ''.join(c for c in no_tags if c.isprintable())


def validate_required(value, field_name: str):
    """
    Validate that a required value is not None or empty.

    Args:
        value: Value to validate
        field_name (str): Name of the field for error message

    Raises:
        ValidationError: If value is None or empty
    """
    if value is None or (isinstance(value, (str, list, dict)) and not value):
        raise ValidationError(f"{field_name} is required")

    return value


def validate_length(value: str, field_name: str, min_length: int = 0, max_length: Optional[int] = None):
    """
    Validate string length.

    Args:
        value (str): String to validate
        field_name (str): Name of the field for error message
        min_length (int, optional): Minimum length required
        max_length (int, optional): Maximum length allowed

    Raises:
        ValidationError: If string length is invalid
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")

    if min_length > 0 and len(value) < min_length:
        raise ValidationError(f"{field_name} must be at least {min_length} characters")

    if max_length and len(value) > max_length:
        raise ValidationError(f"{field_name} cannot exceed {max_length} characters")

    return value


def validate_name(value, field_name: str = "name") -> str:
    """
    Clean and validate a location or visitor name.

    Args:
        value: Raw name as typed by the user
        field_name (str): Name of the field for error message

    Returns:
        str: The stripped, sanitized name

    Raises:
        ValidationError: If the name is missing, empty or too long
    """
    validate_required(value, field_name)
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")

    name = sanitize_input(value).strip()
    validate_required(name, field_name)
    return validate_length(name, field_name, min_length=1, max_length=MAX_NAME_LENGTH)
