"""
models.py - Location and visitor records stored on NFC tags.

A tag holds exactly one location, encoded as UTF-8 JSON in the payload of
the first NDEF record:

    {"name": "Cafe", "visitors": [{"name": "Bob"}]}
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ...utils.exceptions import ValidationError
from ...utils.validators import validate_required

logger = logging.getLogger(__name__)


def require_name(value, field_name: str) -> str:
    """
    Check that a stored name is a non-empty string.

    Names are kept exactly as given. Cleaning and length limits apply to
    user input in actions.py, not to records already on a tag.

    Raises:
        ValidationError: If the name is missing, empty or not a string
    """
    validate_required(value, field_name)
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    return value


class LocationDecodeError(ValueError):
    """Raised when bytes read from a tag are not a valid location record."""
    pass


@dataclass
class Visitor:
    """One person who visited a location."""
    name: str

    def __post_init__(self):
        self.name = require_name(self.name, "Visitor name")

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name}


@dataclass
class Location:
    """
    A tracked physical place and everyone who has visited it.

    Attributes:
        name: Identifier set when the tag is first set up
        visitors: Visitors in the order they were added
    """
    name: str
    visitors: List[Visitor] = field(default_factory=list)

    def __post_init__(self):
        self.name = require_name(self.name, "Location name")
        self.visitors = list(self.visitors)

    def with_visitor(self, visitor: Visitor) -> "Location":
        """Return a copy of this location with ``visitor`` appended."""
        return Location(self.name, self.visitors + [visitor])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "visitors": [visitor.to_dict() for visitor in self.visitors],
        }

    def to_json(self) -> bytes:
        """
        Serialize the location for storage on a tag.

        Returns:
            bytes: Compact UTF-8 JSON
        """
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(',', ':')).encode('utf-8')

    @classmethod
    def from_dict(cls, data: Any) -> "Location":
        if not isinstance(data, dict):
            raise LocationDecodeError("Location record must be a JSON object")

        name = data.get("name")
        visitors = data.get("visitors")
        if not isinstance(name, str):
            raise LocationDecodeError("Location record has no name")
        if not isinstance(visitors, list):
            raise LocationDecodeError("Location record has no visitor list")

        try:
            parsed_visitors = []
            for entry in visitors:
                if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
                    raise LocationDecodeError("Visitor entry has no name")
                parsed_visitors.append(Visitor(entry["name"]))
            return cls(name, parsed_visitors)
        except ValidationError as e:
            # Empty name stored on the tag
            raise LocationDecodeError(e.message)

    @classmethod
    def from_json(cls, data: bytes) -> "Location":
        """
        Decode a location from a tag payload.

        Args:
            data (bytes): UTF-8 JSON payload

        Returns:
            Location: The decoded location

        Raises:
            LocationDecodeError: If the payload is not a valid location record
        """
        try:
            decoded = json.loads(bytes(data).decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as e:
            raise LocationDecodeError(f"Payload is not JSON: {e}")
        return cls.from_dict(decoded)

    @classmethod
    def from_message(cls, message) -> Optional["Location"]:
        """
        Decode the location held in the first record of an NDEF message.

        Returns:
            Location or None: None if the message is empty or undecodable
        """
        if message is None or not message.records:
            return None

        try:
            return cls.from_json(message.records[0].payload)
        except LocationDecodeError as e:
            logger.debug(f"Tag payload is not a location: {e}")
            return None
