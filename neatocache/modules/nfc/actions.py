"""
actions.py - The tag actions a caller can request.

Each action is its own class carrying its argument, so the session
controller can dispatch on the action type once the tag is known to be
writable.
"""

from dataclasses import dataclass

from ...utils.validators import validate_name


class NFCAction:
    """Base class for all tag actions."""

    @property
    def alert_message(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class ReadLocation(NFCAction):
    """Read the location stored on a tag."""

    @property
    def alert_message(self) -> str:
        return "Place tag near reader to read the location."


@dataclass(frozen=True)
class SetupLocation(NFCAction):
    """Initialize a tag with a new, visitor-less location."""
    location_name: str

    def __post_init__(self):
        object.__setattr__(self, "location_name", validate_name(self.location_name, "Location name"))

    @property
    def alert_message(self) -> str:
        return f"Place tag near reader to setup {self.location_name}"


@dataclass(frozen=True)
class AddVisitor(NFCAction):
    """Append a visitor to the location stored on a tag."""
    visitor_name: str

    def __post_init__(self):
        object.__setattr__(self, "visitor_name", validate_name(self.visitor_name, "Visitor name"))

    @property
    def alert_message(self) -> str:
        return f"Place tag near reader to add {self.visitor_name}"
