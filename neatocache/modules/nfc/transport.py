"""
transport.py - The reader capabilities the session controller depends on.

A transport owns the radio. The controller asks it for a reader session,
and the session reports detected tags and its own end through a delegate.
Tag operations are blocking calls that raise NFCError subclasses.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Tuple


class NDEFStatus(Enum):
    """What a tag allows the reader to do with NDEF data."""
    NOT_SUPPORTED = "not_supported"
    READ_ONLY = "read_only"
    READ_WRITE = "read_write"


class InvalidationCode(Enum):
    """Why a reader session ended on the platform's side."""
    FIRST_TAG_READ = "first_tag_read"
    USER_CANCELED = "user_canceled"
    SESSION_TIMEOUT = "session_timeout"
    SYSTEM_BUSY = "system_busy"
    UNEXPECTED = "unexpected"


class InvalidationReason:
    """
    Reason passed to ``SessionDelegate.on_invalidated``.

    Attributes:
        code (InvalidationCode): Classification of the termination
        description (str): Human readable explanation
    """

    # Terminations that are part of normal operation
    EXPECTED_CODES = frozenset({InvalidationCode.FIRST_TAG_READ, InvalidationCode.USER_CANCELED})

    def __init__(self, code, description=""):
        self.code = code
        self.description = description or code.value.replace('_', ' ').capitalize()

    @property
    def is_expected(self):
        return self.code in self.EXPECTED_CODES

    def __repr__(self):
        return f"InvalidationReason({self.code.name}, {self.description!r})"


class NDEFTag(ABC):
    """A single NDEF capable tag, usable once the session has connected to it."""

    @abstractmethod
    def query_ndef_status(self) -> Tuple[NDEFStatus, int]:
        """
        Returns:
            tuple: (NDEFStatus, capacity in bytes of the largest storable NDEF message)
        """

    @abstractmethod
    def read_ndef(self):
        """
        Returns:
            NDEFMessage or None: The stored message, None if the tag is blank
        """

    @abstractmethod
    def write_ndef(self, message):
        """Replace the stored message with ``message``."""


class SessionDelegate(ABC):
    """Receives the events of a reader session."""

    @abstractmethod
    def on_tags_detected(self, session: "ReaderSession", tags: List[NDEFTag]):
        """Called with every batch of tags found while polling."""

    @abstractmethod
    def on_invalidated(self, session: "ReaderSession", reason: Optional[InvalidationReason]):
        """
        Called exactly once when the session ends.

        ``reason`` is None when the application invalidated the session itself.
        """


class ReaderSession(ABC):
    """One scanning lifecycle, from ``begin()`` to invalidation."""

    def __init__(self, delegate, alert_message="", invalidate_after_first_read=True):
        self.delegate = delegate
        self.alert_message = alert_message
        self.invalidate_after_first_read = invalidate_after_first_read

    @abstractmethod
    def begin(self):
        """Start polling for tags."""

    @abstractmethod
    def invalidate(self, error_message=None):
        """End the session. Calling it again has no effect."""

    @abstractmethod
    def restart_polling(self):
        """Resume polling after a detection."""

    @abstractmethod
    def connect(self, tag: NDEFTag):
        """Select ``tag`` for the following tag operations."""

    @property
    @abstractmethod
    def is_invalidated(self) -> bool:
        """True once the session has ended."""


class TagTransport(ABC):
    """Factory for reader sessions on one piece of reader hardware."""

    @abstractmethod
    def is_scanning_available(self) -> bool:
        """True if this device can scan for tags at all."""

    @abstractmethod
    def begin_session(self, delegate: SessionDelegate, alert_message: str,
                      invalidate_after_first_read: bool = True) -> ReaderSession:
        """Create a session; the caller starts it with ``begin()``."""

    def close(self):
        """Release the reader hardware."""
