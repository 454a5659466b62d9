"""
exceptions.py - Custom exception classes for the NFC module.

``str(error)`` is always the text shown to the person holding the tag.
"""

class NFCError(Exception):
    """Base exception for all NFC related errors."""
    pass

class NFCHardwareError(NFCError):
    """Exception raised when there's a hardware communication error."""
    pass

class NFCNoTagError(NFCError):
    """Exception raised when an operation requires a tag but none is present."""
    pass

class NFCReadError(NFCError):
    """Exception raised when tag reading fails."""
    pass

class NFCWriteError(NFCError):
    """Exception raised when tag writing fails."""
    pass

class NFCTagNotWritableError(NFCWriteError):
    """Exception raised when the tag reports itself as read-only."""
    def __init__(self, message="Unable to write to tag."):
        super().__init__(message)

class NFCUnsupportedTagError(NFCError):
    """Exception raised when the tag is not NDEF formatted."""
    def __init__(self, message="Unsupported tag."):
        super().__init__(message)

class NFCDecodeError(NFCReadError):
    """Exception raised when tag data is missing or cannot be decoded."""
    def __init__(self, message="Could not read tag data."):
        super().__init__(message)

class NFCUnavailableError(NFCError):
    """Exception raised when this device cannot scan for tags at all."""
    def __init__(self, message="NFC Reader Not Available"):
        super().__init__(message)

class NFCInvalidatedError(NFCError):
    """Exception raised when a reader session ended with an error."""
    def __init__(self, message):
        super().__init__(message)
        self.message = message

class NFCInvalidPayloadSizeError(NFCWriteError):
    """Exception raised when an NDEF message does not fit on the tag."""
    def __init__(self, message="NDEF payload size exceeds the tag limit", length=None, capacity=None):
        super().__init__(message)
        self.length = length
        self.capacity = capacity

class NFCBusyError(NFCError):
    """Exception raised when an action is requested while another is in flight."""
    def __init__(self, message="Another tag action is already in progress"):
        super().__init__(message)

class NFCTimeoutError(NFCError):
    """Exception raised when waiting for an action result takes too long."""
    def __init__(self, message="Timed out waiting for the tag"):
        super().__init__(message)
