"""
NFC Module - Reads and writes location records on NFC tags.

The session controller drives a reader transport through one tag
interaction at a time. The PN532 transport is only imported when the
controller is initialized without an explicit transport.
"""

# Import public interface functions from controller
from .nfc_controller import (
    initialize,
    shutdown,
    perform_action,
    perform_action_sync
)

from .actions import NFCAction, ReadLocation, SetupLocation, AddVisitor
from .models import Location, Visitor, LocationDecodeError
from .session_controller import ActionResult, TagSessionController
from .transport import (
    TagTransport,
    ReaderSession,
    NDEFTag,
    SessionDelegate,
    NDEFStatus,
    InvalidationCode,
    InvalidationReason
)

# Import exceptions for external use
from .exceptions import (
    NFCError,
    NFCHardwareError,
    NFCNoTagError,
    NFCReadError,
    NFCWriteError,
    NFCTagNotWritableError,
    NFCUnsupportedTagError,
    NFCDecodeError,
    NFCUnavailableError,
    NFCInvalidatedError,
    NFCInvalidPayloadSizeError,
    NFCBusyError,
    NFCTimeoutError
)

__all__ = [
    # Main controller functions
    'initialize',
    'shutdown',
    'perform_action',
    'perform_action_sync',

    # Actions and records
    'NFCAction',
    'ReadLocation',
    'SetupLocation',
    'AddVisitor',
    'Location',
    'Visitor',
    'LocationDecodeError',
    'ActionResult',
    'TagSessionController',

    # Transport contract
    'TagTransport',
    'ReaderSession',
    'NDEFTag',
    'SessionDelegate',
    'NDEFStatus',
    'InvalidationCode',
    'InvalidationReason',

    # Exceptions
    'NFCError',
    'NFCHardwareError',
    'NFCNoTagError',
    'NFCReadError',
    'NFCWriteError',
    'NFCTagNotWritableError',
    'NFCUnsupportedTagError',
    'NFCDecodeError',
    'NFCUnavailableError',
    'NFCInvalidatedError',
    'NFCInvalidPayloadSizeError',
    'NFCBusyError',
    'NFCTimeoutError'
]
