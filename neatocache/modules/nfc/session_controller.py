"""
session_controller.py - Runs one tag action from scan to result.

The controller opens a reader session, waits for a single tag, checks that
it is NDEF writable and then reads, sets up or extends the location stored
on it. Each call to ``perform_action`` ends with at most one call to its
completion, made from the transport's callback thread.

Only one action may be in flight. A second ``perform_action`` while a
session is open fails immediately with NFCBusyError.
"""

import logging
import threading

from .actions import NFCAction, ReadLocation, SetupLocation, AddVisitor
from .exceptions import (
    NFCError, NFCBusyError, NFCDecodeError, NFCInvalidatedError,
    NFCInvalidPayloadSizeError, NFCTagNotWritableError, NFCUnavailableError,
    NFCUnsupportedTagError
)
from .models import Location, Visitor
from .tag_processor import NDEFMessage, NDEFRecord, NDEF_TNF_UNKNOWN
from .transport import NDEFStatus, SessionDelegate

# Configure logger
logger = logging.getLogger(__name__)

# Seconds to wait before polling again after several tags were seen
RETRY_POLL_DELAY = 0.5

TOO_MANY_TAGS_MESSAGE = "There are too many tags present. Remove all and then try again."
READ_SUCCESS_MESSAGE = "Read tag."
SETUP_SUCCESS_MESSAGE = "Successfully setup location."
VISITOR_SUCCESS_MESSAGE = "Successfully added visitor."


class ActionResult:
    """
    Outcome handed to a completion: a location on success, an error otherwise.
    """

    def __init__(self, location=None, error=None):
        self.location = location
        self.error = error

    @classmethod
    def success(cls, location):
        return cls(location=location)

    @classmethod
    def failure(cls, error):
        return cls(error=error)

    @property
    def ok(self):
        return self.error is None

    def get(self):
        """
        Return the location or raise the error.

        Raises:
            NFCError: The error the action failed with
        """
        if self.error is not None:
            raise self.error
        return self.location

    def to_dict(self):
        if self.ok:
            return {'success': True, 'location': self.location.to_dict()}
        return {
            'success': False,
            'error': {'type': type(self.error).__name__, 'message': str(self.error)}
        }

    def __repr__(self):
        if self.ok:
            return f"ActionResult.success({self.location!r})"
        return f"ActionResult.failure({self.error!r})"


class _Operation:
    """State of the one action in flight."""

    def __init__(self, action, completion):
        self.action = action
        self.completion = completion
        self.session = None
        self.error = None
        self.finished = False


class _SessionEnded(Exception):
    """The session went away while a tag sequence was running."""
    pass


class TagSessionController(SessionDelegate):
    """
    Coordinates reader sessions for location actions.

    Args:
        transport (TagTransport): Provider of reader sessions
    """

    def __init__(self, transport):
        self.transport = transport
        self._operation = None
        self._lock = threading.Lock()

    def perform_action(self, action, completion=None):
        """
        Start a tag action.

        Args:
            action (NFCAction): ReadLocation, SetupLocation or AddVisitor
            completion (callable, optional): Called with an ActionResult
        """
        if not isinstance(action, NFCAction):
            raise TypeError(f"Unsupported action: {action!r}")

        if not self.transport.is_scanning_available():
            logger.warning("NFC is not available on this device")
            self._notify(completion, ActionResult.failure(NFCUnavailableError()))
            return

        operation = _Operation(action, completion)
        with self._lock:
            busy = self._operation is not None
            if not busy:
                self._operation = operation

        if busy:
            logger.warning(f"Rejected {type(action).__name__}: another tag action is in progress")
            self._notify(completion, ActionResult.failure(NFCBusyError()))
            return

        try:
            operation.session = self.transport.begin_session(
                self, action.alert_message, invalidate_after_first_read=False
            )
        except NFCError as e:
            logger.error(f"Could not start reader session: {e}")
            with self._lock:
                self._operation = None
            self._finish(operation, ActionResult.failure(e))
            return

        logger.info(f"Starting {type(action).__name__} session")
        operation.session.begin()

    # SessionDelegate

    def on_tags_detected(self, session, tags):
        operation = self._current(session)
        if operation is None:
            logger.debug("Ignoring tags from a session that is no longer active")
            return

        if len(tags) != 1:
            logger.info(f"Detected {len(tags)} tags, waiting for a single tag")
            session.alert_message = TOO_MANY_TAGS_MESSAGE
            timer = threading.Timer(RETRY_POLL_DELAY, self._restart_polling, args=(session,))
            timer.daemon = True
            timer.start()
            return

        tag = tags[0]
        try:
            session.connect(tag)
            self._check_active(operation)

            status, capacity = tag.query_ndef_status()
            self._check_active(operation)
            logger.debug(f"Tag status {status.name}, capacity {capacity} bytes")

            if status == NDEFStatus.NOT_SUPPORTED:
                raise NFCUnsupportedTagError()
            if status == NDEFStatus.READ_ONLY:
                raise NFCTagNotWritableError()

            self._dispatch(operation, tag)
        except _SessionEnded:
            logger.debug("Session ended during tag interaction")
        except NFCError as e:
            self._handle_error(operation, e)

    def on_invalidated(self, session, reason):
        with self._lock:
            operation = self._operation
            if operation is None or operation.session is not session:
                return
            self._operation = None

        if reason is not None and not reason.is_expected:
            logger.warning(f"Reader session invalidated: {reason.description}")
            self._finish(operation, ActionResult.failure(NFCInvalidatedError(reason.description)))
        elif operation.error is not None:
            self._finish(operation, ActionResult.failure(operation.error))
        else:
            logger.debug(f"Reader session closed ({reason.code.name if reason else 'by application'})")
            operation.finished = True

    # Tag sequences

    def _dispatch(self, operation, tag):
        action = operation.action
        if isinstance(action, ReadLocation):
            self._read_location(operation, tag)
        elif isinstance(action, SetupLocation):
            self._create_location(operation, tag, Location(action.location_name))
        elif isinstance(action, AddVisitor):
            self._add_visitor(operation, tag, Visitor(action.visitor_name))
        else:
            raise TypeError(f"Unsupported action: {action!r}")

    def _read_location(self, operation, tag, alert_message=READ_SUCCESS_MESSAGE):
        message = tag.read_ndef()
        self._check_active(operation)

        location = Location.from_message(message)
        if location is None:
            raise NFCDecodeError()

        logger.info(f"Read location '{location.name}' with {len(location.visitors)} visitors")
        self._finish(operation, ActionResult.success(location))
        operation.session.alert_message = alert_message
        operation.session.invalidate()

    def _read_silently(self, operation, tag):
        message = tag.read_ndef()
        self._check_active(operation)
        return message

    def _create_location(self, operation, tag, location):
        # Confirms the tag answers reads before it is overwritten
        self._read_silently(operation, tag)
        self._update_location(operation, tag, location)

    def _add_visitor(self, operation, tag, visitor):
        location = Location.from_message(self._read_silently(operation, tag))
        if location is None:
            raise NFCDecodeError()
        self._update_location(operation, tag, location, visitor)

    def _update_location(self, operation, tag, location, visitor=None):
        alert_message = SETUP_SUCCESS_MESSAGE
        if visitor is not None:
            location = location.with_visitor(visitor)
            alert_message = VISITOR_SUCCESS_MESSAGE

        try:
            payload = location.to_json()
        except (TypeError, ValueError) as e:
            logger.error(f"Could not encode location: {e}")
            raise NFCInvalidatedError("Bad data")

        message = NDEFMessage([NDEFRecord(NDEF_TNF_UNKNOWN, b'', b'', payload)])

        _status, capacity = tag.query_ndef_status()
        self._check_active(operation)
        if message.length > capacity:
            raise NFCInvalidPayloadSizeError(length=message.length, capacity=capacity)

        tag.write_ndef(message)
        self._check_active(operation)
        logger.info(f"Wrote location '{location.name}' ({message.length}/{capacity} bytes)")

        if operation.completion is not None:
            # Report what the tag now holds, not the in-memory copy
            self._read_location(operation, tag, alert_message)
        else:
            operation.session.alert_message = alert_message
            operation.session.invalidate()

    # Helpers

    def _handle_error(self, operation, error):
        logger.warning(f"{type(operation.action).__name__} failed: {error}")
        if operation.error is None:
            operation.error = error
        operation.session.alert_message = str(error)
        operation.session.invalidate()

    def _restart_polling(self, session):
        if self._current(session) is not None and not session.is_invalidated:
            session.restart_polling()

    def _current(self, session):
        with self._lock:
            operation = self._operation
        if operation is None or operation.session is not session:
            return None
        return operation

    def _check_active(self, operation):
        if operation.session.is_invalidated or self._current(operation.session) is None:
            raise _SessionEnded()

    def _finish(self, operation, result):
        if operation.finished:
            return
        operation.finished = True
        self._notify(operation.completion, result)

    @staticmethod
    def _notify(completion, result):
        if completion is None:
            return
        try:
            completion(result)
        except Exception as e:
            logger.error(f"Error in tag action completion: {e}")
