"""
nfc_controller.py - Main NFC controller interface for other application modules.

Holds the application's single tag session controller and exposes the
location actions as plain module functions.
"""

import logging
import threading

from .exceptions import NFCHardwareError, NFCTimeoutError
from .session_controller import ActionResult, TagSessionController

# Configure logger
logger = logging.getLogger(__name__)

# Global controller instance (singleton pattern)
_controller = None
_controller_lock = threading.Lock()


def initialize(transport=None, nfc_config=None):
    """
    Initialize the NFC controller.

    Args:
        transport (TagTransport, optional): Reader transport to use,
            defaults to a PN532 transport built from configuration
        nfc_config (dict, optional): The "nfc" configuration section

    Returns:
        bool: True if the controller is ready (the reader may still be unavailable)
    """
    global _controller

    with _controller_lock:
        if _controller is not None:
            logger.debug("NFC controller already initialized")
            return True

        if transport is None:
            if nfc_config is None:
                from ...config import CONFIG
                nfc_config = CONFIG["nfc"]

            from .hardware_interface import PN532Transport
            transport = PN532Transport(
                i2c_address=nfc_config.get("i2c_address", 0x24),
                poll_timeout=nfc_config.get("poll_timeout", 0.1),
                session_timeout=nfc_config.get("session_timeout", 60),
            )

        _controller = TagSessionController(transport)

    if transport.is_scanning_available():
        logger.info("NFC controller initialized successfully")
    else:
        logger.warning("NFC controller initialized, but no reader is available")
    return True


def shutdown():
    """
    Clean shutdown of the NFC controller and its reader.

    Returns:
        bool: True if shutdown successful, False if errors occurred
    """
    global _controller

    with _controller_lock:
        if _controller is None:
            logger.debug("NFC controller already shut down or not initialized")
            return True

        try:
            _controller.transport.close()
            logger.info("NFC controller shut down successfully")
            return True
        except Exception as e:
            logger.error(f"Error during NFC shutdown: {e}")
            return False
        finally:
            _controller = None


def _get_controller():
    with _controller_lock:
        if _controller is None:
            error_msg = "NFC controller not initialized"
            logger.error(error_msg)
            raise NFCHardwareError(error_msg)
        return _controller


def perform_action(action, completion=None):
    """
    Start a tag action on the shared controller.

    Args:
        action (NFCAction): ReadLocation, SetupLocation or AddVisitor
        completion (callable, optional): Called once with an ActionResult

    Raises:
        NFCHardwareError: If the NFC controller is not initialized
    """
    _get_controller().perform_action(action, completion)


def perform_action_sync(action, timeout=75):
    """
    Run a tag action and wait for its result.

    Args:
        action (NFCAction): ReadLocation, SetupLocation or AddVisitor
        timeout (float): Seconds to wait for the tag interaction

    Returns:
        ActionResult: The outcome. A session closed by the user without an
        outcome is reported as NFCTimeoutError once ``timeout`` elapses.
    """
    done = threading.Event()
    results = []

    def on_complete(result):
        results.append(result)
        done.set()

    perform_action(action, on_complete)

    if not done.wait(timeout):
        logger.warning(f"No result for {type(action).__name__} after {timeout} seconds")
        return ActionResult.failure(NFCTimeoutError())
    return results[0]
