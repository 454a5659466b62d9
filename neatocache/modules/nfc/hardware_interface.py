"""
hardware_interface.py - PN532 reader transport using the Adafruit PN532 library.

Drives a PN532 NFC HAT over I2C and exposes it as a TagTransport for
NTAG21x (NFC Forum Type 2) tags. Polling runs on one background thread per
reader session and every delegate callback is made from that thread.
"""

import logging
import threading
import time

from .exceptions import (
    NFCHardwareError, NFCNoTagError, NFCReadError, NFCWriteError,
    NFCTagNotWritableError, NFCInvalidPayloadSizeError
)
from .tag_processor import (
    NDEFMessage, format_uid, ndef_tlv_extent, tlv_overhead, unwrap_tlv, wrap_tlv
)
from .transport import (
    InvalidationCode, InvalidationReason, NDEFStatus, NDEFTag,
    ReaderSession, TagTransport
)

# Create logger
logger = logging.getLogger(__name__)

# NTAG21x memory layout
PAGE_SIZE = 4
CC_PAGE = 3
FIRST_USER_PAGE = 4
CC_MAGIC = 0xE1


def max_message_length(data_area_size):
    """
    Largest NDEF message that fits a Type 2 data area once TLV wrapped.

    Args:
        data_area_size (int): Size of the data area from the Capability Container

    Returns:
        int: Capacity in bytes
    """
    short_form = data_area_size - tlv_overhead(0)
    if short_form < 255:
        return max(short_form, 0)
    return max(data_area_size - tlv_overhead(255), 254)


class PN532Transport(TagTransport):
    """
    NFC reader transport for a PN532 on I2C.

    Attributes:
        i2c_address (int): I2C device address
        poll_timeout (float): Seconds each passive target poll waits
        session_timeout (float): Seconds before an open session gives up
    """

    def __init__(self, i2c_address=0x24, poll_timeout=0.1, session_timeout=60):
        self.i2c_address = i2c_address
        self.poll_timeout = poll_timeout
        self.session_timeout = session_timeout
        self._pn532 = None
        self._i2c = None
        self._connected = False
        self._lock = threading.RLock()
        logger.info(f"Initializing PN532 transport at I2C address 0x{i2c_address:02X}")

    def connect(self):
        """
        Establish connection to the NFC hardware.

        Returns:
            bool: True if connected successfully
        """
        with self._lock:
            if self._connected:
                return True

            try:
                # Board libraries refuse to import off supported hardware
                import board
                import busio
                from adafruit_pn532.i2c import PN532_I2C

                self._i2c = busio.I2C(board.SCL, board.SDA)
                self._pn532 = PN532_I2C(self._i2c, address=self.i2c_address, debug=False)

                ic, ver, rev, support = self._pn532.firmware_version
                logger.info(f"Connected to PN532 NFC reader: IC={ic}, Version=v{ver}.{rev}, Support={support}")

                # Configure to read ISO14443A tags
                self._pn532.SAM_configuration()
                self._connected = True
                return True

            except Exception as e:
                logger.error(f"Error connecting to NFC hardware: {str(e)}")
                self.disconnect()
                return False

    def disconnect(self):
        """Close connection to NFC hardware."""
        with self._lock:
            try:
                if self._i2c:
                    self._i2c.deinit()
                    logger.info("Disconnected from NFC hardware")
            except Exception as e:
                logger.error(f"Error disconnecting from NFC hardware: {str(e)}")
            finally:
                self._pn532 = None
                self._i2c = None
                self._connected = False

    def close(self):
        self.disconnect()

    def is_scanning_available(self):
        return self.connect()

    def begin_session(self, delegate, alert_message, invalidate_after_first_read=True):
        if not self.connect():
            raise NFCHardwareError("Not connected to NFC hardware")
        return PN532ReaderSession(
            self, delegate, alert_message,
            invalidate_after_first_read=invalidate_after_first_read,
            session_timeout=self.session_timeout
        )

    def poll(self):
        """
        Poll for tag presence.

        Returns:
            bytes or None: Tag UID if detected, None otherwise

        Raises:
            NFCHardwareError: If the reader stops responding
        """
        with self._lock:
            if not self._connected or not self._pn532:
                raise NFCHardwareError("Not connected to NFC hardware")
            try:
                # read_passive_target will return None if no card is available
                uid = self._pn532.read_passive_target(timeout=self.poll_timeout)
            except Exception as e:
                raise NFCHardwareError(f"Error polling for NFC tag: {str(e)}")

        return bytes(uid) if uid is not None else None

    def read_page(self, page):
        """
        Read one 4-byte page from the selected NTAG.

        Raises:
            NFCReadError: If reading fails
        """
        with self._lock:
            if not self._connected or not self._pn532:
                raise NFCHardwareError("Not connected to NFC hardware")
            try:
                data = self._pn532.ntag2xx_read_block(page)
            except Exception as e:
                raise NFCReadError(f"Error reading page {page}: {str(e)}")

        if not data or len(data) < PAGE_SIZE:
            raise NFCReadError(f"Invalid data read from page {page}")
        return bytes(data[:PAGE_SIZE])

    def write_page(self, page, data):
        """
        Write one 4-byte page to the selected NTAG.

        Raises:
            NFCWriteError: If writing fails
        """
        if len(data) != PAGE_SIZE:
            raise NFCWriteError("Data length must be exactly 4 bytes")

        with self._lock:
            if not self._connected or not self._pn532:
                raise NFCHardwareError("Not connected to NFC hardware")
            try:
                success = self._pn532.ntag2xx_write_block(page, data)
            except Exception as e:
                raise NFCWriteError(f"Error writing page {page}: {str(e)}")

        if not success:
            raise NFCWriteError(f"Failed to write data to page {page}")


class PN532ReaderSession(ReaderSession):
    """Reader session polling a PN532 from a background thread."""

    def __init__(self, transport, delegate, alert_message="",
                 invalidate_after_first_read=True, session_timeout=60):
        self._alert_message = ""
        super().__init__(delegate, alert_message, invalidate_after_first_read)
        self._transport = transport
        self._session_timeout = session_timeout
        self._invalidated = threading.Event()
        self._polling = threading.Event()
        self._end_lock = threading.Lock()
        self._thread = None
        self._current_uid = None

    @property
    def alert_message(self):
        return self._alert_message

    @alert_message.setter
    def alert_message(self, text):
        self._alert_message = text
        if text:
            logger.info(f"Reader prompt: {text}")

    @property
    def is_invalidated(self):
        return self._invalidated.is_set()

    def begin(self):
        if self._thread is not None:
            return
        self._polling.set()
        self._thread = threading.Thread(target=self._run, name="pn532-session", daemon=True)
        self._thread.start()

    def invalidate(self, error_message=None):
        if error_message:
            self.alert_message = error_message
        self._end(None)

    def restart_polling(self):
        if self.is_invalidated:
            return
        self._current_uid = None
        self._polling.set()

    def connect(self, tag):
        if self.is_invalidated:
            raise NFCNoTagError("Reader session is no longer active")

        uid = self._transport.poll()
        if uid != tag.uid:
            raise NFCNoTagError("Tag connection lost")
        self._current_uid = uid
        logger.debug(f"Connected to tag {format_uid(uid)}")

    def _run(self):
        deadline = time.monotonic() + self._session_timeout

        while not self.is_invalidated:
            if time.monotonic() >= deadline:
                self._end(InvalidationReason(InvalidationCode.SESSION_TIMEOUT, "Session timeout"))
                return

            if not self._polling.is_set():
                self._invalidated.wait(self._transport.poll_timeout)
                continue

            try:
                uid = self._transport.poll()
            except NFCHardwareError as e:
                logger.error(str(e))
                self._end(InvalidationReason(InvalidationCode.UNEXPECTED, str(e)))
                return

            if uid is None:
                continue

            # Wait for restart_polling() before looking for the next tag
            self._polling.clear()
            logger.debug(f"Tag detected with UID: {format_uid(uid)}")

            try:
                self.delegate.on_tags_detected(self, [NTAG2xxTag(self._transport, uid)])
            except Exception as e:
                logger.exception(f"Error handling detected tag: {e}")
                self._end(InvalidationReason(InvalidationCode.UNEXPECTED, str(e)))
                return

            if self.invalidate_after_first_read:
                self._end(InvalidationReason(InvalidationCode.FIRST_TAG_READ, "First tag read"))
                return

    def _end(self, reason):
        with self._end_lock:
            if self._invalidated.is_set():
                return
            self._invalidated.set()
            self._polling.clear()

        logger.debug(f"Reader session invalidated: {reason!r}")
        self.delegate.on_invalidated(self, reason)


class NTAG2xxTag(NDEFTag):
    """An NTAG213/215/216 (or other Type 2) tag in the PN532's field."""

    def __init__(self, transport, uid):
        self._transport = transport
        self.uid = uid

    def _read_capability_container(self):
        cc = self._transport.read_page(CC_PAGE)
        if cc[0] != CC_MAGIC:
            return None
        return cc

    def query_ndef_status(self):
        cc = self._read_capability_container()
        if cc is None:
            return NDEFStatus.NOT_SUPPORTED, 0

        data_area_size = cc[2] * 8
        # Low nibble of the access byte: 0x0 grants write access
        status = NDEFStatus.READ_WRITE if cc[3] & 0x0F == 0 else NDEFStatus.READ_ONLY
        return status, max_message_length(data_area_size)

    def read_ndef(self):
        cc = self._read_capability_container()
        if cc is None:
            raise NFCReadError("Tag is not NDEF formatted")

        data_area_size = cc[2] * 8
        data = b''
        extent = None

        # Stop at the end of the NDEF TLV instead of reading the whole data area
        while len(data) < data_area_size and (extent is None or len(data) < extent):
            data += self._transport.read_page(FIRST_USER_PAGE + len(data) // PAGE_SIZE)
            if extent is None:
                extent = ndef_tlv_extent(data)

        logger.debug(f"Read {len(data)} bytes of user memory from tag {format_uid(self.uid)}")
        ndef_bytes = unwrap_tlv(data[:data_area_size])
        if ndef_bytes is None:
            return None
        return NDEFMessage.decode(ndef_bytes)

    def write_ndef(self, message):
        status, capacity = self.query_ndef_status()
        if status != NDEFStatus.READ_WRITE:
            raise NFCTagNotWritableError()
        if message.length > capacity:
            raise NFCInvalidPayloadSizeError(length=message.length, capacity=capacity)

        data = wrap_tlv(message.encode())
        if len(data) % PAGE_SIZE:
            data += b'\x00' * (PAGE_SIZE - len(data) % PAGE_SIZE)

        pages = [data[i:i + PAGE_SIZE] for i in range(0, len(data), PAGE_SIZE)]
        # Page 4 carries the TLV header and is written last
        for index in list(range(1, len(pages))) + [0]:
            self._transport.write_page(FIRST_USER_PAGE + index, pages[index])

        logger.debug(f"Wrote {len(data)} bytes of NDEF TLV data to tag {format_uid(self.uid)}")
