"""
tag_processor.py - Functions for processing NFC tag data.

Encodes and decodes NDEF messages, and wraps them in the TLV blocks that
Type 2 tags (NTAG21x) store in their user memory.
"""

import logging
from typing import List, Optional

from .exceptions import NFCDecodeError

# Create logger
logger = logging.getLogger(__name__)

# NDEF Type Name Format values
NDEF_TNF_EMPTY = 0x00
NDEF_TNF_WELL_KNOWN = 0x01
NDEF_TNF_MIME_MEDIA = 0x02
NDEF_TNF_URI = 0x03
NDEF_TNF_EXTERNAL = 0x04
NDEF_TNF_UNKNOWN = 0x05
NDEF_TNF_UNCHANGED = 0x06

# NDEF record header flags
NDEF_FLAG_MB = 0x80  # Message Begin
NDEF_FLAG_ME = 0x40  # Message End
NDEF_FLAG_CF = 0x20  # Chunk Flag
NDEF_FLAG_SR = 0x10  # Short Record
NDEF_FLAG_IL = 0x08  # ID Length present
NDEF_TNF_MASK = 0x07

# Type 2 Tag TLV block types
TLV_NULL = 0x00
TLV_NDEF_MESSAGE = 0x03
TLV_TERMINATOR = 0xFE


def format_uid(raw_uid):
    """
    Format raw UID bytes to a standardized string format.

    Args:
        raw_uid (bytes): Raw UID from NFC reader

    Returns:
        str: Formatted UID string (e.g., "AA:BB:CC:DD"), None for an empty UID
    """
    if not raw_uid:
        return None

    uid_hex = bytes(raw_uid).hex().upper()
    return ':'.join(uid_hex[i:i+2] for i in range(0, len(uid_hex), 2))


class NDEFRecord:
    """
    A single NDEF record.

    Attributes:
        tnf (int): Type Name Format
        type (bytes): Record type
        identifier (bytes): Record identifier
        payload (bytes): Application data
    """

    def __init__(self, tnf=NDEF_TNF_UNKNOWN, type=b'', identifier=b'', payload=b''):
        if not 0 <= tnf <= NDEF_TNF_MASK:
            raise ValueError(f"Invalid TNF value: {tnf}")
        self.tnf = tnf
        self.type = bytes(type)
        self.identifier = bytes(identifier)
        self.payload = bytes(payload)

    def encode(self, message_begin=True, message_end=True):
        """
        Encode the record with its header.

        Args:
            message_begin (bool): Set the MB flag (first record of a message)
            message_end (bool): Set the ME flag (last record of a message)

        Returns:
            bytes: Encoded record
        """
        header = self.tnf
        if message_begin:
            header |= NDEF_FLAG_MB
        if message_end:
            header |= NDEF_FLAG_ME

        # Short Record flag for payloads < 256 bytes
        short_record = len(self.payload) < 256
        if short_record:
            header |= NDEF_FLAG_SR
        if self.identifier:
            header |= NDEF_FLAG_IL

        record = bytes([header, len(self.type)])
        if short_record:
            record += bytes([len(self.payload)])
        else:
            record += len(self.payload).to_bytes(4, byteorder='big')
        if self.identifier:
            record += bytes([len(self.identifier)])

        return record + self.type + self.identifier + self.payload

    def __eq__(self, other):
        if not isinstance(other, NDEFRecord):
            return NotImplemented
        return (self.tnf, self.type, self.identifier, self.payload) == \
            (other.tnf, other.type, other.identifier, other.payload)

    def __repr__(self):
        return f"NDEFRecord(tnf={self.tnf}, type={self.type!r}, identifier={self.identifier!r}, payload={len(self.payload)} bytes)"


class NDEFMessage:
    """An ordered sequence of NDEF records."""

    def __init__(self, records: Optional[List[NDEFRecord]] = None):
        self.records = list(records or [])

    def encode(self):
        """
        Encode every record into a single NDEF message.

        Returns:
            bytes: Encoded message, empty for a message without records
        """
        last = len(self.records) - 1
        return b''.join(
            record.encode(message_begin=(i == 0), message_end=(i == last))
            for i, record in enumerate(self.records)
        )

    @property
    def length(self):
        """Size of the encoded message in bytes, as compared with tag capacity."""
        return len(self.encode())

    @classmethod
    def decode(cls, data):
        """
        Parse an encoded NDEF message.

        Args:
            data (bytes): Raw NDEF message (without TLV wrapping)

        Returns:
            NDEFMessage: The parsed message

        Raises:
            NFCDecodeError: If the data is not a well-formed NDEF message
        """
        data = bytes(data)
        records = []
        offset = 0

        while offset < len(data):
            try:
                header = data[offset]
                if header & NDEF_FLAG_CF:
                    raise NFCDecodeError("Chunked NDEF records are not supported")

                type_length = data[offset + 1]
                offset += 2

                if header & NDEF_FLAG_SR:
                    payload_length = data[offset]
                    offset += 1
                else:
                    if offset + 4 > len(data):
                        raise NFCDecodeError("Truncated NDEF record length")
                    payload_length = int.from_bytes(data[offset:offset+4], byteorder='big')
                    offset += 4

                id_length = 0
                if header & NDEF_FLAG_IL:
                    id_length = data[offset]
                    offset += 1
            except IndexError:
                raise NFCDecodeError("Truncated NDEF record header")

            end = offset + type_length + id_length + payload_length
            if end > len(data):
                raise NFCDecodeError("NDEF record extends past the end of the message")

            record_type = data[offset:offset + type_length]
            offset += type_length
            identifier = data[offset:offset + id_length]
            offset += id_length
            payload = data[offset:end]
            offset = end

            records.append(NDEFRecord(header & NDEF_TNF_MASK, record_type, identifier, payload))
            logger.debug(f"Parsed NDEF record: TNF={header & NDEF_TNF_MASK}, payload={payload_length} bytes")

            # If this was the end of the message, stop parsing
            if header & NDEF_FLAG_ME:
                break

        return cls(records)

    def __eq__(self, other):
        if not isinstance(other, NDEFMessage):
            return NotImplemented
        return self.records == other.records

    def __repr__(self):
        return f"NDEFMessage(records={self.records!r})"


def tlv_overhead(message_length):
    """
    Bytes a Type 2 tag needs around an NDEF message of the given size.

    Includes the TLV type, its 1- or 3-byte length and the terminator TLV.
    """
    return (2 if message_length < 255 else 4) + 1


def wrap_tlv(ndef_message):
    """
    Wrap an encoded NDEF message in an NDEF TLV followed by a terminator.

    Args:
        ndef_message (bytes): Encoded NDEF message

    Returns:
        bytes: TLV data ready to be written from the first user page
    """
    message_length = len(ndef_message)

    if message_length < 255:
        # Standard 1-byte length format
        tlv_length = bytes([message_length])
    else:
        # 3-byte length format for lengths >= 255
        tlv_length = bytes([0xFF]) + message_length.to_bytes(2, byteorder='big')

    return bytes([TLV_NDEF_MESSAGE]) + tlv_length + bytes(ndef_message) + bytes([TLV_TERMINATOR])


def ndef_tlv_extent(data):
    """
    Find how much user memory holds the NDEF TLV.

    Args:
        data (bytes): The first bytes of user memory starting at page 4

    Returns:
        int or None: Offset just past the NDEF TLV value (or past the
        terminator on a tag without one), None if ``data`` ends before
        that can be known
    """
    data = bytes(data)
    offset = 0

    while offset < len(data):
        tlv_type = data[offset]

        if tlv_type == TLV_NULL:
            offset += 1
            continue
        if tlv_type == TLV_TERMINATOR:
            return offset + 1

        if offset + 1 >= len(data):
            return None
        length = data[offset + 1]
        header_size = 2
        if length == 0xFF:
            if offset + 4 > len(data):
                return None
            length = int.from_bytes(data[offset+2:offset+4], byteorder='big')
            header_size = 4

        value_end = offset + header_size + length
        if tlv_type == TLV_NDEF_MESSAGE:
            return value_end
        offset = value_end

    return None


def unwrap_tlv(data):
    """
    Extract the NDEF message from Type 2 tag user memory.

    Args:
        data (bytes): User memory starting at page 4

    Returns:
        bytes or None: The NDEF message, None if the tag holds no message

    Raises:
        NFCDecodeError: If the NDEF TLV is truncated
    """
    data = bytes(data)
    offset = 0

    while offset < len(data):
        tlv_type = data[offset]

        if tlv_type == TLV_NULL:
            offset += 1
            continue
        if tlv_type == TLV_TERMINATOR:
            return None

        if offset + 1 >= len(data):
            raise NFCDecodeError("Truncated TLV header")

        length = data[offset + 1]
        header_size = 2
        if length == 0xFF:
            if offset + 4 > len(data):
                raise NFCDecodeError("Truncated TLV length")
            length = int.from_bytes(data[offset+2:offset+4], byteorder='big')
            header_size = 4

        value_start = offset + header_size
        value_end = value_start + length

        if tlv_type == TLV_NDEF_MESSAGE:
            if length == 0:
                return None
            if value_end > len(data):
                raise NFCDecodeError("NDEF TLV extends past the end of tag memory")
            return data[value_start:value_end]

        # Lock control, memory control and proprietary TLVs are skipped
        offset = value_end

    return None
