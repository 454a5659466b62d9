#!/usr/bin/env python3
"""
test_tag_processor.py - Tests for NDEF/TLV processing and location records.
"""

import json
import unittest

from neatocache.modules.nfc.exceptions import NFCDecodeError
from neatocache.modules.nfc.models import Location, LocationDecodeError, Visitor
from neatocache.modules.nfc.tag_processor import (
    NDEFMessage, NDEFRecord, NDEF_TNF_UNKNOWN, NDEF_TNF_WELL_KNOWN,
    format_uid, ndef_tlv_extent, tlv_overhead, unwrap_tlv, wrap_tlv
)
from neatocache.utils.exceptions import ValidationError


class TestNDEFRecords(unittest.TestCase):
    """NDEF record framing."""

    def test_short_unknown_record_layout(self):
        record = NDEFRecord(NDEF_TNF_UNKNOWN, b'', b'', b'{}')

        # MB | ME | SR | TNF unknown, no type, 2 byte payload
        self.assertEqual(record.encode(), bytes([0xD5, 0x00, 0x02]) + b'{}')
        self.assertEqual(NDEFMessage([record]).length, 5)

    def test_long_record_uses_four_byte_length(self):
        payload = b'x' * 300
        encoded = NDEFRecord(NDEF_TNF_UNKNOWN, b'', b'', payload).encode()

        self.assertEqual(encoded[0] & 0x10, 0)
        self.assertEqual(encoded[2:6], (300).to_bytes(4, 'big'))
        self.assertEqual(len(encoded), 6 + 300)

    def test_identifier_sets_il_flag(self):
        encoded = NDEFRecord(NDEF_TNF_WELL_KNOWN, b'T', b'id', b'\x02enhi').encode()
        self.assertTrue(encoded[0] & 0x08)
        self.assertEqual(encoded[3], 2)

    def test_multi_record_message_flags(self):
        message = NDEFMessage([
            NDEFRecord(NDEF_TNF_UNKNOWN, b'', b'', b'a'),
            NDEFRecord(NDEF_TNF_UNKNOWN, b'', b'', b'b'),
        ])
        encoded = message.encode()

        self.assertEqual(encoded[0] & 0xC0, 0x80)
        self.assertEqual(encoded[4] & 0xC0, 0x40)
        self.assertEqual(NDEFMessage.decode(encoded), message)

    def test_decode_rejects_truncated_record(self):
        with self.assertRaises(NFCDecodeError):
            NDEFMessage.decode(bytes([0xD5, 0x00, 0x10]) + b'short')

    def test_decode_rejects_chunked_records(self):
        with self.assertRaises(NFCDecodeError):
            NDEFMessage.decode(bytes([0xB5, 0x00, 0x01]) + b'a')

    def test_invalid_tnf(self):
        with self.assertRaises(ValueError):
            NDEFRecord(tnf=9)


class TestTLV(unittest.TestCase):
    """Type 2 tag TLV wrapping."""

    def test_short_tlv(self):
        self.assertEqual(wrap_tlv(b'abc'), b'\x03\x03abc\xfe')
        self.assertEqual(tlv_overhead(3), 3)

    def test_long_tlv_uses_three_byte_length(self):
        data = wrap_tlv(b'x' * 300)
        self.assertEqual(data[:4], b'\x03\xff\x01\x2c')
        self.assertEqual(data[-1], 0xFE)
        self.assertEqual(tlv_overhead(300), 5)
        self.assertEqual(unwrap_tlv(data + b'\x00' * 8), b'x' * 300)

    def test_unwrap_skips_null_and_lock_control_tlvs(self):
        memory = b'\x00\x01\x03\xa0\x0c\x34' + wrap_tlv(b'hello') + b'\x00\x00'
        self.assertEqual(unwrap_tlv(memory), b'hello')

    def test_blank_tag_memory_has_no_message(self):
        self.assertIsNone(unwrap_tlv(b'\x03\x00\xfe\x00'))
        self.assertIsNone(unwrap_tlv(b'\xfe\x00\x00\x00'))
        self.assertIsNone(unwrap_tlv(b'\x00' * 16))

    def test_ndef_tlv_extent(self):
        self.assertEqual(ndef_tlv_extent(wrap_tlv(b'abc') + b'\x00' * 8), 5)
        self.assertEqual(ndef_tlv_extent(b'\x00\x01\x03\xa0\x0c\x34\x03\x02'), 10)
        self.assertEqual(ndef_tlv_extent(b'\x03\xff\x01\x2c'), 304)
        self.assertEqual(ndef_tlv_extent(b'\x00\xfe\x00\x00'), 2)
        # Header not complete yet
        self.assertIsNone(ndef_tlv_extent(b'\x00\x00\x00\x03'))
        self.assertIsNone(ndef_tlv_extent(b'\x03\xff\x01'))

    def test_truncated_tlv(self):
        with self.assertRaises(NFCDecodeError):
            unwrap_tlv(b'\x03\x10abc')

    def test_format_uid(self):
        self.assertEqual(format_uid(b'\x04\xa1\xb2\xc3'), "04:A1:B2:C3")
        self.assertIsNone(format_uid(b''))


class TestLocationRecords(unittest.TestCase):
    """Location JSON records."""

    def test_json_layout(self):
        location = Location("Cafe", [Visitor("Bob")])
        self.assertEqual(json.loads(location.to_json()),
                         {"name": "Cafe", "visitors": [{"name": "Bob"}]})

    def test_round_trip_preserves_visitor_order(self):
        location = Location("Corner Café", [Visitor("Zoë"), Visitor("Ann"), Visitor("Bob")])
        self.assertEqual(Location.from_json(location.to_json()), location)

    def test_from_message_uses_first_record(self):
        message = NDEFMessage([
            NDEFRecord(NDEF_TNF_UNKNOWN, b'', b'', Location("Cafe").to_json()),
            NDEFRecord(NDEF_TNF_UNKNOWN, b'', b'', b'ignored'),
        ])
        self.assertEqual(Location.from_message(message), Location("Cafe"))

    def test_from_message_without_location(self):
        self.assertIsNone(Location.from_message(None))
        self.assertIsNone(Location.from_message(NDEFMessage()))
        bad = NDEFMessage([NDEFRecord(NDEF_TNF_UNKNOWN, b'', b'', b'\xff\xfe')])
        self.assertIsNone(Location.from_message(bad))

    def test_decode_rejects_incomplete_records(self):
        for payload in (b'[]', b'{"name": "Cafe"}', b'{"visitors": []}',
                        b'{"name": "Cafe", "visitors": [{"nom": "Bob"}]}',
                        b'{"name": "", "visitors": []}'):
            with self.assertRaises(LocationDecodeError):
                Location.from_json(payload)

    def test_with_visitor_leaves_original_untouched(self):
        location = Location("Cafe")
        updated = location.with_visitor(Visitor("Bob"))

        self.assertEqual(location.visitors, [])
        self.assertEqual(updated.visitors, [Visitor("Bob")])

    def test_decoding_raw_json_keeps_names_exactly(self):
        names = ["C" * 65, "Ann <3 Bob> fan", " Zoë ", "<b>Eve</b>"]
        payload = json.dumps({
            "name": names[0],
            "visitors": [{"name": name} for name in names[1:]]
        }).encode('utf-8')

        location = Location.from_message(
            NDEFMessage([NDEFRecord(NDEF_TNF_UNKNOWN, b'', b'', payload)])
        )

        self.assertIsNotNone(location)
        self.assertEqual(location.name, names[0])
        self.assertEqual([visitor.name for visitor in location.visitors], names[1:])
        self.assertEqual(json.loads(location.to_json()), json.loads(payload))

    def test_names_are_not_rewritten(self):
        self.assertEqual(Visitor("Ann <3 Bob> fan").name, "Ann <3 Bob> fan")
        self.assertEqual(Location("C" * 65).name, "C" * 65)

    def test_names_are_required(self):
        for name in ("", None, 42):
            with self.assertRaises(ValidationError):
                Location(name)
            with self.assertRaises(ValidationError):
                Visitor(name)


if __name__ == '__main__':
    unittest.main()
