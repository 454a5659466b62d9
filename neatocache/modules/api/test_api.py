#!/usr/bin/env python3
"""
test_api.py - Tests for the location API routes and error handling.
"""

import unittest
from unittest import mock

from neatocache.modules.api.api_server import create_app
from neatocache.modules.api.exceptions import TagActionError
from neatocache.modules.nfc import nfc_controller
from neatocache.modules.nfc.exceptions import (
    NFCBusyError, NFCDecodeError, NFCInvalidPayloadSizeError, NFCTimeoutError
)
from neatocache.modules.nfc.models import Location, Visitor
from neatocache.modules.nfc.session_controller import ActionResult
from neatocache.modules.nfc.test_nfc import FakeTag, FakeTransport, location_message


class APITestCase(unittest.TestCase):
    """Base class with a Flask test client and a fake reader."""

    def setUp(self):
        nfc_controller.shutdown()
        self.app = create_app({'action_timeout': 1})
        self.app.testing = True
        self.client = self.app.test_client()

    def tearDown(self):
        nfc_controller.shutdown()

    def present(self, tag, available=True):
        """Initialize the controller with a reader that sees ``tag`` immediately."""
        self.transport = FakeTransport(available=available, auto_tags=[tag])
        nfc_controller.initialize(transport=self.transport)


class TestLocationRoutes(APITestCase):
    """Successful tag actions."""

    def test_scan_location(self):
        self.present(FakeTag(location_message(Location("Cafe", [Visitor("Bob")]))))

        response = self.client.post('/api/location/scan')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {
            'success': True,
            'data': {
                'location': {'name': 'Cafe', 'visitors': [{'name': 'Bob'}]},
                'visitor_count': 1
            }
        })

    def test_setup_location(self):
        tag = FakeTag()
        self.present(tag)

        response = self.client.post('/api/location/setup', json={'name': 'Library'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['data']['location'],
                         {'name': 'Library', 'visitors': []})
        self.assertEqual(Location.from_message(tag.message), Location("Library"))

    def test_add_visitor(self):
        tag = FakeTag(location_message(Location("Cafe", [Visitor("Ann")])))
        self.present(tag)

        response = self.client.post('/api/location/visitors', json={'name': 'Bob'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['data']['visitor_count'], 2)
        self.assertEqual(Location.from_message(tag.message).visitors,
                         [Visitor("Ann"), Visitor("Bob")])


class TestLocationErrors(APITestCase):
    """Failures mapped to JSON error responses."""

    def test_missing_name_is_rejected(self):
        self.present(FakeTag())

        for path in ('/api/location/setup', '/api/location/visitors'):
            for body in ({}, {'name': '  '}, ['Bob']):
                response = self.client.post(path, json=body)
                self.assertEqual(response.status_code, 400)
                self.assertTrue(response.get_json()['error']['message'].endswith('name is required'))

        self.assertEqual(self.transport.sessions, [])

    def test_reader_unavailable(self):
        self.present(FakeTag(), available=False)

        response = self.client.post('/api/location/scan')

        self.assertEqual(response.status_code, 503)
        error = response.get_json()['error']
        self.assertEqual(error['message'], "NFC Reader Not Available")
        self.assertEqual(error['details'], {'type': 'NFCUnavailableError'})

    def test_controller_not_initialized(self):
        response = self.client.post('/api/location/scan')
        self.assertEqual(response.status_code, 503)

    def test_tag_without_location(self):
        self.present(FakeTag())

        response = self.client.post('/api/location/visitors', json={'name': 'Bob'})

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.get_json()['error']['details']['type'], 'NFCDecodeError')

    def test_failure_status_codes(self):
        self.present(FakeTag())
        cases = (
            (NFCBusyError(), 409),
            (NFCInvalidPayloadSizeError(length=600, capacity=492), 413),
            (NFCTimeoutError(), 504),
            (NFCDecodeError(), 422),
        )

        for error, status_code in cases:
            with mock.patch.object(nfc_controller, 'perform_action_sync',
                                   return_value=ActionResult.failure(error)):
                response = self.client.post('/api/location/scan')
            self.assertEqual(response.status_code, status_code)
            self.assertEqual(response.get_json()['error']['message'], str(error))

    def test_tag_action_error_defaults(self):
        error = TagActionError.from_nfc_error(NFCDecodeError())
        self.assertEqual(error.status_code, 422)
        self.assertEqual(error.to_dict(), {
            'type': 'NFCDecodeError',
            'message': "Could not read tag data.",
            'status': 422
        })


class TestServerRoutes(APITestCase):
    """Health check and generic HTTP errors."""

    def test_health(self):
        response = self.client.get('/api/health')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['status'], 'healthy')

    def test_unknown_route(self):
        response = self.client.get('/api/nothing')

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.get_json()['error']['message'],
                         "Resource not found: /api/nothing")

    def test_wrong_method(self):
        response = self.client.get('/api/location/scan')
        self.assertEqual(response.status_code, 405)

    def test_unhandled_error_is_logged_with_traceback(self):
        def broken():
            raise RuntimeError("reader exploded")

        self.app.add_url_rule('/api/broken', 'broken', broken)
        self.app.config['PROPAGATE_EXCEPTIONS'] = False

        with self.assertLogs('neatocache.modules.api.middleware.error_handler', 'ERROR') as logs:
            response = self.client.get('/api/broken')

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.get_json()['error']['message'],
                         "An internal server error occurred")
        record = logs.records[0]
        self.assertIsInstance(record.exc_info[1], RuntimeError)
        self.assertIn("reader exploded", logs.output[0])
        self.assertIn("Traceback", logs.output[0])

    def test_response_keys_keep_envelope_order(self):
        self.present(FakeTag(location_message(Location("Cafe"))))

        body = self.client.post('/api/location/scan').get_data(as_text=True)

        self.assertLess(body.index('"success"'), body.index('"data"'))
        self.assertLess(body.index('"location"'), body.index('"visitor_count"'))
        self.assertLess(body.index('"name"'), body.index('"visitors"'))


if __name__ == '__main__':
    unittest.main()
