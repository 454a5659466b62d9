"""
test_config.py - Tests for configuration loading.
"""

import json
import os
import tempfile
import unittest

from neatocache import config


class TestConfig(unittest.TestCase):

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.directory.name, "config.json")

    def tearDown(self):
        config.load_config()
        self.directory.cleanup()

    def test_defaults_without_file(self):
        loaded = config.load_config(self.path)

        self.assertEqual(loaded, config.DEFAULT_CONFIG)
        self.assertIs(loaded, config.CONFIG)

    def test_sections_merge_with_defaults(self):
        with open(self.path, 'w') as f:
            json.dump({"nfc": {"session_timeout": 30}, "debug_mode": True}, f)

        loaded = config.load_config(self.path)

        self.assertEqual(loaded["nfc"]["session_timeout"], 30)
        self.assertEqual(loaded["nfc"]["i2c_address"], 0x24)
        self.assertTrue(loaded["debug_mode"])
        self.assertEqual(config.DEFAULT_CONFIG["nfc"]["session_timeout"], 60)

    def test_invalid_file_falls_back_to_defaults(self):
        with open(self.path, 'w') as f:
            f.write("{not json")

        self.assertEqual(config.load_config(self.path), config.DEFAULT_CONFIG)

    def test_save_round_trip(self):
        config.load_config(self.path)
        config.CONFIG["api"]["port"] = 8080

        self.assertTrue(config.save_config(self.path))
        self.assertEqual(config.load_config(self.path)["api"]["port"], 8080)


if __name__ == '__main__':
    unittest.main()
