"""
Tests for config validation and GUARDIAN_* environment loading.
"""

from __future__ import annotations

import unittest
from unittest.mock import patch

import voluptuous as vol

from guardian.config import load_config, validate_config
from guardian.const import DEFAULT_ORIGIN, PERMISSION_MAX_WAIT, TRACKING_INTERVAL


class TestValidateConfig(unittest.TestCase):

    def test_defaults(self):
        config = validate_config()
        self.assertEqual(config["origin"], DEFAULT_ORIGIN)
        self.assertIsNone(config["storage_path"])
        self.assertEqual(config["log_level"], "INFO")
        self.assertEqual(config["tracking_interval"], TRACKING_INTERVAL)
        self.assertEqual(config["permission_max_wait"], PERMISSION_MAX_WAIT)
        self.assertEqual(config["firebase"], {"database_url": "", "api_key": "", "auth_token": None})

    def test_log_level_is_normalised(self):
        self.assertEqual(validate_config({"log_level": "debug"})["log_level"], "DEBUG")

    def test_rejects_bad_values(self):
        for bad in (
            {"origin": "ftp://example.com"},
            {"log_level": "chatty"},
            {"tracking_interval": 0},
            {"dial_delay": -1},
            {"firebase": {"database_url": "not a url"}},
            {"unknown_key": 1},
        ):
            with self.subTest(bad=bad):
                with self.assertRaises(vol.Invalid):
                    validate_config(bad)


class TestLoadConfig(unittest.TestCase):

    def test_environment_mapping(self):
        config = load_config(environ={
            "GUARDIAN_ORIGIN": "https://guardian.example",
            "GUARDIAN_FIREBASE_URL": "https://demo.firebaseio.com",
            "GUARDIAN_FIREBASE_API_KEY": "key",
            "GUARDIAN_TRACKING_INTERVAL": "30",
            "GUARDIAN_DIAL_DELAY": "",
            "UNRELATED": "x",
        })

        self.assertEqual(config["origin"], "https://guardian.example")
        self.assertEqual(config["firebase"]["database_url"], "https://demo.firebaseio.com")
        self.assertEqual(config["firebase"]["api_key"], "key")
        self.assertEqual(config["tracking_interval"], 30.0)
        # Empty values fall back to defaults
        self.assertEqual(config["dial_delay"], validate_config()["dial_delay"])

    def test_reads_dotenv_when_no_environ_given(self):
        with patch("guardian.config.load_dotenv") as dotenv, \
                patch.dict("os.environ", {"GUARDIAN_LOG_LEVEL": "warning"}, clear=True):
            config = load_config(env_file="/tmp/guardian.env")

        dotenv.assert_called_once_with("/tmp/guardian.env")
        self.assertEqual(config["log_level"], "WARNING")

    def test_invalid_environment_value(self):
        with self.assertRaises(vol.Invalid):
            load_config(environ={"GUARDIAN_TRACKING_INTERVAL": "soon"})
