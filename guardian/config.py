"""Configuration schema and environment loading."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import voluptuous as vol
from dotenv import load_dotenv

from .const import (
    ACK_DURATION,
    DEFAULT_ORIGIN,
    DIAL_DELAY,
    MESSAGING_FALLBACK_DELAY,
    PERMISSION_MAX_WAIT,
    PERMISSION_POLL_INTERVAL,
    PERMISSION_REQUEST_TIMEOUT,
    TRACKING_INTERVAL,
)

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "GUARDIAN_"

seconds = vol.All(vol.Coerce(float), vol.Range(min=0))
positive_seconds = vol.All(vol.Coerce(float), vol.Range(min=0.01))
url_validator = vol.All(str, vol.Match(r"^https?://[^\s/]+"))
optional_url = vol.Any(None, '', url_validator)

FEED_SCHEMA = vol.Schema(
    {
        vol.Optional('database_url', default=''): optional_url,
        vol.Optional('api_key', default=''): vol.Any(None, str),
        vol.Optional('auth_token', default=None): vol.Any(None, str),
    }
)

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional('origin', default=DEFAULT_ORIGIN): url_validator,
        vol.Optional('storage_path', default=None): vol.Any(None, str),
        vol.Optional('firebase', default={}): FEED_SCHEMA,
        vol.Optional('log_level', default='INFO'): vol.All(
            vol.Upper, vol.In(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
        ),
        vol.Optional('permission_request_timeout', default=PERMISSION_REQUEST_TIMEOUT): positive_seconds,
        vol.Optional('permission_poll_interval', default=PERMISSION_POLL_INTERVAL): positive_seconds,
        vol.Optional('permission_max_wait', default=PERMISSION_MAX_WAIT): seconds,
        vol.Optional('tracking_interval', default=TRACKING_INTERVAL): positive_seconds,
        vol.Optional('dial_delay', default=DIAL_DELAY): seconds,
        vol.Optional('messaging_fallback_delay', default=MESSAGING_FALLBACK_DELAY): seconds,
        vol.Optional('ack_duration', default=ACK_DURATION): seconds,
    }
)

# Environment variable → config key (firebase keys are nested)
_ENV_KEYS = {
    'ORIGIN': ('origin',),
    'STORAGE_PATH': ('storage_path',),
    'LOG_LEVEL': ('log_level',),
    'FIREBASE_URL': ('firebase', 'database_url'),
    'FIREBASE_API_KEY': ('firebase', 'api_key'),
    'FIREBASE_AUTH_TOKEN': ('firebase', 'auth_token'),
    'PERMISSION_REQUEST_TIMEOUT': ('permission_request_timeout',),
    'PERMISSION_POLL_INTERVAL': ('permission_poll_interval',),
    'PERMISSION_MAX_WAIT': ('permission_max_wait',),
    'TRACKING_INTERVAL': ('tracking_interval',),
    'DIAL_DELAY': ('dial_delay',),
    'MESSAGING_FALLBACK_DELAY': ('messaging_fallback_delay',),
    'ACK_DURATION': ('ack_duration',),
}


def validate_config(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Apply defaults and validate. Raises vol.Invalid on bad input."""
    return CONFIG_SCHEMA(dict(config or {}))


def load_config(env_file: Optional[str] = None, environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Build a validated config from GUARDIAN_* environment variables.

    When environ is not given, os.environ is used after loading env_file
    (or a .env in the working directory) with python-dotenv; values already
    in the environment win over the file.
    """
    if environ is None:
        load_dotenv(env_file)
        environ = dict(os.environ)

    raw: Dict[str, Any] = {}
    for suffix, path in _ENV_KEYS.items():
        value = environ.get(ENV_PREFIX + suffix)
        if value is None or value == '':
            continue
        target = raw
        for key in path[:-1]:
            target = target.setdefault(key, {})
        target[path[-1]] = value

    config = validate_config(raw)
    _LOGGER.debug("Configuration loaded (feed configured: %s)", bool(config['firebase'].get('database_url')))
    return config
