"""
Fire-and-forget handoffs to the platform: phone dial and WhatsApp.

Neither returns a success signal. A platform refusal is logged at debug
level and otherwise indistinguishable from success.
"""
from __future__ import annotations

import asyncio
import logging
import re
from urllib.parse import quote

from .const import DIAL_URL, MESSAGING_FALLBACK_DELAY, WHATSAPP_APP_URL, WHATSAPP_WEB_URL
from .contracts import LinkOpener
from .errors import ActuatorInvocationFailed

_LOGGER = logging.getLogger(__name__)

# Characters encodeURIComponent leaves alone
URI_SAFE = "!~*'()"


def normalize_number(number: str) -> str:
    """Keep only '+' and digits."""
    return re.sub(r"[^+\d]", "", number or "")


def dial_link(number: str) -> str:
    return DIAL_URL.format(number=quote(number, safe=URI_SAFE))


def whatsapp_app_link(number: str, message: str) -> str:
    normalized = normalize_number(number)
    return WHATSAPP_APP_URL.format(
        phone=quote(normalized, safe=URI_SAFE), text=quote(message, safe=URI_SAFE)
    )


def whatsapp_web_link(number: str, message: str) -> str:
    normalized = normalize_number(number).lstrip("+")
    return WHATSAPP_WEB_URL.format(
        phone=quote(normalized, safe=URI_SAFE), text=quote(message, safe=URI_SAFE)
    )


def _open(opener: LinkOpener, url: str) -> None:
    scheme = url.split(":", 1)[0]
    try:
        opener.open(url)
    except ActuatorInvocationFailed as exc:
        _LOGGER.debug("Platform refused %s link: %s", scheme, exc)
    except Exception as exc:  # noqa: BLE001
        _LOGGER.debug("Unexpected error opening %s link: %s", scheme, exc)


class PhoneDialer:
    def __init__(self, opener: LinkOpener) -> None:
        self._opener = opener

    def dial(self, number: str) -> bool:
        if not number:
            return False
        _open(self._opener, dial_link(number))
        return True


class MessagingHandoff:
    """
    Two-step messaging handoff: app-scheme link, then the universal web link
    after a fixed delay, unconditionally.
    """

    def __init__(self, opener: LinkOpener, *, fallback_delay: float = MESSAGING_FALLBACK_DELAY) -> None:
        self._opener = opener
        self.fallback_delay = fallback_delay

    def open_app_link(self, number: str, message: str) -> None:
        _open(self._opener, whatsapp_app_link(number, message))

    def open_web_link(self, number: str, message: str) -> None:
        _open(self._opener, whatsapp_web_link(number, message))

    async def send(self, number: str, message: str) -> bool:
        if not number:
            return False
        self.open_app_link(number, message)
        await asyncio.sleep(self.fallback_delay)
        self.open_web_link(number, message)
        return True
