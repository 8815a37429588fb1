"""
Key-value store for contact numbers, the display name and the live-tracking
session id. Backed by a JSON file when a path is given, memory otherwise.
Persistence is best effort: write failures are logged and the in-memory
value still wins for the rest of the run.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path

import voluptuous as vol

from .const import NAME_KEY, DEFAULT_NAME
from .errors import InvalidContact
from .models import ContactCategory, ContactKind

_LOGGER = logging.getLogger(__name__)

phone_number = vol.All(
    vol.Coerce(str),
    lambda v: v.strip(),
    vol.Match(r"^[+\d\s\-()]*$", msg="phone number may only contain digits, spaces and + - ( )"),
)

CONTACTS_SCHEMA = vol.Schema(
    {
        vol.Required(ContactKind.POLICE.store_key, default=''): phone_number,
        vol.Required(ContactKind.FIRE.store_key, default=''): phone_number,
        vol.Required(ContactKind.FAMILY.store_key, default=''): phone_number,
    }
)


class ContactStore:
    """Flat string-to-string store; missing keys read as empty strings."""

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path else None
        self._data: dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        if self._path is None or not self._path.exists():
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            _LOGGER.warning("Could not read contact store %s: %s", self._path, exc)
            return
        if not isinstance(raw, dict):
            _LOGGER.warning("Ignoring malformed contact store %s", self._path)
            return
        self._data = {str(k): str(v) for k, v in raw.items() if v is not None}

    def _flush(self) -> None:
        if self._path is None:
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
        except OSError as exc:
            _LOGGER.warning("Could not persist contact store %s: %s", self._path, exc)

    def get(self, key: str) -> str:
        return self._data.get(key) or ''

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def delete(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    # ------------------------------------------------------------------
    # Contact helpers
    # ------------------------------------------------------------------

    def phone_number(self, kind: ContactKind) -> str:
        return self.get(kind.store_key)

    def category(self, kind: ContactKind) -> ContactCategory:
        """Read the category fresh from the store; never cached."""
        return ContactCategory(kind=kind, phone_number=self.phone_number(kind))

    def display_name(self) -> str:
        """Stored user name, or the placeholder used in messages and feed records."""
        return self.get(NAME_KEY) or DEFAULT_NAME

    def save_contacts(self, police: str = '', fire: str = '', family: str = '') -> dict[str, str]:
        """Validate and store all three numbers. Raises InvalidContact on bad input."""
        try:
            contacts = CONTACTS_SCHEMA({
                ContactKind.POLICE.store_key: police or '',
                ContactKind.FIRE.store_key: fire or '',
                ContactKind.FAMILY.store_key: family or '',
            })
        except vol.Invalid as exc:
            raise InvalidContact(str(exc)) from exc
        self._data.update(contacts)
        self._flush()
        _LOGGER.debug("Contacts saved")
        return contacts

    def save_name(self, name: str) -> None:
        self.set(NAME_KEY, (name or '').strip())
