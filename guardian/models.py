"""
Domain models for the guardian alert flow.

Pure data classes with no I/O; everything that talks to the platform or the
network lives in the modules that use these types.
"""
from __future__ import annotations

import dataclasses
import enum
import logging
from datetime import datetime, timezone

from .const import FAMILY_KEY, FIRE_KEY, POLICE_KEY

_LOGGER = logging.getLogger(__name__)


class PermissionStatus(str, enum.Enum):
    """Geolocation permission as reported by the platform."""

    GRANTED = "granted"
    DENIED = "denied"
    PROMPT = "prompt"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw) -> "PermissionStatus":
        """Map a raw platform value to a status; anything unrecognised is UNKNOWN."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).lower())
        except ValueError:
            if raw is not None:
                _LOGGER.debug("Unrecognised permission state %r, treating as unknown", raw)
            return cls.UNKNOWN


class PermissionState(enum.Enum):
    """States of the permission acquisition machine."""

    UNKNOWN = "unknown"
    PROMPT = "prompt"
    REQUESTING = "requesting"
    BLOCKED_RECOVERY = "blocked_recovery"
    GRANTED = "granted"
    DENIED = "denied"


class PermissionResult(enum.Enum):
    GRANTED = "granted"
    DENIED = "denied"


class ContactKind(str, enum.Enum):
    """The three alert targets. The value doubles as the user-facing label."""

    POLICE = "Police"
    FIRE = "Fire"
    FAMILY = "Family"

    @property
    def label(self) -> str:
        return self.value

    @property
    def store_key(self) -> str:
        return CONTACT_KEYS[self]


CONTACT_KEYS: dict[ContactKind, str] = {
    ContactKind.POLICE: POLICE_KEY,
    ContactKind.FIRE: FIRE_KEY,
    ContactKind.FAMILY: FAMILY_KEY,
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclasses.dataclass(frozen=True)
class LocationFix:
    """A single position sample."""

    latitude: float
    longitude: float
    captured_at: datetime = dataclasses.field(default_factory=utcnow)


@dataclasses.dataclass(frozen=True)
class ContactCategory:
    """An alert target resolved from the contact store at dispatch time."""

    kind: ContactKind
    phone_number: str

    @property
    def label(self) -> str:
        return self.kind.label


@dataclasses.dataclass(frozen=True)
class AlertMessage:
    """
    Composed alert payload.

    Built fresh for every dispatch from the current fix and stored name;
    never cached or persisted. str() renders the exact wire text.
    """

    label: str
    name: str
    latitude: float
    longitude: float
    google_maps_url: str
    osm_url: str
    timestamp: str
    live_url: str | None = None

    @property
    def map_links(self) -> tuple[str, str]:
        return self.google_maps_url, self.osm_url

    @property
    def text(self) -> str:
        lines = [
            f"EMERGENCY: {self.label}",
            f"Name: {self.name}",
            f"Coords: {self.latitude:.6f}, {self.longitude:.6f}",
            f"GoogleMaps: {self.google_maps_url}",
            f"OSM: {self.osm_url}",
        ]
        if self.live_url:
            lines.append(f"Live: {self.live_url}")
        lines.append(f"Time: {self.timestamp}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.text


@dataclasses.dataclass
class SessionState:
    """
    Process-wide mutable state shared by the tracking session and the
    orchestrator. One instance per process run.
    """

    # Live tracking
    session_id: str | None = None
    started_at: datetime | None = None
    active: bool = False

    # Categories dispatched (confirmed) during this run
    triggered: set[ContactKind] = dataclasses.field(default_factory=set)
    # Latched once the combined broadcast has fired
    escalated: bool = False

    def record_trigger(self, kind: ContactKind) -> bool:
        """
        Add kind to the triggered set.

        Returns True exactly once per run: on the call that completes the set
        of all three kinds.
        """
        self.triggered.add(kind)
        if self.escalated or self.triggered != set(ContactKind):
            return False
        self.escalated = True
        return True
