"""Alert message composition and the links embedded in it."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from .const import DEFAULT_NAME, GOOGLE_MAPS_URL, OSM_URL, TRACK_PAGE
from .models import AlertMessage


def format_timestamp(when: datetime | None = None) -> str:
    """Local-time, locale-formatted timestamp."""
    when = (when or datetime.now()).astimezone()
    return when.strftime("%c")


def format_coordinate(value: float) -> str:
    """Shortest plain decimal for a map link: no exponent, no trailing '.0'."""
    if value == 0:
        return "0"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def live_track_url(origin: str, session_id: str) -> str:
    return f"{origin.rstrip('/')}/{TRACK_PAGE}?sid={session_id}"


def compose_message(
    label: str,
    lat: float,
    lon: float,
    live_url: str | None = None,
    name: str | None = None,
    when: datetime | None = None,
) -> AlertMessage:
    """Build the alert for one dispatch. The Live: line appears only when live_url is set."""
    return AlertMessage(
        label=label,
        name=name or DEFAULT_NAME,
        latitude=lat,
        longitude=lon,
        google_maps_url=GOOGLE_MAPS_URL.format(lat=format_coordinate(lat), lon=format_coordinate(lon)),
        osm_url=OSM_URL.format(lat=format_coordinate(lat), lon=format_coordinate(lon)),
        timestamp=format_timestamp(when),
        live_url=live_url or None,
    )
