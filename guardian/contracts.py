"""
Contracts for the platform collaborators the alert flow drives.

A host application (browser bridge, mobile shell, test harness) provides
concrete objects satisfying these protocols; nothing in this package
renders UI or talks to device APIs directly.
"""
from __future__ import annotations

from typing import Protocol

from .models import ContactKind, LocationFix


class GeolocationBackend(Protocol):
    """Platform geolocation access."""

    async def query_permission(self) -> str | None:
        """Return "granted", "denied", "prompt", or None when the platform cannot tell."""
        ...

    async def current_position(self, high_accuracy: bool, timeout: float) -> LocationFix:
        """Request one position; may trigger the platform permission prompt. Raises on failure."""
        ...


class RecoveryPrompt(Protocol):
    """The blocked-permission directive shown to the user."""

    def show(self, message: str) -> None: ...

    def hide(self) -> None: ...

    def open_url(self, url: str) -> None:
        """Best-effort external navigation; may raise when the platform blocks it."""
        ...


class Confirmer(Protocol):
    async def confirm(self, text: str) -> bool: ...


class AlertUI(Protocol):
    """Status surfaces: transient toast, status line, per-button chip, tracking indicator."""

    def toast(self, message: str) -> None: ...

    def set_status(self, message: str) -> None: ...

    def set_chip(self, kind: ContactKind, text: str) -> None: ...

    def clear_chip(self, kind: ContactKind) -> None: ...

    def tracking_changed(self, active: bool) -> None: ...


class LinkOpener(Protocol):
    """Fire-and-forget platform navigation (tel:, whatsapp:, https:). Raises ActuatorInvocationFailed when refused."""

    def open(self, url: str) -> None: ...


class ShareTarget(Protocol):
    async def share(self, title: str, text: str) -> None: ...


class Clipboard(Protocol):
    async def write_text(self, text: str) -> None: ...


class RemoteFeed(Protocol):
    """Write-only live-location store addressed by session id."""

    async def write_meta(self, session_id: str, name: str, started_at: str) -> None: ...

    async def write_latest(self, session_id: str, lat: float, lon: float, ts: str, name: str) -> None: ...
