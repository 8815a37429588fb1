"""
Single-shot position fixes.

No retry happens here; the tracking loop and the dispatch flow decide what a
failed fix means for them.
"""
from __future__ import annotations

import asyncio
import logging

from .const import PERMISSION_REQUEST_TIMEOUT
from .contracts import GeolocationBackend
from .errors import LocationUnavailable, PermissionDenied
from .models import LocationFix, PermissionResult
from .permission import PermissionGate

_LOGGER = logging.getLogger(__name__)


class LocationProvider:
    """Wraps the backend position request behind the permission gate."""

    def __init__(self, backend: GeolocationBackend, gate: PermissionGate) -> None:
        self.backend = backend
        self.gate = gate

    async def get_fix(self, high_accuracy: bool = True, timeout: float = PERMISSION_REQUEST_TIMEOUT) -> LocationFix:
        """Request one fix. Raises LocationUnavailable on timeout or provider error."""
        try:
            fix = await asyncio.wait_for(
                self.backend.current_position(high_accuracy, timeout), timeout=timeout
            )
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise LocationUnavailable(f"Position request timed out after {timeout}s") from exc
        except Exception as exc:  # noqa: BLE001
            raise LocationUnavailable(f"Position request failed: {exc}") from exc

        _LOGGER.debug("Fix acquired: %.6f, %.6f", fix.latitude, fix.longitude)
        return fix

    async def get_location_with_permission(
        self, high_accuracy: bool = True, timeout: float = PERMISSION_REQUEST_TIMEOUT
    ) -> LocationFix:
        """
        Run the permission gate, then take a fix.

        Raises PermissionDenied without touching the position API when the
        gate resolves DENIED.
        """
        result = await self.gate.ensure_permission()
        if result is not PermissionResult.GRANTED:
            raise PermissionDenied("Location permission not granted")
        return await self.get_fix(high_accuracy, timeout)
