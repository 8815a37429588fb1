"""
Geolocation permission acquisition.

State machine for one ensure_permission() call:

    UNKNOWN/PROMPT ──► REQUESTING ──► GRANTED
                            │
                            ▼
                     BLOCKED_RECOVERY ──► GRANTED   (Retry succeeds, or poll sees "granted")
                                     └──► DENIED    (Cancel)

While in BLOCKED_RECOVERY a RecoveryFlow owns the user-facing prompt and a
poll task. Leaving the state, by any path, resolves the flow, stops the poll
and hides the prompt. The poll gives up silently after max_wait; the flow
then stays open until the user acts.
"""
from __future__ import annotations

import asyncio
import logging

from .const import (
    BLOCKED_MESSAGE,
    PERMISSION_MAX_WAIT,
    PERMISSION_POLL_INTERVAL,
    PERMISSION_REQUEST_TIMEOUT,
    SETTINGS_HELP_URL,
    SETTINGS_URLS,
    STILL_BLOCKED_MESSAGE,
)
from .contracts import GeolocationBackend, RecoveryPrompt
from .models import PermissionResult, PermissionState, PermissionStatus

_LOGGER = logging.getLogger(__name__)


class RecoveryFlow:
    """
    An open blocked-permission prompt.

    The host routes the prompt's three buttons to retry(), open_settings()
    and cancel(). The outcome future is the cancellation token: once it is
    resolved no further transition can happen.
    """

    def __init__(self, gate: "PermissionGate", max_wait: float) -> None:
        self._gate = gate
        self.max_wait = max_wait
        self._outcome: asyncio.Future = asyncio.get_running_loop().create_future()
        self._poll_task: asyncio.Task | None = None
        self._closed = False

    @property
    def done(self) -> bool:
        return self._outcome.done()

    @property
    def result(self) -> PermissionResult | None:
        return self._outcome.result() if self._outcome.done() else None

    def open(self) -> None:
        """Show the directive and start polling for an external change."""
        self._gate.prompt.show(BLOCKED_MESSAGE)
        self._poll_task = asyncio.ensure_future(self._poll())

    async def wait(self) -> PermissionResult:
        # Shielded so that one cancelled waiter does not resolve the flow for the others
        return await asyncio.shield(self._outcome)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def retry(self) -> bool:
        """Re-check the status, then re-issue the foreground request. Returns True when granted."""
        if self.done:
            return self.result is PermissionResult.GRANTED

        self._gate.prompt.hide()
        status = await self._gate.query_status()
        if self.done:
            return self.result is PermissionResult.GRANTED
        if status is PermissionStatus.GRANTED:
            self._resolve(PermissionResult.GRANTED)
            return True

        if await self._gate.request_foreground():
            self._resolve(PermissionResult.GRANTED)
            return True

        if not self.done:
            self._gate.prompt.show(STILL_BLOCKED_MESSAGE)
        return self.result is PermissionResult.GRANTED

    def open_settings(self) -> bool:
        """Best-effort navigation to the platform's location settings; the outcome is not observed."""
        for url in SETTINGS_URLS:
            try:
                self._gate.prompt.open_url(url)
                return True
            except Exception as exc:  # noqa: BLE001
                _LOGGER.debug("Could not open %s: %s", url, exc)
        try:
            self._gate.prompt.open_url(SETTINGS_HELP_URL)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.debug("Could not open settings help page: %s", exc)
        return False

    def cancel(self) -> None:
        self._resolve(PermissionResult.DENIED)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _poll(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.max_wait
        while not self.done:
            status = await self._gate.query_status()
            if status is PermissionStatus.GRANTED:
                _LOGGER.debug("Permission granted externally while recovery was open")
                self._resolve(PermissionResult.GRANTED)
                return
            if loop.time() >= deadline:
                _LOGGER.debug("Permission poll ceiling reached, waiting for user action")
                return
            await asyncio.sleep(self._gate.poll_interval)

    def _resolve(self, result: PermissionResult) -> None:
        if not self._outcome.done():
            self._outcome.set_result(result)
        self.close()

    def close(self) -> None:
        """Leave BLOCKED_RECOVERY: settle the outcome, stop polling, hide the prompt. Idempotent."""
        if not self._outcome.done():
            self._outcome.set_result(PermissionResult.DENIED)
        task = self._poll_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        if not self._closed:
            self._closed = True
            self._gate.prompt.hide()


class PermissionGate:
    """Resolves whether location access is allowed, guiding the user through a blocked state."""

    def __init__(
        self,
        backend: GeolocationBackend,
        prompt: RecoveryPrompt,
        *,
        request_timeout: float = PERMISSION_REQUEST_TIMEOUT,
        poll_interval: float = PERMISSION_POLL_INTERVAL,
        max_wait: float = PERMISSION_MAX_WAIT,
    ) -> None:
        self.backend = backend
        self.prompt = prompt
        self.request_timeout = request_timeout
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.state = PermissionState.UNKNOWN
        self._recovery: RecoveryFlow | None = None

    @property
    def recovery(self) -> RecoveryFlow | None:
        """The open recovery flow, if any."""
        if self._recovery is not None and self._recovery.done:
            return None
        return self._recovery

    async def query_status(self) -> PermissionStatus:
        """Current platform status; query failures read as UNKNOWN."""
        try:
            raw = await self.backend.query_permission()
        except Exception as exc:  # noqa: BLE001
            _LOGGER.debug("Permission query failed: %s", exc)
            return PermissionStatus.UNKNOWN
        return PermissionStatus.parse(raw)

    async def request_foreground(self) -> bool:
        """Issue one foreground request, bounded by request_timeout. Failure is not an error."""
        try:
            await asyncio.wait_for(
                self.backend.current_position(True, self.request_timeout),
                timeout=self.request_timeout,
            )
            return True
        except (asyncio.TimeoutError, TimeoutError):
            _LOGGER.warning("Location prompt timed out after %ss", self.request_timeout)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning("Location prompt dismissed or failed: %s", exc)
        return False

    async def ensure_permission(self, max_wait: float | None = None) -> PermissionResult:
        """
        Resolve GRANTED or DENIED for one invocation.

        A call made while a recovery flow is already open joins that flow.
        """
        flow = self.recovery
        if flow is not None:
            _LOGGER.debug("Joining open permission recovery")
            return await flow.wait()

        status = await self.query_status()
        if status is PermissionStatus.GRANTED:
            self.state = PermissionState.GRANTED
            return PermissionResult.GRANTED

        if status in (PermissionStatus.PROMPT, PermissionStatus.UNKNOWN):
            self.state = PermissionState.REQUESTING
            if await self.request_foreground():
                self.state = PermissionState.GRANTED
                return PermissionResult.GRANTED

        return await self._recover(self.max_wait if max_wait is None else max_wait)

    async def _recover(self, max_wait: float) -> PermissionResult:
        flow = self.recovery
        if flow is not None:
            return await flow.wait()

        flow = RecoveryFlow(self, max_wait)
        self._recovery = flow
        self.state = PermissionState.BLOCKED_RECOVERY
        _LOGGER.debug("Entering blocked-permission recovery")
        flow.open()
        try:
            result = await flow.wait()
        finally:
            flow.close()
            if self._recovery is flow:
                self._recovery = None

        self.state = (
            PermissionState.GRANTED if result is PermissionResult.GRANTED else PermissionState.DENIED
        )
        return result
