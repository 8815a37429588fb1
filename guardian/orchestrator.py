"""
Alert orchestration for a single contact-category action.

    dispatch(kind)
      1. contact number from the store            → NoContactConfigured
      2. permission + fix                         → PermissionDenied / LocationUnavailable
      3. ensure live tracking is running
      4. live URL (only with a configured feed)
      5. compose the alert
      6. user confirmation                        → UserCancelled
      7. dial
      8. WhatsApp handoff (app link, then web link)
      9. record the category; escalate once all three are in
     10. "Sent" chip, cleared after ACK_DURATION

Any abort before step 7 reaches neither actuator and is reported to the user
with a status specific to the error.
"""
from __future__ import annotations

import asyncio
import logging

from .actuators import MessagingHandoff, PhoneDialer
from .const import (
    ACK_DURATION,
    COMBINED_LABEL,
    DIAL_DELAY,
    SHARE_TITLE,
    TEST_LABEL,
)
from .contracts import AlertUI, Clipboard, Confirmer, ShareTarget
from .errors import GuardianError, NoContactConfigured, UserCancelled
from .location import LocationProvider
from .message import compose_message
from .models import AlertMessage, ContactKind, LocationFix, SessionState
from .store import ContactStore
from .tracking import TrackingSession

_LOGGER = logging.getLogger(__name__)

# Order in which a test message picks its recipient
TEST_RECIPIENT_ORDER = (ContactKind.FAMILY, ContactKind.POLICE, ContactKind.FIRE)


class AlertOrchestrator:
    """Sequences permission, fix, tracking, confirmation, dispatch and escalation."""

    def __init__(
        self,
        state: SessionState,
        store: ContactStore,
        locator: LocationProvider,
        tracking: TrackingSession,
        confirmer: Confirmer,
        ui: AlertUI,
        dialer: PhoneDialer,
        messenger: MessagingHandoff,
        share: ShareTarget | None = None,
        clipboard: Clipboard | None = None,
        *,
        dial_delay: float = DIAL_DELAY,
        ack_duration: float = ACK_DURATION,
    ) -> None:
        self._state = state
        self._store = store
        self._locator = locator
        self._tracking = tracking
        self._confirmer = confirmer
        self._ui = ui
        self._dialer = dialer
        self._messenger = messenger
        self._share = share
        self._clipboard = clipboard
        self.dial_delay = dial_delay
        self.ack_duration = ack_duration

        # kind → pending chip-clear timer
        self._ack_handles: dict[ContactKind, asyncio.TimerHandle] = {}

    # ------------------------------------------------------------------
    # Contact-category action
    # ------------------------------------------------------------------

    async def dispatch(self, kind: ContactKind) -> bool:
        """Run the full sequence for kind. Returns True when both actuators were invoked."""
        try:
            await self._dispatch(kind)
        except GuardianError as exc:
            _LOGGER.info("%s alert aborted: %s", kind.label, exc)
            self._ui.toast(exc.toast)
            self._ui.set_status(exc.status)
            return False
        return True

    async def _dispatch(self, kind: ContactKind) -> None:
        category = self._store.category(kind)
        if not category.phone_number:
            raise NoContactConfigured(kind.label)

        self._ui.set_status("Checking location permission...")
        fix = await self._locator.get_location_with_permission()

        await self._tracking.ensure_started(fix)
        live_url = self._tracking.live_url()
        message = self._compose(kind.label, fix, live_url)

        if not await self._confirm(f"Call {kind.label} and open WhatsApp to send your location?"):
            raise UserCancelled()

        self._dialer.dial(category.phone_number)
        self._ui.set_status(f"Dialing {kind.label}...")
        await asyncio.sleep(self.dial_delay)
        await self._messenger.send(category.phone_number, message.text)
        self._ui.set_status(f"WhatsApp: messaging {kind.label}")

        if self._state.record_trigger(kind):
            await self._escalate(fix, live_url)

        self._acknowledge(kind)

    async def _confirm(self, text: str) -> bool:
        try:
            return bool(await self._confirmer.confirm(text))
        except Exception as exc:  # noqa: BLE001
            _LOGGER.warning("Confirmation prompt failed, treating as declined: %s", exc)
            return False

    def _compose(self, label: str, fix: LocationFix, live_url: str | None) -> AlertMessage:
        return compose_message(
            label, fix.latitude, fix.longitude, live_url, self._store.display_name()
        )

    # ------------------------------------------------------------------
    # Escalation
    # ------------------------------------------------------------------

    async def _escalate(self, fix: LocationFix, live_url: str | None) -> None:
        """Share the combined alert, falling back to the clipboard."""
        combined = self._compose(COMBINED_LABEL, fix, live_url)
        _LOGGER.info("All contact categories alerted, broadcasting combined alert")

        if self._share is not None:
            try:
                await self._share.share(SHARE_TITLE, combined.text)
                self._ui.toast("Shared combined alert")
                return
            except Exception as exc:  # noqa: BLE001
                _LOGGER.warning("Share of combined alert failed: %s", exc)

        if self._clipboard is not None:
            try:
                await self._clipboard.write_text(combined.text)
                self._ui.toast("Combined copied")
                return
            except Exception as exc:  # noqa: BLE001
                _LOGGER.warning("Clipboard copy of combined alert failed: %s", exc)

        self._ui.toast("Could not share combined alert")

    # ------------------------------------------------------------------
    # Acknowledgment chip
    # ------------------------------------------------------------------

    def _acknowledge(self, kind: ContactKind) -> None:
        previous = self._ack_handles.pop(kind, None)
        if previous is not None:
            previous.cancel()
        self._ui.set_chip(kind, "Sent")
        self._ack_handles[kind] = asyncio.get_running_loop().call_later(
            self.ack_duration, self._clear_ack, kind
        )

    def _clear_ack(self, kind: ContactKind) -> None:
        self._ack_handles.pop(kind, None)
        self._ui.clear_chip(kind)

    # ------------------------------------------------------------------
    # Secondary actions
    # ------------------------------------------------------------------

    async def toggle_tracking(self) -> bool:
        """Stop an active session or start a new one. Returns whether tracking is now active."""
        if self._tracking.is_active:
            self._tracking.stop()
            return False

        self._ui.set_status("Obtaining location...")
        try:
            fix = await self._locator.get_location_with_permission()
        except GuardianError as exc:
            _LOGGER.info("Cannot start tracking: %s", exc)
            self._ui.toast("Cannot start tracking: permission required")
            self._ui.set_status("Permission required")
            return False

        await self._tracking.start(fix)
        return self._tracking.is_active

    async def send_test_message(self) -> bool:
        """Send a TEST alert over WhatsApp only, to the first configured number."""
        number = next(
            (n for n in (self._store.phone_number(k) for k in TEST_RECIPIENT_ORDER) if n), ''
        )
        if not number:
            self._ui.toast("Set at least one number in Settings")
            return False

        try:
            fix = await self._locator.get_location_with_permission()
        except GuardianError as exc:
            _LOGGER.info("Test message aborted: %s", exc)
            self._ui.toast("Could not get location for test")
            return False

        message = self._compose(TEST_LABEL, fix, self._tracking.live_url())
        self._ui.toast("Opening WhatsApp to send test")
        await self._messenger.send(number, message.text)
        return True

    def cancel_pending(self) -> None:
        """Cancel pending chip timers."""
        for handle in self._ack_handles.values():
            handle.cancel()
        self._ack_handles.clear()
