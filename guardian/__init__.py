"""
Guardian: one-tap emergency contact alerts with live location.

async_setup() wires the store, permission gate, location provider, tracking
session and orchestrator around the platform collaborators supplied by the
host application.
"""
from __future__ import annotations

import logging

from .actuators import MessagingHandoff, PhoneDialer
from .config import validate_config
from .const import DOMAIN
from .contracts import AlertUI, Clipboard, Confirmer, GeolocationBackend, LinkOpener, RecoveryPrompt, ShareTarget
from .feed import FirebaseFeed
from .location import LocationProvider
from .models import ContactKind, SessionState
from .orchestrator import AlertOrchestrator
from .permission import PermissionGate
from .store import ContactStore
from .tracking import TrackingSession

__all__ = ["ContactKind", "Guardian", "async_setup"]

_LOGGER = logging.getLogger(__name__)


class Guardian:
    """Everything owned by one process run."""

    def __init__(
        self,
        config: dict,
        store: ContactStore,
        gate: PermissionGate,
        locator: LocationProvider,
        tracking: TrackingSession,
        orchestrator: AlertOrchestrator,
        feed: FirebaseFeed | None,
    ) -> None:
        self.config = config
        self.store = store
        self.gate = gate
        self.locator = locator
        self.tracking = tracking
        self.orchestrator = orchestrator
        self.feed = feed

    async def dispatch(self, kind: ContactKind) -> bool:
        return await self.orchestrator.dispatch(kind)

    async def async_shutdown(self) -> None:
        """Release timers and tasks; an open permission recovery resolves Denied."""
        self.orchestrator.cancel_pending()
        flow = self.gate.recovery
        if flow is not None:
            flow.cancel()
        await self.tracking.async_shutdown()


async def async_setup(
    config: dict | None,
    *,
    backend: GeolocationBackend,
    prompt: RecoveryPrompt,
    confirmer: Confirmer,
    ui: AlertUI,
    opener: LinkOpener,
    share: ShareTarget | None = None,
    clipboard: Clipboard | None = None,
) -> Guardian:
    """Validate config and build a Guardian around the host's collaborators."""
    config = validate_config(config)
    logging.getLogger(DOMAIN).setLevel(config['log_level'])

    state = SessionState()
    store = ContactStore(config['storage_path'])
    gate = PermissionGate(
        backend,
        prompt,
        request_timeout=config['permission_request_timeout'],
        poll_interval=config['permission_poll_interval'],
        max_wait=config['permission_max_wait'],
    )
    locator = LocationProvider(backend, gate)
    feed = FirebaseFeed.from_config(config['firebase'])
    tracking = TrackingSession(
        state,
        locator,
        store,
        feed,
        ui,
        origin=config['origin'],
        interval=config['tracking_interval'],
    )
    orchestrator = AlertOrchestrator(
        state,
        store,
        locator,
        tracking,
        confirmer,
        ui,
        PhoneDialer(opener),
        MessagingHandoff(opener, fallback_delay=config['messaging_fallback_delay']),
        share,
        clipboard,
        dial_delay=config['dial_delay'],
        ack_duration=config['ack_duration'],
    )
    ui.set_status('Ready')
    _LOGGER.debug("Guardian set up (live feed: %s)", feed is not None)
    return Guardian(config, store, gate, locator, tracking, orchestrator, feed)
