"""
Live-location tracking session.

Responsibilities:
- Own the session id (persisted in the contact store until stop()).
- Publish session metadata and coordinates to the remote feed, if any.
- Drive the recurring push timer. Each iteration runs as its own task so
  that stop() only has to cancel the timer: an iteration already in flight
  may finish its write, nothing new is scheduled afterwards. A tick that
  finds the previous iteration still pending is skipped.

Feed write failures are logged here and never reach the caller.
"""
from __future__ import annotations

import asyncio
import logging
import uuid

from .const import DEFAULT_ORIGIN, SESSION_ID_KEY, SESSION_ID_LENGTH, TRACKING_INTERVAL
from .contracts import AlertUI, RemoteFeed
from .errors import GuardianError, RemoteFeedWriteFailed
from .location import LocationProvider
from .message import live_track_url
from .models import LocationFix, SessionState, utcnow
from .store import ContactStore

_LOGGER = logging.getLogger(__name__)


class TrackingSession:
    """At most one active session per SessionState; start() and stop() are idempotent."""

    def __init__(
        self,
        state: SessionState,
        locator: LocationProvider,
        store: ContactStore,
        feed: RemoteFeed | None = None,
        ui: AlertUI | None = None,
        *,
        origin: str = DEFAULT_ORIGIN,
        interval: float = TRACKING_INTERVAL,
    ) -> None:
        self._state = state
        self._locator = locator
        self._store = store
        self._feed = feed
        self._ui = ui
        self.origin = origin
        self.interval = interval

        self._timer: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def is_active(self) -> bool:
        return self._state.active

    @property
    def session_id(self) -> str | None:
        return self._state.session_id

    @property
    def feed_configured(self) -> bool:
        return self._feed is not None

    def live_url(self) -> str | None:
        """Shareable viewer URL, only when a feed is configured and a session id exists."""
        if self._feed is None or not self._state.session_id:
            return None
        return live_track_url(self.origin, self._state.session_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, initial_fix: LocationFix) -> bool:
        """
        Start the session. No-op returning False when already active.

        State is claimed before the first await, so overlapping calls cannot
        start a second timer.
        """
        if self._state.active:
            return False

        session_id = self._state.session_id or self._store.get(SESSION_ID_KEY) or self._new_session_id()
        self._store.set(SESSION_ID_KEY, session_id)
        self._state.session_id = session_id
        self._state.started_at = utcnow()
        self._state.active = True
        self._timer = asyncio.ensure_future(self._run_timer(session_id))
        _LOGGER.info("Live tracking started (session %s)", session_id)

        if self._ui is not None:
            self._ui.tracking_changed(True)
            self._ui.set_status("Live tracking active")
            self._ui.toast("Live tracking started")

        await self._write_meta(session_id)
        await self.publish_fix(initial_fix, session_id)
        return True

    async def ensure_started(self, fix: LocationFix) -> None:
        """Start with fix as the initial snapshot, or push it to the running session."""
        if not await self.start(fix):
            await self.publish_fix(fix)

    def stop(self) -> bool:
        """Cancel the timer, clear the session id and mark inactive. No-op returning False when inactive."""
        if not self._state.active:
            return False

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        previous = self._state.session_id
        self._state.active = False
        self._state.session_id = None
        self._state.started_at = None
        self._store.delete(SESSION_ID_KEY)
        _LOGGER.info("Live tracking stopped (session %s)", previous)

        if self._ui is not None:
            self._ui.tracking_changed(False)
            self._ui.set_status("Live tracking stopped")
            self._ui.toast("Live tracking stopped")
        return True

    async def async_shutdown(self) -> None:
        """Stop the session and cancel iterations still in flight."""
        self.stop()
        for task in list(self._inflight):
            task.cancel()
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)
        self._inflight.clear()

    # ------------------------------------------------------------------
    # Feed writes
    # ------------------------------------------------------------------

    async def publish_fix(self, fix: LocationFix, session_id: str | None = None) -> None:
        """Overwrite tracks/<sid>/latest. Last write wins."""
        session_id = session_id or self._state.session_id
        if not session_id:
            return
        if self._feed is None:
            _LOGGER.debug("Tracking (no feed): %.6f, %.6f", fix.latitude, fix.longitude)
            return
        try:
            await self._feed.write_latest(
                session_id,
                fix.latitude,
                fix.longitude,
                fix.captured_at.isoformat(),
                self._store.display_name(),
            )
        except RemoteFeedWriteFailed as exc:
            _LOGGER.warning("Feed write failed: %s", exc)

    async def _write_meta(self, session_id: str) -> None:
        if self._feed is None:
            return
        try:
            await self._feed.write_meta(
                session_id, self._store.display_name(), self._state.started_at.isoformat()
            )
        except RemoteFeedWriteFailed as exc:
            _LOGGER.warning("Feed write failed: %s", exc)

    # ------------------------------------------------------------------
    # Recurring timer
    # ------------------------------------------------------------------

    async def _run_timer(self, session_id: str) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if not self._state.active or self._state.session_id != session_id:
                return
            # One iteration at a time; a blocked permission recovery would otherwise pile them up
            if self._inflight:
                _LOGGER.debug("Previous tracking update still pending, skipping this tick")
                continue
            task = asyncio.ensure_future(self._iterate(session_id))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def _iterate(self, session_id: str) -> None:
        """One push. A failed iteration is logged; the timer keeps running."""
        try:
            fix = await self._locator.get_location_with_permission()
        except GuardianError as exc:
            _LOGGER.warning("Tracking update failed: %s", exc)
            return
        except Exception as exc:  # noqa: BLE001
            _LOGGER.error("Unexpected error in tracking update: %s", exc)
            return
        await self.publish_fix(fix, session_id)

    @staticmethod
    def _new_session_id() -> str:
        return uuid.uuid4().hex[:SESSION_ID_LENGTH]
