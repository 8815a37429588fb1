"""
Live-location feed backed by the Firebase Realtime Database REST API.

Layout written per tracking session:
    tracks/<sid>/meta   = {name, startedAt}      once, at session start
    tracks/<sid>/latest = {lat, lon, ts, name}   overwritten on every fix

Corresponding CURL command:
curl -X 'PUT' \
  '<database_url>/tracks/<sid>/latest.json?auth=<token>' \
  -d '{"lat": 52.52, "lon": 13.41, "ts": "2026-01-01T00:00:00+00:00", "name": "Ann"}'
"""
from __future__ import annotations

import asyncio
import logging

from .errors import FeedResponseError, RemoteFeedWriteFailed
from .requests import check_availability, make_request

_LOGGER = logging.getLogger(__name__)


class FirebaseFeed:
    """Write-only client for the tracks/ tree."""

    def __init__(self, database_url: str, api_key: str, auth_token: str | None = None) -> None:
        self.database_url = database_url.rstrip("/")
        self.api_key = api_key
        self.auth_token = auth_token

    @classmethod
    def from_config(cls, config: dict | None) -> "FirebaseFeed | None":
        """
        Build a feed from the firebase config block.

        Returns None unless both database_url and api_key are present, which
        is how the rest of the package learns that live tracking has no
        remote backend.
        """
        if not config:
            return None
        database_url = config.get("database_url") or ""
        api_key = config.get("api_key") or ""
        if not database_url or not api_key:
            _LOGGER.debug("Firebase config incomplete, live feed disabled")
            return None
        _LOGGER.info("Firebase ready for live-tracking")
        return cls(database_url, api_key, config.get("auth_token") or None)

    def _url(self, session_id: str, node: str) -> str:
        return f"{self.database_url}/tracks/{session_id}/{node}.json"

    def _params(self) -> dict | None:
        if self.auth_token:
            return {"auth": self.auth_token}
        return None

    async def _put(self, session_id: str, node: str, payload: dict) -> None:
        url = self._url(session_id, node)
        try:
            await make_request("PUT", url, payload=payload, params=self._params())
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise RemoteFeedWriteFailed(f"Timeout writing {node} for session {session_id}") from exc
        except FeedResponseError as exc:
            raise RemoteFeedWriteFailed(f"Feed rejected {node} for session {session_id}: {exc.error_json}") from exc
        except Exception as exc:  # noqa: BLE001
            raise RemoteFeedWriteFailed(f"Failed to write {node} for session {session_id}: {exc}") from exc

    async def write_meta(self, session_id: str, name: str, started_at: str) -> None:
        await self._put(session_id, "meta", {"name": name, "startedAt": started_at})

    async def write_latest(self, session_id: str, lat: float, lon: float, ts: str, name: str) -> None:
        await self._put(session_id, "latest", {"lat": lat, "lon": lon, "ts": ts, "name": name})

    async def check_feed_availability(self, timeout: int = 15) -> bool:
        """Diagnostics only; never consulted before a write."""
        return await check_availability(f"{self.database_url}/.json", timeout=timeout)
