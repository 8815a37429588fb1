"""
Real feed integration tests for FirebaseFeed.
Requires GUARDIAN_FIREBASE_URL and GUARDIAN_FIREBASE_API_KEY environment variables to run.
Skip with:  pytest -k "not Integration"
"""

from __future__ import annotations

import os
import unittest
import uuid

from dotenv import load_dotenv

from guardian.feed import FirebaseFeed
from guardian.models import SessionState
from guardian.requests import make_request

from .test_common import make_backend, make_fix, make_store, make_tracking


class TestFeedIntegration(unittest.IsolatedAsyncioTestCase):
    """
    Integration tests that write to a real Firebase Realtime Database.
    Skipped automatically when GUARDIAN_FIREBASE_URL / GUARDIAN_FIREBASE_API_KEY are not set.
    """

    def setUp(self):
        load_dotenv()
        url = os.getenv("GUARDIAN_FIREBASE_URL")
        api_key = os.getenv("GUARDIAN_FIREBASE_API_KEY")
        if not url or not api_key:
            self.skipTest("GUARDIAN_FIREBASE_URL / GUARDIAN_FIREBASE_API_KEY not set, skipping integration tests")

        self.feed = FirebaseFeed(url, api_key, os.getenv("GUARDIAN_FIREBASE_AUTH_TOKEN") or None)
        self.session_id = "it" + uuid.uuid4().hex[:8]

    async def _read(self, node: str):
        return await make_request("GET", self.feed._url(self.session_id, node), params=self.feed._params())

    async def test_feed_is_reachable(self):
        self.assertTrue(await self.feed.check_feed_availability())

    async def test_write_meta_and_latest(self):
        await self.feed.write_meta(self.session_id, "Integration", "2026-01-01T00:00:00+00:00")
        await self.feed.write_latest(self.session_id, 52.52, 13.405, "2026-01-01T00:00:05+00:00", "Integration")

        meta = await self._read("meta")
        latest = await self._read("latest")
        self.assertEqual(meta["name"], "Integration")
        self.assertAlmostEqual(latest["lat"], 52.52)
        self.assertAlmostEqual(latest["lon"], 13.405)

    async def test_tracking_session_publishes(self):
        state = SessionState(session_id=self.session_id)
        tracking = make_tracking(state, make_backend(), make_store(name="Integration"), self.feed)
        try:
            await tracking.start(make_fix(48.8566, 2.3522))
            latest = await self._read("latest")
            self.assertAlmostEqual(latest["lat"], 48.8566)
        finally:
            await tracking.async_shutdown()
