"""
Tests for LocationProvider: single fixes and the permission-guarded helper.
"""

from __future__ import annotations

import asyncio
import unittest
from unittest.mock import AsyncMock

from guardian.errors import LocationUnavailable, PermissionDenied
from guardian.location import LocationProvider

from .test_common import make_backend, make_fix, make_gate


class TestGetFix(unittest.IsolatedAsyncioTestCase):

    async def test_returns_backend_fix(self):
        fix = make_fix(48.8566, 2.3522)
        backend = make_backend(fix=fix)
        provider = LocationProvider(backend, make_gate(backend))

        result = await provider.get_fix(high_accuracy=False, timeout=2)

        self.assertEqual(result, fix)
        backend.current_position.assert_awaited_once_with(False, 2)

    async def test_provider_error_raises_location_unavailable(self):
        backend = make_backend(position_error=RuntimeError("POSITION_UNAVAILABLE"))
        provider = LocationProvider(backend, make_gate(backend))

        with self.assertRaises(LocationUnavailable):
            await provider.get_fix()

    async def test_timeout_raises_location_unavailable(self):
        backend = make_backend()

        async def slow(high_accuracy, timeout):
            await asyncio.sleep(10)

        backend.current_position = slow
        provider = LocationProvider(backend, make_gate(backend))

        with self.assertRaises(LocationUnavailable):
            await provider.get_fix(timeout=0.05)

    async def test_single_shot_no_retry(self):
        backend = make_backend(position_error=RuntimeError("boom"))
        provider = LocationProvider(backend, make_gate(backend))

        with self.assertRaises(LocationUnavailable):
            await provider.get_fix()
        self.assertEqual(backend.current_position.await_count, 1)


class TestGetLocationWithPermission(unittest.IsolatedAsyncioTestCase):

    async def test_granted_returns_fix(self):
        fix = make_fix(1.5, 2.5)
        backend = make_backend("granted", fix=fix)
        provider = LocationProvider(backend, make_gate(backend))

        self.assertEqual(await provider.get_location_with_permission(), fix)

    async def test_denied_fails_fast_without_position_request(self):
        backend = make_backend("denied")
        gate = make_gate(backend)
        provider = LocationProvider(backend, gate)

        task = asyncio.ensure_future(provider.get_location_with_permission())
        await asyncio.sleep(0.03)
        gate.recovery.cancel()

        with self.assertRaises(PermissionDenied):
            await task
        backend.current_position.assert_not_awaited()

    async def test_location_failure_after_grant(self):
        backend = make_backend("granted")
        backend.current_position = AsyncMock(side_effect=OSError("gps off"))
        provider = LocationProvider(backend, make_gate(backend))

        with self.assertRaises(LocationUnavailable):
            await provider.get_location_with_permission()
