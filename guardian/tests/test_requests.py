"""
Tests for the aiohttp request helpers.
"""

from __future__ import annotations

import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from guardian.errors import FeedResponseError
from guardian.requests import check_availability, make_request


def _mock_response(status=200, json_data=None, content_type="application/json", text=""):
    resp = MagicMock()
    resp.status = status
    resp.headers = {"Content-Type": content_type}
    resp.json = AsyncMock(return_value=json_data)
    resp.text = AsyncMock(return_value=text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _mock_session(request=None, get=None):
    session = MagicMock()
    session.request = request or AsyncMock()
    session.get = get or MagicMock()
    session.close = AsyncMock()
    return session


class TestMakeRequest(unittest.IsolatedAsyncioTestCase):

    async def test_returns_json_on_success(self):
        session = _mock_session(request=AsyncMock(return_value=_mock_response(json_data={"ok": 1})))

        with patch("guardian.requests.aiohttp.ClientSession", return_value=session):
            result = await make_request("put", "https://x.example/a.json", payload={"a": 1})

        self.assertEqual(result, {"ok": 1})
        session.request.assert_awaited_once()
        self.assertEqual(session.request.await_args.args[0], "PUT")
        session.close.assert_awaited()

    async def test_retries_on_timeout_then_succeeds(self):
        responses = [asyncio.TimeoutError(), _mock_response(json_data={"ok": 2})]
        sessions = [
            _mock_session(request=AsyncMock(side_effect=[responses[0]])),
            _mock_session(request=AsyncMock(return_value=responses[1])),
        ]

        with patch("guardian.requests.aiohttp.ClientSession", side_effect=sessions):
            result = await make_request("GET", "https://x.example/a.json", max_attempts=2)

        self.assertEqual(result, {"ok": 2})

    async def test_raises_after_all_timeouts(self):
        with patch(
            "guardian.requests.aiohttp.ClientSession",
            side_effect=lambda **kw: _mock_session(request=AsyncMock(side_effect=asyncio.TimeoutError())),
        ):
            with self.assertRaises(asyncio.TimeoutError):
                await make_request("GET", "https://x.example/a.json", max_attempts=2)

    async def test_error_payload_raises_feed_response_error(self):
        resp = _mock_response(status=401, json_data={"error": "Permission denied"})
        session = _mock_session(request=AsyncMock(return_value=resp))

        with patch("guardian.requests.aiohttp.ClientSession", return_value=session):
            with self.assertRaises(FeedResponseError) as ctx:
                await make_request("PUT", "https://x.example/a.json", payload={})

        self.assertEqual(ctx.exception.error_json, {"error": "Permission denied"})

    async def test_non_json_response_raises_value_error(self):
        resp = _mock_response(status=502, content_type="text/html", text="<html>bad gateway</html>")
        session = _mock_session(request=AsyncMock(return_value=resp))

        with patch("guardian.requests.aiohttp.ClientSession", return_value=session):
            with self.assertRaises(ValueError):
                await make_request("GET", "https://x.example/a.json")

    async def test_unsupported_method(self):
        with self.assertRaises(ValueError):
            await make_request("DELETE", "https://x.example/a.json")


class TestCheckAvailability(unittest.IsolatedAsyncioTestCase):

    async def test_reachable(self):
        session = _mock_session(get=MagicMock(return_value=_mock_response(status=401)))
        with patch("guardian.requests.aiohttp.ClientSession", return_value=session):
            self.assertTrue(await check_availability("https://x.example/.json"))

    async def test_server_error(self):
        session = _mock_session(get=MagicMock(return_value=_mock_response(status=503)))
        with patch("guardian.requests.aiohttp.ClientSession", return_value=session):
            self.assertFalse(await check_availability("https://x.example/.json"))

    async def test_timeout(self):
        session = _mock_session(get=MagicMock(side_effect=asyncio.TimeoutError()))
        with patch("guardian.requests.aiohttp.ClientSession", return_value=session):
            self.assertFalse(await check_availability("https://x.example/.json"))
