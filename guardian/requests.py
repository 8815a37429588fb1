"""
Low-level HTTP helpers for the live-location feed.
Requests retry on timeout only; every other failure propagates to the caller.
"""
import asyncio
import logging
import aiohttp

from .const import FEED_REQUEST_ATTEMPTS, FEED_REQUEST_TIMEOUT
from .errors import FeedResponseError

_LOGGER = logging.getLogger(__name__)


async def check_availability(url: str, timeout: int = 15) -> bool:
    """
    Check whether url answers at all.

    Args:
        url: Address to probe with a shallow GET
        timeout: Timeout in seconds for the probe

    Returns:
        True if the server answered with a non-5xx status, False otherwise
    """
    try:
        timeout_config = aiohttp.ClientTimeout(total=timeout)
        session = aiohttp.ClientSession(timeout=timeout_config)

        try:
            async with session.get(url, params={"shallow": "true"}) as response:
                if response.status >= 500:
                    _LOGGER.warning("Feed URL is not reachable (status %s)", response.status)
                    return False
                return True
        finally:
            await session.close()

    except (asyncio.TimeoutError, TimeoutError):
        _LOGGER.warning("Timeout while checking feed URL")
        return False
    except Exception as e:  # noqa: BLE001
        _LOGGER.error("Error while checking feed availability: %s", e)
        return False


async def make_request(
    method: str,
    url: str,
    headers: dict = None,
    payload: dict = None,
    params: dict = None,
    timeout: int = FEED_REQUEST_TIMEOUT,
    max_attempts: int = FEED_REQUEST_ATTEMPTS,
):
    """
    Make an HTTP request with automatic retry on timeout.

    Args:
        method: HTTP method (GET, PUT or PATCH)
        url: Target URL for the request
        headers: HTTP headers dictionary (optional)
        payload: JSON payload for PUT/PATCH requests (optional)
        params: URL query parameters (optional)
        timeout: Base timeout in seconds (multiplied by attempt number for each retry)
        max_attempts: Maximum number of attempts

    Returns:
        Parsed JSON response

    Raises:
        asyncio.TimeoutError: If all attempts time out
        FeedResponseError: If the server answers with a JSON error body
        ValueError: If the response is not JSON or the method is unsupported
    """
    method = method.upper()
    if method not in ("GET", "PUT", "PATCH"):
        raise ValueError(f"Unsupported HTTP method: {method}")
    headers = headers or {"accept": "application/json"}

    for attempt in range(max_attempts):
        timeout_config = aiohttp.ClientTimeout(total=timeout * (attempt + 1))
        session = aiohttp.ClientSession(timeout=timeout_config)
        try:
            response = await session.request(
                method, url, headers=headers, json=payload, params=params
            )
            return await _process_response(response, url)

        except (asyncio.TimeoutError, TimeoutError):
            if attempt < max_attempts - 1:
                _LOGGER.debug("Timeout on %s %s, attempt %s", method, url, attempt + 1)
                continue
            _LOGGER.warning(
                "Timeout on %s request to %s after %s attempts",
                method, url, max_attempts
            )
            raise

        finally:
            await session.close()

    return None


async def _process_response(response, url: str):
    """
    Extract JSON data from a response.

    Raises:
        FeedResponseError: For JSON error bodies
        ValueError: For non-JSON responses
    """
    content_type = response.headers.get('Content-Type', '')

    if response.status == 200:
        if 'application/json' in content_type:
            return await response.json()
        text = await response.text()
        _LOGGER.warning(
            "Unexpected content type in successful response: %s from %s",
            content_type, url
        )
        raise ValueError(f"Expected JSON but got {content_type}: {text[:200]}")

    if 'application/json' in content_type:
        error_json = await response.json()
        if isinstance(error_json, dict) and error_json.get("error"):
            raise FeedResponseError(error_json)
        raise ValueError(f"HTTP {response.status} from {url}: {error_json}")

    text = await response.text()
    _LOGGER.warning(
        "Received non-JSON error response from %s: status %s, content-type: %s, body preview: %s",
        url, response.status, content_type, text[:200]
    )
    raise ValueError(
        f"HTTP {response.status} with {content_type} "
        f"(expected application/json) from {url}"
    )
