"""Check that the test page server is reachable before starting the browser."""

import asyncio
import logging

import aiohttp

from sdk_autotest.errors import PageServerUnavailableError

log = logging.getLogger(__name__)

LISTING_PATH = "/test/"


def page_url(base_url: str, name: str) -> str:
    """URL of the rendered page for a test case."""
    return f"{base_url.rstrip('/')}/test/{name}/"


async def wait_for_page_server(
    base_url: str,
    timeout: float = 30,
    poll_interval: float = 0.5,
) -> None:
    """Wait until the page server answers the test listing request.

    Any response below 500 counts as up; connection errors and server errors
    are retried until the deadline.

    Args:
        base_url: Base URL of the page server
        timeout: Maximum wait time in seconds
        poll_interval: Seconds between attempts

    Raises:
        PageServerUnavailableError: If the server does not answer in time

    """
    deadline = asyncio.get_running_loop().time() + timeout
    url = f"{base_url.rstrip('/')}{LISTING_PATH}"
    request_timeout = aiohttp.ClientTimeout(total=max(poll_interval, 1.0))
    last_error = "no response"

    async with aiohttp.ClientSession(timeout=request_timeout) as session:
        while True:
            try:
                async with session.get(url, allow_redirects=True) as response:
                    if response.status < 500:
                        log.debug("Page server is up: %s (%d)", url, response.status)
                        return
                    last_error = f"HTTP {response.status}"
            except (aiohttp.ClientError, TimeoutError) as e:
                last_error = str(e) or type(e).__name__

            if asyncio.get_running_loop().time() >= deadline:
                raise PageServerUnavailableError(
                    f"Page server at {base_url} did not respond within "
                    f"{timeout} seconds ({last_error})"
                )

            log.debug("Waiting for page server at %s: %s", url, last_error)
            await asyncio.sleep(poll_interval)
