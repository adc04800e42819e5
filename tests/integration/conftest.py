"""Fixtures for integration tests against a real browser and page server."""

from collections.abc import AsyncGenerator, Mapping
from contextlib import AsyncExitStack

import pytest
from aiohttp.test_utils import TestServer

from sdk_autotest.browser.playwright_session import PlaywrightSession
from sdk_autotest.errors import BrowserLaunchError
from sdk_autotest.models.config import BrowserOptions
from sdk_autotest.testing.pages import ServePagesFn, build_app


@pytest.fixture
async def serve_pages() -> AsyncGenerator[ServePagesFn, None]:
    """Return a function starting a page server for hand-written test pages."""
    servers: list[TestServer] = []

    async def _serve(
        pages: Mapping[str, str],
        delays: Mapping[str, float] | None = None,
    ) -> str:
        server = TestServer(build_app(pages, delays))
        await server.start_server()
        servers.append(server)
        return f"http://{server.host}:{server.port}"

    yield _serve

    for server in servers:
        await server.close()


@pytest.fixture
async def browser_session() -> AsyncGenerator[PlaywrightSession, None]:
    """Launch a headless Chromium, skipping when none is installed."""
    async with AsyncExitStack() as stack:
        try:
            session = await stack.enter_async_context(
                PlaywrightSession.launch(BrowserOptions())
            )
        except BrowserLaunchError as e:
            pytest.skip(f"Browser not available: {e}")
        yield session
