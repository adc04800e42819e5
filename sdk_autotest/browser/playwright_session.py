"""Playwright implementation of the browser session manager."""

import logging
from collections.abc import AsyncGenerator, Iterator
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass, field
from typing import Any

from playwright.async_api import Browser, Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from sdk_autotest.browser.base import BrowserSession, ExecutionContext
from sdk_autotest.errors import BrowserLaunchError
from sdk_autotest.models.config import BrowserOptions

log = logging.getLogger(__name__)


@contextmanager
def _timeouts_as_builtin() -> Iterator[None]:
    """Re-raise Playwright timeouts as the builtin ``TimeoutError``."""
    try:
        yield
    except PlaywrightTimeoutError as e:
        raise TimeoutError(e.message) from e


@dataclass(frozen=True, kw_only=True)
class PlaywrightContext(ExecutionContext):
    """A page inside its own Playwright browser context."""

    page: Page = field(repr=False)

    async def navigate(self, url: str) -> None:
        """Navigate and wait for the load event."""
        with _timeouts_as_builtin():
            await self.page.goto(url, wait_until="load")

    async def wait_ready(self, selector: str) -> None:
        """Wait for the selector to be attached to the DOM."""
        with _timeouts_as_builtin():
            await self.page.wait_for_selector(selector, state="attached")

    async def click(self, x: float, y: float) -> None:
        """Click at viewport coordinates."""
        with _timeouts_as_builtin():
            await self.page.mouse.click(x, y)

    async def evaluate(self, expression: str) -> Any:
        """Evaluate and await the expression."""
        with _timeouts_as_builtin():
            return await self.page.evaluate(expression)


@dataclass(frozen=True, kw_only=True)
class PlaywrightSession(BrowserSession):
    """A launched browser from which isolated contexts are spawned."""

    browser: Browser = field(repr=False)
    # Kept open for the whole session; some browsers exit once no tab is left.
    root_page: Page = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def launch(
        cls, options: BrowserOptions
    ) -> AsyncGenerator["PlaywrightSession", None]:
        """Launch the browser and close it when the context exits.

        Raises:
            BrowserLaunchError: If the browser cannot be started

        """
        async with async_playwright() as playwright:
            browser_type = getattr(playwright, options.browser)
            log.info(
                "Launching browser: browser=%s, headless=%s, executable_path=%s",
                options.browser,
                options.headless,
                options.executable_path,
            )
            try:
                browser = await browser_type.launch(
                    headless=options.headless,
                    executable_path=options.executable_path,
                )
            except PlaywrightError as e:
                raise BrowserLaunchError(
                    f"Failed to launch {options.browser}: {e.message}"
                ) from e

            try:
                try:
                    root_context = await browser.new_context()
                    root_page = await root_context.new_page()
                except PlaywrightError as e:
                    raise BrowserLaunchError(
                        f"Failed to open a page in {options.browser}: {e.message}"
                    ) from e
                yield cls(browser=browser, root_page=root_page)
            finally:
                try:
                    await browser.close()
                except PlaywrightError as e:
                    log.warning("Failed to close browser: %s", e.message)

    @asynccontextmanager
    async def new_context(self) -> AsyncGenerator[PlaywrightContext, None]:
        """Open a fresh browser context with a single page."""
        context = await self.browser.new_context()
        try:
            # The executor owns the deadline.
            context.set_default_timeout(0)
            context.set_default_navigation_timeout(0)
            page = await context.new_page()
            yield PlaywrightContext(page=page)
        finally:
            try:
                await context.close()
            except PlaywrightError as e:
                log.warning("Failed to close browser context: %s", e.message)
