"""Browser session management."""

from sdk_autotest.browser.base import BrowserSession, ExecutionContext
from sdk_autotest.browser.playwright_session import PlaywrightContext, PlaywrightSession

__all__ = [
    "BrowserSession",
    "ExecutionContext",
    "PlaywrightContext",
    "PlaywrightSession",
]
