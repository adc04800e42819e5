"""Abstract base classes for browser sessions and their execution contexts."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any


class ExecutionContext(ABC):
    """An isolated browser tab bound to a single test run.

    Implementations must not apply their own timeouts; the caller bounds every
    call with its deadline and cancels the call when it passes.
    """

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Load ``url`` and wait for the page load to finish."""

    @abstractmethod
    async def wait_ready(self, selector: str) -> None:
        """Wait until an element matching ``selector`` exists in the DOM."""

    @abstractmethod
    async def click(self, x: float, y: float) -> None:
        """Dispatch a mouse click at the given viewport coordinates."""

    @abstractmethod
    async def evaluate(self, expression: str) -> Any:
        """Evaluate ``expression`` in the page.

        If the expression yields a promise, wait for it to settle and return
        the resolved value as JSON-compatible data.
        """


class BrowserSession(ABC):
    """A long-lived browser process that hands out isolated contexts."""

    @abstractmethod
    def new_context(self) -> AbstractAsyncContextManager[ExecutionContext]:
        """Create a new isolated execution context.

        The context is closed when the returned context manager exits,
        whether or not the body raised.
        """
