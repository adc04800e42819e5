"""Models for test cases and test execution results."""

from dataclasses import dataclass
from typing import Literal

ResultStatus = Literal["pass", "fail", "skip", "error"]


@dataclass(frozen=True, kw_only=True)
class TestCase:
    """A test case, identified by the name of its directory."""

    __test__ = False

    name: str


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Result of running a single test case in the browser.

    ``internal_error`` is set when talking to the browser went wrong (as
    opposed to the page reporting a failed assertion). Status ``error`` marks
    a suite outcome that could not be understood.
    """

    __test__ = False

    name: str
    url: str
    status: ResultStatus
    duration: float
    message: str = ""
    internal_error: BaseException | None = None

    @property
    def timed_out(self) -> bool:
        """Whether the run was aborted by the per-test timeout."""
        return isinstance(self.internal_error, TimeoutError)

    @property
    def failed(self) -> bool:
        """Whether this result counts as a failure for the run."""
        return self.status not in {"pass", "skip"}
