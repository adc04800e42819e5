"""Report test results as they arrive and summarize the run."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sdk_autotest.models.result import TestResult


def format_duration(seconds: float) -> str:
    """Format a duration in seconds for display."""
    return f"({seconds:.2f}s)"


def describe_error(error: BaseException) -> str:
    """Short description of an internal error."""
    return str(error) or type(error).__name__


@dataclass(kw_only=True)
class ResultReporter:
    """Logs one line per test result and tracks whether any test failed."""

    timeout: float
    serve: bool = False
    log: logging.Logger = field(
        default_factory=lambda: logging.getLogger("sdk_autotest")
    )
    failed: bool = field(default=False, init=False)

    def report(self, result: TestResult) -> None:
        """Log a single result and update the failure flag."""
        if result.failed:
            self.failed = True

        timing = format_duration(result.duration)
        match result.status:
            case "pass":
                self.log.info("PASS %s %s", result.name, timing)
            case "skip":
                self.log.info("SKIP %s %s", result.name, timing)
            case "fail":
                self._report_failure(result, timing)
            case _:
                self.log.error(
                    "ERROR Invalid test result status: %s %s", result.name, timing
                )
                if result.message:
                    self.log.error("  Message: %s", result.message)

    def _report_failure(self, result: TestResult, timing: str) -> None:
        if result.timed_out:
            self.log.error(
                "FAIL %s Timeout exceeded (%ss) %s",
                result.name,
                f"{self.timeout:g}",
                result.message,
            )
        elif result.internal_error is not None:
            self.log.error(
                "FAIL %s AUTOTEST ERROR: %s %s %s",
                result.name,
                describe_error(result.internal_error),
                result.message,
                timing,
            )
        else:
            self.log.error("FAIL %s %s %s", result.name, result.message, timing)

        # Link for opening the failed test by hand.
        if self.serve:
            self.log.error("^^^^ %s", result.url)

    def summarize(self, elapsed: float) -> None:
        """Log the final line with the total wall-clock duration of the run."""
        timing = format_duration(elapsed)
        if self.failed:
            self.log.error("Done testing, one or more tests failed %s", timing)
        else:
            self.log.info("Done testing %s", timing)

    @property
    def exit_code(self) -> int:
        """Process exit status for the run."""
        return 1 if self.failed else 0


def format_output(results: Sequence[TestResult]) -> dict[str, Any]:
    """Format results for JSON output."""
    all_results = [
        {
            "name": result.name,
            "url": result.url,
            "status": result.status,
            "duration": result.duration,
            "message": result.message,
            "timeout": result.timed_out,
            "internal_error": (
                describe_error(result.internal_error)
                if result.internal_error is not None
                else None
            ),
        }
        for result in results
    ]

    return {
        "total": len(all_results),
        "passed": sum(1 for r in results if r.status == "pass"),
        "failed": sum(1 for r in results if r.status == "fail"),
        "skipped": sum(1 for r in results if r.status == "skip"),
        "errors": sum(
            1 for r in results if r.status not in {"pass", "fail", "skip"}
        ),
        "timeouts": sum(1 for r in results if r.timed_out),
        "results": all_results,
    }
