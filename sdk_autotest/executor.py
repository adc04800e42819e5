"""Run a single test case in an isolated browser context."""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, cast

from pydantic import ValidationError

from sdk_autotest.browser.base import BrowserSession
from sdk_autotest.models.result import ResultStatus, TestCase, TestResult
from sdk_autotest.models.suite import SuiteOutcome
from sdk_autotest.page_server import page_url

log = logging.getLogger(__name__)

BODY_SELECTOR = "body"
# Added by the page once the in-page harness is set up.
START_SELECTOR = ".sdktest-start"
RUN_EXPRESSION = "window.sdktest.run()"


class Step(StrEnum):
    """Steps of a test run that can fail, valued by their failure message."""

    NAVIGATE = "waiting for browser to open page"
    WAIT_BODY = "waiting for body"
    WAIT_START = "waiting to start"
    RUN_SUITE = "retrieving test result from browser"


def translate_outcome(payload: Any) -> tuple[ResultStatus, str]:
    """Map the value resolved by the in-page runner to a status and message.

    A payload that is not a suite outcome, or carries an unknown status,
    yields status ``error``.
    """
    try:
        outcome = SuiteOutcome.model_validate(payload)
    except ValidationError as e:
        return "error", f"malformed test result from browser: {e}"

    message = outcome.error_message()
    if not outcome.has_known_status:
        prefix = f"unrecognized test status {outcome.status!r}"
        return "error", f"{prefix}\n{message}" if message else prefix

    return cast(ResultStatus, outcome.status), message


@dataclass(frozen=True, kw_only=True)
class TestExecutor:
    """Runs test cases one at a time, each in its own execution context."""

    __test__ = False

    session: BrowserSession
    base_url: str
    timeout: float

    async def run(self, test_case: TestCase) -> TestResult:
        """Run a test case to completion.

        Every step, acquiring the context included, shares one deadline.
        Browser failures and the deadline produce a ``fail`` result naming the
        step that was in flight; they are never raised.
        """
        url = page_url(self.base_url, test_case.name)
        started = time.perf_counter()
        step = Step.NAVIGATE

        try:
            async with (
                asyncio.timeout(self.timeout),
                self.session.new_context() as context,
            ):
                await context.navigate(url)

                step = Step.WAIT_BODY
                await context.wait_ready(BODY_SELECTOR)

                step = Step.WAIT_START
                await context.wait_ready(START_SELECTOR)

                # Gives the page focus, needed for focus events on form elements.
                try:
                    await context.click(0, 0)
                except Exception as e:
                    log.debug("Focus click failed for %s: %s", test_case.name, e)

                step = Step.RUN_SUITE
                payload = await context.evaluate(RUN_EXPRESSION)
        except Exception as e:
            duration = time.perf_counter() - started
            log.debug(
                "Test %s failed while %s: %r", test_case.name, step.value, e
            )
            return TestResult(
                name=test_case.name,
                url=url,
                status="fail",
                duration=duration,
                message=step.value,
                internal_error=e,
            )

        status, message = translate_outcome(payload)
        return TestResult(
            name=test_case.name,
            url=url,
            status=status,
            duration=time.perf_counter() - started,
            message=message,
        )
