"""Tests for the test executor."""

import asyncio

import pytest

from sdk_autotest.executor import (
    RUN_EXPRESSION,
    START_SELECTOR,
    TestExecutor,
    translate_outcome,
)
from sdk_autotest.models.result import TestCase
from sdk_autotest.testing.fakes import FakeBrowserSession, FakePage
from sdk_autotest.testing.payloads import sub_result, suite_outcome

BASE_URL = "http://localhost:8050"


def make_executor(
    pages: dict[str, FakePage], timeout: float = 1.0
) -> tuple[TestExecutor, FakeBrowserSession]:
    """Create an executor on a fake session serving ``pages``."""
    session = FakeBrowserSession(pages=pages)
    return TestExecutor(session=session, base_url=BASE_URL, timeout=timeout), session


async def test_passing_test() -> None:
    """Runs every step in order and reports a pass."""
    executor, session = make_executor({"basic": FakePage()})

    result = await executor.run(TestCase(name="basic"))

    assert result.name == "basic"
    assert result.url == "http://localhost:8050/test/basic/"
    assert result.status == "pass"
    assert result.message == ""
    assert result.internal_error is None
    assert result.duration >= 0
    assert session.contexts[0].calls == [
        "navigate:http://localhost:8050/test/basic/",
        "wait_ready:body",
        f"wait_ready:{START_SELECTOR}",
        "click:0,0",
        f"evaluate:{RUN_EXPRESSION}",
    ]
    assert session.contexts[0].closed


async def test_assertion_failure() -> None:
    """Reports the in-page errors without an internal error."""
    payload = {
        "status": "fail",
        "results": [{"status": "fail", "errors": ["expected true"]}],
    }
    executor, _ = make_executor({"broken": FakePage(payload=payload)})

    result = await executor.run(TestCase(name="broken"))

    assert result.status == "fail"
    assert result.message == "expected true"
    assert result.internal_error is None
    assert not result.timed_out


async def test_skipped_test() -> None:
    """Reports a skip reported by the page."""
    executor, _ = make_executor(
        {"skipped": FakePage(payload=suite_outcome(status="skip"))}
    )

    result = await executor.run(TestCase(name="skipped"))

    assert result.status == "skip"
    assert not result.failed


@pytest.mark.parametrize(
    ("step", "message"),
    [
        ("navigate", "waiting for browser to open page"),
        ("body", "waiting for body"),
        ("start", "waiting to start"),
        ("evaluate", "retrieving test result from browser"),
    ],
)
async def test_step_failure_is_reported(step: str, message: str) -> None:
    """Names the failed step and keeps the underlying error."""
    error = RuntimeError("Target closed")
    executor, session = make_executor(
        {"basic": FakePage(fail_at=step, error=error)}  # type: ignore[arg-type]
    )

    result = await executor.run(TestCase(name="basic"))

    assert result.status == "fail"
    assert result.message == message
    assert result.internal_error is error
    assert not result.timed_out
    assert session.contexts[0].closed


async def test_failing_focus_click_is_ignored() -> None:
    """A failed focus click does not fail the test."""
    executor, session = make_executor({"basic": FakePage(fail_at="click")})

    result = await executor.run(TestCase(name="basic"))

    assert result.status == "pass"
    assert session.contexts[0].calls[-1] == f"evaluate:{RUN_EXPRESSION}"


@pytest.mark.parametrize(
    ("step", "message"),
    [
        ("navigate", "waiting for browser to open page"),
        ("start", "waiting to start"),
        ("evaluate", "retrieving test result from browser"),
    ],
)
async def test_timeout_aborts_step_in_flight(step: str, message: str) -> None:
    """Aborts a hanging step once the deadline passes and flags a timeout."""
    executor, session = make_executor(
        {"slow": FakePage(hang_at=step)},  # type: ignore[arg-type]
        timeout=0.05,
    )

    result = await executor.run(TestCase(name="slow"))

    assert result.status == "fail"
    assert result.message == message
    assert isinstance(result.internal_error, TimeoutError)
    assert result.timed_out
    assert result.duration >= 0.05
    assert session.contexts[0].closed


async def test_timeout_covers_opening_the_context() -> None:
    """Bounds an execution context that never opens by the same deadline."""
    session = FakeBrowserSession(hang_on_open=True)
    executor = TestExecutor(session=session, base_url=BASE_URL, timeout=0.05)

    result = await asyncio.wait_for(executor.run(TestCase(name="stuck")), 2)

    assert result.status == "fail"
    assert result.message == "waiting for browser to open page"
    assert result.timed_out
    assert result.duration >= 0.05
    assert session.contexts[0].calls == []
    assert session.open_contexts == 0


async def test_duration_covers_slow_navigation() -> None:
    """Measures the whole run, including time spent navigating."""
    executor, _ = make_executor({"basic": FakePage(delay=0.05)})

    result = await executor.run(TestCase(name="basic"))

    assert result.status == "pass"
    assert result.duration >= 0.05


async def test_unrecognized_status_is_an_error() -> None:
    """Marks an unknown suite status as an error instead of accepting it."""
    payload = suite_outcome(
        status="running", results=[sub_result(status="fail", errors=["boom"])]
    )
    executor, _ = make_executor({"weird": FakePage(payload=payload)})

    result = await executor.run(TestCase(name="weird"))

    assert result.status == "error"
    assert result.message == (
        "unrecognized test status 'running'\nAssertionError: boom"
    )
    assert result.internal_error is None
    assert result.failed


async def test_each_run_gets_its_own_context() -> None:
    """Never reuses an execution context between test runs."""
    executor, session = make_executor({})

    await executor.run(TestCase(name="first"))
    await executor.run(TestCase(name="second"))

    assert len(session.contexts) == 2
    assert session.contexts[0] is not session.contexts[1]
    assert session.contexts[0].url == "http://localhost:8050/test/first/"
    assert session.contexts[1].url == "http://localhost:8050/test/second/"
    assert all(context.closed for context in session.contexts)


@pytest.mark.parametrize(
    "payload",
    [None, "pass", [], {"results": []}, {"status": 1, "results": []}],
)
def test_translate_malformed_payload(payload: object) -> None:
    """Turns payloads that are not suite outcomes into an error status."""
    status, message = translate_outcome(payload)

    assert status == "error"
    assert message.startswith("malformed test result from browser")


def test_translate_passing_payload() -> None:
    """Passes through the status of a valid payload."""
    assert translate_outcome(suite_outcome(status="pass")) == ("pass", "")
