"""Run test cases with bounded concurrency."""

import asyncio
import logging
import os
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import TypeAlias

from sdk_autotest.errors import ConfigurationError
from sdk_autotest.executor import TestExecutor
from sdk_autotest.models.result import TestCase, TestResult
from sdk_autotest.page_server import page_url

log = logging.getLogger(__name__)

ResultCallback: TypeAlias = Callable[[TestResult], None]


def resolve_concurrency(concurrency: int) -> int:
    """Return the number of workers for a configured concurrency.

    Raises:
        ConfigurationError: If concurrency is negative

    """
    if concurrency < 0:
        raise ConfigurationError(
            "Concurrency must be positive, or zero for number of cores"
        )
    if concurrency == 0:
        return os.cpu_count() or 1
    return concurrency


@dataclass(frozen=True, kw_only=True)
class TestScheduler:
    """Fans test cases out to a fixed pool of workers and joins on them."""

    __test__ = False

    executor: TestExecutor
    concurrency: int
    on_result: ResultCallback = field(default=lambda result: None)

    async def run(self, test_cases: Sequence[TestCase]) -> Sequence[TestResult]:
        """Run every test case exactly once.

        Args:
            test_cases: Test cases to run

        Returns:
            One result per test case, in completion order

        """
        if not test_cases:
            log.info("No test cases provided")
            return []

        workers = min(resolve_concurrency(self.concurrency), len(test_cases))
        queue: asyncio.Queue[TestCase] = asyncio.Queue()
        for test_case in test_cases:
            queue.put_nowait(test_case)

        results: list[TestResult] = []
        log.info(
            "Running %d test(s) with %d worker(s)...", len(test_cases), workers
        )
        tasks = [
            asyncio.create_task(self._worker(queue, results), name=f"worker-{i}")
            for i in range(workers)
        ]
        try:
            await queue.join()
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        log.info("Test execution completed")
        return results

    async def _worker(
        self, queue: asyncio.Queue[TestCase], results: list[TestResult]
    ) -> None:
        """Pull test cases off the queue until cancelled."""
        while True:
            test_case = await queue.get()
            try:
                result = await self._run_one(test_case)
                results.append(result)
                self._notify(result)
            finally:
                queue.task_done()

    async def _run_one(self, test_case: TestCase) -> TestResult:
        """Run one test case, turning unexpected exceptions into a failed result."""
        started = time.perf_counter()
        try:
            return await self.executor.run(test_case)
        except Exception as e:
            log.error("Test %s crashed: %s", test_case.name, e, exc_info=e)
            return TestResult(
                name=test_case.name,
                url=page_url(self.executor.base_url, test_case.name),
                status="fail",
                duration=time.perf_counter() - started,
                message="running test",
                internal_error=e,
            )

    def _notify(self, result: TestResult) -> None:
        try:
            self.on_result(result)
        except Exception as e:
            log.error("Reporting result of %s failed: %s", result.name, e, exc_info=e)
