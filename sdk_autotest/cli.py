"""CLI entry point for running SDK tests in a browser."""

import argparse
import asyncio
import json
import logging
import sys
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from sdk_autotest.browser.playwright_session import PlaywrightSession
from sdk_autotest.config_loader import load_config
from sdk_autotest.discovery import discover_test_cases
from sdk_autotest.errors import AutotestError
from sdk_autotest.executor import TestExecutor
from sdk_autotest.page_server import wait_for_page_server
from sdk_autotest.reporter import ResultReporter, format_output
from sdk_autotest.scheduler import TestScheduler, resolve_concurrency


async def serve_forever() -> None:
    """Block until the process is interrupted."""
    await asyncio.Event().wait()


async def run(
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    json_output: bool = False,
) -> int:
    """Run the browser tests and return the exit code."""
    log = logging.getLogger("sdk_autotest")

    config = await load_config(config_path, overrides)
    settings = config.autotest
    concurrency = resolve_concurrency(settings.concurrency)

    test_cases = discover_test_cases(Path(config.test_folder))
    if not test_cases:
        log.info("No test files found")
        if json_output:
            print(json.dumps(format_output([])))
        return 0

    base_url = config.page_server_url
    if settings.preflight:
        log.info("Waiting for page server at %s", base_url)
        await wait_for_page_server(base_url)

    if settings.serve:
        log.info("Running autotest (serving on %s)", base_url)
    else:
        log.info("Running autotest")

    reporter = ResultReporter(timeout=settings.timeout, serve=settings.serve)

    async with PlaywrightSession.launch(settings.browser_options) as session:
        started = time.perf_counter()
        executor = TestExecutor(
            session=session, base_url=base_url, timeout=settings.timeout
        )
        scheduler = TestScheduler(
            executor=executor, concurrency=concurrency, on_result=reporter.report
        )
        results = await scheduler.run(test_cases)
        reporter.summarize(time.perf_counter() - started)

        if json_output:
            print(json.dumps(format_output(results), indent=2))

        if settings.serve:
            log.info("Keeping the browser open, press Ctrl+C to exit")
            await serve_forever()

    return reporter.exit_code


def collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Map CLI arguments to configuration overrides (unset flags are None)."""
    return {
        "port": args.port,
        "base_url": args.base_url,
        "test_folder": args.test_folder,
        "autotest": {
            "concurrency": args.concurrency,
            "timeout": args.timeout,
            "headless": args.headless,
            "browser": args.browser,
            "browser_exec_path": args.browser_exec_path,
            "serve": True if args.serve else None,
            "preflight": False if args.no_preflight else None,
        },
    }


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Run the SDK test pages with an instrumented browser"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the configuration file (default: sdktest.yaml)",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Keep the browser open after the run so tests can be inspected",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Number of tests to run in parallel (0 for number of cores)",
    )
    parser.add_argument(
        "--timeout",
        help="Timeout per test (e.g. '20s', '1m')",
    )
    parser.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run the browser without a window",
    )
    parser.add_argument(
        "--browser",
        choices=["chromium", "firefox", "webkit"],
        help="Browser engine to launch",
    )
    parser.add_argument(
        "--browser-exec-path",
        help="Path to a browser executable to use instead of the bundled one",
    )
    parser.add_argument("--port", type=int, help="Port of the test page server")
    parser.add_argument("--base-url", help="Base URL of the test page server")
    parser.add_argument("--test-folder", help="Directory containing the test cases")
    parser.add_argument(
        "--no-preflight",
        action="store_true",
        help="Do not wait for the page server before starting",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a JSON summary of the results to stdout",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )
    return parser


def main() -> None:
    """CLI entry point."""
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        exit_code = asyncio.run(
            run(
                config_path=args.config,
                overrides=collect_overrides(args),
                json_output=args.json,
            )
        )
    except AutotestError as e:
        logging.getLogger("sdk_autotest").error("%s", e)
        exit_code = 1
    except KeyboardInterrupt:
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
