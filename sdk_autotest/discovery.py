"""Discover test cases in the test folder."""

import logging
from collections.abc import Sequence
from pathlib import Path

from sdk_autotest.errors import ConfigurationError
from sdk_autotest.models.result import TestCase

log = logging.getLogger(__name__)


def discover_test_cases(test_folder: Path) -> Sequence[TestCase]:
    """List the test cases in a test folder.

    Every top-level subdirectory is a test case named after the directory.
    Hidden directories are skipped.

    Args:
        test_folder: Root directory containing one directory per test case

    Returns:
        Test cases sorted by name

    Raises:
        ConfigurationError: If the test folder does not exist

    """
    if not test_folder.is_dir():
        raise ConfigurationError(f"Test folder not found: {test_folder}")

    names = sorted(
        entry.name
        for entry in test_folder.iterdir()
        if entry.is_dir() and not entry.name.startswith(".")
    )
    log.debug("Found %d test case(s) in %s", len(names), test_folder)
    return [TestCase(name=name) for name in names]
