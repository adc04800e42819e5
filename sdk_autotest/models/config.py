"""Models for the autotest configuration loaded from sdktest.yaml."""

import math
import re
from typing import Annotated, Literal

from pydantic import BeforeValidator, Field

from sdk_autotest.models.base import Model

DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: object) -> float:
    """Parse a duration into seconds.

    Accepts numbers (seconds) and Go-style strings such as ``"20s"``,
    ``"1m30s"``, ``"1500ms"`` or ``"250us"``.

    Raises:
        ValueError: If the value is not a finite duration

    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, int | float):
        return _finite(float(value), value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid duration: {value!r}")

    text = value.strip()
    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        return _finite(seconds, value)

    position = 0
    total = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * DURATION_UNITS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(text):
        raise ValueError(f"Invalid duration: {value!r}")
    return total


def _finite(seconds: float, value: object) -> float:
    if not math.isfinite(seconds):
        raise ValueError(f"Invalid duration: {value!r}")
    return seconds


Duration = Annotated[float, BeforeValidator(parse_duration)]


class BrowserOptions(Model):
    """Options for launching the browser process."""

    browser: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium", description="Browser engine to launch"
    )
    headless: bool = Field(default=True, description="Run without a visible window")
    executable_path: str | None = Field(
        default=None, description="Custom browser executable (None uses bundled)"
    )


class AutotestSettings(Model):
    """The ``autotest`` section of the configuration."""

    concurrency: int = Field(
        default=0, ge=0, description="Parallel tests (0 means number of cores)"
    )
    timeout: Duration = Field(default=20.0, gt=0, description="Per-test timeout")
    headless: bool = Field(default=True, description="Run the browser headless")
    browser: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium", description="Browser engine to launch"
    )
    browser_exec_path: str | None = Field(
        default=None, description="Custom browser executable path"
    )
    serve: bool = Field(
        default=False, description="Keep the browser open after the run finishes"
    )
    preflight: bool = Field(
        default=True, description="Wait for the page server before running tests"
    )

    @property
    def browser_options(self) -> BrowserOptions:
        """Options for the browser session manager."""
        return BrowserOptions(
            browser=self.browser,
            headless=self.headless,
            executable_path=self.browser_exec_path or None,
        )


class Config(Model):
    """Complete configuration loaded from sdktest.yaml."""

    port: int = Field(default=8050, gt=0, lt=65536, description="Page server port")
    base_url: str | None = Field(
        default=None, description="Page server base URL (defaults to localhost:port)"
    )
    test_folder: str = Field(default="test", description="Directory of test cases")
    autotest: AutotestSettings = Field(default_factory=AutotestSettings)

    @property
    def page_server_url(self) -> str:
        """Base URL of the page server without a trailing slash."""
        if self.base_url:
            return self.base_url.rstrip("/")
        return f"http://localhost:{self.port}"
