"""Errors that abort a whole autotest run."""


class AutotestError(Exception):
    """Base class for fatal autotest errors."""


class ConfigurationError(AutotestError):
    """Raised when the configuration is missing or invalid."""


class BrowserLaunchError(AutotestError):
    """Raised when the browser process cannot be started."""


class PageServerUnavailableError(AutotestError):
    """Raised when the test page server does not answer in time."""
