"""Pydantic models for the suite outcome returned by the in-page test runner."""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field

KNOWN_STATUSES: frozenset[str] = frozenset({"pass", "fail", "skip"})


class InPageModel(BaseModel):
    """Base for payloads produced by the browser (camelCase keys)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class InPageError(InPageModel):
    """An error thrown inside a test page, as serialized by the harness."""

    message: str | None = None
    stack: str | None = None
    line_number: int | None = Field(default=None, alias="lineNumber")
    column_number: int | None = Field(default=None, alias="columnNumber")
    file_name: str | None = Field(default=None, alias="fileName")


class SubResult(InPageModel):
    """Result of a single in-page test function."""

    status: str
    raw_errors: Sequence[InPageError] = Field(default_factory=list, alias="rawErrors")
    errors: Sequence[str] = Field(default_factory=list)


class SuiteOutcome(InPageModel):
    """Result of a whole test page, resolved by ``window.sdktest.run()``.

    The status is kept as a plain string so that an unexpected value can be
    reported instead of failing validation.
    """

    status: str
    results: Sequence[SubResult] = Field(default_factory=list)

    @property
    def has_known_status(self) -> bool:
        """Whether the top-level status is one the harness is allowed to emit."""
        return self.status in KNOWN_STATUSES

    def error_message(self) -> str:
        """Join every error string of every sub-result, in order."""
        return "\n".join(error for result in self.results for error in result.errors)
