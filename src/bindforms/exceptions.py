"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

GENERIC_BACKEND_ERROR = "GenericBackendError"


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class AsyncExecutionError(PackageError):
    """Raised when an async operation fails in compatibility runner."""

    result: BaseException
    message: str = "Async operation failed"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.result}"


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when optional runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass
class DefinitionError(PackageError):
    """Raised when a form definition cannot be loaded."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass
class SubmissionError(PackageError):
    """Rejection raised by submit operations.

    A structured rejection sets ``error_category`` to ``GenericBackendError`` and carries
    ``details={"issues": [{"field": ..., "message": ..., "severity": ...}]}``.
    """

    message: str
    error_category: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    status_code: int | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message

    @property
    def issues(self) -> list[Any] | None:
        """Return the structured issue list, if any."""
        issues = self.details.get("issues")
        return issues if isinstance(issues, list) else None
