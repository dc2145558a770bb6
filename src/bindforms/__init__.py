"""BindForms package."""

from bindforms.async_runner import run_async
from bindforms.exceptions import (
    AsyncExecutionError,
    DefinitionError,
    DependencyError,
    PackageError,
    SettingsError,
    SubmissionError,
)
from bindforms.logging import configure_logging, get_logger
from bindforms.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("bindforms")

__all__ = [
    "AsyncExecutionError",
    "DefinitionError",
    "DependencyError",
    "PackageError",
    "Settings",
    "SettingsError",
    "SubmissionError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
    "run_async",
]
