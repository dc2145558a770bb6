"""Field validation: rule evaluation, display timing and async scheduling."""

from bindforms.validation.display import (
    group_invalid_results_by_severity,
    highest_failing_severity,
    is_validation_in_progress,
    parse_severity,
    should_show,
)
from bindforms.validation.rules import evaluate_async, evaluate_sync, pre_validate, validate
from bindforms.validation.scheduler import AsyncValidationScheduler

__all__ = [
    "AsyncValidationScheduler",
    "evaluate_async",
    "evaluate_sync",
    "group_invalid_results_by_severity",
    "highest_failing_severity",
    "is_validation_in_progress",
    "parse_severity",
    "pre_validate",
    "should_show",
    "validate",
]
