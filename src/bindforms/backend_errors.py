"""Conversion of rejected submissions into validation results."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from bindforms import logger
from bindforms.exceptions import GENERIC_BACKEND_ERROR
from bindforms.settings import DEFAULT_SUBMIT_ERROR_MESSAGE
from bindforms.typing.enums import ValidationSeverity
from bindforms.typing.models import BackendIssue, BackendValidation, SingleValidationResult
from bindforms.validation.display import parse_severity


def _structured_issues(error: Any) -> list[Any] | None:
    if getattr(error, "error_category", None) != GENERIC_BACKEND_ERROR:
        return None
    details = getattr(error, "details", None)
    if not isinstance(details, Mapping):
        return None
    issues = details.get("issues")
    return issues if isinstance(issues, list) else None


def _error_message(error: Any) -> str | None:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message.strip():
        return message
    if isinstance(error, BaseException) and str(error).strip():
        return str(error)
    return None


def _to_result(issue: BackendIssue, default_message: str) -> SingleValidationResult:
    return SingleValidationResult(
        is_valid=False,
        invalid_message=issue.message or default_message,
        severity=parse_severity(issue.severity, unknown=ValidationSeverity.ERROR) or ValidationSeverity.ERROR,
        from_backend=True,
    )


def map_submission_error(error: Any, *, default_message: str = DEFAULT_SUBMIT_ERROR_MESSAGE) -> BackendValidation:
    """Split a submission rejection into general and per-field results.

    A structured rejection (``error_category == "GenericBackendError"`` with
    ``details["issues"]``) routes each issue to its field, or to the general list when it
    names none. Anything else becomes one general ``error`` carrying the rejection's
    message, or ``default_message`` when it has none.

    Args:
        error: The rejection raised by the submit operation.
        default_message: Text used when the rejection carries no message.

    Returns:
        BackendValidation: Results tagged ``from_backend``.
    """
    raw_issues = _structured_issues(error)
    if raw_issues is None:
        message = _error_message(error) or default_message
        logger.warning("Unstructured submission failure", extra={"error_message": message})
        general = SingleValidationResult(
            is_valid=False,
            invalid_message=message,
            severity=ValidationSeverity.ERROR,
            from_backend=True,
        )
        return BackendValidation(general=(general,))

    general: list[SingleValidationResult] = []
    per_field: dict[str, list[SingleValidationResult]] = {}
    for raw in raw_issues:
        try:
            issue = BackendIssue.model_validate(raw)
        except ValidationError:
            logger.warning("Ignoring malformed backend issue", extra={"issue": repr(raw)})
            continue
        result = _to_result(issue, default_message)
        if issue.field:
            per_field.setdefault(issue.field, []).append(result)
        else:
            general.append(result)

    logger.info(
        "Mapped backend validation issues",
        extra={"general": len(general), "fields": sorted(per_field)},
    )
    return BackendValidation(
        general=tuple(general),
        per_field={path: tuple(results) for path, results in per_field.items()},
    )
