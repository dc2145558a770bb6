"""When a field's validation message is visible, and with which severity."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bindforms import logger
from bindforms.typing.enums import ValidationMode, ValidationSeverity
from bindforms.typing.models import DisplayDecision, InteractionFlags

if TYPE_CHECKING:
    from collections.abc import Iterable

    from bindforms.typing.models import SingleValidationResult, ValidationResult

_NO_FLAGS = InteractionFlags()
_RANKED = frozenset({ValidationSeverity.ERROR, ValidationSeverity.WARNING})


def parse_severity(
    severity: str | None,
    *,
    unknown: ValidationSeverity = ValidationSeverity.NONE,
) -> ValidationSeverity | None:
    """Map an author-supplied severity onto the closed severity set.

    Args:
        severity: Raw severity text.
        unknown: Severity used for text outside the set.

    Returns:
        ValidationSeverity | None: Parsed severity, ``unknown`` when unrecognised, None when absent.
    """
    if severity is None:
        return None
    try:
        return ValidationSeverity.from_str(severity)
    except ValueError:
        logger.warning("Unknown validation severity", extra={"severity": severity, "used": unknown.value})
        return unknown


def highest_failing_severity(validations: Iterable[SingleValidationResult]) -> ValidationSeverity:
    """Return the most severe severity among failing results.

    Only ``error`` and ``warning`` rank; anything else yields ``none``.
    """
    highest = ValidationSeverity.NONE
    for validation in validations:
        if validation.is_valid or validation.severity not in _RANKED:
            continue
        if validation.severity.rank > highest.rank:
            highest = validation.severity
    return highest


def group_invalid_results_by_severity(
    results: Iterable[ValidationResult],
    general: Iterable[SingleValidationResult] = (),
) -> dict[ValidationSeverity, list[SingleValidationResult]]:
    """Bucket failing results by severity.

    Args:
        results: Per-field results.
        general: Form-scoped results.

    Returns:
        dict[ValidationSeverity, list[SingleValidationResult]]: One list per severity.
    """
    grouped: dict[ValidationSeverity, list[SingleValidationResult]] = {severity: [] for severity in ValidationSeverity}
    singles = [validation for result in results for validation in result.validations]
    singles.extend(general)
    for validation in singles:
        if not validation.is_valid:
            grouped[validation.severity].append(validation)
    return grouped


def is_validation_in_progress(result: ValidationResult | None, value: Any) -> bool:
    """Return whether the live value has not been validated yet."""
    return result is None or result.validated_value != value


def _shown_by_mode(flags: InteractionFlags, mode: ValidationMode, *, is_valid: bool) -> bool:
    if not flags.is_dirty:
        return False
    if mode is ValidationMode.ON_CHANGED:
        return True
    if mode is ValidationMode.ON_LOST_FOCUS:
        return not is_valid and (not flags.focused or not flags.was_valid_on_lost_focus)
    if flags.focused:
        return not flags.invalid_became_valid and not flags.was_valid_on_focus
    return not flags.was_valid_on_lost_focus


def should_show(
    flags: InteractionFlags | None,
    validation_result: ValidationResult | None,
    *,
    validation_mode: ValidationMode = ValidationMode.ERROR_LATE,
    validation_in_progress: bool = False,
    previous_decision: bool | None = None,
) -> DisplayDecision:
    """Decide whether the field's message is visible.

    Args:
        flags: The field's interaction history; a field never touched has none.
        validation_result: Latest stored result of the field.
        validation_mode: Configured display mode.
        validation_in_progress: True while the stored result belongs to an older value.
        previous_decision: Visibility decided last time, held while validation runs.

    Returns:
        DisplayDecision: Visibility and the severity to surface.
    """
    flags = flags or _NO_FLAGS
    is_valid = validation_result is not None and validation_result.is_valid
    shown = flags.force_show_result or _shown_by_mode(flags, validation_mode, is_valid=is_valid)
    if validation_in_progress and previous_decision is not None:
        shown = previous_decision

    if not shown or validation_result is None:
        return DisplayDecision(should_show=shown)
    return DisplayDecision(
        should_show=True,
        severity=highest_failing_severity(validation_result.validations),
    )
