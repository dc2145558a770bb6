from __future__ import annotations

import pytest

from bindforms.typing.enums import ValidationMode, ValidationSeverity
from bindforms.typing.models import InteractionFlags, SingleValidationResult, ValidationResult
from bindforms.validation.display import (
    group_invalid_results_by_severity,
    highest_failing_severity,
    is_validation_in_progress,
    parse_severity,
    should_show,
)

_ERROR = SingleValidationResult(is_valid=False, severity=ValidationSeverity.ERROR, invalid_message="E")
_WARNING = SingleValidationResult(is_valid=False, severity=ValidationSeverity.WARNING, invalid_message="W")
_PASS = SingleValidationResult(is_valid=True, severity=ValidationSeverity.ERROR)


def _result(*validations: SingleValidationResult, value: object = "v") -> ValidationResult:
    return ValidationResult(validated_value=value, validations=validations)


@pytest.mark.parametrize(
    ("raw", "parsed"),
    [
        ("error", ValidationSeverity.ERROR),
        ("warning", ValidationSeverity.WARNING),
        ("valid", ValidationSeverity.VALID),
        ("none", ValidationSeverity.NONE),
        ("fatal", ValidationSeverity.NONE),
        (None, None),
    ],
)
def test_parse_severity(raw: str | None, parsed: ValidationSeverity | None) -> None:
    assert parse_severity(raw) is parsed


def test_error_outranks_warning() -> None:
    assert highest_failing_severity([_WARNING, _ERROR]) is ValidationSeverity.ERROR
    assert highest_failing_severity([_PASS, _WARNING]) is ValidationSeverity.WARNING
    assert highest_failing_severity([_PASS]) is ValidationSeverity.NONE


def test_group_invalid_results_by_severity() -> None:
    general = SingleValidationResult(is_valid=False, severity=ValidationSeverity.ERROR, from_backend=True)

    grouped = group_invalid_results_by_severity([_result(_ERROR, _PASS), _result(_WARNING)], [general])

    assert grouped[ValidationSeverity.ERROR] == [_ERROR, general]
    assert grouped[ValidationSeverity.WARNING] == [_WARNING]
    assert grouped[ValidationSeverity.VALID] == []
    assert grouped[ValidationSeverity.NONE] == []


def test_validation_in_progress_compares_validated_value() -> None:
    assert is_validation_in_progress(None, "a")
    assert is_validation_in_progress(_result(value="a"), "ab")
    assert not is_validation_in_progress(_result(value="a"), "a")


def test_untouched_field_is_hidden() -> None:
    decision = should_show(None, _result(_ERROR))

    assert decision.should_show is False
    assert decision.severity is ValidationSeverity.NONE


def test_force_show_overrides_every_mode() -> None:
    flags = InteractionFlags(force_show_result=True)

    for mode in ValidationMode:
        decision = should_show(flags, _result(_ERROR), validation_mode=mode)
        assert decision.should_show is True
        assert decision.severity is ValidationSeverity.ERROR


def test_on_changed_shows_as_soon_as_dirty() -> None:
    flags = InteractionFlags(is_dirty=True, focused=True)

    decision = should_show(flags, _result(_ERROR), validation_mode=ValidationMode.ON_CHANGED)

    assert decision.should_show is True
    assert decision.severity is ValidationSeverity.ERROR


@pytest.mark.parametrize(
    ("flags", "shown"),
    [
        (InteractionFlags(is_dirty=True, focused=True), True),
        (InteractionFlags(is_dirty=True, focused=True, was_valid_on_focus=True), False),
        (InteractionFlags(is_dirty=True, focused=True, invalid_became_valid=True), False),
        (InteractionFlags(is_dirty=True, focused=False), True),
        (InteractionFlags(is_dirty=True, focused=False, was_valid_on_lost_focus=True), False),
        (InteractionFlags(is_dirty=False), False),
    ],
)
def test_error_late(flags: InteractionFlags, shown: bool) -> None:
    decision = should_show(flags, _result(_ERROR), validation_mode=ValidationMode.ERROR_LATE)
    assert decision.should_show is shown


@pytest.mark.parametrize(
    ("flags", "result", "shown"),
    [
        (InteractionFlags(is_dirty=True, focused=False), _result(_ERROR), True),
        (InteractionFlags(is_dirty=True, focused=True), _result(_ERROR), True),
        (InteractionFlags(is_dirty=True, focused=True, was_valid_on_lost_focus=True), _result(_ERROR), False),
        (InteractionFlags(is_dirty=True, focused=False), _result(_PASS), False),
    ],
)
def test_on_lost_focus(flags: InteractionFlags, result: ValidationResult, shown: bool) -> None:
    decision = should_show(flags, result, validation_mode=ValidationMode.ON_LOST_FOCUS)
    assert decision.should_show is shown


def test_previous_decision_is_held_while_validating() -> None:
    flags = InteractionFlags(is_dirty=True, focused=False)

    held = should_show(flags, _result(_PASS), validation_in_progress=True, previous_decision=False)
    settled = should_show(flags, _result(_ERROR), validation_in_progress=False, previous_decision=False)

    assert held.should_show is False
    assert settled.should_show is True


def test_shown_valid_result_has_no_failing_severity() -> None:
    flags = InteractionFlags(is_dirty=True)

    decision = should_show(flags, _result(_PASS), validation_mode=ValidationMode.ON_CHANGED)

    assert decision.should_show is True
    assert decision.severity is ValidationSeverity.NONE


def test_parse_severity_uses_requested_fallback_for_unknown_text() -> None:
    assert parse_severity("critical", unknown=ValidationSeverity.ERROR) is ValidationSeverity.ERROR
    assert parse_severity("warning", unknown=ValidationSeverity.ERROR) is ValidationSeverity.WARNING
