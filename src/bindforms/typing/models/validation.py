"""Validation-centric domain models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from bindforms.typing.enums import ValidationSeverity

_WIRE_CONFIG = ConfigDict(
    extra="forbid",
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class SingleValidationResult(BaseModel):
    """Outcome of exactly one validation rule."""

    model_config = _WIRE_CONFIG

    is_valid: bool
    severity: ValidationSeverity = ValidationSeverity.NONE
    invalid_message: str | None = None
    valid_message: str | None = None
    is_async: bool = False
    is_stale: bool = False
    from_backend: bool = False


class ValidationResult(BaseModel):
    """Merged validation outcome of one field.

    ``is_valid`` is derived from ``validations`` so it always equals the conjunction of
    the contained rule outcomes.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, alias_generator=to_camel, populate_by_name=True)

    validated_value: Any = None
    is_partial: bool = False
    validations: tuple[SingleValidationResult, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_valid(self) -> bool:
        """Return whether every contained rule passed."""
        return all(validation.is_valid for validation in self.validations)

    def without_backend(self) -> ValidationResult:
        """Return a copy with backend-origin entries removed."""
        kept = tuple(validation for validation in self.validations if not validation.from_backend)
        return self.model_copy(update={"validations": kept})

    def async_entries(self) -> tuple[SingleValidationResult, ...]:
        """Return the entries produced by the custom asynchronous check."""
        return tuple(validation for validation in self.validations if validation.is_async)

    def sync_entries(self) -> tuple[SingleValidationResult, ...]:
        """Return the entries produced by built-in rules or the backend."""
        return tuple(validation for validation in self.validations if not validation.is_async)


class FormItemValidations(BaseModel):
    """Declarative validation rules of one field."""

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    required: bool | None = None
    required_invalid_message: str | None = None
    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    length_invalid_message: str | None = None
    length_invalid_severity: ValidationSeverity = ValidationSeverity.ERROR
    min_value: float | None = None
    max_value: float | None = None
    range_invalid_message: str | None = None
    range_invalid_severity: ValidationSeverity = ValidationSeverity.ERROR
    pattern: str | None = None
    pattern_invalid_message: str | None = None
    pattern_invalid_severity: ValidationSeverity = ValidationSeverity.ERROR
    regex: str | None = None
    regex_invalid_message: str | None = None
    regex_invalid_severity: ValidationSeverity = ValidationSeverity.ERROR

    @property
    def is_empty(self) -> bool:
        """Return whether no built-in rule is configured."""
        return (
            not self.required
            and self.min_length is None
            and self.max_length is None
            and self.min_value is None
            and self.max_value is None
            and not self.pattern
            and self.regex is None
        )


class DisplayDecision(BaseModel):
    """Whether a field currently shows its validation message, and with which severity."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    should_show: bool
    severity: ValidationSeverity = ValidationSeverity.NONE
