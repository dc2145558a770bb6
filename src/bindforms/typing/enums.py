"""Project enums."""

from __future__ import annotations

from enum import StrEnum
from typing import Self


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> Self:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            Self: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class ValidationSeverity(_EnumMixin):
    """Severity attached to a single validation outcome."""

    ERROR = "error"
    WARNING = "warning"
    VALID = "valid"
    NONE = "none"

    @property
    def rank(self) -> int:
        """Return a comparable rank where higher is more severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    ValidationSeverity.NONE: 0,
    ValidationSeverity.VALID: 1,
    ValidationSeverity.WARNING: 2,
    ValidationSeverity.ERROR: 3,
}


class ValidationMode(_EnumMixin):
    """When a field surfaces its validation message."""

    ERROR_LATE = "errorLate"
    ON_CHANGED = "onChanged"
    ON_LOST_FOCUS = "onLostFocus"


class NamedPattern(_EnumMixin):
    """Built-in patterns selectable by name."""

    EMAIL = "email"
    PHONE = "phone"
    URL = "url"


class FormActionKind(_EnumMixin):
    """Closed set of state transitions accepted by the form store."""

    FIELD_INITIALIZED = "FieldInitialized"
    FIELD_VALUE_CHANGED = "FieldValueChanged"
    FIELD_VALIDATED = "FieldValidated"
    FIELD_FOCUSED = "FieldFocused"
    FIELD_LOST_FOCUS = "FieldLostFocus"
    FIELD_REMOVED = "FieldRemoved"
    TRIED_TO_SUBMIT = "TriedToSubmit"
    SUBMITTING = "Submitting"
    SUBMITTED = "Submitted"
    SUBMIT_CANCELLED = "SubmitCancelled"
    BACKEND_VALIDATION_ARRIVED = "BackendValidationArrived"
    RESET = "Reset"


class SubmitOutcome(_EnumMixin):
    """Result of one submit attempt."""

    DISABLED = "disabled"
    BLOCKED_BY_ERRORS = "blocked_by_errors"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SUBMITTED = "submitted"
    FAILED = "failed"


class FieldType(_EnumMixin):
    """Field kinds understood by form definitions."""

    TEXT = "text"
    NUMBER = "number"
    INTEGER = "integer"
    CHECKBOX = "checkbox"
    SELECT = "select"
    DATE_PICKER = "datePicker"
    CUSTOM = "custom"
    ITEMS = "items"
