"""Core domain model exports."""

from bindforms.typing.models.actions import (
    BackendValidationArrived,
    FieldFocused,
    FieldInitialized,
    FieldLostFocus,
    FieldRemoved,
    FieldValidated,
    FieldValueChanged,
    FormAction,
    Reset,
    SubmitCancelled,
    Submitted,
    Submitting,
    TriedToSubmit,
)
from bindforms.typing.models.backend import BackendIssue, BackendValidation, SubmitOptions
from bindforms.typing.models.definition import FieldDefinition, FormDefinition
from bindforms.typing.models.state import FormState, InteractionFlags
from bindforms.typing.models.validation import (
    DisplayDecision,
    FormItemValidations,
    SingleValidationResult,
    ValidationResult,
)

__all__ = [
    "BackendIssue",
    "BackendValidation",
    "BackendValidationArrived",
    "DisplayDecision",
    "FieldDefinition",
    "FieldFocused",
    "FieldInitialized",
    "FieldLostFocus",
    "FieldRemoved",
    "FieldValidated",
    "FieldValueChanged",
    "FormAction",
    "FormDefinition",
    "FormItemValidations",
    "FormState",
    "InteractionFlags",
    "Reset",
    "SingleValidationResult",
    "SubmitCancelled",
    "SubmitOptions",
    "Submitted",
    "Submitting",
    "TriedToSubmit",
    "ValidationResult",
]
