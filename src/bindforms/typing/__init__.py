"""Typing-centric domain modules."""

from bindforms.typing.enums import (
    FieldType,
    FormActionKind,
    NamedPattern,
    SubmitOutcome,
    ValidationMode,
    ValidationSeverity,
)
from bindforms.typing.models import (
    BackendValidation,
    FieldDefinition,
    FormAction,
    FormDefinition,
    FormItemValidations,
    FormState,
    InteractionFlags,
    SingleValidationResult,
    SubmitOptions,
    ValidationResult,
)
from bindforms.typing.protocol import (
    ConfirmationPrompt,
    CustomValidator,
    FocusManager,
    FocusTarget,
    ModalContext,
    SubmitOperation,
)

__all__ = [
    "BackendValidation",
    "ConfirmationPrompt",
    "CustomValidator",
    "FieldDefinition",
    "FieldType",
    "FocusManager",
    "FocusTarget",
    "FormAction",
    "FormActionKind",
    "FormDefinition",
    "FormItemValidations",
    "FormState",
    "InteractionFlags",
    "ModalContext",
    "NamedPattern",
    "SingleValidationResult",
    "SubmitOperation",
    "SubmitOptions",
    "SubmitOutcome",
    "ValidationMode",
    "ValidationResult",
    "ValidationSeverity",
]
