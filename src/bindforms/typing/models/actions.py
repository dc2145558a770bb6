"""Actions accepted by the form store."""

from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from bindforms.typing.enums import FormActionKind
from bindforms.typing.models.validation import SingleValidationResult, ValidationResult


class _Action(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    field_scoped: ClassVar[bool] = False


class _FieldAction(_Action):
    field_scoped: ClassVar[bool] = True

    path: str


class FieldInitialized(_FieldAction):
    """Write a field's initial value unless the user already edited it."""

    kind: Literal[FormActionKind.FIELD_INITIALIZED] = FormActionKind.FIELD_INITIALIZED
    value: Any = None
    force: bool = False


class FieldValueChanged(_FieldAction):
    """Write a user-entered value."""

    kind: Literal[FormActionKind.FIELD_VALUE_CHANGED] = FormActionKind.FIELD_VALUE_CHANGED
    value: Any = None


class FieldValidated(_FieldAction):
    """Store a validation outcome.

    ``superseded`` marks an asynchronous outcome whose request was overtaken by a newer
    one for the same field.
    """

    kind: Literal[FormActionKind.FIELD_VALIDATED] = FormActionKind.FIELD_VALIDATED
    result: ValidationResult
    superseded: bool = False


class FieldFocused(_FieldAction):
    """Field received focus."""

    kind: Literal[FormActionKind.FIELD_FOCUSED] = FormActionKind.FIELD_FOCUSED


class FieldLostFocus(_FieldAction):
    """Field lost focus."""

    kind: Literal[FormActionKind.FIELD_LOST_FOCUS] = FormActionKind.FIELD_LOST_FOCUS


class FieldRemoved(_FieldAction):
    """Field was unmounted."""

    kind: Literal[FormActionKind.FIELD_REMOVED] = FormActionKind.FIELD_REMOVED


class TriedToSubmit(_Action):
    """User attempted to submit; every known field must show its result."""

    kind: Literal[FormActionKind.TRIED_TO_SUBMIT] = FormActionKind.TRIED_TO_SUBMIT


class Submitting(_Action):
    """Submission call started."""

    kind: Literal[FormActionKind.SUBMITTING] = FormActionKind.SUBMITTING


class Submitted(_Action):
    """Submission call succeeded."""

    kind: Literal[FormActionKind.SUBMITTED] = FormActionKind.SUBMITTED


class SubmitCancelled(_Action):
    """Submission call was interrupted before it settled."""

    kind: Literal[FormActionKind.SUBMIT_CANCELLED] = FormActionKind.SUBMIT_CANCELLED


class BackendValidationArrived(_Action):
    """Submission call failed with general and field-scoped issues."""

    kind: Literal[FormActionKind.BACKEND_VALIDATION_ARRIVED] = FormActionKind.BACKEND_VALIDATION_ARRIVED
    general: tuple[SingleValidationResult, ...] = ()
    per_field: dict[str, tuple[SingleValidationResult, ...]] = Field(default_factory=dict)


class Reset(_Action):
    """Discard every change and start over from the original subject."""

    kind: Literal[FormActionKind.RESET] = FormActionKind.RESET
    original_subject: dict[str, Any] = Field(default_factory=dict)


FormAction = Annotated[
    FieldInitialized
    | FieldValueChanged
    | FieldValidated
    | FieldFocused
    | FieldLostFocus
    | FieldRemoved
    | TriedToSubmit
    | Submitting
    | Submitted
    | SubmitCancelled
    | BackendValidationArrived
    | Reset,
    Field(discriminator="kind"),
]
