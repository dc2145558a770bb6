"""Form state models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bindforms.typing.models.validation import SingleValidationResult, ValidationResult


class InteractionFlags(BaseModel):
    """Per-field interaction history driving message display."""

    model_config = ConfigDict(extra="forbid", frozen=True, alias_generator=to_camel, populate_by_name=True)

    is_dirty: bool = False
    focused: bool = False
    was_valid_on_focus: bool = False
    was_valid_on_lost_focus: bool = False
    invalid_became_valid: bool = False
    force_show_result: bool = False


class FormState(BaseModel):
    """Immutable snapshot of one form instance.

    Transitions never mutate a snapshot; they build a new one and share every untouched
    branch with the previous snapshot.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    subject: dict[str, Any] = Field(default_factory=dict)
    original_subject: dict[str, Any] = Field(default_factory=dict)
    validation_results: dict[str, ValidationResult] = Field(default_factory=dict)
    interaction_flags: dict[str, InteractionFlags] = Field(default_factory=dict)
    general_validation_results: tuple[SingleValidationResult, ...] = ()
    submit_in_progress: bool = False
    reset_epoch: int = 0

    @classmethod
    def initial(cls, original_subject: dict[str, Any] | None = None, *, reset_epoch: int = 0) -> FormState:
        """Build the state of a freshly mounted form.

        Args:
            original_subject: Initial data supplied to the form, if any.
            reset_epoch: Epoch carried over from a previous state.

        Returns:
            FormState: Initial state whose subject mirrors the original subject.
        """
        original = original_subject or {}
        return cls.model_construct(
            subject=dict(original),
            original_subject=original,
            validation_results={},
            interaction_flags={},
            general_validation_results=(),
            submit_in_progress=False,
            reset_epoch=reset_epoch,
        )
