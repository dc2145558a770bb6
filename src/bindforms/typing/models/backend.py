"""Backend submission models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from bindforms.typing.models.validation import SingleValidationResult


class BackendIssue(BaseModel):
    """One issue reported by a rejected submission.

    An issue without ``field`` is general, form-scoped.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    field: str | None = None
    message: str | None = None
    severity: str | None = None


class BackendValidation(BaseModel):
    """Backend issues converted into validation results."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    general: tuple[SingleValidationResult, ...] = ()
    per_field: dict[str, tuple[SingleValidationResult, ...]] = Field(default_factory=dict)


class SubmitOptions(BaseModel):
    """Options passed alongside the payload to submit operations."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    pass_as_default_body: bool = True
